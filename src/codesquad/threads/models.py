"""Persisted value objects: threads, review comments, file ownership."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Any, Callable

from codesquad.errors import PreconditionError, ValidationError

MAX_NAME_LENGTH = 50

IdFactory = Callable[[], str]
Clock = Callable[[], float]


def new_id() -> str:
    return uuid.uuid4().hex


class IsolationMode(StrEnum):
    """How a thread's agent is separated from the main workspace."""

    NONE = "none"
    WORKTREE = "worktree"


def validate_name(name: str) -> str:
    if not name:
        raise ValidationError("Thread name cannot be empty")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Thread name cannot exceed {MAX_NAME_LENGTH} characters (got {len(name)})"
        )
    return name


@dataclass(frozen=True, slots=True)
class ThreadState:
    """One agent session bound to a terminal, optionally in its own worktree.

    Instances are never mutated; the ``with_*`` helpers return validated
    copies.
    """

    thread_id: str
    name: str
    terminal_id: str
    working_dir: str
    branch: str | None = None
    worktree_path: str | None = None
    whitelist_patterns: tuple[str, ...] = ()
    created_at: float = 0.0

    def __post_init__(self) -> None:
        validate_name(self.name)
        if (self.branch is None) != (self.worktree_path is None):
            raise ValidationError(
                "branch and worktree_path must both be set or both be absent",
                details={"thread_id": self.thread_id},
            )
        # De-duplicate by exact match, keeping first occurrence order.
        object.__setattr__(
            self, "whitelist_patterns", tuple(dict.fromkeys(self.whitelist_patterns))
        )

    @classmethod
    def create(
        cls,
        *,
        name: str,
        terminal_id: str,
        working_dir: str,
        branch: str | None = None,
        worktree_path: str | None = None,
        whitelist_patterns: tuple[str, ...] = (),
        id_factory: IdFactory = new_id,
        clock: Clock = time.time,
    ) -> ThreadState:
        return cls(
            thread_id=id_factory(),
            name=name,
            terminal_id=terminal_id,
            working_dir=working_dir,
            branch=branch,
            worktree_path=worktree_path,
            whitelist_patterns=whitelist_patterns,
            created_at=clock(),
        )

    @property
    def is_worktree(self) -> bool:
        return self.worktree_path is not None

    def with_name(self, new_name: str) -> ThreadState:
        return replace(self, name=validate_name(new_name))

    def with_branch(self, new_branch: str) -> ThreadState:
        if not new_branch:
            raise ValidationError("Branch name cannot be empty")
        if not self.is_worktree:
            raise PreconditionError(
                "Cannot switch branch: thread does not have a worktree",
                details={"thread_id": self.thread_id},
            )
        return replace(self, branch=new_branch)

    def has_whitelist_pattern(self, pattern: str) -> bool:
        return pattern in self.whitelist_patterns

    def with_whitelist_pattern(self, pattern: str) -> ThreadState:
        if pattern in self.whitelist_patterns:
            return self
        return replace(self, whitelist_patterns=(*self.whitelist_patterns, pattern))

    def without_whitelist_pattern(self, pattern: str) -> ThreadState:
        if pattern not in self.whitelist_patterns:
            return self
        return replace(
            self,
            whitelist_patterns=tuple(p for p in self.whitelist_patterns if p != pattern),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "thread_id": self.thread_id,
            "name": self.name,
            "terminal_id": self.terminal_id,
            "working_dir": self.working_dir,
            "branch": self.branch,
            "worktree_path": self.worktree_path,
            "whitelist_patterns": list(self.whitelist_patterns),
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ThreadState:
        return cls(
            thread_id=str(data["thread_id"]),
            name=str(data["name"]),
            terminal_id=str(data["terminal_id"]),
            working_dir=str(data["working_dir"]),
            branch=data.get("branch"),
            worktree_path=data.get("worktree_path"),
            whitelist_patterns=tuple(data.get("whitelist_patterns", [])),
            created_at=float(data.get("created_at", 0.0)),
        )


@dataclass(slots=True)
class Comment:
    """A review comment on a file line (or line range)."""

    id: str
    file: str
    line: int
    text: str
    end_line: int | None = None
    code_context: str | None = None
    thread_id: str | None = None
    is_submitted: bool = False
    timestamp: float = field(default_factory=time.time)

    @classmethod
    def create(
        cls,
        *,
        file: str,
        line: int,
        text: str,
        end_line: int | None = None,
        code_context: str | None = None,
        thread_id: str | None = None,
        id_factory: IdFactory = new_id,
    ) -> Comment:
        return cls(
            id=id_factory(),
            file=file,
            line=line,
            text=text,
            end_line=end_line,
            code_context=code_context,
            thread_id=thread_id,
        )

    @property
    def line_range(self) -> str:
        if self.end_line is not None and self.end_line != self.line:
            return f"{self.line}-{self.end_line}"
        return str(self.line)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "file": self.file,
            "line": self.line,
            "end_line": self.end_line,
            "text": self.text,
            "code_context": self.code_context,
            "thread_id": self.thread_id,
            "is_submitted": self.is_submitted,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Comment:
        end_line = data.get("end_line")
        return cls(
            id=str(data["id"]),
            file=str(data["file"]),
            line=int(data["line"]),
            text=str(data.get("text", "")),
            end_line=int(end_line) if end_line is not None else None,
            code_context=data.get("code_context"),
            thread_id=data.get("thread_id"),
            is_submitted=bool(data.get("is_submitted", False)),
            timestamp=float(data.get("timestamp", 0.0)),
        )


@dataclass(frozen=True, slots=True)
class FileThreadMapping:
    """Which thread last touched ``file_path``."""

    file_path: str
    thread_id: str
    last_modified_at: float = field(default_factory=time.time)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "thread_id": self.thread_id,
            "last_modified_at": self.last_modified_at,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileThreadMapping:
        return cls(
            file_path=str(data["file_path"]),
            thread_id=str(data["thread_id"]),
            last_modified_at=float(data.get("last_modified_at", 0.0)),
        )
