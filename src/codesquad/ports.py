"""Interfaces of the collaborators the thread core drives.

Concrete implementations live in :mod:`codesquad.adapters`; tests supply
in-memory fakes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from codesquad.threads.models import Comment, FileThreadMapping, ThreadState


class ThreadStateStore(Protocol):
    async def save(self, state: ThreadState) -> None: ...

    async def find_by_id(self, thread_id: str) -> ThreadState | None: ...

    async def find_by_terminal_id(self, terminal_id: str) -> ThreadState | None: ...

    async def find_all(self) -> list[ThreadState]: ...

    async def delete(self, thread_id: str) -> bool: ...

    async def update_whitelist(self, thread_id: str, patterns: list[str]) -> None: ...


class TerminalPort(Protocol):
    async def create_terminal(self, name: str, cwd: str) -> str: ...

    async def send_text(self, terminal_id: str, text: str) -> None: ...

    async def close_terminal(self, terminal_id: str) -> None: ...


class GitPort(Protocol):
    async def create_worktree(self, path: str, branch: str, repo_root: str) -> None: ...

    async def remove_worktree(self, path: str, repo_root: str, force: bool = False) -> None: ...

    async def switch_branch(self, worktree_path: str, branch: str) -> None: ...

    async def delete_branch(self, branch: str, repo_root: str, force: bool = False) -> None: ...

    async def has_uncommitted_changes(self, worktree_path: str) -> bool: ...

    async def stash_changes(self, worktree_path: str) -> None: ...

    async def list_branches(self, repo_root: str) -> list[str]: ...


class FileSystemPort(Protocol):
    async def ensure_dir(self, path: str) -> None: ...

    async def copy_file(self, source: str, dest: str) -> None: ...

    async def exists(self, path: str) -> bool: ...

    async def is_file(self, path: str) -> bool: ...


class FileGlobber(Protocol):
    async def glob(self, pattern: str, root: str) -> list[str]: ...


class CommentStore(Protocol):
    async def save(self, comment: Comment) -> None: ...

    async def find_all(self) -> list[Comment]: ...

    async def find_active(self) -> list[Comment]: ...

    async def find_by_thread_id(self, thread_id: str) -> list[Comment]: ...

    async def mark_as_submitted(self, ids: list[str]) -> None: ...

    async def delete_by_thread_id(self, thread_id: str) -> int: ...


class OwnershipMapStore(Protocol):
    async def save(self, mapping: FileThreadMapping) -> None: ...

    async def find_by_file_path(self, file_path: str) -> FileThreadMapping | None: ...

    async def find_by_thread_id(self, thread_id: str) -> list[FileThreadMapping]: ...

    async def find_all(self) -> list[FileThreadMapping]: ...

    async def delete(self, file_path: str) -> bool: ...

    async def clear(self) -> None: ...


class EditorPort(Protocol):
    async def open_folder(self, path: str) -> None: ...


class NotificationPort(Protocol):
    def show_info(self, message: str) -> None: ...

    def show_warning(self, message: str) -> None: ...

    def show_error(self, message: str) -> None: ...
