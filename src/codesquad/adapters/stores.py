"""Thread, comment and ownership stores.

The in-memory stores are the canonical implementation; the JSON variants
load once on construction and rewrite their file after each mutation.
"""

from __future__ import annotations

import logging
from pathlib import Path

from codesquad.adapters.jsonio import load_records, save_records
from codesquad.threads.models import Comment, FileThreadMapping, ThreadState

logger = logging.getLogger(__name__)

THREADS_FILE = "threads.json"
COMMENTS_FILE = "comments.json"
OWNERSHIP_FILE = "ownership.json"


# ---------------------------------------------------------------------------
# Threads
# ---------------------------------------------------------------------------


class InMemoryThreadStateStore:
    def __init__(self) -> None:
        self._threads: dict[str, ThreadState] = {}

    async def save(self, state: ThreadState) -> None:
        self._threads[state.thread_id] = state
        self._persist()

    async def find_by_id(self, thread_id: str) -> ThreadState | None:
        return self._threads.get(thread_id)

    async def find_by_terminal_id(self, terminal_id: str) -> ThreadState | None:
        for state in self._threads.values():
            if state.terminal_id == terminal_id:
                return state
        return None

    async def find_all(self) -> list[ThreadState]:
        return list(self._threads.values())

    async def delete(self, thread_id: str) -> bool:
        existed = self._threads.pop(thread_id, None) is not None
        if existed:
            self._persist()
        return existed

    async def update_whitelist(self, thread_id: str, patterns: list[str]) -> None:
        state = self._threads.get(thread_id)
        if state is None:
            return
        # Rebuild through the constructor so de-duplication applies.
        data = state.to_dict() | {"whitelist_patterns": patterns}
        self._threads[thread_id] = ThreadState.from_dict(data)
        self._persist()

    def _persist(self) -> None:
        """Hook for file-backed subclasses."""


class JsonThreadStateStore(InMemoryThreadStateStore):
    def __init__(self, state_dir: str | Path) -> None:
        super().__init__()
        self.path = Path(state_dir) / THREADS_FILE
        for item in load_records(self.path):
            try:
                state = ThreadState.from_dict(item)
            except Exception as exc:
                logger.warning("skipping unreadable thread record: %s", exc)
                continue
            self._threads[state.thread_id] = state

    def _persist(self) -> None:
        save_records(self.path, [t.to_dict() for t in self._threads.values()])


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


class InMemoryCommentStore:
    def __init__(self) -> None:
        self._comments: list[Comment] = []

    async def save(self, comment: Comment) -> None:
        self._comments = [c for c in self._comments if c.id != comment.id]
        self._comments.append(comment)
        self._persist()

    async def find_all(self) -> list[Comment]:
        return list(self._comments)

    async def find_active(self) -> list[Comment]:
        return [c for c in self._comments if not c.is_submitted]

    async def find_by_thread_id(self, thread_id: str) -> list[Comment]:
        return [c for c in self._comments if c.thread_id == thread_id]

    async def mark_as_submitted(self, ids: list[str]) -> None:
        wanted = set(ids)
        for c in self._comments:
            if c.id in wanted:
                c.is_submitted = True
        self._persist()

    async def delete_by_thread_id(self, thread_id: str) -> int:
        before = len(self._comments)
        self._comments = [c for c in self._comments if c.thread_id != thread_id]
        removed = before - len(self._comments)
        if removed:
            self._persist()
        return removed

    def _persist(self) -> None:
        """Hook for file-backed subclasses."""


class JsonCommentStore(InMemoryCommentStore):
    def __init__(self, state_dir: str | Path) -> None:
        super().__init__()
        self.path = Path(state_dir) / COMMENTS_FILE
        for item in load_records(self.path):
            try:
                self._comments.append(Comment.from_dict(item))
            except Exception as exc:
                logger.warning("skipping unreadable comment record: %s", exc)

    def _persist(self) -> None:
        save_records(self.path, [c.to_dict() for c in self._comments])


# ---------------------------------------------------------------------------
# File ownership
# ---------------------------------------------------------------------------


class InMemoryOwnershipMapStore:
    def __init__(self) -> None:
        self._mappings: dict[str, FileThreadMapping] = {}

    async def save(self, mapping: FileThreadMapping) -> None:
        self._mappings[mapping.file_path] = mapping
        self._persist()

    async def find_by_file_path(self, file_path: str) -> FileThreadMapping | None:
        return self._mappings.get(file_path)

    async def find_by_thread_id(self, thread_id: str) -> list[FileThreadMapping]:
        return [m for m in self._mappings.values() if m.thread_id == thread_id]

    async def find_all(self) -> list[FileThreadMapping]:
        return list(self._mappings.values())

    async def delete(self, file_path: str) -> bool:
        existed = self._mappings.pop(file_path, None) is not None
        if existed:
            self._persist()
        return existed

    async def clear(self) -> None:
        self._mappings.clear()
        self._persist()

    def _persist(self) -> None:
        """Hook for file-backed subclasses."""


class JsonOwnershipMapStore(InMemoryOwnershipMapStore):
    def __init__(self, state_dir: str | Path) -> None:
        super().__init__()
        self.path = Path(state_dir) / OWNERSHIP_FILE
        for item in load_records(self.path):
            try:
                mapping = FileThreadMapping.from_dict(item)
            except Exception as exc:
                logger.warning("skipping unreadable ownership record: %s", exc)
                continue
            self._mappings[mapping.file_path] = mapping

    def _persist(self) -> None:
        save_records(self.path, [m.to_dict() for m in self._mappings.values()])

