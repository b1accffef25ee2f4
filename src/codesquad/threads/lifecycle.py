"""Thread lifecycle: create, delete, rename, switch branch, open in editor.

Each operation orchestrates the thread store and the external ports.
Creation is all-or-nothing around the worktree. Deletion is best-effort:
the thread always leaves the active set, even when git cleanup fails.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from codesquad.errors import CodesquadError, ExternalFailure, ValidationError
from codesquad.ports import (
    CommentStore,
    EditorPort,
    FileGlobber,
    FileSystemPort,
    GitPort,
    TerminalPort,
    ThreadStateStore,
)
from codesquad.status.detector import StatusDetector
from codesquad.threads.models import (
    Clock,
    IdFactory,
    IsolationMode,
    ThreadState,
    new_id,
    validate_name,
)

logger = logging.getLogger(__name__)

DIRTY_WORKTREE_ERROR = (
    "Cannot switch branch: uncommitted changes exist. "
    "Commit them or retry with stash_changes=True."
)


@dataclass(slots=True)
class DeleteThreadResult:
    success: bool
    deleted_comments_count: int = 0
    worktree_removed: bool = False
    terminal_closed: bool = False
    branch_deleted: bool = False


@dataclass(slots=True)
class RenameThreadResult:
    success: bool
    thread_state: ThreadState | None = None
    previous_name: str | None = None
    error: str | None = None


@dataclass(slots=True)
class SwitchBranchResult:
    success: bool
    thread_state: ThreadState | None = None
    previous_branch: str | None = None
    changes_stashed: bool = False
    error: str | None = None


@dataclass(slots=True)
class OpenInEditorResult:
    success: bool
    error: str | None = None


def default_worktree_path(workspace_root: str, branch: str) -> str:
    """``<parent>/<workspace-name>.worktree/<branch>`` next to the workspace."""
    root = Path(workspace_root)
    return str(root.parent / f"{root.name}.worktree" / branch)


class ThreadLifecycleManager:
    """Owns the create/delete/rename/switch/open flows for agent threads."""

    def __init__(
        self,
        *,
        store: ThreadStateStore,
        terminal: TerminalPort,
        git: GitPort,
        fs: FileSystemPort,
        globber: FileGlobber,
        comments: CommentStore,
        editor: EditorPort,
        detector: StatusDetector,
        id_factory: IdFactory = new_id,
        clock: Clock = time.time,
    ) -> None:
        self._store = store
        self._terminal = terminal
        self._git = git
        self._fs = fs
        self._globber = globber
        self._comments = comments
        self._editor = editor
        self._detector = detector
        self._id_factory = id_factory
        self._clock = clock

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def create(
        self,
        name: str,
        isolation_mode: IsolationMode | str,
        workspace_root: str,
        *,
        branch_name: str | None = None,
        worktree_path: str | None = None,
        worktree_copy_patterns: Iterable[str] = (),
    ) -> ThreadState:
        """Create a thread, its optional worktree, and its terminal.

        Raises:
            ValidationError: ``name`` is empty or longer than 50 characters, or
                ``isolation_mode`` is unknown.
            ExternalFailure: the worktree could not be created.
        """
        try:
            mode = IsolationMode(isolation_mode)
        except ValueError as exc:
            raise ValidationError(
                f"Unknown isolation mode: {isolation_mode!r}",
                details={"allowed": [m.value for m in IsolationMode]},
            ) from exc
        validate_name(name)

        working_dir = workspace_root
        branch: str | None = None
        wt_path: str | None = None

        if mode is IsolationMode.WORKTREE:
            branch = branch_name or name
            wt_path = worktree_path or default_worktree_path(workspace_root, branch)
            try:
                await self._git.create_worktree(wt_path, branch, workspace_root)
            except CodesquadError:
                raise
            except Exception as exc:
                raise ExternalFailure(
                    f"Failed to create worktree at {wt_path}: {exc}",
                    details={"branch": branch, "path": wt_path},
                ) from exc
            logger.info("created worktree %s on branch %s", wt_path, branch)
            await self._copy_into_worktree(workspace_root, wt_path, worktree_copy_patterns)
            working_dir = wt_path

        terminal_id = await self._terminal.create_terminal(name, working_dir)
        state = ThreadState.create(
            name=name,
            terminal_id=terminal_id,
            working_dir=working_dir,
            branch=branch,
            worktree_path=wt_path,
            id_factory=self._id_factory,
            clock=self._clock,
        )
        await self._store.save(state)
        logger.info("created thread %s (%s) in %s", state.thread_id, name, working_dir)
        return state

    async def _copy_into_worktree(
        self, workspace_root: str, worktree_path: str, patterns: Iterable[str]
    ) -> int:
        copied = 0
        # Globbed matches may come back symlink-resolved; compare resolved paths.
        root = Path(workspace_root).resolve()
        for pattern in patterns:
            try:
                matches = await self._globber.glob(pattern, workspace_root)
            except Exception as exc:
                logger.warning("glob %r failed in %s: %s", pattern, workspace_root, exc)
                continue
            for source in matches:
                try:
                    rel = Path(source).resolve().relative_to(root)
                except ValueError:
                    logger.warning("skipping %s: outside workspace %s", source, root)
                    continue
                dest = os.path.join(worktree_path, str(rel))
                try:
                    if not await self._fs.is_file(source):
                        continue
                    await self._fs.ensure_dir(os.path.dirname(dest))
                    await self._fs.copy_file(source, dest)
                    copied += 1
                except Exception as exc:
                    logger.warning("failed to copy %s into worktree: %s", rel, exc)
        return copied

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(
        self,
        thread_id: str,
        workspace_root: str,
        *,
        close_terminal: bool = True,
        remove_worktree: bool = True,
    ) -> DeleteThreadResult:
        state = await self._store.find_by_id(thread_id)
        if state is None:
            return DeleteThreadResult(success=False)

        result = DeleteThreadResult(success=True)

        if close_terminal:
            try:
                await self._terminal.close_terminal(state.terminal_id)
                result.terminal_closed = True
            except Exception as exc:
                logger.warning("failed to close terminal %s: %s", state.terminal_id, exc)

        self._detector.clear(state.terminal_id)

        try:
            result.deleted_comments_count = await self._comments.delete_by_thread_id(thread_id)
        except Exception as exc:
            logger.warning("failed to delete comments of thread %s: %s", thread_id, exc)

        if remove_worktree and state.worktree_path is not None:
            try:
                await self._git.remove_worktree(state.worktree_path, workspace_root, force=True)
                result.worktree_removed = True
            except Exception as exc:
                logger.warning("failed to remove worktree %s: %s", state.worktree_path, exc)

            if result.worktree_removed and state.branch:
                try:
                    await self._git.delete_branch(state.branch, workspace_root, force=True)
                    result.branch_deleted = True
                except Exception as exc:
                    # Branch may be checked out elsewhere.
                    logger.warning("failed to delete branch %s: %s", state.branch, exc)

        await self._store.delete(thread_id)
        logger.info(
            "deleted thread %s (terminal_closed=%s worktree_removed=%s comments=%d)",
            thread_id,
            result.terminal_closed,
            result.worktree_removed,
            result.deleted_comments_count,
        )
        return result

    # ------------------------------------------------------------------
    # Rename / branch switch / editor
    # ------------------------------------------------------------------

    async def rename(self, thread_id: str, new_name: str) -> RenameThreadResult:
        state = await self._store.find_by_id(thread_id)
        if state is None:
            return RenameThreadResult(success=False, error="Thread not found")

        try:
            updated = state.with_name(new_name)
        except ValidationError as exc:
            return RenameThreadResult(
                success=False, thread_state=state, previous_name=state.name, error=str(exc)
            )

        await self._store.save(updated)
        return RenameThreadResult(success=True, thread_state=updated, previous_name=state.name)

    async def switch_branch(
        self,
        thread_id: str,
        target_branch: str,
        *,
        stash_changes: bool = True,
    ) -> SwitchBranchResult:
        state = await self._store.find_by_id(thread_id)
        if state is None:
            return SwitchBranchResult(success=False, error="Thread not found")

        try:
            updated = state.with_branch(target_branch)
        except CodesquadError as exc:
            return SwitchBranchResult(
                success=False, thread_state=state, previous_branch=state.branch, error=str(exc)
            )

        worktree = str(state.worktree_path)
        changes_stashed = False
        if await self._git.has_uncommitted_changes(worktree):
            if not stash_changes:
                return SwitchBranchResult(
                    success=False,
                    thread_state=state,
                    previous_branch=state.branch,
                    error=DIRTY_WORKTREE_ERROR,
                )
            await self._git.stash_changes(worktree)
            changes_stashed = True

        await self._git.switch_branch(worktree, target_branch)
        await self._store.save(updated)
        logger.info("thread %s switched %s -> %s", thread_id, state.branch, target_branch)
        return SwitchBranchResult(
            success=True,
            thread_state=updated,
            previous_branch=state.branch,
            changes_stashed=changes_stashed,
        )

    async def open_in_editor(self, thread_id: str) -> OpenInEditorResult:
        state = await self._store.find_by_id(thread_id)
        if state is None:
            return OpenInEditorResult(success=False, error="Thread not found")
        if state.worktree_path is None:
            return OpenInEditorResult(success=False, error="Thread does not have a worktree")
        try:
            await self._editor.open_folder(state.worktree_path)
        except Exception as exc:
            logger.warning("failed to open %s in editor: %s", state.worktree_path, exc)
            return OpenInEditorResult(success=False, error=str(exc) or "Failed to open editor")
        return OpenInEditorResult(success=True)

    # ------------------------------------------------------------------
    # Whitelist and queries
    # ------------------------------------------------------------------

    async def add_whitelist_pattern(self, thread_id: str, pattern: str) -> ThreadState | None:
        state = await self._store.find_by_id(thread_id)
        if state is None:
            return None
        updated = state.with_whitelist_pattern(pattern)
        if updated is not state:
            await self._store.update_whitelist(thread_id, list(updated.whitelist_patterns))
        return updated

    async def remove_whitelist_pattern(self, thread_id: str, pattern: str) -> ThreadState | None:
        state = await self._store.find_by_id(thread_id)
        if state is None:
            return None
        updated = state.without_whitelist_pattern(pattern)
        if updated is not state:
            await self._store.update_whitelist(thread_id, list(updated.whitelist_patterns))
        return updated

    async def find_thread(self, thread_id: str) -> ThreadState | None:
        return await self._store.find_by_id(thread_id)

    async def find_by_terminal(self, terminal_id: str) -> ThreadState | None:
        return await self._store.find_by_terminal_id(terminal_id)

    async def list_threads(self) -> list[ThreadState]:
        threads = await self._store.find_all()
        return sorted(threads, key=lambda t: t.created_at)
