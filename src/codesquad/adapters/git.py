"""Git worktree and branch operations through the ``git`` CLI."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from codesquad.errors import GitCommandError

log = logging.getLogger(__name__)


class GitCliPort:
    def __init__(self, binary: str = "git") -> None:
        self._binary = binary

    async def _run(self, args: list[str], cwd: str | Path) -> str:
        process = await asyncio.create_subprocess_exec(
            self._binary,
            *args,
            cwd=str(cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            raise GitCommandError(
                [self._binary, *args],
                process.returncode or 1,
                stderr.decode("utf-8", errors="replace"),
            )
        return stdout.decode("utf-8", errors="replace")

    async def _prune_worktrees(self, repo_root: str) -> None:
        """Clean up stale bookkeeping left by worktrees deleted outside git."""
        try:
            await self._run(["worktree", "prune"], repo_root)
        except GitCommandError as exc:
            log.warning("git worktree prune failed: %s", exc.stderr.strip())

    async def create_worktree(self, path: str, branch: str, repo_root: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        await self._prune_worktrees(repo_root)
        existing = await self.list_branches(repo_root)
        if branch in existing:
            await self._run(["worktree", "add", path, branch], repo_root)
        else:
            await self._run(["worktree", "add", path, "-b", branch], repo_root)

    async def remove_worktree(self, path: str, repo_root: str, force: bool = False) -> None:
        args = ["worktree", "remove"]
        if force:
            args.append("--force")
        args.append(path)
        await self._run(args, repo_root)
        await self._prune_worktrees(repo_root)

    async def switch_branch(self, worktree_path: str, branch: str) -> None:
        existing = await self.list_branches(worktree_path)
        if branch in existing:
            await self._run(["switch", branch], worktree_path)
        else:
            await self._run(["switch", "-c", branch], worktree_path)

    async def delete_branch(self, branch: str, repo_root: str, force: bool = False) -> None:
        await self._run(["branch", "-D" if force else "-d", branch], repo_root)

    async def has_uncommitted_changes(self, worktree_path: str) -> bool:
        out = await self._run(["status", "--porcelain"], worktree_path)
        return bool(out.strip())

    async def stash_changes(self, worktree_path: str) -> None:
        await self._run(
            ["stash", "push", "--include-untracked", "-m", "codesquad: branch switch"],
            worktree_path,
        )

    async def list_branches(self, repo_root: str) -> list[str]:
        out = await self._run(["branch", "--format=%(refname:short)"], repo_root)
        return [line.strip() for line in out.splitlines() if line.strip()]
