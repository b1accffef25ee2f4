"""Terminal port backed by tmux: one window per thread.

Terminal ids are tmux window ids (``@12``), which stay stable for the
window's lifetime even when windows are renamed or reordered.
"""

from __future__ import annotations

import asyncio
import logging

from codesquad.errors import ExternalFailure

logger = logging.getLogger(__name__)


class TmuxTerminalPort:
    def __init__(self, session: str = "codesquad", binary: str = "tmux") -> None:
        self.session = session
        self._binary = binary

    async def _run(self, args: list[str], *, check: bool = True) -> str:
        process = await asyncio.create_subprocess_exec(
            self._binary,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        stdout, stderr = await process.communicate()
        if check and process.returncode != 0:
            raise ExternalFailure(
                f"tmux {' '.join(args)} failed: {stderr.decode('utf-8', errors='replace').strip()}",
                details={"args": args, "returncode": process.returncode},
            )
        return stdout.decode("utf-8", errors="replace").strip()

    async def _has_session(self) -> bool:
        process = await asyncio.create_subprocess_exec(
            self._binary,
            "has-session",
            "-t",
            self.session,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
        return await process.wait() == 0

    async def create_terminal(self, name: str, cwd: str) -> str:
        fmt = "#{window_id}"
        if await self._has_session():
            window_id = await self._run(
                ["new-window", "-d", "-t", self.session, "-n", name, "-c", cwd, "-P", "-F", fmt]
            )
        else:
            window_id = await self._run(
                ["new-session", "-d", "-s", self.session, "-n", name, "-c", cwd, "-P", "-F", fmt]
            )
        logger.info("opened tmux window %s (%s) in %s", window_id, name, cwd)
        return window_id

    async def send_text(self, terminal_id: str, text: str) -> None:
        body = text[:-1] if text.endswith("\n") else text
        # Literal mode so tmux does not interpret key names inside the text.
        await self._run(["send-keys", "-t", terminal_id, "-l", body])
        if text.endswith("\n"):
            await self._run(["send-keys", "-t", terminal_id, "Enter"])

    async def close_terminal(self, terminal_id: str) -> None:
        # No-op when the window is already gone.
        await self._run(["kill-window", "-t", terminal_id], check=False)
