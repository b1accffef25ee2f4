"""Local filesystem, glob, editor and notification adapters."""

from __future__ import annotations

import asyncio
import logging
import shutil
from pathlib import Path

from rich.console import Console
from rich.markup import escape

from codesquad.errors import ExternalFailure

logger = logging.getLogger(__name__)


class LocalFileSystem:
    async def ensure_dir(self, path: str) -> None:
        Path(path).mkdir(parents=True, exist_ok=True)

    async def copy_file(self, source: str, dest: str) -> None:
        await asyncio.to_thread(shutil.copy2, source, dest)

    async def exists(self, path: str) -> bool:
        return Path(path).exists()

    async def is_file(self, path: str) -> bool:
        return Path(path).is_file()


class PathGlobber:
    """Glob relative to a root, returning sorted absolute file paths."""

    async def glob(self, pattern: str, root: str) -> list[str]:
        base = Path(root).resolve()
        return sorted(str(p) for p in base.glob(pattern) if p.is_file())


class CommandEditorPort:
    """Opens a folder by running an editor command, e.g. ``code --new-window``."""

    def __init__(self, command: list[str]) -> None:
        self._command = list(command)

    async def open_folder(self, path: str) -> None:
        if not self._command:
            raise ExternalFailure("No editor command configured", recoverable=True)
        binary = shutil.which(self._command[0])
        if binary is None:
            raise ExternalFailure(
                f"Editor command not found: {self._command[0]}", recoverable=True
            )
        logger.info("opening %s with %s", path, binary)
        process = await asyncio.create_subprocess_exec(
            binary,
            *self._command[1:],
            path,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        _, stderr = await process.communicate()
        if process.returncode != 0:
            raise ExternalFailure(
                f"{self._command[0]} exited with {process.returncode}: "
                f"{stderr.decode('utf-8', errors='replace').strip()}",
                recoverable=True,
            )


class ConsoleNotifier:
    """User-facing messages on a rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def show_info(self, message: str) -> None:
        self.console.print(f"[cyan]ℹ[/cyan] {escape(message)}")

    def show_warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠ {escape(message)}[/yellow]")

    def show_error(self, message: str) -> None:
        self.console.print(f"[bold red]✗ {escape(message)}[/bold red]")
