"""Composition root: wire the thread core to concrete adapters from config."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from codesquad.adapters import (
    CommandEditorPort,
    ConsoleNotifier,
    GitCliPort,
    JsonCommentStore,
    JsonOwnershipMapStore,
    JsonThreadStateStore,
    LocalFileSystem,
    PathGlobber,
    TmuxTerminalPort,
)
from codesquad.config.schema import CodesquadConfig
from codesquad.ports import NotificationPort, TerminalPort
from codesquad.routing import CommentRouter, CommentService, OwnershipTracker
from codesquad.status import StatusDetector
from codesquad.threads import ThreadLifecycleManager


@dataclass(slots=True)
class Squad:
    config: CodesquadConfig
    workspace_root: str
    threads: ThreadLifecycleManager
    router: CommentRouter
    comments: CommentService
    ownership: OwnershipTracker
    detector: StatusDetector
    notifier: NotificationPort


def build_squad(
    workspace_root: str | Path,
    config: CodesquadConfig,
    *,
    notifier: NotificationPort | None = None,
    terminal: TerminalPort | None = None,
) -> Squad:
    root = str(Path(workspace_root).resolve())
    state_dir = Path(root) / config.workspace.state_dir

    thread_store = JsonThreadStateStore(state_dir)
    comment_store = JsonCommentStore(state_dir)
    ownership_store = JsonOwnershipMapStore(state_dir)
    terminal = terminal or TmuxTerminalPort(session=config.terminal.tmux_session)
    notifier = notifier or ConsoleNotifier()
    detector = StatusDetector(
        debounce_seconds=config.status.debounce_ms / 1000,
        buffer_lines=config.status.buffer_lines,
    )

    threads = ThreadLifecycleManager(
        store=thread_store,
        terminal=terminal,
        git=GitCliPort(),
        fs=LocalFileSystem(),
        globber=PathGlobber(),
        comments=comment_store,
        editor=CommandEditorPort(config.editor.command),
        detector=detector,
    )
    router = CommentRouter(
        comments=comment_store,
        ownership=ownership_store,
        threads=thread_store,
        terminal=terminal,
        notifier=notifier,
    )
    return Squad(
        config=config,
        workspace_root=root,
        threads=threads,
        router=router,
        comments=CommentService(comment_store),
        ownership=OwnershipTracker(ownership_store),
        detector=detector,
        notifier=notifier,
    )
