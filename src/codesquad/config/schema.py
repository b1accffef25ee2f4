"""Configuration schema for codesquad YAML files."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(slots=True)
class WorkspaceConfig:
    state_dir: str = ".codesquad"
    default_isolation: str = "worktree"  # "worktree" | "none"
    # Git-ignored files a fresh worktree would lack (env files, local settings).
    worktree_copy_patterns: list[str] = field(default_factory=lambda: [".env", ".env.*"])


@dataclass(slots=True)
class StatusConfig:
    debounce_ms: int = 500
    buffer_lines: int = 10


@dataclass(slots=True)
class TerminalConfig:
    tmux_session: str = "codesquad"


@dataclass(slots=True)
class EditorConfig:
    command: list[str] = field(default_factory=lambda: ["code", "--new-window"])


@dataclass(slots=True)
class LoggingConfig:
    debug: bool = False
    json: bool = False


@dataclass(slots=True)
class CodesquadConfig:
    version: int = 1
    workspace: WorkspaceConfig = field(default_factory=WorkspaceConfig)
    status: StatusConfig = field(default_factory=StatusConfig)
    terminal: TerminalConfig = field(default_factory=TerminalConfig)
    editor: EditorConfig = field(default_factory=EditorConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
