"""YAML config loader for codesquad."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from codesquad.config.schema import (
    CodesquadConfig,
    EditorConfig,
    LoggingConfig,
    StatusConfig,
    TerminalConfig,
    WorkspaceConfig,
)
from codesquad.errors import ConfigError

DEFAULT_CONFIG_PATH = Path(".codesquad") / "config.yaml"


def config_path_for(workspace_root: str | Path) -> Path:
    return Path(workspace_root) / DEFAULT_CONFIG_PATH


def load_config(path: str | Path) -> CodesquadConfig:
    p = Path(path)
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) if p.exists() else {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {p}: {exc}", details={"path": str(p)}) from exc
    if not isinstance(raw, dict):
        raw = {}

    workspace = WorkspaceConfig(**_pick(_section(raw, "workspace"), WorkspaceConfig))
    status = StatusConfig(**_pick(_section(raw, "status"), StatusConfig))
    terminal = TerminalConfig(**_pick(_section(raw, "terminal"), TerminalConfig))
    editor = EditorConfig(**_pick(_section(raw, "editor"), EditorConfig))
    logging_cfg = LoggingConfig(**_pick(_section(raw, "logging"), LoggingConfig))

    if workspace.default_isolation not in {"worktree", "none"}:
        raise ConfigError(
            f"workspace.default_isolation must be 'worktree' or 'none', "
            f"got {workspace.default_isolation!r}"
        )
    if isinstance(editor.command, str):
        editor.command = editor.command.split()
    if status.debounce_ms <= 0 or status.buffer_lines <= 0:
        raise ConfigError("status.debounce_ms and status.buffer_lines must be positive")

    return CodesquadConfig(
        version=int(raw.get("version", 1)),
        workspace=workspace,
        status=status,
        terminal=terminal,
        editor=editor,
        logging=logging_cfg,
    )


def _section(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    return value if isinstance(value, dict) else {}


def _pick(raw: dict[str, Any], model_type: type[Any]) -> dict[str, Any]:
    allowed = set(model_type.__dataclass_fields__.keys())
    return {k: v for k, v in raw.items() if k in allowed}
