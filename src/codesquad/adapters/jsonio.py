"""Record-list JSON files, replaced atomically on every write."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def load_records(path: Path) -> list[dict[str, Any]]:
    """Return the dict entries of a JSON list file.

    A missing file is an empty store. An unreadable or non-list file is
    logged and treated as empty.
    """
    if not path.exists():
        return []
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("could not read %s, starting empty: %s", path, exc)
        return []
    if not isinstance(raw, list):
        logger.warning("%s does not hold a list, ignoring it", path)
        return []
    return [item for item in raw if isinstance(item, dict)]


def save_records(path: Path, records: list[dict[str, Any]]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(f".{path.name}.tmp")
    with tmp.open("w", encoding="utf-8") as handle:
        json.dump(records, handle, indent=2)
        handle.write("\n")
        handle.flush()
        os.fsync(handle.fileno())
    # Readers see either the old file or the new one, never a partial write.
    os.replace(tmp, path)
