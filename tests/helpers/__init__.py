"""Shared test helpers for the codesquad test suite."""

from __future__ import annotations

from tests.helpers.fakes import (
    FakeEditor,
    FakeFileSystem,
    FakeGit,
    FakeGlobber,
    FakeNotifier,
    FakeTerminal,
    ManualScheduler,
    sequential_ids,
)

__all__ = [
    "FakeEditor",
    "FakeFileSystem",
    "FakeGit",
    "FakeGlobber",
    "FakeNotifier",
    "FakeTerminal",
    "ManualScheduler",
    "sequential_ids",
]
