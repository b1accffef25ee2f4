"""Concrete implementations of the thread core's ports."""

from codesquad.adapters.git import GitCliPort
from codesquad.adapters.local import CommandEditorPort, ConsoleNotifier, LocalFileSystem, PathGlobber
from codesquad.adapters.stores import (
    InMemoryCommentStore,
    InMemoryOwnershipMapStore,
    InMemoryThreadStateStore,
    JsonCommentStore,
    JsonOwnershipMapStore,
    JsonThreadStateStore,
)
from codesquad.adapters.tmux import TmuxTerminalPort

__all__ = [
    "CommandEditorPort",
    "ConsoleNotifier",
    "GitCliPort",
    "InMemoryCommentStore",
    "InMemoryOwnershipMapStore",
    "InMemoryThreadStateStore",
    "JsonCommentStore",
    "JsonOwnershipMapStore",
    "JsonThreadStateStore",
    "LocalFileSystem",
    "PathGlobber",
    "TmuxTerminalPort",
]
