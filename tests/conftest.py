"""Global test fixtures for codesquad."""

from __future__ import annotations

import pytest

from codesquad.adapters.stores import (
    InMemoryCommentStore,
    InMemoryOwnershipMapStore,
    InMemoryThreadStateStore,
)
from codesquad.status import StatusDetector
from codesquad.threads import ThreadLifecycleManager
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


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def detector(scheduler: ManualScheduler) -> StatusDetector:
    return StatusDetector(scheduler)


@pytest.fixture
def thread_store() -> InMemoryThreadStateStore:
    return InMemoryThreadStateStore()


@pytest.fixture
def comment_store() -> InMemoryCommentStore:
    return InMemoryCommentStore()


@pytest.fixture
def ownership_store() -> InMemoryOwnershipMapStore:
    return InMemoryOwnershipMapStore()


@pytest.fixture
def terminal() -> FakeTerminal:
    return FakeTerminal()


@pytest.fixture
def git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def fs() -> FakeFileSystem:
    return FakeFileSystem()


@pytest.fixture
def globber() -> FakeGlobber:
    return FakeGlobber()


@pytest.fixture
def editor() -> FakeEditor:
    return FakeEditor()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def manager(
    thread_store: InMemoryThreadStateStore,
    terminal: FakeTerminal,
    git: FakeGit,
    fs: FakeFileSystem,
    globber: FakeGlobber,
    comment_store: InMemoryCommentStore,
    editor: FakeEditor,
    detector: StatusDetector,
) -> ThreadLifecycleManager:
    return ThreadLifecycleManager(
        store=thread_store,
        terminal=terminal,
        git=git,
        fs=fs,
        globber=globber,
        comments=comment_store,
        editor=editor,
        detector=detector,
        id_factory=sequential_ids("thread"),
        clock=lambda: 1_700_000_000.0,
    )
