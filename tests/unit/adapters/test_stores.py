"""Tests for the in-memory and JSON-backed stores."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from codesquad.adapters.stores import (
    COMMENTS_FILE,
    OWNERSHIP_FILE,
    THREADS_FILE,
    InMemoryCommentStore,
    InMemoryOwnershipMapStore,
    InMemoryThreadStateStore,
    JsonCommentStore,
    JsonOwnershipMapStore,
    JsonThreadStateStore,
)
from codesquad.threads.models import Comment, FileThreadMapping, ThreadState


def _thread(thread_id: str = "t1", terminal_id: str = "term-1") -> ThreadState:
    return ThreadState(
        thread_id=thread_id,
        name="feature",
        terminal_id=terminal_id,
        working_dir="/wt",
        branch="feature",
        worktree_path="/wt",
    )


class TestThreadStore:
    @pytest.mark.asyncio
    async def test_save_find_delete(self) -> None:
        store = InMemoryThreadStateStore()
        await store.save(_thread())
        assert (await store.find_by_id("t1")) == _thread()
        assert (await store.find_by_terminal_id("term-1")) == _thread()
        assert await store.delete("t1") is True
        assert await store.delete("t1") is False
        assert await store.find_all() == []

    @pytest.mark.asyncio
    async def test_update_whitelist_deduplicates(self) -> None:
        store = InMemoryThreadStateStore()
        await store.save(_thread())
        await store.update_whitelist("t1", ["*.py", "*.py", "docs/**"])
        state = await store.find_by_id("t1")
        assert state is not None
        assert state.whitelist_patterns == ("*.py", "docs/**")

    @pytest.mark.asyncio
    async def test_update_whitelist_unknown_is_noop(self) -> None:
        store = InMemoryThreadStateStore()
        await store.update_whitelist("missing", ["*"])
        assert await store.find_all() == []

    @pytest.mark.asyncio
    async def test_json_store_persists(self, tmp_path: Path) -> None:
        store = JsonThreadStateStore(tmp_path)
        await store.save(_thread())
        await store.update_whitelist("t1", ["src/**"])

        reloaded = JsonThreadStateStore(tmp_path)
        state = await reloaded.find_by_id("t1")
        assert state is not None
        assert state.whitelist_patterns == ("src/**",)
        assert not (tmp_path / f".{THREADS_FILE}.tmp").exists()

    @pytest.mark.asyncio
    async def test_json_store_skips_bad_records(self, tmp_path: Path) -> None:
        good = _thread().to_dict()
        bad = _thread("t2").to_dict() | {"name": ""}
        (tmp_path / THREADS_FILE).write_text(json.dumps([good, bad, "junk"]))
        store = JsonThreadStateStore(tmp_path)
        assert [t.thread_id for t in await store.find_all()] == ["t1"]

    def test_json_store_tolerates_corrupt_file(self, tmp_path: Path) -> None:
        (tmp_path / THREADS_FILE).write_text("{not json")
        store = JsonThreadStateStore(tmp_path)
        assert store.path == tmp_path / THREADS_FILE


class TestCommentStore:
    @pytest.mark.asyncio
    async def test_active_and_submitted(self) -> None:
        store = InMemoryCommentStore()
        await store.save(Comment(id="c1", file="a.py", line=1, text="x"))
        await store.save(Comment(id="c2", file="a.py", line=2, text="y"))
        await store.mark_as_submitted(["c1"])
        assert [c.id for c in await store.find_active()] == ["c2"]
        assert len(await store.find_all()) == 2

    @pytest.mark.asyncio
    async def test_save_replaces_same_id(self) -> None:
        store = InMemoryCommentStore()
        await store.save(Comment(id="c1", file="a.py", line=1, text="x"))
        await store.save(Comment(id="c1", file="a.py", line=1, text="edited"))
        assert [c.text for c in await store.find_all()] == ["edited"]

    @pytest.mark.asyncio
    async def test_delete_by_thread(self) -> None:
        store = InMemoryCommentStore()
        await store.save(Comment(id="c1", file="a.py", line=1, text="x", thread_id="t1"))
        await store.save(Comment(id="c2", file="a.py", line=1, text="x", thread_id="t2"))
        assert await store.delete_by_thread_id("t1") == 1
        assert [c.id for c in await store.find_by_thread_id("t2")] == ["c2"]

    @pytest.mark.asyncio
    async def test_json_store_persists_submission(self, tmp_path: Path) -> None:
        store = JsonCommentStore(tmp_path)
        await store.save(Comment(id="c1", file="a.py", line=1, end_line=3, text="x"))
        await store.mark_as_submitted(["c1"])

        reloaded = JsonCommentStore(tmp_path)
        [comment] = await reloaded.find_all()
        assert comment.is_submitted
        assert comment.line_range == "1-3"
        assert json.loads((tmp_path / COMMENTS_FILE).read_text())[0]["id"] == "c1"


class TestOwnershipStore:
    @pytest.mark.asyncio
    async def test_last_writer_wins(self) -> None:
        store = InMemoryOwnershipMapStore()
        await store.save(FileThreadMapping("a.py", "t1"))
        await store.save(FileThreadMapping("a.py", "t2"))
        mapping = await store.find_by_file_path("a.py")
        assert mapping is not None and mapping.thread_id == "t2"
        assert await store.find_by_thread_id("t1") == []

    @pytest.mark.asyncio
    async def test_delete_and_clear(self) -> None:
        store = InMemoryOwnershipMapStore()
        await store.save(FileThreadMapping("a.py", "t1"))
        await store.save(FileThreadMapping("b.py", "t1"))
        assert await store.delete("a.py") is True
        assert await store.delete("a.py") is False
        await store.clear()
        assert await store.find_all() == []

    @pytest.mark.asyncio
    async def test_json_store_persists(self, tmp_path: Path) -> None:
        store = JsonOwnershipMapStore(tmp_path / "state")
        await store.save(FileThreadMapping("a.py", "t1", last_modified_at=2.0))
        reloaded = JsonOwnershipMapStore(tmp_path / "state")
        assert await reloaded.find_by_file_path("a.py") == FileThreadMapping("a.py", "t1", 2.0)
        assert (tmp_path / "state" / OWNERSHIP_FILE).exists()
