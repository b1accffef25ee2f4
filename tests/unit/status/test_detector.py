"""Tests for the per-terminal status state machine."""

from __future__ import annotations

import asyncio

import pytest

from codesquad.status import AgentStatus, AIType, AsyncioScheduler, StatusDetector
from tests.helpers.fakes import ManualScheduler


def _record(detector: StatusDetector) -> list[tuple[str, AgentStatus]]:
    events: list[tuple[str, AgentStatus]] = []
    detector.on_status_change(lambda tid, status: events.append((tid, status)))
    return events


class TestReads:
    def test_unknown_terminal_is_inactive(self, detector: StatusDetector) -> None:
        assert detector.get_status("nope") == AgentStatus.INACTIVE
        assert detector.get_ai_type("nope") is None
        assert detector.get_state("nope") is None


class TestImmediateWorking:
    def test_output_flips_to_working_synchronously(self, detector: StatusDetector) -> None:
        events = _record(detector)
        detector.process_output("t1", "claude", "Some output")
        assert detector.get_status("t1") == AgentStatus.WORKING
        assert events == [("t1", AgentStatus.WORKING)]

    def test_prompt_chunk_is_working_until_window_elapses(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        events = _record(detector)
        detector.process_output("t1", "claude", "> ")
        assert detector.get_status("t1") == AgentStatus.WORKING

        scheduler.advance(0.5)
        assert detector.get_status("t1") == AgentStatus.IDLE
        assert [s for _, s in events] == [AgentStatus.WORKING, AgentStatus.IDLE]

    def test_continuous_output_notifies_working_once(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        events = _record(detector)
        detector.process_output("t1", "claude", "Reading...")
        scheduler.advance(0.1)
        detector.process_output("t1", "claude", "Writing...")
        scheduler.advance(0.1)
        detector.process_output("t1", "claude", "Done")
        scheduler.advance(0.15)
        assert events == [("t1", AgentStatus.WORKING)]

    def test_multiple_subscribers_all_notified(self, detector: StatusDetector) -> None:
        count = 0

        def bump(_tid: str, _status: AgentStatus) -> None:
            nonlocal count
            count += 1

        detector.on_status_change(bump)
        detector.on_status_change(bump)
        detector.process_output("t1", "claude", "out")
        assert count == 2

    def test_subscriber_error_does_not_propagate(self, detector: StatusDetector) -> None:
        def boom(_tid: str, _status: AgentStatus) -> None:
            raise RuntimeError("boom")

        detector.on_status_change(boom)
        detector.process_output("t1", "claude", "out")
        assert detector.get_status("t1") == AgentStatus.WORKING


class TestDebouncedEvaluation:
    def test_each_chunk_restarts_the_window(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        detector.process_output("t1", "claude", "> ")
        scheduler.advance(0.4)
        detector.process_output("t1", "claude", "still going")
        scheduler.advance(0.4)
        assert detector.get_status("t1") == AgentStatus.WORKING
        assert scheduler.pending == 1

    def test_waiting_prompt(self, detector: StatusDetector, scheduler: ManualScheduler) -> None:
        events = _record(detector)
        detector.process_output("t1", "claude", "Do you want to proceed? (y/n)")
        scheduler.advance(0.5)
        assert detector.get_status("t1") == AgentStatus.WAITING
        assert [s for _, s in events] == [AgentStatus.WORKING, AgentStatus.WAITING]

    def test_silence_without_prompt_stays_working(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        events = _record(detector)
        detector.process_output("t1", "claude", "Thinking about the refactor")
        scheduler.advance(2.0)
        assert detector.get_status("t1") == AgentStatus.WORKING
        assert len(events) == 1

    def test_tool_marker_without_completion_means_waiting(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        events = _record(detector)
        detector.process_output("t1", "claude", "⏺ Bash(rm -rf build)")
        state = detector.get_state("t1")
        assert state is not None and state.tool_in_progress
        scheduler.advance(0.5)
        assert detector.get_status("t1") == AgentStatus.WAITING
        assert [s for _, s in events] == [AgentStatus.WORKING, AgentStatus.WAITING]

    def test_idle_clears_tool_in_progress(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        detector.process_output("t1", "claude", "⏺ Read(src/app.py)")
        detector.process_output("t1", "claude", "> ")
        scheduler.advance(0.5)
        state = detector.get_state("t1")
        assert state is not None
        assert state.status == AgentStatus.IDLE
        assert not state.tool_in_progress

    def test_output_after_waiting_reenters_working(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        detector.process_output("t1", "claude", "(y/n)")
        scheduler.advance(0.5)
        events = _record(detector)
        detector.process_output("t1", "claude", "(y/n)")
        scheduler.advance(0.5)
        # working again, then waiting again
        assert [s for _, s in events] == [AgentStatus.WORKING, AgentStatus.WAITING]

    def test_buffer_keeps_last_ten_lines(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        for i in range(15):
            detector.process_output("t1", "claude", f"Line {i}")
        detector.process_output("t1", "claude", "> ")
        state = detector.get_state("t1")
        assert state is not None
        assert len(state.recent_lines) == 10
        assert state.recent_lines[0] == "Line 6"
        scheduler.advance(0.5)
        assert detector.get_status("t1") == AgentStatus.IDLE

    def test_multiline_chunk_is_split(self, detector: StatusDetector) -> None:
        detector.process_output("t1", None, "a\nb\nc")
        state = detector.get_state("t1")
        assert state is not None
        assert list(state.recent_lines) == ["a", "b", "c"]

    def test_ansi_codes_are_ignored(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        detector.process_output("t1", "claude", "\x1b[32m> \x1b[0m")
        scheduler.advance(0.5)
        assert detector.get_status("t1") == AgentStatus.IDLE

    def test_terminals_are_independent(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        detector.process_output("t1", "claude", "> ")
        detector.process_output("t2", "claude", "(y/n)")
        scheduler.advance(0.5)
        assert detector.get_status("t1") == AgentStatus.IDLE
        assert detector.get_status("t2") == AgentStatus.WAITING


class TestAITypeDetection:
    def test_hint_is_recorded_without_notification(self, detector: StatusDetector) -> None:
        changes: list[tuple[str, AIType]] = []
        detector.on_ai_type_change(lambda tid, t: changes.append((tid, t)))
        detector.process_output("t1", "codex", "hello")
        assert detector.get_ai_type("t1") == AIType.CODEX
        assert changes == []

    def test_signature_overrides_hint(self, detector: StatusDetector) -> None:
        changes: list[tuple[str, AIType]] = []
        detector.on_ai_type_change(lambda tid, t: changes.append((tid, t)))
        detector.process_output("t1", "claude", ">_ OpenAI Codex (v0.39)")
        assert detector.get_ai_type("t1") == AIType.CODEX
        assert changes == [("t1", AIType.CODEX)]

    def test_same_signature_twice_notifies_once(self, detector: StatusDetector) -> None:
        changes: list[AIType] = []
        detector.on_ai_type_change(lambda _tid, t: changes.append(t))
        detector.process_output("t1", None, "Welcome to Claude Code!")
        detector.process_output("t1", None, "Claude Code tips")
        assert changes == [AIType.CLAUDE]

    def test_reclassified_type_drives_pattern_table(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        detector.process_output("t1", "claude", "Gemini CLI")
        detector.process_output("t1", "claude", "Type your message or @path/to/file")
        scheduler.advance(0.5)
        assert detector.get_ai_type("t1") == AIType.GEMINI
        assert detector.get_status("t1") == AgentStatus.IDLE

    def test_gemini_welcome_screen_settles_idle(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        detector.process_output("t1", None, "Tips for getting started:")
        scheduler.advance(0.5)
        assert detector.get_ai_type("t1") == AIType.GEMINI
        assert detector.get_status("t1") == AgentStatus.IDLE


class TestClear:
    def test_clear_resets_to_inactive(self, detector: StatusDetector) -> None:
        detector.process_output("t1", "claude", "output")
        detector.clear("t1")
        assert detector.get_status("t1") == AgentStatus.INACTIVE
        assert detector.get_ai_type("t1") is None

    def test_clear_cancels_pending_timer(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        events = _record(detector)
        detector.process_output("t1", "claude", "> ")
        detector.clear("t1")
        scheduler.advance(1.0)
        assert len(events) == 1
        assert detector.get_status("t1") == AgentStatus.INACTIVE

    def test_stale_timer_does_not_touch_new_entry(
        self, detector: StatusDetector, scheduler: ManualScheduler
    ) -> None:
        detector.process_output("t1", "claude", "> ")
        stale = detector.get_state("t1")
        assert stale is not None
        handle = stale.pending_timer
        detector.clear("t1")
        detector.process_output("t1", "claude", "working on it")
        # Fire the old callback by hand even though it was cancelled.
        assert handle is not None
        handle.callback()  # type: ignore[attr-defined]
        assert detector.get_status("t1") == AgentStatus.WORKING

    def test_clear_unknown_terminal_is_noop(self, detector: StatusDetector) -> None:
        detector.clear("never-seen")


class TestAsyncioScheduler:
    @pytest.mark.asyncio
    async def test_debounce_on_real_loop(self) -> None:
        detector = StatusDetector(debounce_seconds=0.05)
        events: list[AgentStatus] = []
        detector.on_status_change(lambda _tid, s: events.append(s))
        detector.process_output("t1", "claude", "> ")
        await asyncio.sleep(0.15)
        assert events == [AgentStatus.WORKING, AgentStatus.IDLE]
        detector.clear("t1")

    def test_default_scheduler_needs_running_loop(self) -> None:
        with pytest.raises(RuntimeError, match="running event loop"):
            AsyncioScheduler().call_later(0.1, lambda: None)

