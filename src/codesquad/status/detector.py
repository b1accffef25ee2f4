"""Per-terminal agent status detection.

Each terminal that has produced output owns one :class:`TerminalStatusState`
in the detector's registry.  Output flips the terminal to ``working`` at
once; a debounced evaluation after a quiet window decides whether the agent
has settled at a prompt (``idle``) or needs attention (``waiting``).

State machine per terminal::

    inactive --output--> working --quiet + idle prompt-------> idle
                            ^     --quiet + question/tool----> waiting
                            |                                   |
                            +-------------output----------------+
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable

from codesquad.status.patterns import (
    AgentStatus,
    AIType,
    detect_signature,
    strip_ansi,
    table_for,
)
from codesquad.status.scheduler import AsyncioScheduler, Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.5
BUFFER_LINES = 10

StatusCallback = Callable[[str, AgentStatus], None]
AITypeCallback = Callable[[str, AIType], None]


@dataclass(slots=True)
class TerminalStatusState:
    status: AgentStatus
    recent_lines: deque[str]
    detected_ai_type: AIType | None = None
    tool_in_progress: bool = False
    last_update: float = field(default_factory=time.time)
    pending_timer: TimerHandle | None = None


class StatusDetector:
    """Classifies live terminal output into agent states.

    With the default scheduler, :meth:`process_output` must be called while
    an asyncio loop is running. Synchronous callers pass their own scheduler.

    Args:
        scheduler: Source of debounce timers (asyncio by default).
        debounce_seconds: Quiet period before prompts are evaluated.
        buffer_lines: How many recent lines are kept per terminal.
        clock: Timestamp source for ``last_update``.
    """

    def __init__(
        self,
        scheduler: Scheduler | None = None,
        *,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        buffer_lines: int = BUFFER_LINES,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._scheduler: Scheduler = scheduler or AsyncioScheduler()
        self._debounce = debounce_seconds
        self._buffer_lines = buffer_lines
        self._clock = clock
        self._states: dict[str, TerminalStatusState] = {}
        self._status_callbacks: list[StatusCallback] = []
        self._type_callbacks: list[AITypeCallback] = []

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def on_status_change(self, callback: StatusCallback) -> None:
        self._status_callbacks.append(callback)

    def on_ai_type_change(self, callback: AITypeCallback) -> None:
        self._type_callbacks.append(callback)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_status(self, terminal_id: str) -> AgentStatus:
        state = self._states.get(terminal_id)
        return state.status if state else AgentStatus.INACTIVE

    def get_ai_type(self, terminal_id: str) -> AIType | None:
        state = self._states.get(terminal_id)
        return state.detected_ai_type if state else None

    def get_state(self, terminal_id: str) -> TerminalStatusState | None:
        return self._states.get(terminal_id)

    @property
    def tracked_terminals(self) -> list[str]:
        return list(self._states)

    # ------------------------------------------------------------------
    # Output handling
    # ------------------------------------------------------------------

    def process_output(
        self,
        terminal_id: str,
        ai_type_hint: AIType | str | None,
        chunk: str,
    ) -> None:
        state = self._states.get(terminal_id)
        if state is None:
            state = TerminalStatusState(
                status=AgentStatus.INACTIVE,
                recent_lines=deque(maxlen=self._buffer_lines),
                detected_ai_type=_coerce_ai_type(ai_type_hint),
                last_update=self._clock(),
            )
            self._states[terminal_id] = state
        elif state.detected_ai_type is None:
            state.detected_ai_type = _coerce_ai_type(ai_type_hint)

        clean = strip_ansi(chunk)
        state.recent_lines.extend(clean.split("\n"))

        if state.status != AgentStatus.WORKING:
            self._transition(terminal_id, state, AgentStatus.WORKING)

        signature = detect_signature(clean)
        if signature is not None and signature != state.detected_ai_type:
            state.detected_ai_type = signature
            self._notify_type(terminal_id, signature)

        if table_for(state.detected_ai_type).has_tool_marker(clean):
            state.tool_in_progress = True

        if state.pending_timer is not None:
            state.pending_timer.cancel()
        state.pending_timer = self._scheduler.call_later(
            self._debounce, lambda: self._evaluate(terminal_id, state)
        )

    def clear(self, terminal_id: str) -> None:
        state = self._states.pop(terminal_id, None)
        if state is not None and state.pending_timer is not None:
            state.pending_timer.cancel()
            state.pending_timer = None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _evaluate(self, terminal_id: str, state: TerminalStatusState) -> None:
        # A timer from a cleared (or replaced) entry must not touch the registry.
        if self._states.get(terminal_id) is not state:
            return
        state.pending_timer = None

        detected = table_for(state.detected_ai_type).classify_buffer(list(state.recent_lines))
        if detected == AgentStatus.IDLE:
            state.tool_in_progress = False
            target = AgentStatus.IDLE
        elif detected == AgentStatus.WAITING or state.tool_in_progress:
            target = AgentStatus.WAITING
        else:
            # Quiet without a prompt: most likely a slow response.
            return

        if state.status != target:
            self._transition(terminal_id, state, target)

    def _transition(
        self, terminal_id: str, state: TerminalStatusState, status: AgentStatus
    ) -> None:
        state.status = status
        state.last_update = self._clock()
        logger.debug("terminal %s -> %s", terminal_id, status)
        for cb in list(self._status_callbacks):
            try:
                cb(terminal_id, status)
            except Exception:
                logger.exception("status subscriber failed for terminal %s", terminal_id)

    def _notify_type(self, terminal_id: str, ai_type: AIType) -> None:
        logger.debug("terminal %s detected as %s", terminal_id, ai_type)
        for cb in list(self._type_callbacks):
            try:
                cb(terminal_id, ai_type)
            except Exception:
                logger.exception("ai-type subscriber failed for terminal %s", terminal_id)


def _coerce_ai_type(value: AIType | str | None) -> AIType | None:
    if value is None:
        return None
    try:
        return AIType(value)
    except ValueError:
        return None
