"""Terminal output → agent status classification."""

from codesquad.status.detector import StatusDetector, TerminalStatusState
from codesquad.status.patterns import AgentStatus, AIType
from codesquad.status.scheduler import AsyncioScheduler, Scheduler

__all__ = [
    "AIType",
    "AgentStatus",
    "AsyncioScheduler",
    "Scheduler",
    "StatusDetector",
    "TerminalStatusState",
]
