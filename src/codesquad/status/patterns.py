"""Per-agent pattern tables for terminal status classification.

Working is never pattern-detected: any output means the agent is active.
The tables only recognise the prompts an agent shows once it stops, either
an input prompt (idle) or a question it needs answered (waiting).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Iterable, Sequence


class AgentStatus(StrEnum):
    INACTIVE = "inactive"
    IDLE = "idle"
    WORKING = "working"
    WAITING = "waiting"


class AIType(StrEnum):
    CLAUDE = "claude"
    CODEX = "codex"
    GEMINI = "gemini"


_ANSI_RE = re.compile(r"\x1B(?:\[[0-?]*[ -/]*[@-~]|\][^\x07]*\x07|[@-Z\\-_])")


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


@dataclass(frozen=True, slots=True)
class PatternTable:
    """Ordered prompt patterns for one agent flavour."""

    idle: tuple[re.Pattern[str], ...]
    waiting: tuple[re.Pattern[str], ...]
    tool_markers: tuple[re.Pattern[str], ...] = ()

    def classify(self, text: str) -> AgentStatus | None:
        """Idle patterns are checked before waiting patterns."""
        if any(p.search(text) for p in self.idle):
            return AgentStatus.IDLE
        if any(p.search(text) for p in self.waiting):
            return AgentStatus.WAITING
        return None

    def classify_buffer(self, lines: Sequence[str]) -> AgentStatus | None:
        # Most recent output is most relevant.
        for line in reversed(lines):
            status = self.classify(line)
            if status is not None:
                return status
        # Prompts split across lines.
        if len(lines) >= 2:
            return self.classify("\n".join(lines[-3:]))
        return None

    def has_tool_marker(self, text: str) -> bool:
        return any(p.search(text) for p in self.tool_markers)


def _compile(*patterns: str, flags: int = 0) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, flags) for p in patterns)


_YES_NO = (r"\([yY]/[nN]\)", r"\[[yY]/[nN]\]")

CLAUDE = PatternTable(
    idle=_compile(
        r"^>\s*$",
        r"-- INSERT --",
        r"-- NORMAL --",
        flags=re.MULTILINE,
    ),
    waiting=_compile(
        r"Enter to select",
        *_YES_NO,
        r"Tab/Arrow keys",
        r"Press Enter to continue",
        r"(?i)Do you want to proceed\?",
    ),
    tool_markers=_compile(r"[⏺●]\s*[A-Z][A-Za-z]*\("),
)

CODEX = PatternTable(
    idle=_compile(
        r"[│|]\s*[▌▍▎▏█⎸]",
        r"[⮐⏎↵←⇦]\s*send",
        r"\^J\s*newline",
        r"\^C\s*quit",
        r"To get started",
        r"OpenAI Codex",
    ),
    waiting=_compile(*_YES_NO, r"Allow command\?"),
    tool_markers=_compile(r"^\s*•\s*Running\b", flags=re.MULTILINE),
)

GEMINI = PatternTable(
    idle=_compile(
        r"Type your message",
        r"@path/to/file",
        r"Tips for getting started",
    ),
    waiting=_compile(
        *_YES_NO,
        r"(?i)Waiting for user",
        r"(?i)Allow execution",
        r"(?i)Enter to select",
        r"(?i)Press Enter",
    ),
    tool_markers=_compile(r"[⊷✔]\s*(?:Shell|ReadFile|WriteFile|Edit|ReadManyFiles|FindFiles)\b"),
)

GENERIC = PatternTable(
    idle=_compile(r"^>\s*$", r"\$\s*$", flags=re.MULTILINE),
    waiting=_compile(*_YES_NO),
    tool_markers=CLAUDE.tool_markers,
)

_TABLES: dict[AIType, PatternTable] = {
    AIType.CLAUDE: CLAUDE,
    AIType.CODEX: CODEX,
    AIType.GEMINI: GEMINI,
}

# Phrases that only one agent prints; checked in this order.
SIGNATURES: tuple[tuple[AIType, re.Pattern[str]], ...] = (
    (AIType.CLAUDE, re.compile(r"Claude Code|claude\.ai/code")),
    (AIType.CODEX, re.compile(r"OpenAI Codex|codex-cli")),
    (AIType.GEMINI, re.compile(r"Gemini CLI|Tips for getting started")),
)


def table_for(ai_type: AIType | str | None) -> PatternTable:
    if ai_type is None:
        return GENERIC
    try:
        return _TABLES[AIType(ai_type)]
    except ValueError:
        return GENERIC


def detect_signature(
    text: str,
    signatures: Iterable[tuple[AIType, re.Pattern[str]]] = SIGNATURES,
) -> AIType | None:
    for ai_type, pattern in signatures:
        if pattern.search(text):
            return ai_type
    return None
