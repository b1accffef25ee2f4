"""Route pending review comments to the agent threads that own the files.

Comments are grouped by file, each file resolved to its owning thread via
the ownership map (falling back to the focused thread), and every
destination receives exactly one batched message per flush.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from codesquad.ports import (
    CommentStore,
    NotificationPort,
    OwnershipMapStore,
    TerminalPort,
    ThreadStateStore,
)
from codesquad.threads.models import Comment, ThreadState

logger = logging.getLogger(__name__)

PROMPT_HEADER = (
    "Here are my comments on your work. Read the content at each referenced line "
    "and respond based on that content and my comment. Locate and identify the "
    "exact content before responding."
)
NO_ACTIVE_THREAD_WARNING = "No active thread to receive comments"


@dataclass(slots=True)
class RoutingResult:
    submitted_ids: list[str]
    count: int
    thread_names: list[str] = field(default_factory=list)
    unrouted_files: list[str] = field(default_factory=list)


@dataclass(slots=True)
class _Delivery:
    thread: ThreadState
    comments: list[Comment] = field(default_factory=list)


def format_comments(comments: list[Comment]) -> str:
    """Render comments as one prompt, grouped by file in first-seen order."""
    grouped: dict[str, list[Comment]] = {}
    for c in comments:
        grouped.setdefault(c.file, []).append(c)

    parts = [PROMPT_HEADER]
    for file, file_comments in grouped.items():
        parts.append(f"\nFile: {file}")
        for c in file_comments:
            parts.append(f"Line {c.line_range}: {c.text}")
    return "\n".join(parts)


class CommentRouter:
    """Flushes unsubmitted comments to their destination terminals."""

    def __init__(
        self,
        *,
        comments: CommentStore,
        ownership: OwnershipMapStore,
        threads: ThreadStateStore,
        terminal: TerminalPort,
        notifier: NotificationPort,
    ) -> None:
        self._comments = comments
        self._ownership = ownership
        self._threads = threads
        self._terminal = terminal
        self._notifier = notifier

    async def execute_with_routing(
        self, focused_thread: ThreadState | None = None
    ) -> RoutingResult | None:
        pending = await self._comments.find_active()
        if not pending:
            return None

        by_file: dict[str, list[Comment]] = {}
        for c in pending:
            by_file.setdefault(c.file, []).append(c)

        deliveries: dict[str, _Delivery] = {}
        unrouted: list[str] = []
        for file, file_comments in by_file.items():
            thread = await self._resolve(file, focused_thread)
            if thread is None:
                unrouted.append(file)
                continue
            delivery = deliveries.setdefault(thread.thread_id, _Delivery(thread=thread))
            delivery.comments.extend(file_comments)

        if not deliveries:
            self._notifier.show_warning(NO_ACTIVE_THREAD_WARNING)
            return None

        submitted: list[str] = []
        names: list[str] = []
        for delivery in deliveries.values():
            message = format_comments(delivery.comments)
            await self._terminal.send_text(delivery.thread.terminal_id, message + "\n")
            ids = [c.id for c in delivery.comments]
            await self._comments.mark_as_submitted(ids)
            submitted.extend(ids)
            names.append(delivery.thread.name)
            logger.info(
                "sent %d comment(s) to thread %s", len(ids), delivery.thread.thread_id
            )

        self._notifier.show_info(f"Sent {len(submitted)} comment(s) to {', '.join(names)}")
        if unrouted:
            logger.warning("no destination thread for %s", ", ".join(unrouted))
            self._notifier.show_warning(
                f"{NO_ACTIVE_THREAD_WARNING} for: {', '.join(unrouted)} (left pending)"
            )

        return RoutingResult(
            submitted_ids=submitted,
            count=len(submitted),
            thread_names=names,
            unrouted_files=unrouted,
        )

    async def _resolve(
        self, file: str, focused_thread: ThreadState | None
    ) -> ThreadState | None:
        mapping = await self._ownership.find_by_file_path(file)
        if mapping is not None:
            owner = await self._threads.find_by_id(mapping.thread_id)
            if owner is not None:
                return owner
            logger.debug("owner %s of %s no longer exists", mapping.thread_id, file)
        return focused_thread
