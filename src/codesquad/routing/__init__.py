"""Review comment routing."""

from codesquad.routing.router import CommentRouter, RoutingResult, format_comments
from codesquad.routing.services import CommentService, OwnershipTracker

__all__ = [
    "CommentRouter",
    "CommentService",
    "OwnershipTracker",
    "RoutingResult",
    "format_comments",
]
