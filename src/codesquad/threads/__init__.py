"""Thread state and lifecycle management."""

from codesquad.threads.lifecycle import (
    DeleteThreadResult,
    OpenInEditorResult,
    RenameThreadResult,
    SwitchBranchResult,
    ThreadLifecycleManager,
)
from codesquad.threads.models import Comment, FileThreadMapping, IsolationMode, ThreadState

__all__ = [
    "Comment",
    "DeleteThreadResult",
    "FileThreadMapping",
    "IsolationMode",
    "OpenInEditorResult",
    "RenameThreadResult",
    "SwitchBranchResult",
    "ThreadLifecycleManager",
    "ThreadState",
]
