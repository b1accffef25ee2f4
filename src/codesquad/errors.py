"""Codesquad error hierarchy."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCategory(StrEnum):
    """Category of error for classification and handling."""

    VALIDATION = "validation"
    PRECONDITION = "precondition"
    EXTERNAL = "external"
    CONFIGURATION = "configuration"


class CodesquadError(Exception):
    """Base error for all codesquad exceptions."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.EXTERNAL,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.category = category
        self.details: dict[str, Any] = details or {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r}, category={self.category!r})"


class ValidationError(CodesquadError):
    """Caller input violates an invariant (empty name, over-length name, ...)."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, category=ErrorCategory.VALIDATION, **kwargs)


class PreconditionError(CodesquadError):
    """The operation needs caller action before it can proceed."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, category=ErrorCategory.PRECONDITION, **kwargs)


class ExternalFailure(CodesquadError):
    """An external collaborator (git, terminal, filesystem, editor) failed."""

    def __init__(self, message: str, *, recoverable: bool = False, **kwargs: Any) -> None:
        super().__init__(message, category=ErrorCategory.EXTERNAL, **kwargs)
        self.recoverable = recoverable


class GitCommandError(ExternalFailure):
    """A ``git`` invocation exited non-zero."""

    def __init__(self, args: list[str], returncode: int, stderr: str = "") -> None:
        cmd = " ".join(args)
        super().__init__(
            f"git command failed ({returncode}): {cmd}: {stderr.strip()}",
            details={"args": args, "returncode": returncode},
        )
        self.returncode = returncode
        self.stderr = stderr


class ConfigError(CodesquadError):
    """Configuration file could not be used."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        super().__init__(message, category=ErrorCategory.CONFIGURATION, **kwargs)
