"""
Structured error types for the sequent engine.

Every error raised by sequent itself derives from ``SequentError`` so callers
can catch the whole family with a single ``except`` clause. Errors raised by
*handlers* are never wrapped: they flow through the engine as pending errors
and, when nothing clears them, are re-raised to the caller unchanged.

Manifesto:
    - **Typed hierarchy:** Registration problems and execution problems are
      different failures with different fixes.
    - **Rich context:** Errors carry a category and a context dict for logging.
    - **Chaining:** The original exception is kept as ``cause``.

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │                       SequentError                         │
        │              (category, context, cause)                    │
        ├───────────────────────────────────────────────────────────┤
        │  ConfigError        HandlerError         ExecutionError    │
        │  (CONFIG)           (HANDLER)            (EXECUTION)       │
        │                          │                    │            │
        │                  InvalidHandlerError    UnhandledFailure   │
        └───────────────────────────────────────────────────────────┘

Examples:
    >>> err = InvalidHandlerError(42)
    >>> err.category
    <ErrorCategory.HANDLER: 'HANDLER'>
    >>> isinstance(err, TypeError)
    True

    >>> failure = UnhandledFailure("e1")
    >>> failure.error
    'e1'

Tags:
    error-handling, exception-hierarchy, sequent-core

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and logging."""

    CONFIG = "CONFIG"  # Invalid settings
    HANDLER = "HANDLER"  # Bad handler registration
    EXECUTION = "EXECUTION"  # Engine-level run failure
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


class SequentError(Exception):
    """
    Base exception for all sequent errors.

    Subclasses set ``default_category`` so that callers do not need to pass a
    category explicitly.

    Examples:
        >>> error = SequentError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(pipeline="ingest").context
        {'pipeline': 'ingest'}
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context: dict[str, Any] = dict(context or {})
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> SequentError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ExecutionError("run failed").with_context(pipeline="ingest")
        """
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.context:
            result["context"] = dict(self.context)
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


class ConfigError(SequentError):
    """Invalid or inconsistent configuration."""

    default_category = ErrorCategory.CONFIG


class HandlerError(SequentError):
    """Base class for handler registration errors."""

    default_category = ErrorCategory.HANDLER


class InvalidHandlerError(HandlerError, TypeError):
    """Raised when a supplied object is neither callable nor a processor."""

    def __init__(self, handler: Any, reason: str | None = None):
        self.handler = handler
        super().__init__(
            f"Cannot use {type(handler).__name__!s} as a handler: "
            + (reason or "expected a callable or an object with a process() method")
        )


class ExecutionError(SequentError):
    """Base class for failures surfaced by the execution engine."""

    default_category = ErrorCategory.EXECUTION


class UnhandledFailure(ExecutionError):
    """
    A pending error that is not an exception survived to the end of a run.

    Handlers may signal failure by *returning* any value other than ``None``,
    ``True`` or ``False``. When such a value is still pending after the last
    handler it cannot be raised directly, so it is carried in ``error``.
    """

    def __init__(self, error: Any):
        self.error = error
        super().__init__(f"Unhandled pipeline failure: {error!r}", context={"error": repr(error)})


def raise_pending(error: Any) -> None:
    """Raise a pending error, wrapping non-exception values."""
    if isinstance(error, BaseException):
        raise error
    raise UnhandledFailure(error)
