"""Cancellation - the done marker and the explicit cancel token.

Two advisory signals stop a run before the next handler starts:

* the **done marker** on the context (``ctx["_done"] = True`` or
  ``ctx._done = True``; the name comes from ``SEQUENT_DONE_MARKER``), kept for
  handlers that only see the context;
* a :class:`CancelToken` carried *alongside* the context.  The token of the
  current run lives in a context variable, so nested containers invoked as
  ``process(ctx, err)`` observe it without any extra argument.

Neither signal interrupts a handler that is already running.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from sequent.core.settings import get_settings

_current_token: ContextVar[CancelToken | None] = ContextVar("sequent_cancel_token", default=None)  # noqa: B039


class CancelToken:
    """Advisory cancellation flag shared by every container of one run."""

    def __init__(self) -> None:
        self._cancelled = False
        self._reason: str | None = None

    def cancel(self, reason: str | None = None) -> None:
        """Request that the run stops before its next handler."""
        self._cancelled = True
        self._reason = reason

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str | None:
        return self._reason

    def __repr__(self) -> str:
        state = f"cancelled, reason={self._reason!r}" if self._cancelled else "active"
        return f"CancelToken({state})"


def current_token() -> CancelToken | None:
    """Token of the run executing in the current context, if any."""
    return _current_token.get()


@contextmanager
def use_token(token: CancelToken | None) -> Iterator[CancelToken | None]:
    """Make ``token`` the current token for the duration of the block.

    Passing ``None`` keeps whatever token is already current.
    """
    if token is None:
        yield _current_token.get()
        return
    reset = _current_token.set(token)
    try:
        yield token
    finally:
        _current_token.reset(reset)


def is_done(ctx: Any, marker: str | None = None) -> bool:
    """True when the context's done marker is set."""
    marker = marker or get_settings().done_marker
    if isinstance(ctx, Mapping):
        return bool(ctx.get(marker, False))
    return bool(getattr(ctx, marker, False))


def is_cancelled(ctx: Any, token: CancelToken | None = None, marker: str | None = None) -> bool:
    """True when the run should not start another handler."""
    token = token or _current_token.get()
    if token is not None and token.cancelled:
        return True
    return is_done(ctx, marker)
