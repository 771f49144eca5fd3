"""Execution engine - fold a handler list into one asynchronous run.

The engine walks a list of :class:`~sequent.engine.kinds.Entry` left to right
carrying one piece of state, the *pending error*.  Each step's value is turned
into an :class:`~sequent.engine.outcome.Outcome` and acted upon before the next
handler starts.

ARCHITECTURE
────────────
::

    for each entry:
      cancelled?  ───────────────────────────────▶ return ABORT
      dispatch by kind:
        PROCESSOR   process(ctx, pending)          always
        ERROR       fn(ctx, pending)               only with a pending error
        TASK        fn(ctx)                        only without one
        MIDDLEWARE  process(ctx, next)             only without one;
                                                   next() runs the rest
      raised Exception  ─▶ becomes the step value
      interpret:
        ABORT     last entry / terminate ─▶ return ABORT
                  otherwise              ─▶ return CONTINUE
        CLEAR     pending = None
        FAIL(e)   pending = e
        CONTINUE  unchanged
    end: pending? raise it : CONTINUE

Two termination modes
─────────────────────
A container's own list runs with ``terminate=True``: any ``False`` ends the
whole call.  A chain-group runs with ``terminate=False``: a ``False`` from a
member other than the last only ends the group, and the enclosing list
proceeds with the error it had before the group ran.  A ``False`` from the
last member propagates outward and is interpreted again at the group's
position.

A nested list never changes the enclosing pending error by clearing.  Only a
failure it leaves behind replaces it, with the original value: ``invoke``
unwraps the ``UnhandledFailure`` raised for a non-exception error.

Related modules:
    pipeline.py     - Pipeline / Group, the containers that call execute()
    outcome.py      - step value coercion
    cancellation.py - done marker and cancel token
"""

from __future__ import annotations

import inspect
from collections.abc import Sequence
from typing import Any

from sequent.core.errors import ExecutionError, UnhandledFailure, raise_pending
from sequent.core.logging import get_logger
from sequent.core.settings import get_settings
from sequent.engine.cancellation import CancelToken, current_token, is_cancelled
from sequent.engine.kinds import Entry, HandlerKind
from sequent.engine.outcome import Outcome

logger = get_logger(__name__)


async def invoke(fn: Any, *args: Any) -> Any:
    """Call a sync or async handler; a raised ``Exception`` becomes the value."""
    try:
        value = fn(*args)
        if inspect.isawaitable(value):
            value = await value
        return value
    except UnhandledFailure as exc:
        # a nested list gave up on a returned error; hand the value on as-is
        return exc.error
    except Exception as exc:  # noqa: BLE001 - folded into the pending error
        return exc


class _Continuation:
    """``next`` handed to a continuation-driving handler inside a list."""

    def __init__(
        self,
        ctx: Any,
        tail: Sequence[Entry],
        terminate: bool,
        token: CancelToken | None,
    ) -> None:
        self._ctx = ctx
        self._tail = tail
        self._terminate = terminate
        self._token = token
        self.invoked = False
        self.outcome: Outcome | None = None

    async def __call__(self) -> None:
        if self.invoked:
            raise ExecutionError("next() called more than once")
        self.invoked = True
        self.outcome = await execute(self._ctx, None, self._tail, self._terminate, token=self._token)


async def execute(
    ctx: Any,
    err: Any,
    handlers: Sequence[Entry],
    terminate: bool = False,
    *,
    token: CancelToken | None = None,
) -> Outcome:
    """Run ``handlers`` against ``ctx``.

    Args:
        ctx: Shared mutable context, passed by reference to every handler
        err: Incoming pending error, ``None`` when absent
        handlers: Registered entries, in order
        terminate: End the whole call on any ``False``, not only the last one
        token: Cancel token; defaults to the token of the enclosing run

    Returns:
        ``Outcome.abort()`` on a terminal signal or cancellation, otherwise
        ``Outcome.proceed()``, which leaves the caller's pending error as it
        was before this list ran.

    Raises:
        The pending error left once the list is exhausted (non-exception
        values wrapped in ``UnhandledFailure``).
    """
    settings = get_settings()
    trace = settings.trace_steps
    marker = settings.done_marker
    token = token or current_token()

    pending = err
    last = len(handlers) - 1

    for index, entry in enumerate(handlers):
        if is_cancelled(ctx, token, marker):
            if trace:
                logger.debug("engine.cancelled", index=index, handler=entry.name)
            return Outcome.abort()

        kind = entry.kind
        if (kind is HandlerKind.ERROR and pending is None) or (
            kind in (HandlerKind.TASK, HandlerKind.MIDDLEWARE) and pending is not None
        ):
            if trace:
                logger.debug("engine.skip", index=index, handler=entry.name, kind=kind.value)
            continue

        if trace:
            logger.debug("engine.step", index=index, handler=entry.name, kind=kind.value)

        if kind is HandlerKind.MIDDLEWARE:
            tail = handlers[index + 1 :]
            nxt = _Continuation(ctx, tail, terminate, token)
            value = await invoke(entry.target.process, ctx, nxt)
            if nxt.invoked:
                # the rest of the list already ran inside the continuation
                outcome = Outcome.from_value(value)
                if outcome.failed:
                    raise_pending(outcome.error)
                if not outcome.aborted:
                    return nxt.outcome or Outcome.proceed()
            elif value is None and tail:
                value = False
        elif kind is HandlerKind.PROCESSOR:
            value = await invoke(entry.target.process, ctx, pending)
        elif kind is HandlerKind.ERROR:
            value = await invoke(entry.target, ctx, pending)
        else:
            value = await invoke(entry.target, ctx)

        outcome = Outcome.from_value(value)

        if outcome.aborted:
            if index == last or terminate:
                if trace:
                    logger.debug("engine.abort", index=index, handler=entry.name, scope="list")
                return outcome
            if trace:
                logger.debug("engine.abort", index=index, handler=entry.name, scope="group")
            return Outcome.proceed()

        if outcome.cleared:
            if trace and pending is not None:
                logger.debug("engine.clear", index=index, handler=entry.name)
            pending = None
        elif outcome.failed:
            if trace:
                logger.debug("engine.fail", index=index, handler=entry.name, error=repr(outcome.error))
            pending = outcome.error

    if pending is not None:
        raise_pending(pending)
    return Outcome.proceed()
