"""Stack - the continuation-passing container.

Manifesto:
    Some processing is naturally "around" the rest of the chain: time it,
guard it, clean up after it.  In the continuation-passing model every
middleware receives ``next`` and decides whether (and when) the rest of the
chain runs.

ARCHITECTURE
────────────
::

    Stack.use(handler)          → to_middleware(handler), once
      fn(ctx)                   → auto: await fn(ctx); await next()
      fn(ctx, next)             → manual: fn drives next itself
      obj.process(ctx, next)    → used as-is (Stack, If, After, ...)
      obj.process(ctx, err)     → bridged error-as-value processor (Pipeline)

    Stack.process(ctx, next)    → link[0] → link[1] → ... → next

A ``Stack`` also declares ``takes_next = True``, so a ``Pipeline`` that
contains one hands it the rest of the pipeline as its continuation.

Example::

    stack = Stack()
    stack.use(lambda ctx: ctx.setdefault("seen", []).append("a"))

    async def timed(ctx, next):
        started = time.monotonic()
        await next()
        ctx["elapsed"] = time.monotonic() - started

    stack.use(timed)
    await stack.process({})
"""

from __future__ import annotations

import functools
import inspect
from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from sequent.core.errors import InvalidHandlerError, raise_pending
from sequent.engine.cancellation import is_cancelled
from sequent.engine.kinds import count_parameters, has_process, reject_processor_class
from sequent.engine.outcome import Outcome

Next = Callable[[], Awaitable[None]]


async def next_noop() -> None:
    """A continuation that does nothing."""
    return None


async def settle(value: Any) -> Any:
    """Await ``value`` when it is awaitable."""
    if inspect.isawaitable(value):
        return await value
    return value


def is_middleware(obj: Any) -> bool:
    """True for continuation-driving objects (``process(ctx, next)``)."""
    return has_process(obj) and bool(getattr(obj, "takes_next", False))


def is_auto_handler(obj: Any) -> bool:
    """Functions with zero or one parameter get ``next`` called for them."""
    return callable(obj) and not has_process(obj) and count_parameters(obj) <= 1


class FunctionMiddleware:
    """A plain function normalised to the middleware shape."""

    takes_next = True

    def __init__(self, fn: Callable[..., Any], meta: Any = None) -> None:
        self.fn = fn
        self.auto = count_parameters(fn) <= 1
        self.meta = meta if meta is not None else getattr(fn, "meta", None)
        functools.update_wrapper(self, fn, updated=())

    async def process(self, ctx: Any, next: Next = next_noop) -> None:
        if self.auto:
            await settle(self.fn(ctx))
            await next()
        else:
            await settle(self.fn(ctx, next))


class ProcessorMiddleware:
    """Adapts an error-as-value processor (``process(ctx, err)``) to a link.

    ``ABORT`` stops the chain, a failure is raised, anything else continues.
    """

    takes_next = True

    def __init__(self, processor: Any, meta: Any = None) -> None:
        self.processor = processor
        self.meta = meta if meta is not None else getattr(processor, "meta", None)

    @property
    def children(self) -> Any:
        return getattr(self.processor, "children", None)

    async def process(self, ctx: Any, next: Next = next_noop) -> None:
        outcome = Outcome.from_value(await settle(self.processor.process(ctx, None)))
        if outcome.aborted:
            return
        if outcome.failed:
            raise_pending(outcome.error)
        await next()


class Stack:
    """Continuation-passing container.

    Args:
        middleware: Initial handlers, each normalised by ``to_middleware``
        meta: Opaque metadata reported by the hierarchy
    """

    takes_next = True

    def __init__(self, middleware: Iterable[Any] | None = None, meta: Any = None) -> None:
        self.middleware: list[Any] = [Stack.to_middleware(m) for m in middleware or ()]
        self.meta = meta

    @property
    def children(self) -> tuple[Any, ...]:
        return tuple(self.middleware)

    def use(self, handler: Any, meta: Any = None) -> Stack:
        """Append a handler; returns this stack for chaining."""
        self.middleware.append(Stack.to_middleware(handler, meta))
        return self

    async def process(self, ctx: Any, next: Next = next_noop) -> None:
        """Run the children, then ``next`` (unless a child stops the chain)."""
        await Stack.run(self.middleware, ctx, next)

    @staticmethod
    async def run(middleware: Iterable[Any], ctx: Any, next: Next = next_noop) -> None:
        """Chain ``middleware`` right to left around ``next`` and invoke it."""
        chain = next
        for item in reversed(list(middleware)):
            chain = functools.partial(_link, item, ctx, chain)
        await chain()

    @staticmethod
    def to_middleware(handler: Any, meta: Any = None) -> Any:
        """Normalise ``handler`` into an object exposing ``process(ctx, next)``.

        Raises:
            InvalidHandlerError: If ``handler`` is neither callable nor a processor
        """
        reject_processor_class(handler)
        if is_middleware(handler):
            if meta is not None and getattr(handler, "meta", None) is None:
                handler.meta = meta
            return handler
        if has_process(handler):
            return ProcessorMiddleware(handler, meta)
        if callable(handler):
            return FunctionMiddleware(handler, meta)
        raise InvalidHandlerError(handler)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self.middleware)} middleware)"


async def _link(item: Any, ctx: Any, next: Next) -> None:
    if is_cancelled(ctx):
        return
    await settle(item.process(ctx, next))
