"""Combinators - pre-built containers with conditional and post-processing rules.

All combinators are :class:`~sequent.engine.middleware.Stack` subclasses and
therefore drive a continuation.  Inside a ``Stack`` the continuation is the
rest of the stack; inside a ``Pipeline`` it is the rest of the enclosing
list.

ARCHITECTURE
────────────
::

    If(pred, children, terminate)   pred? children → (next unless terminate)
                                    else  next
    After(children)                 next → children
    AfterIf(pred, children)         next → pred? children
    Catch(on_error, children)       try: children → next
                                    except: on_error(err, ctx)

Example::

    app = Pipeline()
    app.use(Catch(report, [
        If(lambda ctx: ctx["admin"], [grant_all], terminate=True),
        load_permissions,
    ]))
    app.use(After([write_audit_log]))
    app.use(handle_request)
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from sequent.engine.middleware import Next, Stack, next_noop, settle

Predicate = Callable[[Any], "bool | Awaitable[bool]"]
ErrorCallback = Callable[[Exception, Any], "None | Awaitable[None]"]


class After(Stack):
    """Runs its children once the continuation has completed.

    Errors raised by ``next`` propagate before the children run.
    """

    async def process(self, ctx: Any, next: Next = next_noop) -> None:
        await next()
        await Stack.run(self.middleware, ctx, next_noop)


class If(Stack):
    """Guards its children with a predicate.

    ``If(pred, children)``, ``If(pred, terminate)`` and
    ``If(pred, children, terminate)`` are all accepted; ``terminate``
    defaults to ``False``.  When the predicate holds the children run and,
    unless ``terminate`` is set, the continuation follows.  When it does not
    hold only the continuation runs.
    """

    def __init__(
        self,
        predicate: Predicate,
        middleware: Iterable[Any] | bool | None = None,
        terminate: bool = False,
        meta: Any = None,
    ) -> None:
        if isinstance(middleware, bool):
            terminate, middleware = middleware, None
        super().__init__(middleware, meta)
        self.predicate = predicate
        self.terminate = terminate

    async def process(self, ctx: Any, next: Next = next_noop) -> None:
        if await settle(self.predicate(ctx)):
            await Stack.run(self.middleware, ctx, next_noop if self.terminate else next)
        else:
            await next()


class AfterIf(Stack):
    """Runs the continuation, then its children if the predicate holds.

    The predicate sees the context as the continuation left it.
    """

    def __init__(
        self,
        predicate: Predicate,
        middleware: Iterable[Any] | None = None,
        meta: Any = None,
    ) -> None:
        super().__init__(middleware, meta)
        self.predicate = predicate

    async def process(self, ctx: Any, next: Next = next_noop) -> None:
        await next()
        if await settle(self.predicate(ctx)):
            await Stack.run(self.middleware, ctx, next_noop)


class Catch(Stack):
    """Failure boundary around its children and the continuation.

    An exception is handed to ``on_error(error, ctx)``.  Returning normally
    swallows it; re-raising propagates it past the boundary.
    """

    def __init__(
        self,
        on_error: ErrorCallback,
        middleware: Iterable[Any] | None = None,
        meta: Any = None,
    ) -> None:
        super().__init__(middleware, meta)
        self.on_error = on_error

    async def process(self, ctx: Any, next: Next = next_noop) -> None:
        try:
            await Stack.run(self.middleware, ctx, next)
        except Exception as err:
            await settle(self.on_error(err, ctx))
