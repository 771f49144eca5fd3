"""Pipeline - the error-as-value container.

A ``Pipeline`` owns an ordered list of handlers and chain-groups.  ``use()``
registers handlers fluently; ``process()`` runs them through
:func:`~sequent.engine.execute.execute` with ``terminate=True``, so a ``False``
anywhere in the pipeline's own list ends the whole call.

Chain-groups are explicit :class:`Group` processors.  ``use(a, b, c)`` is a
shorthand for ``use(Group(a, b, c))``; ``use(a).use(b).use(c)`` is a flat
sequence.  The difference matters: a ``False`` from ``b`` inside the group
only ends the group.

Example::

    from sequent import Pipeline

    async def load(ctx):
        ctx["user"] = await fetch_user(ctx["user_id"])

    async def not_found(ctx, err):
        if isinstance(err, KeyError):
            ctx["status"] = 404
            return True

    app = Pipeline(meta={"name": "profile"})
    app.use(load).use(not_found).use(render)
    await app.process({"user_id": 7})
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from typing import Any

from sequent.core.logging import LogContext, get_context, get_logger
from sequent.engine.cancellation import CancelToken, use_token
from sequent.engine.execute import execute
from sequent.engine.kinds import Entry
from sequent.engine.outcome import Outcome

logger = get_logger(__name__)


class Group:
    """A bounded sub-chain with local termination.

    Behaves as a single processor in the enclosing list.  A ``False`` from a
    member other than the last stops only the group, and the enclosing list
    carries on with the error it had before the group ran.
    """

    takes_next = False

    def __init__(self, *handlers: Any, meta: Any = None) -> None:
        if not handlers:
            raise ValueError("Group() requires at least one handler")
        self._entries = tuple(Entry.of(h) for h in handlers)
        self.meta = meta

    @property
    def handlers(self) -> tuple[Entry, ...]:
        return self._entries

    @property
    def children(self) -> tuple[Entry, ...]:
        return self._entries

    async def process(self, ctx: Any, err: Any = None) -> Outcome:
        return await execute(ctx, err, self._entries, terminate=False)

    def __repr__(self) -> str:
        return f"Group({', '.join(e.name for e in self._entries)})"


class Pipeline:
    """Ordered container of handlers, chain-groups and nested containers.

    Args:
        handlers: Initial handlers, each registered as if passed to ``use()``
        meta: Opaque metadata reported by :func:`~sequent.engine.hierarchy.hierarchy`
        name: Label used in log events; defaults to ``meta["name"]``
    """

    takes_next = False

    def __init__(
        self,
        handlers: Iterable[Any] | None = None,
        meta: Any = None,
        *,
        name: str | None = None,
    ) -> None:
        self._entries: list[Entry] = [Entry.of(h) for h in handlers or ()]
        self.meta = meta
        if name is None and isinstance(meta, dict):
            name = meta.get("name")
        self.name = name

    def use(self, *handlers: Any, meta: Any = None) -> Pipeline:
        """Register one handler, or several as a single chain-group.

        Returns:
            This pipeline, for chaining
        """
        if not handlers:
            raise ValueError("use() requires at least one handler")
        if len(handlers) == 1:
            entry = Entry.of(handlers[0], meta)
        else:
            entry = Entry.of(Group(*handlers, meta=meta))
        self._entries.append(entry)
        return self

    @property
    def handlers(self) -> tuple[Entry, ...]:
        """Read-only view of the registered entries."""
        return tuple(self._entries)

    @property
    def children(self) -> tuple[Entry, ...]:
        return tuple(self._entries)

    async def process(
        self,
        ctx: Any,
        err: Any = None,
        *,
        token: CancelToken | None = None,
    ) -> Outcome:
        """Run the pipeline against ``ctx``.

        Args:
            ctx: Caller-owned mutable context
            err: Incoming pending error (set when nested in another container)
            token: Cancel token for this run; nested containers inherit it

        Returns:
            ``Outcome.abort()`` if a handler terminated the run, else
            ``Outcome.proceed()``

        Raises:
            The pending error nobody cleared
        """
        bound: dict[str, Any] = {"pipeline": self.name or type(self).__name__}
        outermost = "run_id" not in get_context()
        if outermost:
            bound["run_id"] = uuid.uuid4().hex[:12]

        with use_token(token), LogContext(**bound):
            try:
                return await execute(ctx, err, tuple(self._entries), terminate=True)
            except Exception as exc:
                if outermost:
                    logger.warning("engine.unhandled", error=repr(exc))
                raise

    def __repr__(self) -> str:
        label = f"{self.name!r}, " if self.name else ""
        return f"Pipeline({label}{len(self._entries)} handlers)"
