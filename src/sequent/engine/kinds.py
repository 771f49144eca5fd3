"""Handler classification - decide once, at registration, what a handler is.

A supplied unit of work is one of four kinds:

* ``TASK``       - ``fn(ctx)``; runs only when no error is pending.
* ``ERROR``      - ``fn(ctx, err)``; runs only when an error is pending.
* ``PROCESSOR``  - object with ``process(ctx, err)``; always runs and decides
  for itself how to react to the ambient error (a ``Pipeline`` or ``Group``).
* ``MIDDLEWARE`` - object with ``process(ctx, next)`` that declares
  ``takes_next = True`` (a ``Stack`` or a combinator); drives a continuation.

Classification only looks at static shape (declared parameter count, presence
of ``process``), never at runtime values, and is applied once when the
handler is wrapped in an :class:`Entry`.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from sequent.core.errors import InvalidHandlerError

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


class HandlerKind(str, Enum):
    """Closed set of handler shapes understood by the engine."""

    TASK = "task"
    ERROR = "error"
    PROCESSOR = "processor"
    MIDDLEWARE = "middleware"


def count_parameters(fn: Callable[..., Any]) -> int:
    """Number of positional parameters ``fn`` declares.

    ``*args`` counts as two so that variadic wrappers are treated as
    error-aware.  Callables whose signature cannot be inspected (some
    builtins) count as one.
    """
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError):
        return 1

    count = 0
    for param in sig.parameters.values():
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            return max(count, 2)
        if param.kind in _POSITIONAL:
            count += 1
    return count


def has_process(obj: Any) -> bool:
    """True when ``obj`` exposes a callable ``process`` attribute."""
    return not inspect.isroutine(obj) and callable(getattr(obj, "process", None))


def reject_processor_class(obj: Any) -> None:
    """Raise when ``obj`` is a processor class rather than an instance."""
    if isinstance(obj, type) and has_process(obj):
        raise InvalidHandlerError(obj, f"pass an instance of {obj.__name__}, not the class")


def classify(handler: Any) -> HandlerKind:
    """Classify ``handler``.

    Objects exposing ``process`` win over plain callables, so an object that
    is both callable and a processor is treated as a processor.

    Raises:
        InvalidHandlerError: If ``handler`` is neither callable nor a processor,
            or is a processor class
    """
    reject_processor_class(handler)
    if has_process(handler):
        if getattr(handler, "takes_next", False):
            return HandlerKind.MIDDLEWARE
        return HandlerKind.PROCESSOR
    if callable(handler):
        return HandlerKind.ERROR if count_parameters(handler) >= 2 else HandlerKind.TASK
    raise InvalidHandlerError(handler)


@dataclass(frozen=True)
class Entry:
    """A registered handler together with its kind and metadata."""

    kind: HandlerKind
    target: Any
    meta: Any = None

    @classmethod
    def of(cls, handler: Any, meta: Any = None) -> Entry:
        """Wrap ``handler``; existing entries are returned unchanged."""
        if isinstance(handler, Entry):
            return handler
        kind = classify(handler)
        if kind in (HandlerKind.PROCESSOR, HandlerKind.MIDDLEWARE):
            # containers adopt registration metadata when they have none
            if meta is not None and hasattr(handler, "meta") and handler.meta is None:
                handler.meta = meta
            meta = getattr(handler, "meta", None) if meta is None else meta
        return cls(kind=kind, target=handler, meta=meta)

    @property
    def name(self) -> str:
        """Human-readable label: ``meta["name"]`` or the target's qualified name."""
        if isinstance(self.meta, dict) and self.meta.get("name"):
            return str(self.meta["name"])
        target = self.target
        name = getattr(target, "name", None)
        if isinstance(name, str) and name:
            return name
        return getattr(target, "__qualname__", None) or type(target).__name__

    @property
    def children(self) -> tuple[Any, ...] | None:
        """Children of the target when it is a container, else None."""
        children = getattr(self.target, "children", None)
        if self.kind in (HandlerKind.PROCESSOR, HandlerKind.MIDDLEWARE) and children is not None:
            return tuple(children)
        return None
