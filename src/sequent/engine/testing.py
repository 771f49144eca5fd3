"""Test Harness - utilities for testing pipelines.

Manifesto:
Most pipeline tests ask the same questions: which handlers ran, in which
order, and which error did an error handler see.  ``Recorder`` builds named
handlers that answer those questions without hand-written closures in every
test.

ARCHITECTURE
────────────
::

    Recorder
      .task(name, returns=None, raises=None)   → fn(ctx)
      .error(name, returns=None, reraise=False) → fn(ctx, err)
      .step(name)                              → fn(ctx, next)  (Stack model)
      .calls                                   → names, in call order
      .errors_seen                             → {name: err}

    assert_called(recorder, *names)      → exact call order
    assert_not_called(recorder, *names)  → none of names ran
    (both raise HandlerAssertionError, which works under ``python -O``)

Example::

    rec = Recorder()
    app = Pipeline().use(rec.task("a", raises=ValueError("e1")))
    app.use(rec.error("b", returns=True)).use(rec.task("c"))
    await app.process({})
    assert_called(rec, "a", "b", "c")
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any


class Recorder:
    """Factory of named handlers that record their invocations."""

    def __init__(self) -> None:
        self.calls: list[str] = []
        self.errors_seen: dict[str, Any] = {}

    def task(
        self,
        name: str,
        returns: Any = None,
        raises: BaseException | None = None,
        mutate: Callable[[Any], None] | None = None,
    ) -> Callable[[Any], Awaitable[Any]]:
        """An async task handler ``fn(ctx)``."""

        async def handler(ctx):
            self.calls.append(name)
            if mutate is not None:
                mutate(ctx)
            if raises is not None:
                raise raises
            return returns

        handler.__name__ = handler.__qualname__ = name
        return handler

    def error(
        self,
        name: str,
        returns: Any = None,
        reraise: bool = False,
    ) -> Callable[[Any, Any], Awaitable[Any]]:
        """An async error handler ``fn(ctx, err)``; ``reraise`` raises the error it received."""

        async def handler(ctx, err):
            self.calls.append(name)
            self.errors_seen[name] = err
            if reraise:
                raise err
            return returns

        handler.__name__ = handler.__qualname__ = name
        return handler

    def step(self, name: str, call_next: bool = True) -> Callable[[Any, Any], Awaitable[None]]:
        """A manual continuation-passing handler ``fn(ctx, next)``."""

        async def handler(ctx, next):
            self.calls.append(name)
            if call_next:
                await next()

        handler.__name__ = handler.__qualname__ = name
        return handler

    def reset(self) -> None:
        self.calls.clear()
        self.errors_seen.clear()


class HandlerAssertionError(AssertionError):
    """Raised when a recorded run does not match the expected calls.

    Carries the recorded calls so a failing test shows what actually ran.
    """

    def __init__(self, message: str, calls: list[str]) -> None:
        self.calls = list(calls)
        super().__init__(f"{message}\n  Calls: {self.calls}")


def assert_called(recorder: Recorder, *names: str) -> None:
    """Assert that exactly ``names`` ran, in this order.

    Raises:
        HandlerAssertionError: If the recorded calls differ
    """
    if recorder.calls != list(names):
        raise HandlerAssertionError(f"Expected calls {list(names)}", recorder.calls)


def assert_not_called(recorder: Recorder, *names: str) -> None:
    """Assert that none of ``names`` ran.

    Raises:
        HandlerAssertionError: If any of ``names`` was recorded
    """
    ran = [n for n in names if n in recorder.calls]
    if ran:
        raise HandlerAssertionError(f"Expected {ran} not to run", recorder.calls)
