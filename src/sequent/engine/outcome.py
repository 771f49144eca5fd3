"""Outcome - explicit result of one handler step.

Manifesto:
    A handler's return value steers the engine: stop the sequence, clear the
pending error, fail, or simply carry on.  Overloading ``False`` / ``True`` /
``None`` / "anything else" on a single return channel is convenient for plain
functions but ambiguous to read, so the engine converts every step value into
an ``Outcome`` before acting on it.

ARCHITECTURE
────────────
::

    Outcome
      ├── .proceed()            → CONTINUE  (pending error unchanged)
      ├── .abort()              → ABORT     (terminal signal)
      ├── .clear()              → CLEAR     (pending error cleared)
      ├── .fail(error)          → FAIL      (error becomes pending)
      └── .from_value(any)      → coerce plain returns

BEST PRACTICES
──────────────
- Plain handlers may keep returning ``False`` / ``True`` / ``None`` / an
  error value; ``from_value()`` handles them.
- Handlers that want to be explicit return an ``Outcome`` directly.

Example::

    from sequent import Outcome, Pipeline

    async def authorize(ctx):
        if not ctx["user"]:
            return Outcome.fail(PermissionError("anonymous"))

    async def recover(ctx, err):
        ctx["status"] = 403
        return Outcome.clear()

Tags:
    sequent, engine, outcome, result-type

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class OutcomeKind(str, Enum):
    """What the engine should do after a step."""

    CONTINUE = "continue"
    ABORT = "abort"
    CLEAR = "clear"
    FAIL = "fail"


@dataclass(frozen=True)
class Outcome:
    """
    Result of one step (or of a whole sequence).

    Attributes:
        kind: The control-flow decision
        error: The failure value, only set when ``kind`` is ``FAIL``
    """

    kind: OutcomeKind
    error: Any = None

    def __post_init__(self):
        if self.kind is OutcomeKind.FAIL and self.error is None:
            raise ValueError("A failed Outcome must carry an error")
        if self.kind is not OutcomeKind.FAIL and self.error is not None:
            raise ValueError(f"Outcome {self.kind.value!r} cannot carry an error")

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def proceed(cls) -> Outcome:
        """Carry on; any pending error persists unchanged."""
        return _CONTINUE

    @classmethod
    def abort(cls) -> Outcome:
        """Terminal signal: abandon the rest of the current scope."""
        return _ABORT

    @classmethod
    def clear(cls) -> Outcome:
        """Clear the pending error so task handlers run again."""
        return _CLEAR

    @classmethod
    def fail(cls, error: Any) -> Outcome:
        """Make ``error`` the pending error."""
        return cls(OutcomeKind.FAIL, error)

    @classmethod
    def from_value(cls, value: Any) -> Outcome:
        """Coerce an arbitrary step value into an Outcome.

        Coercion rules:

        ========== ===========================================
        Type       Behaviour
        ========== ===========================================
        Outcome    Returned as-is
        None       ``proceed()``
        False      ``abort()``
        True       ``clear()``
        other      ``fail(value)``
        ========== ===========================================
        """
        if isinstance(value, Outcome):
            return value
        if value is None:
            return _CONTINUE
        if isinstance(value, bool):
            return _CLEAR if value else _ABORT
        return cls.fail(value)

    # =========================================================================
    # Predicates
    # =========================================================================

    @property
    def is_continue(self) -> bool:
        return self.kind is OutcomeKind.CONTINUE

    @property
    def aborted(self) -> bool:
        return self.kind is OutcomeKind.ABORT

    @property
    def cleared(self) -> bool:
        return self.kind is OutcomeKind.CLEAR

    @property
    def failed(self) -> bool:
        return self.kind is OutcomeKind.FAIL

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging."""
        result: dict[str, Any] = {"kind": self.kind.value}
        if self.failed:
            result["error"] = repr(self.error)
        return result

    def __repr__(self) -> str:
        if self.failed:
            return f"Outcome(FAIL, {self.error!r})"
        return f"Outcome({self.kind.name})"


_CONTINUE = Outcome(OutcomeKind.CONTINUE)
_ABORT = Outcome(OutcomeKind.ABORT)
_CLEAR = Outcome(OutcomeKind.CLEAR)
