"""
Sequent - a composable asynchronous execution engine.

Build a named sequence of handlers that run in order against a shared mutable
context; any handler may short-circuit the sequence, signal or clear an error,
or delegate to a nested sequence.
"""

__version__ = "0.1.0"

from sequent.core.errors import (
    ConfigError,
    ExecutionError,
    InvalidHandlerError,
    SequentError,
    UnhandledFailure,
)
from sequent.engine import (
    After,
    AfterIf,
    CancelToken,
    Catch,
    Group,
    HandlerKind,
    If,
    MetaHierarchy,
    Outcome,
    Pipeline,
    Stack,
    classify,
    execute,
    hierarchy,
    next_noop,
)

__all__ = [
    "__version__",
    "Pipeline",
    "Group",
    "Stack",
    "execute",
    "Outcome",
    "HandlerKind",
    "classify",
    "next_noop",
    "If",
    "After",
    "AfterIf",
    "Catch",
    "CancelToken",
    "MetaHierarchy",
    "hierarchy",
    "SequentError",
    "ConfigError",
    "ExecutionError",
    "InvalidHandlerError",
    "UnhandledFailure",
]
