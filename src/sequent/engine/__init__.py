"""
Sequent engine - composable asynchronous handler sequences.

Two execution models share one set of combinators:

- ``Pipeline`` / ``Group``: error-as-value, chain-grouped sequences driven by
  :func:`execute`
- ``Stack``: continuation-passing middleware (``fn(ctx, next)``)

Usage:
    from sequent.engine import Pipeline, If, After, Catch

    app = Pipeline(meta={"name": "checkout"})
    app.use(validate_cart)
    app.use(reserve_stock, charge_card)          # one chain-group
    app.use(refund_on_error)                     # fn(ctx, err)
    app.use(After([send_receipt]))
    outcome = await app.process({"cart": cart})
"""

from sequent.engine.cancellation import CancelToken, current_token, is_cancelled, is_done, use_token
from sequent.engine.combinators import After, AfterIf, Catch, If
from sequent.engine.execute import execute
from sequent.engine.hierarchy import MetaHierarchy, hierarchy
from sequent.engine.kinds import Entry, HandlerKind, classify, count_parameters
from sequent.engine.middleware import (
    FunctionMiddleware,
    Next,
    ProcessorMiddleware,
    Stack,
    is_auto_handler,
    is_middleware,
    next_noop,
)
from sequent.engine.outcome import Outcome, OutcomeKind
from sequent.engine.pipeline import Group, Pipeline
from sequent.engine.visualizer import render_tree, summarize

__all__ = [
    # Engine
    "execute",
    "Outcome",
    "OutcomeKind",
    # Classification
    "HandlerKind",
    "Entry",
    "classify",
    "count_parameters",
    # Containers
    "Pipeline",
    "Group",
    "Stack",
    "Next",
    "next_noop",
    "FunctionMiddleware",
    "ProcessorMiddleware",
    "is_middleware",
    "is_auto_handler",
    # Combinators
    "If",
    "After",
    "AfterIf",
    "Catch",
    # Cancellation
    "CancelToken",
    "current_token",
    "use_token",
    "is_done",
    "is_cancelled",
    # Introspection
    "MetaHierarchy",
    "hierarchy",
    "render_tree",
    "summarize",
]
