"""
CLI utility helpers - target loading and output formatting.
"""

from __future__ import annotations

import importlib
import json
from typing import Any

import typer
from rich.console import Console
from rich.tree import Tree

from sequent.engine.hierarchy import children_of, label_of
from sequent.engine.kinds import Entry

console = Console()
err_console = Console(stderr=True)


# ── Target loading ───────────────────────────────────────────────────────


def load_target(target: str) -> Any:
    """Resolve ``package.module:attribute`` to the object it names.

    Dotted attributes (``module:app.admin``) are followed.
    """
    module_name, sep, attr_path = target.partition(":")
    if not sep or not module_name or not attr_path:
        raise typer.BadParameter(f"Expected MODULE:ATTR, got {target!r}")

    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise typer.BadParameter(f"Cannot import {module_name!r}: {e}") from e

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise typer.BadParameter(f"{module_name!r} has no attribute {attr_path!r}") from e
    return obj


def parse_context(raw: str | None) -> Any:
    """Parse the ``--context`` JSON option (an empty dict when omitted)."""
    if raw is None:
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"--context is not valid JSON: {e.msg}") from e


# ── Output helpers ───────────────────────────────────────────────────────


def build_tree(root: Any) -> Tree:
    """Rich tree of a container's hierarchy."""
    tree = Tree(f"[bold]{label_of(root)}[/bold]")
    _add_children(tree, root)
    return tree


def _add_children(branch: Tree, node: Any) -> None:
    for child in children_of(node) or ():
        kind = f"[dim]{child.kind.value}[/dim] " if isinstance(child, Entry) else ""
        sub = branch.add(f"{kind}{label_of(child)}")
        _add_children(sub, child)


def print_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))
