"""Visualizer - render container hierarchies for humans.

Two output formats:

- **Tree** - indented ASCII outline, one line per node
- **Summary** - dict with node counts and nesting depth (JSON-friendly)

Example::

    from sequent.engine.visualizer import render_tree

    print(render_tree(app))
    # app
    # ├── [λ] load
    # ├── [▣] auth
    # │   └── [λ] check_token
    # └── [!] not_found
"""

from __future__ import annotations

from typing import Any

from sequent.engine.hierarchy import children_of, label_of, walk
from sequent.engine.kinds import Entry, HandlerKind

_INDICATORS = {
    HandlerKind.TASK: "λ",
    HandlerKind.ERROR: "!",
    HandlerKind.PROCESSOR: "▣",
    HandlerKind.MIDDLEWARE: "↻",
}


def _indicator(node: Any) -> str:
    if isinstance(node, Entry):
        return _INDICATORS[node.kind]
    if children_of(node) is not None:
        return _INDICATORS[HandlerKind.MIDDLEWARE]
    return "·"


def render_tree(root: Any) -> str:
    """Render ``root`` and its descendants as an indented ASCII tree."""
    lines = [label_of(root)]
    _render_children(root, prefix="", lines=lines)
    return "\n".join(lines)


def _render_children(node: Any, prefix: str, lines: list[str]) -> None:
    children = children_of(node) or ()
    for i, child in enumerate(children):
        last = i == len(children) - 1
        branch = "└── " if last else "├── "
        lines.append(f"{prefix}{branch}[{_indicator(child)}] {label_of(child)}")
        _render_children(child, prefix + ("    " if last else "│   "), lines)


def summarize(root: Any) -> dict[str, Any]:
    """Counts of containers and leaves plus the maximum nesting depth."""
    containers = 0
    leaves = 0
    max_depth = 0
    kinds: dict[str, int] = {}

    for depth, node in walk(root):
        max_depth = max(max_depth, depth)
        if children_of(node) is not None:
            containers += 1
        else:
            leaves += 1
        if isinstance(node, Entry):
            kinds[node.kind.value] = kinds.get(node.kind.value, 0) + 1

    return {
        "name": label_of(root),
        "containers": containers,
        "leaves": leaves,
        "max_depth": max_depth,
        "kinds": kinds,
    }
