"""Metadata hierarchy - read-only introspection of nested containers.

Every container (``Pipeline``, ``Group``, ``Stack`` and the combinators) may
carry an opaque ``meta`` value.  :func:`hierarchy` walks a container and
reports its own metadata and, recursively, the metadata of each child.
Leaves report ``children=None``.  Nothing here touches execution state.

Example::

    app = Pipeline(meta={"name": "app"})
    app.use(Pipeline(meta={"name": "auth"}).use(check_token))
    hierarchy(app).to_dict()
    # {"meta": {"name": "app"},
    #  "children": [{"meta": {"name": "auth"},
    #                "children": [{"meta": None, "children": None}]}]}
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from sequent.engine.kinds import Entry


@dataclass
class MetaHierarchy:
    """Metadata of one node and of its children (``None`` for leaves)."""

    meta: Any = None
    children: list[MetaHierarchy] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging / JSON output."""
        return {
            "meta": self.meta,
            "children": [c.to_dict() for c in self.children] if self.children is not None else None,
        }


def children_of(node: Any) -> tuple[Any, ...] | None:
    """Immediate children of ``node``, or None when it is not a container."""
    if isinstance(node, Entry):
        return node.children
    children = getattr(node, "children", None)
    return tuple(children) if children is not None else None


def hierarchy(node: Any) -> MetaHierarchy:
    """Build the metadata hierarchy rooted at ``node``."""
    children = children_of(node)
    return MetaHierarchy(
        meta=getattr(node, "meta", None),
        children=[hierarchy(child) for child in children] if children is not None else None,
    )


def label_of(node: Any) -> str:
    """Display name: ``meta["name"]``, else the handler's qualified name."""
    if isinstance(node, Entry):
        return node.name
    meta = getattr(node, "meta", None)
    if isinstance(meta, dict) and meta.get("name"):
        return str(meta["name"])
    name = getattr(node, "name", None)
    if isinstance(name, str) and name:
        return name
    return getattr(node, "__qualname__", None) or type(node).__name__


def walk(node: Any, depth: int = 0) -> Iterator[tuple[int, Any]]:
    """Depth-first ``(depth, node)`` pairs, starting with ``node`` itself."""
    yield depth, node
    for child in children_of(node) or ():
        yield from walk(child, depth + 1)
