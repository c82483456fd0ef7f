"""Depth-first enter/exit tree walk with traversal control.

A single walk function serves both the HTML render pipeline and the TOC
synthesizer; they differ only in the visitor they pass.

Call pattern:
    - leaf node: ``visitor(node, True)`` once
    - container: ``visitor(node, True)``, children in order, ``visitor(node, False)``

The visitor's return value steers the walk:
    - ``GO_TO_NEXT``: carry on in document order
    - ``SKIP_CHILDREN``: on a container's entering call, skip its children
      and its exiting call; no effect on leaves
    - ``TERMINATE``: stop at once; no further visitor calls, not even the
      exiting calls of ancestors that are still open

Example, collecting the event sequence of a document:

    seen = []

    def visit(node, entering):
        seen.append((type(node).__name__, entering))
        return WalkStatus.GO_TO_NEXT

    walk(doc, visit)

Visitor exceptions propagate to the caller unchanged.

"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from enum import Enum
from typing import TypeAlias

from marktoc.nodes import Container, Node


class WalkStatus(Enum):
    """Traversal signal returned by a visitor on every call."""

    GO_TO_NEXT = "go_to_next"
    SKIP_CHILDREN = "skip_children"
    TERMINATE = "terminate"


Visitor: TypeAlias = Callable[[Node, bool], WalkStatus]


def walk(node: Node, visitor: Visitor) -> WalkStatus:
    """Walk ``node`` and its descendants, calling ``visitor`` per event.

    The walk keeps its own stack of open containers, so tree depth is not
    bounded by the interpreter's recursion limit.

    Args:
        node: Root of the subtree to walk
        visitor: Callable taking ``(node, entering)`` and returning a WalkStatus

    Returns:
        ``TERMINATE`` if the visitor stopped the walk, otherwise ``GO_TO_NEXT``
    """
    status = visitor(node, True)
    if status is WalkStatus.TERMINATE:
        return status
    container = node.as_container()
    if container is None or status is WalkStatus.SKIP_CHILDREN:
        return WalkStatus.GO_TO_NEXT

    # Each frame is an open container and the iterator over its remaining children.
    stack: list[tuple[Container, Iterator[Node]]] = [(container, iter(container.children))]
    while stack:
        parent, children = stack[-1]
        child = next(children, None)
        if child is None:
            stack.pop()
            if visitor(parent, False) is WalkStatus.TERMINATE:
                return WalkStatus.TERMINATE
            continue

        status = visitor(child, True)
        if status is WalkStatus.TERMINATE:
            return status
        inner = child.as_container()
        if inner is not None and status is not WalkStatus.SKIP_CHILDREN:
            stack.append((inner, iter(inner.children)))

    return WalkStatus.GO_TO_NEXT


__all__ = ["Visitor", "WalkStatus", "walk"]
