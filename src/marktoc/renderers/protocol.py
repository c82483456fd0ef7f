"""Renderer protocol: the interface the render pipeline drives.

A renderer writes into a caller-provided :class:`StringBuilder`:

- ``render_header`` once, before the walk, with the whole document
- ``render_node`` for every walk event (once for leaves, on enter and
  exit for containers); its return value steers the walk
- ``render_footer`` once, after the walk

The built-in ``HtmlRenderer`` is the reference implementation. The TOC
synthesizer reuses ``render_node`` alone, to capture heading text.

Example:
    from marktoc.renderers.protocol import Renderer

    class PlainText:
        def render_header(self, sb, doc): pass
        def render_footer(self, sb, doc): pass
        def render_node(self, sb, node, entering):
            if isinstance(node, Text):
                sb.append(node.content)
            return WalkStatus.GO_TO_NEXT

"""

from typing import Protocol

from marktoc.nodes import Document, Node
from marktoc.stringbuilder import StringBuilder
from marktoc.walker import WalkStatus


class Renderer(Protocol):
    """Protocol for enter/exit renderers."""

    def render_header(self, sb: StringBuilder, doc: Document) -> None:
        """Write content preceding the document body.

        Implementations with nothing to write supply an empty method.

        """
        ...

    def render_node(self, sb: StringBuilder, node: Node, entering: bool) -> WalkStatus:
        """Render one walk event for ``node``.

        Args:
            sb: Output sink
            node: Node being visited
            entering: True on the first (or only) call, False on a container's exit

        Returns:
            How the walk should continue; normally ``WalkStatus.GO_TO_NEXT``.

        """
        ...

    def render_footer(self, sb: StringBuilder, doc: Document) -> None:
        """Symmetric counterpart of :meth:`render_header`."""
        ...
