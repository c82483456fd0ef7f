"""Render pipeline: header, walked body, footer.

No error interception happens here; whatever the renderer raises reaches
the caller, and the partial output is discarded with the builder.
"""

from __future__ import annotations

from marktoc.nodes import Document, Node
from marktoc.renderers.protocol import Renderer
from marktoc.stringbuilder import StringBuilder
from marktoc.utils.logger import get_logger
from marktoc.walker import WalkStatus, walk

logger = get_logger(__name__)


def render_document(doc: Document, renderer: Renderer) -> str:
    """Render a parsed document with ``renderer``.

    Args:
        doc: Document AST root
        renderer: Any object satisfying the :class:`Renderer` protocol

    Returns:
        Rendered output
    """
    sb = StringBuilder()
    renderer.render_header(sb, doc)

    def visit(node: Node, entering: bool) -> WalkStatus:
        return renderer.render_node(sb, node, entering)

    status = walk(doc, visit)
    if status is WalkStatus.TERMINATE:
        logger.debug("Renderer %s terminated the walk early", type(renderer).__name__)

    renderer.render_footer(sb, doc)
    return sb.build()


__all__ = ["render_document"]
