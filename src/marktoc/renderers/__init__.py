"""marktoc renderers.

Renderers turn walk events into output. Any object with
``render_header``, ``render_node`` and ``render_footer`` satisfies the
:class:`Renderer` protocol.

Available Renderers:
- HtmlRenderer: Renders AST to HTML, one enter/exit event at a time

"""

from marktoc.renderers.html import HtmlRenderer
from marktoc.renderers.protocol import Renderer

__all__ = ["HtmlRenderer", "Renderer"]
