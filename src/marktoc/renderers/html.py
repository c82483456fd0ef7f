"""HTML renderer driven by enter/exit walk events.

Each call to :meth:`HtmlRenderer.render_node` writes the markup for one
event: the opening tag of a container on enter, its closing tag on exit,
and the whole markup of a leaf in its single call. ``render_header`` and
``render_footer`` wrap the body in a complete HTML page when asked to.

Heading anchors:
A heading's ``id`` attribute is its ``heading_id`` (assigned by TOC
synthesis), else its explicit ``{#id}``, else, with
``auto_heading_ids=True``, a unique slug of its text.

Thread Safety:
Per-render state lives in a RenderContext that ``render_header`` resets.
Use one HtmlRenderer per render when rendering concurrently.
"""

import html
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from urllib.parse import quote as url_quote

from marktoc.errors import RenderError
from marktoc.inline import plain_text
from marktoc.nodes import (
    BlockQuote,
    CodeBlock,
    CodeSpan,
    Container,
    Document,
    Emphasis,
    Heading,
    HtmlBlock,
    HtmlInline,
    Image,
    LineBreak,
    Link,
    List,
    ListItem,
    Node,
    Paragraph,
    SoftBreak,
    Strikethrough,
    Strong,
    Text,
    ThematicBreak,
)
from marktoc.stringbuilder import StringBuilder
from marktoc.utils.text import escape_html
from marktoc.utils.text import slugify as default_slugify
from marktoc.walker import WalkStatus

logger = logging.getLogger(__name__)


def _encode_url(url: str) -> str:
    """Decode entities, then percent-encode what is not safe in an href."""
    return url_quote(html.unescape(url), safe="/:?#[]@!$&'()*+,;=-_.~%")


@dataclass(slots=True)
class RenderContext:
    """Per-render mutable state.

    ``containers`` is the stack of containers entered and not yet exited;
    paragraphs look at it to render tight list items without ``<p>``.
    """

    containers: list[Container] = field(default_factory=list)
    seen_slugs: set[str] = field(default_factory=set)


class HtmlRenderer:
    """Render AST nodes to HTML one walk event at a time.

    Usage:
        >>> from marktoc import parse, render_document
        >>> render_document(parse("# Hello **World**"), HtmlRenderer())
        '<h1>Hello <strong>World</strong></h1>\\n'

    """

    __slots__ = (
        "_complete_page",
        "_title",
        "_css",
        "_highlight",
        "_auto_heading_ids",
        "_slugify",
        "_ctx",
    )

    def __init__(
        self,
        *,
        complete_page: bool = False,
        title: str | None = None,
        css: str | None = None,
        highlight: bool = False,
        auto_heading_ids: bool = False,
        slugify: Callable[[str], str] | None = None,
    ) -> None:
        """Initialize renderer.

        Args:
            complete_page: Wrap the body in ``<html>``/``<head>``/``<body>``
            title: Page title; defaults to the document's title block
            css: Stylesheet URL linked from the page head
            highlight: Send fenced code through the configured highlighter
            auto_heading_ids: Slug ids for headings that have none
            slugify: Custom slug function for ``auto_heading_ids``
        """
        self._complete_page = complete_page
        self._title = title
        self._css = css
        self._highlight = highlight
        self._auto_heading_ids = auto_heading_ids
        self._slugify = slugify or default_slugify
        self._ctx = RenderContext()

    # =========================================================================
    # Document header and footer
    # =========================================================================

    def render_header(self, sb: StringBuilder, doc: Document) -> None:
        self._ctx = RenderContext()
        if not self._complete_page:
            return

        title = self._title if self._title is not None else self._title_block_text(doc)
        sb.append("<!DOCTYPE html>\n<html>\n<head>\n")
        sb.append(f"  <title>{escape_html(title)}</title>\n")
        sb.append('  <meta charset="utf-8">\n')
        if self._css:
            sb.append(f'  <link rel="stylesheet" type="text/css" href="{escape_html(self._css)}">\n')
        sb.append("</head>\n<body>\n\n")

    def render_footer(self, sb: StringBuilder, doc: Document) -> None:
        if self._complete_page:
            sb.append("\n</body>\n</html>\n")

    def _title_block_text(self, doc: Document) -> str:
        for child in doc.children:
            heading = child.as_heading()
            if heading is not None and heading.is_title_block:
                return plain_text(heading)
        return ""

    # =========================================================================
    # Node events
    # =========================================================================

    def render_node(self, sb: StringBuilder, node: Node, entering: bool) -> WalkStatus:
        """Write the markup for one walk event."""
        container = node.as_container()
        if container is not None and not entering:
            self._ctx.containers.pop()

        self._render(sb, node, entering)

        if container is not None and entering:
            self._ctx.containers.append(container)
        return WalkStatus.GO_TO_NEXT

    def _render(self, sb: StringBuilder, node: Node, entering: bool) -> None:
        match node:
            case Document():
                pass
            case Heading():
                self._render_heading(sb, node, entering)
            case Paragraph():
                self._render_paragraph(sb, node, entering)
            case BlockQuote():
                sb.append("<blockquote>\n" if entering else "</blockquote>\n")
            case List():
                self._render_list(sb, node, entering)
            case ListItem():
                self._render_list_item(sb, node, entering)
            case CodeBlock():
                self._render_code_block(sb, node)
            case ThematicBreak():
                sb.append("<hr />\n")
            case HtmlBlock():
                sb.append(node.html.rstrip("\n")).append("\n")
            case Text():
                sb.append(escape_html(node.content))
            case Emphasis():
                sb.append("<em>" if entering else "</em>")
            case Strong():
                sb.append("<strong>" if entering else "</strong>")
            case Strikethrough():
                sb.append("<del>" if entering else "</del>")
            case Link():
                if entering:
                    title = f' title="{escape_html(node.title)}"' if node.title else ""
                    sb.append(f'<a href="{escape_html(_encode_url(node.url))}"{title}>')
                else:
                    sb.append("</a>")
            case Image():
                title = f' title="{escape_html(node.title)}"' if node.title else ""
                src = escape_html(_encode_url(node.url))
                sb.append(f'<img src="{src}" alt="{escape_html(node.alt)}"{title} />')
            case CodeSpan():
                sb.append("<code>").append(escape_html(node.code)).append("</code>")
            case LineBreak():
                sb.append("<br />\n")
            case SoftBreak():
                sb.append("\n")
            case HtmlInline():
                sb.append(node.html)
            case _:
                raise RenderError(f"No HTML markup for node type {type(node).__name__}")

    def _render_heading(self, sb: StringBuilder, heading: Heading, entering: bool) -> None:
        if heading.is_title_block:
            sb.append('<h1 class="title">' if entering else "</h1>\n")
            return
        if not entering:
            sb.append(f"</h{heading.level}>\n")
            return

        anchor = heading.heading_id or heading.explicit_id
        if anchor is None and self._auto_heading_ids:
            anchor = self._unique_slug(plain_text(heading))
        id_attr = f' id="{escape_html(anchor)}"' if anchor else ""
        sb.append(f"<h{heading.level}{id_attr}>")

    def _unique_slug(self, text: str) -> str:
        slug = self._slugify(text) or "section"
        original = slug
        counter = 1
        while slug in self._ctx.seen_slugs:
            slug = f"{original}-{counter}"
            counter += 1
        self._ctx.seen_slugs.add(slug)
        return slug

    def _tight_parent(self, node: Node) -> ListItem | None:
        """Return the enclosing list item when ``node`` sits directly in a tight list."""
        stack = self._ctx.containers
        if len(stack) < 2:
            return None
        parent, grandparent = stack[-1], stack[-2]
        if isinstance(parent, ListItem) and isinstance(grandparent, List) and grandparent.tight:
            return parent
        return None

    def _render_paragraph(self, sb: StringBuilder, para: Paragraph, entering: bool) -> None:
        item = self._tight_parent(para)
        if item is None:
            sb.append("<p>" if entering else "</p>\n")
        elif not entering and item.children[-1] is not para:
            sb.append("\n")

    def _render_list(self, sb: StringBuilder, lst: List, entering: bool) -> None:
        if not entering:
            sb.append("</ol>\n" if lst.ordered else "</ul>\n")
        elif lst.ordered:
            start_attr = f' start="{lst.start}"' if lst.start != 1 else ""
            sb.append(f"<ol{start_attr}>\n")
        else:
            sb.append("<ul>\n")

    def _render_list_item(self, sb: StringBuilder, item: ListItem, entering: bool) -> None:
        if not entering:
            sb.append("</li>\n")
            return
        sb.append("<li>")
        parent = self._ctx.containers[-1] if self._ctx.containers else None
        tight = isinstance(parent, List) and parent.tight
        # Block content starts on its own line unless it is tight text.
        if item.children and not (tight and isinstance(item.children[0], Paragraph)):
            sb.append("\n")

    def _render_code_block(self, sb: StringBuilder, code: CodeBlock) -> None:
        lang = code.language
        if self._highlight and lang:
            from marktoc.highlighting import highlight

            try:
                highlighted = highlight(code.code, lang)
            except Exception:
                logger.debug("Syntax highlighting failed for language %r", lang, exc_info=True)
                highlighted = None
            if highlighted is not None:
                sb.append(highlighted.rstrip("\n")).append("\n")
                return

        lang_class = f' class="language-{escape_html(lang)}"' if lang else ""
        sb.append(f"<pre><code{lang_class}>")
        sb.append(escape_html(code.code))
        sb.append("</code></pre>\n")
