"""
marktoc — Markdown to HTML with table-of-contents synthesis.

A document that contains a ``[TOC]`` marker gets, alongside its HTML body,
a nested-list outline of its headings. Each outline entry links to
``#toc_<n>`` and the body renders the matching ``id`` on the heading.

Quick Start:
    >>> from marktoc import to_html
    >>> toc, body = to_html("[TOC]\\n# Intro\\n\\n## Setup\\n")
    >>> print(body)
    <h1 id="toc_0">Intro</h1>
    <h2 id="toc_1">Setup</h2>
    <BLANKLINE>

    >>> # Or use the high-level Markdown class
    >>> from marktoc import Markdown
    >>> md = Markdown()
    >>> md("Hello **World**")
    '<p>Hello <strong>World</strong></p>\\n'

Installation:
    pip install marktoc              # Core (zero deps)
    pip install marktoc[syntax]      # + Syntax highlighting via Rosettes
"""

from marktoc.config import (
    ParseConfig,
    get_parse_config,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)
from marktoc.errors import MarktocError, ParseError, RenderError, TocError
from marktoc.location import SourceLocation
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
from marktoc.parser import Parser
from marktoc.pipeline import render_document
from marktoc.preprocess import TOC_MARKER, has_toc_marker, preparse
from marktoc.renderers.html import HtmlRenderer
from marktoc.renderers.protocol import Renderer
from marktoc.stringbuilder import StringBuilder
from marktoc.toc import TocEntry, collect_toc_entries, layout_toc, render_toc
from marktoc.walker import Visitor, WalkStatus, walk

__version__ = "0.1.0"


def parse(
    source: str | bytes,
    *,
    source_file: str | None = None,
    config: ParseConfig | None = None,
) -> Document:
    """Preparse and parse Markdown source into a Document.

    Args:
        source: Markdown source text, or UTF-8 bytes
        source_file: Optional source file path for locations and errors
        config: Parse configuration; the context's current config when None

    Returns:
        Document AST root node

    Example:
        >>> doc = parse("# Hello **World**")
        >>> doc.children[0].level
        1
    """
    text = preparse(source)
    with parse_config_context(config or get_parse_config()):
        blocks = Parser(text, source_file=source_file).parse()

    loc = SourceLocation(
        lineno=1,
        col_offset=1,
        end_lineno=text.count("\n") + 1,
        source_file=source_file,
    )
    return Document(location=loc, children=tuple(blocks))


def render(doc: Document, renderer: Renderer | None = None) -> str:
    """Render a Document through the header/body/footer pipeline.

    Args:
        doc: Document AST to render
        renderer: Renderer to use; a default HtmlRenderer when None

    Returns:
        Rendered body
    """
    return render_document(doc, renderer or HtmlRenderer())


def toc_to_html(source: str | bytes, doc: Document, renderer: Renderer | None = None) -> str:
    """Synthesize the table of contents when ``source`` asks for one.

    Args:
        source: The raw source ``doc`` was parsed from
        doc: Parsed document; headings receive their anchor ids
        renderer: Renderer for heading content; a default HtmlRenderer when None

    Returns:
        TOC markup, or an empty string when the source has no ``[TOC]`` marker
    """
    if not has_toc_marker(source):
        return ""
    return render_toc(doc, renderer or HtmlRenderer())


def to_html(
    source: str | bytes,
    *,
    renderer: Renderer | None = None,
    config: ParseConfig | None = None,
    source_file: str | None = None,
) -> tuple[str, str]:
    """Convert Markdown to a ``(toc, body)`` pair of HTML strings.

    The TOC is synthesized before the body is rendered so that the body's
    heading ids match the TOC's anchors.

    Args:
        source: Markdown source text, or UTF-8 bytes
        renderer: Renderer to use for both outputs; a default HtmlRenderer when None
        config: Parse configuration
        source_file: Optional source file path for locations and errors

    Returns:
        ``(toc, body)``; ``toc`` is empty unless the source has a ``[TOC]`` marker
    """
    doc = parse(source, source_file=source_file, config=config)
    renderer = renderer or HtmlRenderer()
    toc = toc_to_html(source, doc, renderer)
    return toc, render_document(doc, renderer)


class Markdown:
    """High-level Markdown processor combining parser and renderer.

    Usage:
        >>> md = Markdown(complete_page=True, title="Notes")
        >>> toc, body = md.to_html("[TOC]\\n# Notes\\n")
        >>> toc
        '\\n<ul>\\n<li><a href="#toc_0">Notes</a></li>\\n</ul>'

    Thread Safety:
        Holds only immutable settings; every call builds its own renderer.
    """

    __slots__ = ("_config", "_renderer_options")

    def __init__(
        self,
        *,
        config: ParseConfig | None = None,
        complete_page: bool = False,
        title: str | None = None,
        css: str | None = None,
        highlight: bool = False,
        auto_heading_ids: bool = False,
    ) -> None:
        """Initialize Markdown processor.

        Args:
            config: Parse configuration (defaults to ``ParseConfig()``)
            complete_page: Wrap the body in a full HTML page
            title: Page title for ``complete_page``
            css: Stylesheet URL for ``complete_page``
            highlight: Syntax-highlight fenced code
            auto_heading_ids: Slug ids for headings without one
        """
        self._config = config or ParseConfig()
        self._renderer_options = {
            "complete_page": complete_page,
            "title": title,
            "css": css,
            "highlight": highlight,
            "auto_heading_ids": auto_heading_ids,
        }

    def __call__(self, source: str | bytes) -> str:
        """Convert Markdown to the HTML body."""
        return self.to_html(source)[1]

    def parse(self, source: str | bytes, *, source_file: str | None = None) -> Document:
        return parse(source, source_file=source_file, config=self._config)

    def renderer(self) -> HtmlRenderer:
        """Build a fresh renderer with this processor's options."""
        return HtmlRenderer(**self._renderer_options)

    def to_html(self, source: str | bytes, *, source_file: str | None = None) -> tuple[str, str]:
        """Convert Markdown to a ``(toc, body)`` pair."""
        return to_html(source, renderer=self.renderer(), config=self._config, source_file=source_file)

    def toc(self, source: str | bytes) -> str:
        """Return only the table of contents for ``source``."""
        doc = self.parse(source)
        return toc_to_html(source, doc, self.renderer())


__all__ = [
    # Main API
    "parse",
    "render",
    "render_document",
    "render_toc",
    "to_html",
    "toc_to_html",
    "Markdown",
    # Preprocessing
    "preparse",
    "has_toc_marker",
    "TOC_MARKER",
    # Walking
    "walk",
    "WalkStatus",
    "Visitor",
    # TOC
    "TocEntry",
    "collect_toc_entries",
    "layout_toc",
    # Parser / renderer
    "Parser",
    "Renderer",
    "HtmlRenderer",
    "StringBuilder",
    # Configuration
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
    # Errors
    "MarktocError",
    "ParseError",
    "RenderError",
    "TocError",
    # Location
    "SourceLocation",
    # Nodes
    "Node",
    "Container",
    "Document",
    "Heading",
    "Paragraph",
    "CodeBlock",
    "BlockQuote",
    "List",
    "ListItem",
    "ThematicBreak",
    "HtmlBlock",
    "Text",
    "Emphasis",
    "Strong",
    "Strikethrough",
    "Link",
    "Image",
    "CodeSpan",
    "LineBreak",
    "SoftBreak",
    "HtmlInline",
    # Version
    "__version__",
]
