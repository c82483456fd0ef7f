"""Table-of-contents synthesis from a document's headings.

One walk over the tree visits every node. Non-title headings get an
anchor id ``toc_<n>`` written onto the node (``n`` counts non-title
headings from zero in document order), and the inline content between a
heading's enter and exit events is rendered through the caller's
renderer into that heading's entry. Title-block headings get no id and
leave the count, the nesting and the minimum level untouched.

After the walk the entries are laid out as nested ``<ul>``/``<li>``
markup. Levels are taken relative to the shallowest heading present, so
a document whose headings start at ``##`` gets no empty wrapper list for
the missing ``#`` level; jumps of more than one level open or close
several lists in one step.

Heading ids are written during synthesis, so render the TOC before the
body when the body should carry matching anchors.

Example: ``render_toc(parse("# Intro\\n\\n## Setup\\n"), HtmlRenderer())`` returns:

    <ul>
    <li><a href="#toc_0">Intro</a>
    <ul>
    <li><a href="#toc_1">Setup</a></li>
    </ul></li>
    </ul>

"""

from __future__ import annotations

from dataclasses import dataclass, field

from marktoc.errors import TocError
from marktoc.nodes import Document, Heading, Node
from marktoc.renderers.protocol import Renderer
from marktoc.stringbuilder import StringBuilder
from marktoc.utils.logger import get_logger
from marktoc.walker import WalkStatus, walk

logger = get_logger(__name__)

ANCHOR_PREFIX = "toc_"

# Markup fragments for one nesting step.
LIST_OPEN = "\n<ul>\n<li>"
LIST_CLOSE = "</li>\n</ul>"
ITEM_BREAK = "</li>\n\n<li>"
ANCHOR_CLOSE = "</a>"


@dataclass(frozen=True, slots=True)
class TocEntry:
    """One heading as it appears in the table of contents.

    Attributes:
        level: Heading level as written in the document (1 = ``#``)
        anchor: Anchor id shared with the rendered heading
        html: Rendered inline content of the heading
    """

    level: int
    anchor: str
    html: str


@dataclass(slots=True)
class TocCollector:
    """Walk state for one synthesis call.

    Use as the visitor of :func:`walk`; ``entries`` holds the collected
    headings afterwards.
    """

    renderer: Renderer
    entries: list[TocEntry] = field(default_factory=list)
    in_heading: bool = False
    heading_count: int = 0
    min_level: int | None = None
    _heading: Heading | None = field(default=None, init=False, repr=False)
    _content: StringBuilder | None = field(default=None, init=False, repr=False)

    def __call__(self, node: Node, entering: bool) -> WalkStatus:
        heading = node.as_heading()
        if heading is not None and not heading.is_title_block:
            if entering:
                self._open(heading)
            else:
                self._close()
            return WalkStatus.GO_TO_NEXT

        if self.in_heading and self._content is not None:
            return self.renderer.render_node(self._content, node, entering)

        return WalkStatus.GO_TO_NEXT

    def _open(self, heading: Heading) -> None:
        if heading.level < 1:
            raise TocError(f"heading level must be >= 1, got {heading.level}", level=heading.level)

        heading.heading_id = f"{ANCHOR_PREFIX}{self.heading_count}"
        if self.min_level is None or heading.level < self.min_level:
            self.min_level = heading.level

        self.heading_count += 1
        self.in_heading = True
        self._heading = heading
        self._content = StringBuilder()

    def _close(self) -> None:
        if self._heading is None or self._content is None:
            return
        self.entries.append(
            TocEntry(
                level=self._heading.level,
                anchor=self._heading.heading_id or "",
                html=self._content.build(),
            )
        )
        self.in_heading = False
        self._heading = None
        self._content = None

    def finish(self) -> list[TocEntry]:
        """Close a heading left open by a terminated walk and return the entries."""
        self._close()
        return self.entries


def collect_toc_entries(doc: Document, renderer: Renderer) -> list[TocEntry]:
    """Assign heading ids and collect TOC entries in document order.

    Args:
        doc: Document AST root; non-title headings are updated in place
        renderer: Renderer used for heading inline content

    Returns:
        Entries for every non-title heading reached by the walk
    """
    collector = TocCollector(renderer)
    walk(doc, collector)
    return collector.finish()


def layout_toc(entries: list[TocEntry], min_level: int | None = None) -> str:
    """Lay out collected entries as balanced, nested list markup.

    Args:
        entries: Entries in document order
        min_level: Shallowest heading level; computed from ``entries`` when omitted

    Raises:
        TocError: If an entry sits above ``min_level``
    """
    if not entries:
        return ""

    if min_level is None:
        min_level = min(entry.level for entry in entries)
    # Levels above the shallowest heading never get a wrapper list.
    base = min_level - 1
    sb = StringBuilder()
    current_level = 0

    for entry in entries:
        level = entry.level - base
        if level < 1:
            raise TocError(
                f"heading level {entry.level} is above the minimum level {min_level}",
                level=entry.level,
            )

        if level == current_level:
            sb.append(ITEM_BREAK)
        elif level < current_level:
            while level < current_level:
                current_level -= 1
                sb.append(LIST_CLOSE)
            sb.append(ITEM_BREAK)
        else:
            while level > current_level:
                current_level += 1
                sb.append(LIST_OPEN)

        sb.append(f'<a href="#{entry.anchor}">').append(entry.html).append(ANCHOR_CLOSE)

    while current_level > 0:
        current_level -= 1
        sb.append(LIST_CLOSE)

    return sb.build()


def render_toc(doc: Document, renderer: Renderer) -> str:
    """Synthesize the table of contents for ``doc``.

    Args:
        doc: Document AST root; non-title headings receive ``heading_id``
        renderer: Renderer used for heading inline content only

    Returns:
        Nested list markup, or an empty string when there are no headings
    """
    collector = TocCollector(renderer)
    if walk(doc, collector) is WalkStatus.TERMINATE:
        logger.debug("TOC walk terminated by %s", type(renderer).__name__)
    entries = collector.finish()
    logger.debug("Collected %d TOC entries (min level %s)", len(entries), collector.min_level)
    return layout_toc(entries, collector.min_level)


__all__ = [
    "ANCHOR_PREFIX",
    "TocCollector",
    "TocEntry",
    "collect_toc_entries",
    "layout_toc",
    "render_toc",
]
