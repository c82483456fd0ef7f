"""Typed AST nodes for marktoc.

All nodes are slotted dataclasses. Nodes split into two shapes:

- containers carry ``children`` and are walked twice (enter and exit)
- leaves carry their content inline and are walked once

Node Hierarchy:
Node (base)
├── Container
│   ├── Document
│   ├── Heading
│   ├── Paragraph
│   ├── BlockQuote
│   ├── List
│   ├── ListItem
│   ├── Emphasis
│   ├── Strong
│   ├── Strikethrough
│   └── Link
└── leaves
    ├── Text
    ├── CodeSpan
    ├── CodeBlock
    ├── ThematicBreak
    ├── HtmlBlock
    ├── HtmlInline
    ├── Image
    ├── LineBreak
    └── SoftBreak

Mutability:
Nodes are plain (non-frozen) dataclasses because TOC synthesis writes
``Heading.heading_id`` in place; the body renderer reads it back to emit
the matching anchor. Nothing else mutates a parsed tree.

"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from marktoc.location import SourceLocation

# =============================================================================
# Base Nodes
# =============================================================================


@dataclass(slots=True)
class Node:
    """Base class for all AST nodes.

    All nodes track their source location for error messages and debugging.

    """

    location: SourceLocation

    def as_container(self) -> Container | None:
        """Return this node as a container, or None for a leaf."""
        return None

    def as_heading(self) -> Heading | None:
        """Return this node as a heading, or None for any other kind."""
        return None


@dataclass(slots=True)
class Container(Node):
    """Node with ordered children."""

    children: tuple[Node, ...] = ()

    def as_container(self) -> Container | None:
        return self


# =============================================================================
# Inline Nodes
# =============================================================================


@dataclass(slots=True)
class Text(Node):
    """Plain text content."""

    content: str = ""


@dataclass(slots=True)
class Emphasis(Container):
    """Emphasized (italic) text.

    Markdown: *text* or _text_
    HTML: <em>text</em>

    """


@dataclass(slots=True)
class Strong(Container):
    """Strong (bold) text.

    Markdown: **text** or __text__
    HTML: <strong>text</strong>

    """


@dataclass(slots=True)
class Strikethrough(Container):
    """Deleted text.

    Markdown: ~~deleted~~
    HTML: <del>deleted</del>

    """


@dataclass(slots=True)
class Link(Container):
    """Hyperlink.

    Markdown: [text](url "title") or <url>
    HTML: <a href="url" title="title">text</a>

    """

    url: str = ""
    title: str | None = None


@dataclass(slots=True)
class Image(Node):
    """Image.

    Markdown: ![alt](url "title")

    """

    url: str = ""
    alt: str = ""
    title: str | None = None


@dataclass(slots=True)
class CodeSpan(Node):
    """Inline code.

    Markdown: `code`

    """

    code: str = ""


@dataclass(slots=True)
class LineBreak(Node):
    """Hard line break (two trailing spaces or a trailing backslash)."""


@dataclass(slots=True)
class SoftBreak(Node):
    """Soft line break (single newline in a paragraph)."""


@dataclass(slots=True)
class HtmlInline(Node):
    """Inline raw HTML tag, passed through unchanged."""

    html: str = ""


# =============================================================================
# Block Nodes
# =============================================================================


@dataclass(slots=True)
class Heading(Container):
    """ATX, setext or title-block heading.

    Markdown: # Heading, Heading\\n======, or % Title at document start

    ``heading_id`` starts empty and is assigned ``toc_<n>`` by TOC synthesis.
    ``explicit_id`` holds a ``{#custom-id}`` suffix written in the source.
    Title-block headings are document metadata and never enter the TOC.

    """

    level: int = 1
    is_title_block: bool = False
    heading_id: str | None = None
    explicit_id: str | None = None
    style: Literal["atx", "setext", "title"] = "atx"

    def as_heading(self) -> Heading | None:
        return self


@dataclass(slots=True)
class Paragraph(Container):
    """Paragraph block."""


@dataclass(slots=True)
class CodeBlock(Node):
    """Fenced or indented code block.

    ``info`` is the fence info string (first word is the language);
    always None for indented code.

    """

    code: str = ""
    info: str | None = None
    fenced: bool = True

    @property
    def language(self) -> str | None:
        if not self.info:
            return None
        return self.info.split()[0]


@dataclass(slots=True)
class BlockQuote(Container):
    """Block quote.

    Markdown: > quoted text

    """


@dataclass(slots=True)
class ListItem(Container):
    """List item; children are blocks."""


@dataclass(slots=True)
class List(Container):
    """Ordered or unordered list; children are ListItem nodes.

    A tight list renders single-paragraph items without ``<p>`` tags.

    """

    ordered: bool = False
    start: int = 1
    tight: bool = True


@dataclass(slots=True)
class ThematicBreak(Node):
    """Thematic break (horizontal rule).

    Markdown: --- or *** or ___

    """


@dataclass(slots=True)
class HtmlBlock(Node):
    """Raw HTML block, passed through unchanged."""

    html: str = ""


@dataclass(slots=True)
class Document(Container):
    """Root document node."""


__all__ = [
    "BlockQuote",
    "CodeBlock",
    "CodeSpan",
    "Container",
    "Document",
    "Emphasis",
    "Heading",
    "HtmlBlock",
    "HtmlInline",
    "Image",
    "LineBreak",
    "Link",
    "List",
    "ListItem",
    "Node",
    "Paragraph",
    "SoftBreak",
    "Strikethrough",
    "Strong",
    "Text",
    "ThematicBreak",
]
