"""Line-oriented block parser producing the marktoc AST.

The parser walks the preparsed source line by line and recognizes, in
priority order: fenced code, ATX headings, thematic breaks, block
quotes, lists, indented code, raw HTML blocks and paragraphs (which
turn into setext headings when underlined). A run of ``%`` lines at the
very start of a document is a title block.

Block quotes and list items are parsed by a nested Parser over their
de-indented lines; ``line_offset`` keeps locations pointing at the
original source.

Thread Safety:
    Parser instances are single-use. Configuration is read from the
    ContextVar in :mod:`marktoc.config`.

"""

from __future__ import annotations

import re
from dataclasses import dataclass

from marktoc.config import get_parse_config
from marktoc.errors import ParseError
from marktoc.inline import parse_inline
from marktoc.location import SourceLocation
from marktoc.nodes import (
    BlockQuote,
    CodeBlock,
    Heading,
    HtmlBlock,
    List,
    ListItem,
    Node,
    Paragraph,
    ThematicBreak,
)
from marktoc.utils.logger import get_logger
from marktoc.utils.text import expand_tabs

logger = get_logger(__name__)

MAX_NESTING = 64

_ATX_HEADING = re.compile(r"^ {0,3}(#{1,6})(?:[ \t]+(.*?))?[ \t]*$")
_ATX_CLOSING = re.compile(r"(?:^|[ \t]+)#+[ \t]*$")
_EXPLICIT_ID = re.compile(r"[ \t]*\{#([A-Za-z0-9_:.-]+)\}$")
_THEMATIC_BREAK = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")
_SETEXT_UNDERLINE = re.compile(r"^ {0,3}(=+|-+)[ \t]*$")
_FENCE_OPEN = re.compile(r"^( {0,3})(`{3,}|~{3,})(.*)$")
_BLOCKQUOTE = re.compile(r"^ {0,3}> ?(.*)$")
_LIST_MARKER = re.compile(r"^( {0,3})([-+*]|\d{1,9}[.)])([ \t]+|$)")
_TITLE_LINE = re.compile(r"^%[ \t]?(.*)$")
_HTML_BLOCK = re.compile(
    r"^ {0,3}(?:<!--|<\?|<![A-Za-z]|</?(?:address|article|aside|blockquote|body|center|details|dialog|"
    r"dd|div|dl|dt|fieldset|figcaption|figure|footer|form|h[1-6]|head|header|hr|html|iframe|"
    r"legend|li|link|main|menu|nav|ol|p|pre|section|script|style|summary|table|tbody|td|"
    r"tfoot|th|thead|title|tr|ul)(?:[\s/>]|$))",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class _ListMarker:
    bullet: str | None
    delimiter: str | None
    number: int
    content_indent: int
    first_line: str

    def continues(self, other: _ListMarker) -> bool:
        """True when ``other`` starts a sibling item of the same list."""
        if self.bullet is not None:
            return other.bullet == self.bullet
        return other.delimiter == self.delimiter


def _is_blank(line: str) -> bool:
    return not line.strip()


def _indent_of(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def _match_list_marker(line: str) -> _ListMarker | None:
    match = _LIST_MARKER.match(line)
    if match is None:
        return None
    indent, marker, spacing = match.groups()
    rest = line[match.end() :]
    width = len(spacing)
    if width > 4 or not rest:
        # Content starting 5+ columns out is indented code inside the item.
        width = 1
        rest = line[match.end(2) + 1 :] if len(spacing) > 4 else rest
    content_indent = len(indent) + len(marker) + width
    if marker[-1] in ".)":
        return _ListMarker(None, marker[-1], int(marker[:-1]), content_indent, rest)
    return _ListMarker(marker, None, 1, content_indent, rest)


class Parser:
    """Block parser for Markdown.

    Usage:
            >>> blocks = Parser("# Hello\\n\\nWorld").parse()
            >>> blocks[0].level
            1

    """

    __slots__ = ("_lines", "_source_file", "_line_offset", "_depth", "_config")

    def __init__(
        self,
        source: str,
        source_file: str | None = None,
        *,
        line_offset: int = 0,
        depth: int = 0,
    ) -> None:
        """Initialize parser with preparsed source text.

        Args:
            source: Markdown text with ``\\n`` line endings
            source_file: Optional source file path for locations and errors
            line_offset: Number of source lines preceding ``source``
            depth: Container nesting depth of this (sub-)parser
        """
        if depth > MAX_NESTING:
            raise ParseError(
                f"container nesting deeper than {MAX_NESTING} levels",
                lineno=line_offset + 1,
                source_file=source_file,
            )
        self._lines = [expand_tabs(line) for line in source.split("\n")]
        if self._lines and self._lines[-1] == "":
            self._lines.pop()
        self._source_file = source_file
        self._line_offset = line_offset
        self._depth = depth
        self._config = get_parse_config()

    def parse(self) -> list[Node]:
        """Parse the source into a list of block nodes."""
        blocks: list[Node] = []
        i = 0
        if self._depth == 0 and self._config.title_block:
            i = self._parse_title_block(blocks)

        while i < len(self._lines):
            if _is_blank(self._lines[i]):
                i += 1
                continue
            block, i = self._parse_block(i)
            blocks.append(block)
        return blocks

    # =========================================================================
    # Helpers
    # =========================================================================

    def _loc(self, start: int, end: int | None = None) -> SourceLocation:
        loc = SourceLocation(
            lineno=self._line_offset + start + 1,
            col_offset=1,
            source_file=self._source_file,
        )
        if end is None:
            return loc
        return loc.through(self._line_offset + end)

    def _subparse(self, lines: list[str], start: int) -> tuple[Node, ...]:
        sub = Parser(
            "\n".join(lines),
            self._source_file,
            line_offset=self._line_offset + start,
            depth=self._depth + 1,
        )
        return tuple(sub.parse())

    def _starts_block(self, line: str) -> bool:
        """True when ``line`` interrupts a paragraph."""
        if _ATX_HEADING.match(line) or _THEMATIC_BREAK.match(line):
            return True
        if self._is_fence(line):
            return True
        if _BLOCKQUOTE.match(line) or _HTML_BLOCK.match(line):
            return True
        marker = _match_list_marker(line)
        # Only lists with content, and ordered lists starting at 1, interrupt.
        return marker is not None and bool(marker.first_line.strip()) and marker.number == 1

    @staticmethod
    def _is_fence(line: str) -> bool:
        match = _FENCE_OPEN.match(line)
        if match is None:
            return False
        return not (match.group(2)[0] == "`" and "`" in match.group(3))

    # =========================================================================
    # Blocks
    # =========================================================================

    def _parse_title_block(self, blocks: list[Node]) -> int:
        parts: list[str] = []
        i = 0
        while i < len(self._lines):
            match = _TITLE_LINE.match(self._lines[i])
            if match is None:
                break
            parts.append(match.group(1).strip())
            i += 1
        if not parts:
            return 0

        loc = self._loc(0, i)
        text = " ".join(part for part in parts if part)
        blocks.append(
            Heading(
                location=loc,
                children=parse_inline(text, loc),
                level=1,
                is_title_block=True,
                style="title",
            )
        )
        return i

    def _parse_block(self, i: int) -> tuple[Node, int]:
        line = self._lines[i]

        if self._is_fence(line):
            return self._parse_fenced_code(i)

        match = _ATX_HEADING.match(line)
        if match is not None:
            return self._parse_atx_heading(i, match), i + 1

        if _THEMATIC_BREAK.match(line):
            return ThematicBreak(location=self._loc(i)), i + 1

        if _BLOCKQUOTE.match(line):
            return self._parse_blockquote(i)

        marker = _match_list_marker(line)
        if marker is not None:
            return self._parse_list(i, marker)

        if _indent_of(line) >= 4:
            return self._parse_indented_code(i)

        if _HTML_BLOCK.match(line):
            return self._parse_html_block(i)

        return self._parse_paragraph(i)

    def _parse_atx_heading(self, i: int, match: re.Match[str]) -> Heading:
        level = len(match.group(1))
        content = match.group(2) or ""
        content = _ATX_CLOSING.sub("", content).strip()

        explicit_id = None
        if self._config.heading_ids:
            id_match = _EXPLICIT_ID.search(content)
            if id_match is not None:
                explicit_id = id_match.group(1)
                content = content[: id_match.start()].rstrip()

        loc = self._loc(i)
        return Heading(
            location=loc,
            children=parse_inline(content, loc),
            level=level,
            explicit_id=explicit_id,
            style="atx",
        )

    def _parse_fenced_code(self, i: int) -> tuple[Node, int]:
        match = _FENCE_OPEN.match(self._lines[i])
        assert match is not None
        indent = len(match.group(1))
        fence = match.group(2)
        info = match.group(3).strip() or None
        closing = re.compile(rf"^ {{0,3}}{re.escape(fence[0])}{{{len(fence)},}}[ \t]*$")

        code_lines: list[str] = []
        j = i + 1
        while j < len(self._lines):
            line = self._lines[j]
            if closing.match(line):
                j += 1
                break
            strip = min(indent, _indent_of(line))
            code_lines.append(line[strip:])
            j += 1
        else:
            logger.debug("Unclosed code fence at line %d", self._line_offset + i + 1)

        code = "\n".join(code_lines) + "\n" if code_lines else ""
        return CodeBlock(location=self._loc(i, j), code=code, info=info, fenced=True), j

    def _parse_indented_code(self, i: int) -> tuple[Node, int]:
        code_lines: list[str] = []
        j = i
        while j < len(self._lines):
            line = self._lines[j]
            if _is_blank(line):
                code_lines.append(line[4:])
            elif _indent_of(line) >= 4:
                code_lines.append(line[4:])
            else:
                break
            j += 1
        while code_lines and _is_blank(code_lines[-1]):
            code_lines.pop()
        code = "\n".join(code_lines) + "\n"
        return CodeBlock(location=self._loc(i, j), code=code, fenced=False), j

    def _parse_html_block(self, i: int) -> tuple[Node, int]:
        j = i
        while j < len(self._lines) and not _is_blank(self._lines[j]):
            j += 1
        return HtmlBlock(location=self._loc(i, j), html="\n".join(self._lines[i:j])), j

    def _parse_blockquote(self, i: int) -> tuple[Node, int]:
        inner: list[str] = []
        j = i
        while j < len(self._lines):
            line = self._lines[j]
            match = _BLOCKQUOTE.match(line)
            if match is not None:
                inner.append(match.group(1))
            elif not _is_blank(line) and inner and not _is_blank(inner[-1]) and not self._starts_block(line):
                # Lazy continuation of a quoted paragraph.
                inner.append(line)
            else:
                break
            j += 1
        return BlockQuote(location=self._loc(i, j), children=self._subparse(inner, i)), j

    def _parse_list(self, i: int, marker: _ListMarker) -> tuple[Node, int]:
        items: list[ListItem] = []
        loose = False
        first = marker
        j = i

        while j < len(self._lines):
            current = _match_list_marker(self._lines[j])
            if current is None or not first.continues(current) or _THEMATIC_BREAK.match(self._lines[j]):
                break

            item_start = j
            item_lines = [current.first_line]
            j += 1
            while j < len(self._lines):
                line = self._lines[j]
                if _is_blank(line):
                    item_lines.append("")
                    j += 1
                    continue
                if _indent_of(line) >= current.content_indent:
                    item_lines.append(line[current.content_indent :])
                    j += 1
                    continue
                if not _is_blank(item_lines[-1]) and not self._starts_block(line) and _match_list_marker(line) is None:
                    # Lazy paragraph continuation.
                    item_lines.append(line.strip())
                    j += 1
                    continue
                break

            # Trailing blank lines belong between items, not to the item.
            trailing = 0
            while item_lines and _is_blank(item_lines[-1]):
                item_lines.pop()
                trailing += 1
            if trailing and j < len(self._lines):
                nxt = _match_list_marker(self._lines[j])
                if nxt is not None and first.continues(nxt):
                    loose = True
            if any(_is_blank(line) for line in item_lines):
                loose = loose or self._has_inner_gap(item_lines)

            children = self._subparse(item_lines, item_start)
            items.append(ListItem(location=self._loc(item_start, j - trailing), children=children))

        ordered = first.bullet is None
        return (
            List(
                location=self._loc(i, j),
                children=tuple(items),
                ordered=ordered,
                start=first.number if ordered else 1,
                tight=not loose,
            ),
            j,
        )

    @staticmethod
    def _has_inner_gap(lines: list[str]) -> bool:
        """True when a blank line separates two top-level blocks of an item."""
        in_fence = False
        for index, line in enumerate(lines):
            if Parser._is_fence(line) and _indent_of(line) < 4:
                in_fence = not in_fence
                continue
            if in_fence or not _is_blank(line) or index == 0:
                continue
            nxt = next((candidate for candidate in lines[index + 1 :] if not _is_blank(candidate)), None)
            if nxt is not None and _indent_of(nxt) < 2 and _match_list_marker(nxt) is None:
                return True
        return False

    def _parse_paragraph(self, i: int) -> tuple[Node, int]:
        lines = [self._lines[i].lstrip()]
        j = i + 1
        while j < len(self._lines):
            line = self._lines[j]
            if _is_blank(line):
                break
            underline = _SETEXT_UNDERLINE.match(line)
            if underline is not None:
                level = 1 if underline.group(1)[0] == "=" else 2
                loc = self._loc(i, j + 1)
                text = "\n".join(lines).strip()
                return (
                    Heading(location=loc, children=parse_inline(text, loc), level=level, style="setext"),
                    j + 1,
                )
            if self._starts_block(line):
                break
            lines.append(line.lstrip())
            j += 1

        loc = self._loc(i, j)
        text = "\n".join(lines).rstrip()
        return Paragraph(location=loc, children=parse_inline(text, loc)), j


__all__ = ["MAX_NESTING", "Parser"]
