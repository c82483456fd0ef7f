"""Inline parsing: text runs into Text, Emphasis, Link and friends.

Parsing happens in two steps:

1. A left-to-right scan builds a flat list of pieces: finished nodes
   (code spans, links, images, autolinks, HTML tags, breaks), plain text
   and delimiter runs (``*``, ``_``, ``~``).
2. Delimiter runs are matched closer-first against the nearest
   compatible opener, following the CommonMark flanking rules and the
   "rule of three"; unmatched runs fall back to literal text. Matches are
   recorded on the runs and the nested nodes are built in one final pass.

Configuration (strikethrough, autolinks, inline HTML) is read from the
ContextVar in :mod:`marktoc.config`.

"""

from __future__ import annotations

import html
import re
import unicodedata
from dataclasses import dataclass, field
from typing import TypeAlias

from marktoc.config import get_parse_config
from marktoc.location import SourceLocation
from marktoc.nodes import (
    CodeSpan,
    Emphasis,
    HtmlInline,
    Image,
    LineBreak,
    Link,
    Node,
    SoftBreak,
    Strikethrough,
    Strong,
    Text,
)
from marktoc.walker import WalkStatus, walk

# Link labels are parsed by a nested InlineParser; brackets deeper than this stay literal.
MAX_LABEL_NESTING = 32

_ASCII_PUNCTUATION = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")
_ENTITY = re.compile(r"&(?:#[0-9]{1,7}|#[xX][0-9a-fA-F]{1,6}|[A-Za-z][A-Za-z0-9]{1,31});")
_AUTOLINK = re.compile(r"<([A-Za-z][A-Za-z0-9+.-]{1,31}:[^\s<>]*)>")
_EMAIL_AUTOLINK = re.compile(r"<([A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]*[A-Za-z0-9])?(?:\.[A-Za-z0-9-]+)*)>")
_HTML_TAG = re.compile(
    r"<(?:[A-Za-z][A-Za-z0-9-]*(?:\s+[A-Za-z_:][\w.:-]*(?:\s*=\s*(?:[^\s\"'=<>`]+|'[^']*'|\"[^\"]*\"))?)*\s*/?"
    r"|/[A-Za-z][A-Za-z0-9-]*\s*"
    r"|!--(?:(?!--).)*--)>",
    re.DOTALL,
)


@dataclass(slots=True)
class _Delimiter:
    """A run of ``*``, ``_`` or ``~`` awaiting a partner."""

    char: str
    count: int
    original: int
    can_open: bool
    can_close: bool
    opens: list[_EmphasisKind] = field(default_factory=list)
    closes: list[_EmphasisKind] = field(default_factory=list)


_EmphasisKind: TypeAlias = type[Emphasis] | type[Strong] | type[Strikethrough]
_Piece: TypeAlias = Node | str | _Delimiter


def _is_punctuation(ch: str) -> bool:
    return ch in _ASCII_PUNCTUATION or unicodedata.category(ch).startswith("P")


def _flanking(prev: str, nxt: str) -> tuple[bool, bool]:
    """Return (left-flanking, right-flanking) for a run between ``prev`` and ``nxt``."""
    prev_space = not prev or prev.isspace()
    next_space = not nxt or nxt.isspace()
    prev_punct = bool(prev) and _is_punctuation(prev)
    next_punct = bool(nxt) and _is_punctuation(nxt)
    left = not next_space and (not next_punct or prev_space or prev_punct)
    right = not prev_space and (not prev_punct or next_space or next_punct)
    return left, right


class InlineParser:
    """Parse one block's inline text.

    Usage:
        InlineParser("Hello *world*", location).parse()
        # (Text(content='Hello '), Emphasis(children=(Text(content='world'),)))

    """

    __slots__ = ("_text", "_pos", "_location", "_depth", "_config", "_pieces", "_buffer")

    def __init__(self, text: str, location: SourceLocation, *, depth: int = 0) -> None:
        self._text = text
        self._pos = 0
        self._location = location
        self._depth = depth
        self._config = get_parse_config()
        self._pieces: list[_Piece] = []
        self._buffer: list[str] = []

    def parse(self) -> tuple[Node, ...]:
        text = self._text
        while self._pos < len(text):
            ch = text[self._pos]
            match ch:
                case "\\":
                    self._scan_escape()
                case "`":
                    self._scan_code_span()
                case "*" | "_":
                    self._scan_delimiter(ch)
                case "~" if self._config.strikethrough:
                    self._scan_delimiter(ch)
                case "!" if text.startswith("![", self._pos):
                    self._scan_link(image=True)
                case "[":
                    self._scan_link(image=False)
                case "<":
                    self._scan_angle()
                case "&":
                    self._scan_entity()
                case "\n":
                    self._scan_newline()
                case _:
                    self._buffer.append(ch)
                    self._pos += 1
        self._flush()
        return tuple(_finish(self._pieces, self._location))

    # =========================================================================
    # Scanners
    # =========================================================================

    def _flush(self) -> None:
        if self._buffer:
            self._pieces.append("".join(self._buffer))
            self._buffer.clear()

    def _emit(self, node: Node) -> None:
        self._flush()
        self._pieces.append(node)

    def _scan_escape(self) -> None:
        text = self._text
        nxt = text[self._pos + 1] if self._pos + 1 < len(text) else ""
        if nxt == "\n":
            self._emit(LineBreak(location=self._location))
            self._pos += 2
            self._skip_indent()
        elif nxt in _ASCII_PUNCTUATION and nxt:
            self._buffer.append(nxt)
            self._pos += 2
        else:
            self._buffer.append("\\")
            self._pos += 1

    def _scan_code_span(self) -> None:
        text = self._text
        start = self._pos
        end = start
        while end < len(text) and text[end] == "`":
            end += 1
        run = end - start

        search = end
        while True:
            close = text.find("`" * run, search)
            if close == -1:
                self._buffer.append("`" * run)
                self._pos = end
                return
            close_end = close + run
            if close_end < len(text) and text[close_end] == "`":
                # Longer run; not our closer.
                while close_end < len(text) and text[close_end] == "`":
                    close_end += 1
                search = close_end
                continue
            break

        code = text[end:close].replace("\n", " ")
        if len(code) > 2 and code[0] == " " and code[-1] == " " and code.strip(" "):
            code = code[1:-1]
        self._emit(CodeSpan(location=self._location, code=code))
        self._pos = close + run

    def _scan_delimiter(self, char: str) -> None:
        text = self._text
        start = self._pos
        end = start
        while end < len(text) and text[end] == char:
            end += 1
        prev = text[start - 1] if start > 0 else ""
        nxt = text[end] if end < len(text) else ""
        left, right = _flanking(prev, nxt)

        if char == "_":
            can_open = left and (not right or _is_punctuation(prev))
            can_close = right and (not left or _is_punctuation(nxt))
        else:
            can_open, can_close = left, right

        self._flush()
        count = end - start
        self._pieces.append(_Delimiter(char, count, count, can_open, can_close))
        self._pos = end

    def _scan_link(self, *, image: bool) -> None:
        text = self._text
        open_pos = self._pos + (1 if image else 0)
        close = _find_closing_bracket(text, open_pos) if self._depth < MAX_LABEL_NESTING else -1
        parsed = _parse_destination(text, close + 1) if close != -1 else None
        if parsed is None:
            self._buffer.append("![" if image else "[")
            self._pos = open_pos + 1
            return

        url, title, end = parsed
        label = text[open_pos + 1 : close]
        children = InlineParser(label, self._location, depth=self._depth + 1).parse()
        if image:
            alt = "".join(plain_text(child) for child in children)
            self._emit(Image(location=self._location, url=url, alt=alt, title=title))
        else:
            self._emit(Link(location=self._location, children=children, url=url, title=title))
        self._pos = end

    def _scan_angle(self) -> None:
        text = self._text
        if self._config.autolinks:
            match = _AUTOLINK.match(text, self._pos)
            if match is not None:
                url = match.group(1)
                self._emit(self._autolink(url, url))
                self._pos = match.end()
                return
            match = _EMAIL_AUTOLINK.match(text, self._pos)
            if match is not None:
                address = match.group(1)
                self._emit(self._autolink(f"mailto:{address}", address))
                self._pos = match.end()
                return
        if self._config.inline_html:
            match = _HTML_TAG.match(text, self._pos)
            if match is not None:
                self._emit(HtmlInline(location=self._location, html=match.group(0)))
                self._pos = match.end()
                return
        self._buffer.append("<")
        self._pos += 1

    def _autolink(self, url: str, label: str) -> Link:
        return Link(
            location=self._location,
            children=(Text(location=self._location, content=label),),
            url=url,
        )

    def _scan_entity(self) -> None:
        match = _ENTITY.match(self._text, self._pos)
        if match is None:
            self._buffer.append("&")
            self._pos += 1
            return
        self._buffer.append(html.unescape(match.group(0)))
        self._pos = match.end()

    def _scan_newline(self) -> None:
        pending = "".join(self._buffer)
        stripped = pending.rstrip(" ")
        hard = len(pending) - len(stripped) >= 2
        self._buffer = [stripped] if stripped else []
        self._emit(LineBreak(location=self._location) if hard else SoftBreak(location=self._location))
        self._pos += 1
        self._skip_indent()

    def _skip_indent(self) -> None:
        text = self._text
        while self._pos < len(text) and text[self._pos] in " \t":
            self._pos += 1


# =============================================================================
# Link helpers
# =============================================================================


def _find_closing_bracket(text: str, open_pos: int) -> int:
    """Index of the ``]`` matching the ``[`` at ``open_pos``, or -1."""
    depth = 0
    pos = open_pos
    while pos < len(text):
        ch = text[pos]
        if ch == "\\":
            pos += 2
            continue
        if ch == "`":
            # Brackets inside code spans do not count.
            run_end = pos
            while run_end < len(text) and text[run_end] == "`":
                run_end += 1
            close = text.find(text[pos:run_end], run_end)
            pos = close + (run_end - pos) if close != -1 else run_end
            continue
        if ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    return -1


def _parse_destination(text: str, pos: int) -> tuple[str, str | None, int] | None:
    """Parse ``(url "title")`` starting at ``pos``; return (url, title, end)."""
    if pos >= len(text) or text[pos] != "(":
        return None
    pos = _skip_space(text, pos + 1)

    if pos < len(text) and text[pos] == "<":
        close = text.find(">", pos + 1)
        if close == -1 or "\n" in text[pos:close]:
            return None
        url = text[pos + 1 : close]
        pos = close + 1
    else:
        start = pos
        depth = 0
        while pos < len(text):
            ch = text[pos]
            if ch == "\\" and pos + 1 < len(text):
                pos += 2
                continue
            if ch.isspace():
                break
            if ch == "(":
                depth += 1
            elif ch == ")":
                if depth == 0:
                    break
                depth -= 1
            pos += 1
        url = text[start:pos]

    title = None
    after_url = _skip_space(text, pos)
    if after_url < len(text) and after_url > pos and text[after_url] in "\"'(":
        closer = ")" if text[after_url] == "(" else text[after_url]
        end = after_url + 1
        while end < len(text) and text[end] != closer:
            end += 2 if text[end] == "\\" else 1
        if end >= len(text):
            return None
        title = _unescape_punctuation(text[after_url + 1 : end])
        after_url = end + 1

    pos = _skip_space(text, after_url)
    if pos >= len(text) or text[pos] != ")":
        return None
    return _unescape_punctuation(url), title, pos + 1


def _skip_space(text: str, pos: int) -> int:
    while pos < len(text) and text[pos] in " \t\n":
        pos += 1
    return pos


def _unescape_punctuation(value: str) -> str:
    return re.sub(r"\\([!-/:-@\[-`{-~])", r"\1", value)


# =============================================================================
# Emphasis resolution
# =============================================================================


def _find_opener(pieces: list[_Piece], stack: list[int], closer: _Delimiter) -> int:
    """Position in ``stack`` of the nearest opener usable by ``closer``, or -1."""
    for position in range(len(stack) - 1, -1, -1):
        opener = pieces[stack[position]]
        assert isinstance(opener, _Delimiter)
        if closer.char != "~" and (opener.can_close or closer.can_open):
            total = opener.original + closer.original
            if total % 3 == 0 and not (opener.original % 3 == 0 and closer.original % 3 == 0):
                continue
        return position
    return -1


def _match_closer(pieces: list[_Piece], stacks: dict[str, list[int]], closer: _Delimiter) -> None:
    """Pair ``closer`` with openers until it is used up or none is left."""
    stack = stacks[closer.char]
    while closer.count:
        position = _find_opener(pieces, stack, closer)
        if position == -1:
            return
        opener_index = stack[position]
        opener = pieces[opener_index]
        assert isinstance(opener, _Delimiter)

        if closer.char == "~":
            if opener.count < 2 or closer.count < 2:
                return
            use, kind = 2, Strikethrough
        elif opener.count >= 2 and closer.count >= 2:
            use, kind = 2, Strong
        else:
            use, kind = 1, Emphasis

        opener.count -= use
        closer.count -= use
        opener.opens.append(kind)
        closer.closes.append(kind)

        # Openers between the pair are inside the new node and stay literal.
        for other in stacks.values():
            while other and other[-1] > opener_index:
                other.pop()
        if not opener.count:
            stack.pop()


def _finish(pieces: list[_Piece], location: SourceLocation) -> list[Node]:
    """Match delimiter runs, then build the nested nodes.

    Openers wait on one stack per delimiter character. Each closer only
    looks at its own stack, and a match drops every opener above its
    partner, so each run is pushed and popped at most once.
    """
    stacks: dict[str, list[int]] = {"*": [], "_": [], "~": []}
    for index, piece in enumerate(pieces):
        if not isinstance(piece, _Delimiter):
            continue
        if piece.can_close:
            _match_closer(pieces, stacks, piece)
        if piece.count and piece.can_open:
            stacks[piece.char].append(index)
    return _build(pieces, location)


def _build(pieces: list[_Piece], location: SourceLocation) -> list[Node]:
    # One frame per open emphasis node; frame 0 is the top level.
    frames: list[tuple[_EmphasisKind | None, list[Node | str]]] = [(None, [])]
    for piece in pieces:
        if not isinstance(piece, _Delimiter):
            frames[-1][1].append(piece)
            continue
        for _ in piece.closes:
            kind, parts = frames.pop()
            assert kind is not None
            frames[-1][1].append(kind(location=location, children=tuple(_merge_text(parts, location))))
        if piece.count:
            frames[-1][1].append(piece.char * piece.count)
        # Outermost node first: the last match used the outermost characters.
        for kind in reversed(piece.opens):
            frames.append((kind, []))
    return _merge_text(frames[0][1], location)


def _merge_text(parts: list[Node | str], location: SourceLocation) -> list[Node]:
    nodes: list[Node] = []
    pending: list[str] = []

    def flush() -> None:
        if pending:
            nodes.append(Text(location=location, content="".join(pending)))
            pending.clear()

    for part in parts:
        if isinstance(part, str):
            pending.append(part)
        else:
            flush()
            nodes.append(part)
    flush()
    return nodes


def plain_text(node: Node) -> str:
    """Concatenate the text content below ``node``."""
    parts: list[str] = []

    def visit(child: Node, entering: bool) -> WalkStatus:
        match child:
            case Text():
                parts.append(child.content)
            case CodeSpan():
                parts.append(child.code)
            case Image():
                parts.append(child.alt)
            case SoftBreak() | LineBreak():
                parts.append(" ")
        return WalkStatus.GO_TO_NEXT

    walk(node, visit)
    return "".join(parts)


def parse_inline(text: str, location: SourceLocation) -> tuple[Node, ...]:
    """Parse inline Markdown ``text`` into nodes located at ``location``."""
    return InlineParser(text, location).parse()


__all__ = ["MAX_LABEL_NESTING", "InlineParser", "parse_inline", "plain_text"]
