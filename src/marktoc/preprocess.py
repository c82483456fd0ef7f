"""Source normalization applied before parsing.

Line endings are folded to ``\\n`` and a leading ``[TOC]`` marker is cut
off together with everything before it. The marker is what asks for a
table of contents; see :func:`has_toc_marker`.

Example:
    >>> preparse("[TOC]\\nHello")
    'Hello'
    >>> preparse("a\\r\\nb\\rc")
    'a\\nb\\nc'

"""

from __future__ import annotations

import re

# First occurrence only; the optional newline belongs to the marker.
TOC_MARKER: re.Pattern[str] = re.compile(r"\[TOC\]\n?")


def _as_text(source: str | bytes) -> str:
    if isinstance(source, bytes):
        return source.decode("utf-8")
    return source


def normalize_newlines(source: str) -> str:
    """Replace ``\\r\\n`` pairs, then lone ``\\r``, with ``\\n``."""
    return source.replace("\r\n", "\n").replace("\r", "\n")


def preparse(source: str | bytes) -> str:
    """Normalize raw Markdown before it reaches the parser.

    Never fails: a missing marker leaves the text as-is apart from
    line-ending normalization.

    Args:
        source: Raw Markdown text, or UTF-8 bytes

    Returns:
        Normalized text with everything through the first ``[TOC]`` removed
    """
    text = normalize_newlines(_as_text(source))
    match = TOC_MARKER.search(text)
    if match is not None:
        text = text[match.end() :]
    return text


def has_toc_marker(source: str | bytes) -> bool:
    """Return True when the source asks for a table of contents."""
    return TOC_MARKER.search(_as_text(source)) is not None


__all__ = ["TOC_MARKER", "has_toc_marker", "normalize_newlines", "preparse"]
