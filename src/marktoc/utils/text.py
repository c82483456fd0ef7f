"""Text helpers shared by the parser and the HTML renderer.

Example:
    >>> from marktoc.utils.text import slugify
    >>> slugify("Hello World!")
    'hello-world'
"""

from __future__ import annotations

import html as html_module
import re

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATOR_RUN = re.compile(r"[-\s]+")


def slugify(text: str, separator: str = "-") -> str:
    """Convert heading text to a URL fragment.

    HTML entities are decoded first, then anything that is not a word
    character, whitespace or hyphen is dropped.

    Examples:
        >>> slugify("Test &amp; Code")
        'test-code'
        >>> slugify("  Getting   Started ")
        'getting-started'
    """
    if not text:
        return ""

    text = html_module.unescape(text).lower().strip()
    text = _NON_WORD.sub("", text)
    text = _SEPARATOR_RUN.sub(separator, text)
    return text.strip(separator)


def escape_html(text: str) -> str:
    """Escape ``&``, ``<``, ``>`` and ``"`` for text and attribute content.

    Single quotes are left alone; every attribute we emit is double-quoted.

    Examples:
        >>> escape_html('<a href="x">')
        '&lt;a href=&quot;x&quot;&gt;'
    """
    if not text:
        return ""
    return html_module.escape(text, quote=False).replace('"', "&quot;")


def expand_tabs(line: str, tab_size: int = 4) -> str:
    """Expand leading tabs so indentation can be measured in columns."""
    if "\t" not in line:
        return line
    return line.expandtabs(tab_size)
