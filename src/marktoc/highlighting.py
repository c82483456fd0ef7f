"""Optional syntax highlighting for fenced code blocks.

When ``marktoc[syntax]`` is installed, Rosettes is picked up automatically.
Any other highlighter can be injected with :func:`set_highlighter`.

Usage:
    from marktoc.highlighting import set_highlighter

    def my_highlighter(code: str, language: str) -> str:
        return f'<pre class="language-{language}"><code>{code}</code></pre>'

    set_highlighter(my_highlighter)
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from marktoc.utils.logger import get_logger

logger = get_logger(__name__)


class Highlighter(Protocol):
    """Protocol for syntax highlighters.

    Contract:
        - MUST return complete HTML for the block (``<pre>`` included)
        - MUST escape HTML entities in code
        - SHOULD fall back to plain text for unknown languages

    """

    def highlight(self, code: str, language: str) -> str: ...

    def supports_language(self, language: str) -> bool: ...


# Support for simple callable-based highlighters
SimpleHighlighter = Callable[[str, str], str]

_highlighter: Highlighter | SimpleHighlighter | None = None
_tried_rosettes: bool = False


def set_highlighter(highlighter: Highlighter | SimpleHighlighter | None) -> None:
    """Set the global syntax highlighter (None clears it)."""
    global _highlighter
    _highlighter = highlighter


def _try_import_rosettes() -> bool:
    """Try to import and configure the Rosettes highlighter."""
    global _highlighter, _tried_rosettes
    if _tried_rosettes:
        return _highlighter is not None
    _tried_rosettes = True
    try:
        import rosettes  # type: ignore[import-not-found]
    except ImportError:
        return False

    class RosettesHighlighter:
        """Rosettes-based highlighter implementing the Highlighter protocol."""

        def highlight(self, code: str, language: str) -> str:
            result: str = rosettes.highlight(code, language=language)
            return result

        def supports_language(self, language: str) -> bool:
            result: bool = rosettes.supports_language(language)
            return result

    _highlighter = RosettesHighlighter()
    logger.debug("Using Rosettes for syntax highlighting")
    return True


def get_highlighter() -> Highlighter | SimpleHighlighter | None:
    """Return the configured highlighter, loading Rosettes on first use."""
    if _highlighter is None:
        _try_import_rosettes()
    return _highlighter


def highlight(code: str, language: str) -> str | None:
    """Highlight ``code`` with the configured highlighter.

    Returns:
        Highlighted HTML, or None when no highlighter is available or the
        highlighter does not know ``language``
    """
    highlighter = get_highlighter()
    if highlighter is None:
        return None
    if hasattr(highlighter, "highlight") and callable(highlighter.highlight):
        if not highlighter.supports_language(language):
            return None
        return highlighter.highlight(code, language)
    return highlighter(code, language)
