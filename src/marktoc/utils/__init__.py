"""Utility modules for marktoc.

Provides:
- text: slugify, escape_html, expand_tabs
- logger: get_logger for logging
"""

from marktoc.utils.logger import get_logger
from marktoc.utils.text import escape_html, expand_tabs, slugify

__all__ = [
    "escape_html",
    "expand_tabs",
    "get_logger",
    "slugify",
]
