"""Exception classes for marktoc.

Preprocessing and walking never raise on their own; these cover the
parser, the HTML renderer and the TOC level-stack bookkeeping.
"""

from __future__ import annotations


class MarktocError(Exception):
    """Base exception for all marktoc errors."""

    pass


class ParseError(MarktocError):
    """Error during Markdown parsing.

    Raised when the parser is handed input it cannot turn into a tree.
    """

    def __init__(
        self,
        message: str,
        lineno: int | None = None,
        col_offset: int | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize parse error with optional location.

        Args:
            message: Error description
            lineno: Line number where error occurred (1-indexed)
            col_offset: Column offset where error occurred (1-indexed)
            source_file: Path to source file (optional)
        """
        self.message = message
        self.lineno = lineno
        self.col_offset = col_offset
        self.source_file = source_file

        location = ""
        if source_file:
            location = f"{source_file}:"
        if lineno is not None:
            location += f"{lineno}:"
            if col_offset is not None:
                location += f"{col_offset}:"
        if location:
            location = location.rstrip(":") + " "

        super().__init__(f"{location}{message}")


class RenderError(MarktocError):
    """Error during HTML rendering.

    Raised when the renderer meets a node kind it has no markup for.
    """

    pass


class TocError(MarktocError):
    """Error while laying out the table of contents.

    Raised when the open-list count would drop below zero, i.e. the
    emitted nesting could no longer be balanced.
    """

    def __init__(self, message: str, level: int | None = None) -> None:
        self.level = level
        super().__init__(message)
