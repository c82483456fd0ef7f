"""Source location tracking for parse errors and AST nodes.

Thread Safety:
SourceLocation is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SourceLocation:
    """Position of a node in the preparsed source.

    Lines and columns are 1-indexed.

    Examples:
            >>> loc = SourceLocation(3, 1, source_file="guide.md")
            >>> str(loc)
            'guide.md:3:1'

    """

    lineno: int
    col_offset: int
    end_lineno: int | None = None
    source_file: str | None = None

    def __str__(self) -> str:
        if self.source_file:
            return f"{self.source_file}:{self.lineno}:{self.col_offset}"
        return f"{self.lineno}:{self.col_offset}"

    def through(self, end_lineno: int) -> SourceLocation:
        """Return a copy of this location ending on ``end_lineno``."""
        return SourceLocation(
            lineno=self.lineno,
            col_offset=self.col_offset,
            end_lineno=end_lineno,
            source_file=self.source_file,
        )
