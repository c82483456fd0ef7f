"""StringBuilder output sink.

Renderers write into a StringBuilder handed to them by the caller: the
render pipeline and the TOC synthesizer each own one per call. Appends
go to a list that is joined once at the end.

Thread Safety:
StringBuilder instances are local to each render call.

"""

from __future__ import annotations


class StringBuilder:
    """Append-only string accumulator.

    Usage:
            >>> sb = StringBuilder()
            >>> _ = sb.append("<li>").append("Intro").append("</li>")
            >>> sb.build()
            '<li>Intro</li>'

    """

    __slots__ = ("_parts", "_length")

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._length = 0

    def append(self, s: str) -> StringBuilder:
        """Append a string (empty strings are skipped).

        Returns:
            self for method chaining
        """
        if s:
            self._parts.append(s)
            self._length += len(s)
        return self

    def build(self) -> str:
        """Join all parts into the final string."""
        return "".join(self._parts)

    def __len__(self) -> int:
        """Total number of characters appended so far."""
        return self._length

    def __bool__(self) -> bool:
        return self._length > 0
