"""
Line scanner over fixture text.

Yields lines together with their 1-based line number and their character
offsets in the source, so that later stages can copy untouched regions of
the source through verbatim.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Line:
    """
    A single source line.

    Attributes:
        number: 1-based line number
        text: Line content without its terminator (a trailing CR is dropped)
        start: Offset of the first character of the line
        end: Offset just past the line terminator (or end of text)
        terminated: False only for a last line with no newline
    """
    number: int
    text: str
    start: int
    end: int
    terminated: bool = True

    def is_blank(self) -> bool:
        return self.text.strip() == ""


class LineScanner:
    """Sequential reader of Lines with one line of lookahead."""

    def __init__(self, text: str):
        self._text = text
        self._pos = 0
        self._number = 0
        self._peeked: Optional[Line] = None

    @property
    def text(self) -> str:
        return self._text

    def scan(self) -> Optional[Line]:
        """Return the next line, or None at end of text."""
        if self._peeked is not None:
            line, self._peeked = self._peeked, None
            return line
        return self._read()

    def peek(self) -> Optional[Line]:
        """Return the next line without consuming it."""
        if self._peeked is None:
            self._peeked = self._read()
        return self._peeked

    def _read(self) -> Optional[Line]:
        if self._pos >= len(self._text):
            return None

        start = self._pos
        newline = self._text.find('\n', start)
        if newline < 0:
            content_end = end = len(self._text)
        else:
            content_end, end = newline, newline + 1

        content = self._text[start:content_end]
        if content.endswith('\r'):
            content = content[:-1]

        self._pos = end
        self._number += 1
        return Line(
            number=self._number,
            text=content,
            start=start,
            end=end,
            terminated=newline >= 0
        )
