#!/usr/bin/env python3
"""
Fixture Reader

Splits fixture text into Blocks. Grammar, applied top to bottom:

    # comment lines (only before a directive)
    directive key=value key=(a, b) flag
    input lines (zero or more)
    ----
    expected lines, ended by a blank line or end of file

Any number of blank lines between blocks is equivalent to one. An expected
section that must itself contain blank lines uses the double-separator form:

    directive
    ----
    ----
    first paragraph

    second paragraph
    ----
    ----

The closing ----/---- pair ends the block by itself; the next directive
may follow it directly.

Failure model:
- A malformed directive or a missing separator raises FixtureSyntaxError;
  the structure is ambiguous past that point, so the fixture is abandoned
"""

from typing import Iterator, List, Optional, Tuple

from .block import Block
from .errors import FixtureSyntaxError, ParseError
from .line_parser import parse_line
from .line_scanner import Line, LineScanner


SEPARATOR = "----"
COMMENT_PREFIX = "#"


class FixtureReader:
    """
    Iterates the Blocks of one fixture in file order.

    Usage:
        for block in FixtureReader("testdata/basic", text):
            ...
    """

    def __init__(self, source_name: str, text: str):
        """
        Initialize the reader.

        Args:
            source_name: Name used in block positions ("<source>:<line>")
            text: Complete fixture text
        """
        self.source_name = source_name
        self._scanner = LineScanner(text)

    def __iter__(self) -> Iterator[Block]:
        while True:
            block = self.next_block()
            if block is None:
                return
            yield block

    def next_block(self) -> Optional[Block]:
        """
        Read the next Block.

        Returns:
            The next Block, or None at end of fixture.

        Raises:
            FixtureSyntaxError: On a malformed directive or block structure
        """
        while True:
            line = self._scanner.scan()
            if line is None:
                return None
            stripped = line.text.strip()
            if not stripped or stripped.startswith(COMMENT_PREFIX):
                continue
            return self._read_block(line)

    def _pos(self, line: Line) -> str:
        return f"{self.source_name}:{line.number}"

    def _read_block(self, directive: Line) -> Block:
        pos = self._pos(directive)
        try:
            cmd, cmd_args = parse_line(directive.text)
        except ParseError as e:
            raise FixtureSyntaxError(pos, str(e), column=e.column) from e

        input_lines: List[str] = []
        while True:
            line = self._scanner.scan()
            if line is None:
                raise FixtureSyntaxError(
                    pos, f"missing separator {SEPARATOR!r} after directive {cmd!r}"
                )
            if line.text == SEPARATOR:
                break
            input_lines.append(line.text)

        expected, span = self._read_expected(pos, line)

        return Block(
            pos=pos,
            cmd=cmd,
            cmd_args=tuple(cmd_args),
            input="\n".join(input_lines),
            expected=expected,
            line=directive.number,
            expected_span=span
        )

    def _read_expected(self, pos: str, separator: Line) -> Tuple[str, Tuple[int, int]]:
        """Read the expected section following a separator line."""
        start = end = separator.end

        first = self._scanner.peek()
        if first is not None and first.text == SEPARATOR:
            return self._read_double_separated(pos, start)

        lines = []
        while True:
            line = self._scanner.peek()
            if line is None or line.is_blank():
                break
            self._scanner.scan()
            lines.append(line.text + "\n")
            end = line.end

        return "".join(lines), (start, end)

    def _read_double_separated(self, pos: str, start: int) -> Tuple[str, Tuple[int, int]]:
        """Read an expected section that runs until a ----/---- line pair."""
        self._scanner.scan()

        lines = []
        while True:
            line = self._scanner.scan()
            if line is None:
                raise FixtureSyntaxError(
                    pos, f"unterminated {SEPARATOR}/{SEPARATOR} expected section"
                )
            if line.text == SEPARATOR:
                closing = self._scanner.peek()
                if closing is not None and closing.text == SEPARATOR:
                    self._scanner.scan()
                    break
            lines.append(line.text + "\n")

        return "".join(lines), (start, closing.end)


def read_blocks(source_name: str, text: str) -> List[Block]:
    """Read every Block of a fixture into a list."""
    return list(FixtureReader(source_name, text))
