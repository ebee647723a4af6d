"""
Error types raised while scanning and running fixtures.

Propagation:
- ParseError / FixtureSyntaxError: fatal to the current fixture
- BlockFatal: aborts the current block only
- BlockSkipped: aborts the remaining blocks of the current fixture
- OSError from fixture I/O is not wrapped and aborts the whole run
"""

from typing import Optional


class DataDrivenError(Exception):
    """Base class for all harness errors."""
    pass


class ParseError(DataDrivenError):
    """
    Raised when a directive line cannot be tokenized.

    Attributes:
        column: 1-based column of the first unparseable character
        line: The directive line as given
    """

    def __init__(self, column: int, line: str):
        self.column = column
        self.line = line
        super().__init__(f"cannot parse directive at column {column}: {line}")


class FixtureSyntaxError(DataDrivenError):
    """
    Raised when the structure of a fixture is ambiguous or malformed.

    The fixture is abandoned at this point; blocks after the error are
    never run.
    """

    def __init__(self, pos: str, message: str, column: Optional[int] = None):
        self.pos = pos
        self.column = column
        self.message = message
        super().__init__(f"{pos}: {message}")


class BlockFatal(DataDrivenError):
    """Raised by Scope.fatal to abort the current block."""
    pass


class BlockSkipped(DataDrivenError):
    """Raised by Scope.skip to abort the rest of the current fixture."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)
