#!/usr/bin/env python3
"""
Directive Line Parser

Tokenizes a single directive line into a command name and an ordered list
of arguments:

    make argTuple=(1, 2) argInt=12 flag moreIgnore=

- The first token is the command (any run of non-whitespace characters)
- Each following token is a key, optionally followed by `=value` or by
  `=(v1, v2, ...)`
- Tuple elements are split on commas and whitespace-trimmed
- Values are kept verbatim; nothing is unescaped or re-encoded

Guarantees:
- Pure: the same line always yields the same result or the same error
- Errors carry the 1-based column of the first unparseable character
"""

import re
from dataclasses import dataclass
from typing import List, Tuple

from .errors import ParseError


_COMMAND_RE = re.compile(r'\S+')

# key, key=value, key=(v1, v2, ...); each must end at whitespace or EOL
_ARGUMENT_RE = re.compile(r'[\w/,.\-]+(?:=\([^)]*\)|=[^\s()]*)?(?=\s|$)')

_SPACE_RE = re.compile(r'\s*')


@dataclass(frozen=True)
class CmdArg:
    """
    One argument of a directive.

    Attributes:
        key: Argument name
        vals: Empty for a bare flag, one element for key=value,
              several for key=(v1, v2, ...)
    """
    key: str
    vals: Tuple[str, ...] = ()

    def __str__(self) -> str:
        if not self.vals:
            return self.key
        if len(self.vals) == 1:
            return f"{self.key}={self.vals[0]}"
        return f"{self.key}=({', '.join(self.vals)})"


def parse_line(line: str) -> Tuple[str, List[CmdArg]]:
    """
    Parse a directive line.

    Args:
        line: One line of text, without its line terminator

    Returns:
        Tuple of (command, arguments) with arguments in source order,
        duplicates included.

    Raises:
        ParseError: If the line is blank or a token is malformed
    """
    fields = _split_directives(line)
    if not fields:
        raise ParseError(1, line)

    cmd_args = [_parse_argument(field) for field in fields[1:]]
    return fields[0], cmd_args


def _split_directives(line: str) -> List[str]:
    """Split a line into its command and argument tokens."""
    fields = []
    pattern = _COMMAND_RE
    pos = _SPACE_RE.match(line).end()

    while pos < len(line):
        match = pattern.match(line, pos)
        if match is None:
            raise ParseError(pos + 1, line)
        fields.append(match.group(0))
        pos = _SPACE_RE.match(line, match.end()).end()
        pattern = _ARGUMENT_RE

    return fields


def _parse_argument(field: str) -> CmdArg:
    """Convert one already-validated argument token into a CmdArg."""
    key, sep, val = field.partition('=')
    if not sep:
        return CmdArg(key)

    if val.startswith('(') and val.endswith(')'):
        elements = val[1:-1].split(',')
        return CmdArg(key, tuple(element.strip() for element in elements))

    return CmdArg(key, (val,))
