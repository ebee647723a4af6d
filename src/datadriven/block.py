#!/usr/bin/env python3
"""
Blocks and Argument Access

A Block is one parsed test case of a fixture: the directive, its input,
its expected output and where it came from. Blocks are immutable; the
reader creates them in file order and the driver consumes each one once.

Argument access follows two rules:
- Duplicate keys are all retained, but lookups resolve to the FIRST one
- Extraction failures fail the current block through the scope, never
  the whole run
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

from .line_parser import CmdArg


# Accepted spellings for boolean argument values
_BOOL_VALUES = {
    "1": True, "t": True, "T": True, "true": True, "TRUE": True, "True": True,
    "0": False, "f": False, "F": False, "false": False, "FALSE": False, "False": False,
}


@dataclass(frozen=True)
class Block:
    """
    One test case.

    Attributes:
        pos: "<source>:<line>" of the directive line, for diagnostics
        cmd: Command name (never empty)
        cmd_args: Arguments in source order, duplicates included
        input: Lines between directive and separator joined with "\\n"
        expected: Expected output, every line newline-terminated
        line: 1-based line number of the directive
        expected_span: (start, end) offsets of the expected section in the
                       source text, consumed by the rewriter
    """
    pos: str
    cmd: str
    cmd_args: Tuple[CmdArg, ...] = ()
    input: str = ""
    expected: str = ""
    line: int = 0
    expected_span: Tuple[int, int] = (0, 0)

    def arg(self, key: str) -> Optional[CmdArg]:
        """Return the first argument named `key`, or None."""
        for cmd_arg in self.cmd_args:
            if cmd_arg.key == key:
                return cmd_arg
        return None

    def has_arg(self, key: str) -> bool:
        """
        Check whether an argument is present.

        Matches either an argument's key or its full rendering
        (e.g. "a=b", "c=(1, 2)"). Never fails.
        """
        for cmd_arg in self.cmd_args:
            if cmd_arg.key == key or str(cmd_arg) == key:
                return True
        return False

    def scan_args(self, t, key: str, *types: Callable[[str], Any]) -> Any:
        """
        Extract and convert the values of the first argument named `key`.

        Args:
            t: Scope of the running fixture; failures are reported through it
            key: Argument name
            *types: One converter per expected value: int, float, bool, str,
                    or any callable taking the raw string

        Returns:
            The converted value when one converter is given, otherwise a
            tuple of converted values in positional order.

        Failure (reported via t.fatal, aborting the current block):
            - No argument named `key`
            - Value count differs from the number of converters
            - A converter rejects its value

        Usage:
            one, banana = d.scan_args(t, "argTuple", int, str)
            twelve = d.scan_args(t, "argInt", int)
        """
        cmd_arg = self.arg(key)
        if cmd_arg is None:
            t.fatalf("%s: %s: missing argument: %s", self.pos, self.cmd, key)

        if len(cmd_arg.vals) != len(types):
            t.fatalf(
                "%s: %s: argument %s has %d value(s), expected %d",
                self.pos, self.cmd, key, len(cmd_arg.vals), len(types)
            )

        values = []
        for index, (raw, convert) in enumerate(zip(cmd_arg.vals, types)):
            try:
                values.append(_convert(raw, convert))
            except (TypeError, ValueError) as e:
                t.fatalf(
                    "%s: %s: argument %s value %d (%r): %s",
                    self.pos, self.cmd, key, index, raw, e
                )

        if len(values) == 1:
            return values[0]
        return tuple(values)


def _convert(raw: str, convert: Callable[[str], Any]) -> Any:
    """Convert one raw argument value."""
    if convert is str:
        return raw
    if convert is bool:
        if raw not in _BOOL_VALUES:
            raise ValueError(f"invalid boolean {raw!r}")
        return _BOOL_VALUES[raw]
    return convert(raw)
