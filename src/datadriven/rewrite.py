#!/usr/bin/env python3
"""
Fixture Rewriter

Rebuilds fixture text with the expected sections of mismatching blocks
replaced by actual output. Every other character of the source (comments,
directives, inputs, separators, blank lines, passing blocks) is copied
through verbatim, so a rewrite produces the minimal diff.

Comparison only trims output (see trim_output). Newly written expected
text is normalized further (see normalize_output):
- Runs of blank lines collapse to exactly one blank line
- Trailing blank lines are dropped; non-empty output ends with a newline
- Empty output produces an empty expected section

In both, a CR before a newline is dropped, as the reader does.

Output containing a blank line is written in the double-separator form so
that reading the fixture back yields the same expected text. Output that
no form can hold (see can_render) is never written.

The rewritten text is assembled completely in memory; write_atomic()
replaces the file in one step, so no partial fixture is ever visible.
"""

import os
import stat
from dataclasses import dataclass
from typing import List

from .block import Block
from .reader import SEPARATOR


@dataclass(frozen=True)
class RewriteSpan:
    """
    A region of the source text to replace.

    Attributes:
        start: Offset of the first replaced character
        end: Offset just past the last replaced character
        replacement: Text written in place of source[start:end]
    """
    start: int
    end: int
    replacement: str


def _output_lines(output: str) -> List[str]:
    """Split output into lines as the reader does; a trailing CR is not content."""
    return [line[:-1] if line.endswith("\r") else line for line in output.split("\n")]


def trim_output(output: str) -> str:
    """
    Prepare handler output for comparison with an expected section.

    Returns:
        "" for empty (or whitespace-only) output, otherwise the output with
        trailing blank lines removed and a single final newline. Nothing
        else is changed.
    """
    lines = _output_lines(output)
    while lines and lines[-1].strip() == "":
        lines.pop()
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def normalize_output(output: str) -> str:
    """
    Normalize handler output for writing into a fixture.

    Args:
        output: Raw handler output

    Returns:
        "" for empty (or whitespace-only) output, otherwise the output with
        blank-line runs collapsed, trailing blank lines removed and a single
        final newline.
    """
    lines: List[str] = []
    for line in _output_lines(output):
        if line.strip() == "":
            if lines and lines[-1] == "":
                continue
            lines.append("")
        else:
            lines.append(line)

    while lines and lines[-1] == "":
        lines.pop()
    if not lines:
        return ""
    return "\n".join(lines) + "\n"


def needs_double_separator(expected: str) -> bool:
    """True if `expected` cannot be written as a plain expected section."""
    lines = expected.split("\n")[:-1]
    if not lines:
        return False
    return lines[0] == SEPARATOR or any(line == "" for line in lines)


def can_render(expected: str) -> bool:
    """
    True if `expected` reads back unchanged once written into a fixture.

    A double-separated section ends at the first ----/---- line pair, so
    its content may neither hold such a pair nor end with a ---- line.
    """
    if not needs_double_separator(expected):
        return True
    lines = expected.split("\n")[:-1]
    if lines[-1] == SEPARATOR:
        return False
    return not any(
        first == SEPARATOR and second == SEPARATOR
        for first, second in zip(lines, lines[1:])
    )


_CLOSING = f"{SEPARATOR}\n{SEPARATOR}\n"


def render_expected(expected: str) -> str:
    """Render normalized output as the text of an expected section."""
    if needs_double_separator(expected):
        return f"{SEPARATOR}\n{expected}{_CLOSING}"
    return expected


class Rewriter:
    """
    Collects replacements for one fixture and renders the new text.

    Usage:
        rewriter = Rewriter(text)
        rewriter.replace_expected(block, normalize_output(actual))
        new_text = rewriter.render()
    """

    def __init__(self, source: str):
        """
        Initialize the rewriter.

        Args:
            source: The original fixture text the blocks were read from
        """
        self._source = source
        self._spans: List[RewriteSpan] = []

    @property
    def replaced(self) -> int:
        """Number of expected sections scheduled for replacement."""
        return len(self._spans)

    def replace_expected(self, block: Block, expected: str) -> None:
        """
        Schedule the expected section of `block` to be replaced.

        Args:
            block: A block read from this rewriter's source
            expected: Normalized output (see normalize_output)
        """
        start, end = block.expected_span
        self._spans.append(RewriteSpan(start, end, render_expected(expected)))

    def render(self) -> str:
        """Return the source with every scheduled replacement applied."""
        parts = []
        pos = 0
        for span in sorted(self._spans, key=lambda s: s.start):
            parts.append(self._source[pos:span.start])
            replacement = span.replacement
            # A separator on the last line may lack its newline.
            if replacement and span.start > 0 and self._source[span.start - 1] != "\n":
                replacement = "\n" + replacement
            # A plain section must be ended by a blank line when the replaced
            # section was closed by a separator pair with a directive right after.
            if not replacement.endswith(_CLOSING) and self._directive_follows(span.end):
                replacement += "\n"
            parts.append(replacement)
            pos = span.end
        parts.append(self._source[pos:])
        return "".join(parts)

    def _directive_follows(self, pos: int) -> bool:
        """True if the line starting at `pos` exists and is not blank."""
        newline = self._source.find("\n", pos)
        line = self._source[pos:] if newline < 0 else self._source[pos:newline]
        return line.strip() != ""


def read_fixture(path: str) -> str:
    """Read fixture text exactly as stored (no newline translation)."""
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()


def write_atomic(path: str, text: str) -> None:
    """
    Replace the file at `path` with `text` in a single step.

    The text goes to a hidden temporary file next to `path`, which is
    flushed, synced and then renamed over the original. An existing file
    keeps its permission bits.
    """
    directory, name = os.path.split(os.path.abspath(path))
    tmp_path = os.path.join(directory, f".{name}.tmp")
    try:
        with open(tmp_path, 'w', encoding='utf-8', newline='') as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if os.path.exists(path):
            os.chmod(tmp_path, stat.S_IMODE(os.stat(path).st_mode))
        os.replace(tmp_path, path)
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
