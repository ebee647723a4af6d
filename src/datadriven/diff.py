"""
Divergence summary for large text mismatches.

Common leading and trailing lines are trimmed so that only the diverging
region is shown; each side is capped at max_lines with a "..." marker.
"""

from dataclasses import dataclass
from typing import List, Optional


DEFAULT_MAX_LINES = 10
ELLIPSIS = "..."


@dataclass(frozen=True)
class Divergence:
    """
    The region where two texts differ.

    Attributes:
        line_number: 1-based line of the first differing line
        expected: Differing lines of the expected text
        actual: Differing lines of the actual text
    """
    line_number: int
    expected: List[str]
    actual: List[str]

    def format(self, source_name: str, max_lines: int = DEFAULT_MAX_LINES) -> str:
        return (
            f"{source_name}:{self.line_number} expected:\n"
            f"{_lines_to_str(self.expected, max_lines)}"
            f"  got:\n"
            f"{_lines_to_str(self.actual, max_lines)}"
        )


def find_divergence(expected: str, actual: str) -> Optional[Divergence]:
    """
    Locate the diverging region of two texts.

    Returns:
        None if the texts are equal, otherwise a Divergence.
    """
    if expected == actual:
        return None

    lines_expected = expected.split("\n")
    lines_actual = actual.split("\n")

    head = 0
    while (head < len(lines_expected) and head < len(lines_actual)
           and lines_expected[head] == lines_actual[head]):
        head += 1

    tail = 0
    while (tail < len(lines_expected) - head and tail < len(lines_actual) - head
           and lines_expected[-1 - tail] == lines_actual[-1 - tail]):
        tail += 1

    return Divergence(
        line_number=head + 1,
        expected=lines_expected[head:len(lines_expected) - tail],
        actual=lines_actual[head:len(lines_actual) - tail]
    )


def summarize_divergence(
    source_name: str,
    expected: str,
    actual: str,
    max_lines: int = DEFAULT_MAX_LINES
) -> Optional[str]:
    """Format the diverging region of two texts, or None if they are equal."""
    divergence = find_divergence(expected, actual)
    if divergence is None:
        return None
    return divergence.format(source_name, max_lines)


def _lines_to_str(lines: List[str], max_lines: int) -> str:
    shown = "".join(f"{line}\n" for line in lines[:max_lines])
    if len(lines) > max_lines:
        shown += ELLIPSIS + "\n"
    return shown
