"""
datadriven - directive-driven golden-file tests

Fixtures are text files holding a sequence of test cases:

    # comment
    directive key=value key=(a, b) flag
    input
    ----
    expected output

Each case is handed to a handler; its output is compared with the expected
section, or written back into the fixture in rewrite mode.
"""

from .block import Block
from .config import RunConfig
from .diff import find_divergence, summarize_divergence
from .driver import Handler, run_file, run_fixture, run_path, walk
from .errors import (
    BlockFatal,
    BlockSkipped,
    DataDrivenError,
    FixtureSyntaxError,
    ParseError,
)
from .line_parser import CmdArg, parse_line
from .reader import FixtureReader, SEPARATOR, read_blocks
from .rewrite import Rewriter, normalize_output
from .scope import Scope
from .trace import RunTrace
from .unittest_support import report, run_test, run_test_from_string

__all__ = [
    # Parsing
    'CmdArg',
    'parse_line',
    'Block',
    'FixtureReader',
    'read_blocks',
    'SEPARATOR',
    # Running
    'Handler',
    'Scope',
    'RunConfig',
    'run_fixture',
    'run_file',
    'run_path',
    'walk',
    'run_test',
    'run_test_from_string',
    'report',
    # Rewriting and reporting
    'Rewriter',
    'normalize_output',
    'find_divergence',
    'summarize_divergence',
    'RunTrace',
    # Errors
    'DataDrivenError',
    'ParseError',
    'FixtureSyntaxError',
    'BlockFatal',
    'BlockSkipped',
]
