#!/usr/bin/env python3
"""
Run Configuration

RunConfig is passed explicitly to every run entry point; there is no
module-level mutable mode switch. from_env() resolves the configuration
from the process surface:

- DATADRIVEN_REWRITE=1 or a --rewrite flag on the command line
- DATADRIVEN_VERBOSE=1 or --datadriven-verbose
- DATADRIVEN_TRACE=<path> to write the run trace as JSONL
"""

import argparse
import os
import sys
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Sequence

from .diff import DEFAULT_MAX_LINES


ENV_REWRITE = "DATADRIVEN_REWRITE"
ENV_VERBOSE = "DATADRIVEN_VERBOSE"
ENV_TRACE = "DATADRIVEN_TRACE"

REWRITE_FLAG = "--rewrite"
VERBOSE_FLAG = "--datadriven-verbose"

_TRUE_VALUES = frozenset(["1", "true", "yes", "on"])


@dataclass(frozen=True)
class RunConfig:
    """
    Settings shared read-only by every fixture of a run.

    Attributes:
        rewrite: Replace mismatching expected sections instead of failing
        verbose: Echo every block and its output to stderr
        max_diff_lines: Cap per side for divergence summaries
        trace_path: Where to write the JSONL run trace, if anywhere
    """
    rewrite: bool = False
    verbose: bool = False
    max_diff_lines: int = DEFAULT_MAX_LINES
    trace_path: Optional[str] = None

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        argv: Optional[Sequence[str]] = None
    ) -> "RunConfig":
        """
        Build a configuration from environment variables and argv.

        Args:
            environ: Environment mapping (default os.environ)
            argv: Command-line arguments without the program name
                  (default sys.argv[1:]); unrelated arguments are ignored

        Returns:
            RunConfig with flags from either source enabled
        """
        environ = os.environ if environ is None else environ
        argv = sys.argv[1:] if argv is None else argv

        parser = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
        parser.add_argument(REWRITE_FLAG, action="store_true")
        parser.add_argument(VERBOSE_FLAG, action="store_true")
        flags, _ = parser.parse_known_args(list(argv))

        return cls(
            rewrite=flags.rewrite or _env_flag(environ.get(ENV_REWRITE)),
            verbose=flags.datadriven_verbose or _env_flag(environ.get(ENV_VERBOSE)),
            trace_path=environ.get(ENV_TRACE) or None
        )

    def with_rewrite(self, rewrite: bool = True) -> "RunConfig":
        return replace(self, rewrite=rewrite)


def _env_flag(value: Optional[str]) -> bool:
    if value is None:
        return False
    return value.strip().lower() in _TRUE_VALUES
