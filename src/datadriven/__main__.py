#!/usr/bin/env python3
"""
Command-line runner.

Usage:
    python -m datadriven --handler mypkg.handlers:handle testdata/
    python -m datadriven --handler mypkg.handlers:handle --rewrite testdata/

Exit codes:
    0: every fixture passed (or was rewritten)
    1: at least one fixture failed
    2: usage error (bad handler reference, missing path)
"""

import argparse
import importlib
import os
import sys
from typing import List, Optional

from .config import RunConfig
from .driver import Handler, run_path
from .scope import Scope
from .trace import RunTrace


EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


class HandlerLoadError(Exception):
    """Raised when a module:function handler reference cannot be resolved."""
    pass


def load_handler(reference: str) -> Handler:
    """
    Resolve a "module:function" reference to a callable.

    Raises:
        HandlerLoadError: If the reference is malformed or cannot be imported
    """
    module_name, sep, attr = reference.partition(':')
    if not sep or not module_name or not attr:
        raise HandlerLoadError(f"handler must be module:function, got {reference!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise HandlerLoadError(f"cannot import {module_name}: {e}") from e

    handler = getattr(module, attr, None)
    if not callable(handler):
        raise HandlerLoadError(f"{module_name} has no callable {attr!r}")
    return handler


def print_failures(root: Scope, verbose: bool = False, output=sys.stderr) -> None:
    """
    Print every failure and skip recorded under `root`.

    Log messages are printed with the failures of their scope, and for
    passing scopes too when verbose.
    """
    for scope in root.walk():
        if scope.failures:
            status = "FAIL"
        elif verbose and scope.logs:
            status = "PASS"
        else:
            status = None

        if status:
            print(f"--- {status}: {scope.full_name}", file=output)
            for message in scope.output:
                print(message.lstrip("\n"), file=output)
        if scope.skipped:
            print(f"--- SKIP: {scope.full_name}: {scope.skip_reason}", file=output)


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m datadriven",
        description="Run directive-driven golden-file fixtures"
    )
    parser.add_argument("paths", nargs="+", help="Fixture files or directories")
    parser.add_argument("--handler", required=True, help="Handler as module:function")
    parser.add_argument("--rewrite", action="store_true",
                        help="Rewrite mismatching expected sections in place")
    parser.add_argument("--verbose", action="store_true", help="Echo every block")
    parser.add_argument("--trace", help="Write the run trace as JSONL to this file")
    parser.add_argument("--max-diff-lines", type=int, default=None,
                        help="Lines shown per side in divergence summaries")

    args = parser.parse_args(argv)

    env_config = RunConfig.from_env(argv=[])
    config = RunConfig(
        rewrite=args.rewrite or env_config.rewrite,
        verbose=args.verbose or env_config.verbose,
        max_diff_lines=(
            env_config.max_diff_lines if args.max_diff_lines is None else args.max_diff_lines
        ),
        trace_path=args.trace or env_config.trace_path
    )

    try:
        handler = load_handler(args.handler)
    except HandlerLoadError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE

    missing = [path for path in args.paths if not os.path.exists(path)]
    if missing:
        print(f"ERROR: no such fixture: {', '.join(missing)}", file=sys.stderr)
        return EXIT_USAGE

    root = Scope()
    trace = RunTrace()
    for path in args.paths:
        run_path(root.child(path), path, handler, config, trace)

    if config.trace_path:
        trace.write(config.trace_path)

    print_failures(root, verbose=config.verbose)
    trace.print_summary()

    return EXIT_FAILED if root.failed else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
