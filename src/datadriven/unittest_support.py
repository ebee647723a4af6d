#!/usr/bin/env python3
"""
unittest Integration

Entry points for running fixtures from a unittest.TestCase. The run itself
happens on a Scope tree; once it finishes, every scope with failures or a
skip is reported to the TestCase:

- the root scope reports directly on the test
- every nested scope reports inside tc.subTest(path=<relative path>), so a
  failing fixture file never hides its siblings

Usage:
    class TestParser(unittest.TestCase):
        def test_fixtures(self):
            run_test(self, "testdata/parser", handle)

The rewrite mode comes from RunConfig.from_env() unless a config is given:

    DATADRIVEN_REWRITE=1 python -m unittest tests.test_parser
"""

import unittest
from typing import Optional

from .config import RunConfig
from .driver import Handler, run_fixture, run_path
from .scope import Scope
from .trace import RunTrace


STRING_SOURCE_NAME = "<string>"


def run_test(
    tc: unittest.TestCase,
    path: str,
    handler: Handler,
    config: Optional[RunConfig] = None
) -> Scope:
    """
    Run a fixture file, or every fixture below a directory.

    In rewrite mode each fixture file is rewritten in place once all of its
    blocks have run.

    Args:
        tc: The running test
        path: Fixture file or directory
        handler: Directive handler
        config: Run configuration (default RunConfig.from_env())

    Returns:
        The root Scope of the run, after it has been reported to `tc`.
    """
    config = config or RunConfig.from_env()
    root = Scope()
    trace = RunTrace()

    run_path(root, path, handler, config, trace)

    if config.trace_path:
        trace.write(config.trace_path)
    report(tc, root)
    return root


def run_test_from_string(
    tc: unittest.TestCase,
    text: str,
    handler: Handler,
    config: Optional[RunConfig] = None
) -> Optional[str]:
    """
    Run a fixture held in memory.

    Returns:
        The rewritten fixture text in rewrite mode, otherwise None.
    """
    config = config or RunConfig.from_env()
    root = Scope()

    new_text = run_fixture(root, STRING_SOURCE_NAME, text, handler, config)

    report(tc, root)
    return new_text


def report(tc: unittest.TestCase, root: Scope) -> None:
    """Report failures and skips of a finished Scope tree to `tc`."""
    for scope in root.walk():
        if not scope.failures and not scope.skipped:
            continue
        if scope is root:
            _report_scope(tc, scope)
        else:
            with tc.subTest(path=scope.full_name):
                _report_scope(tc, scope)


def _report_scope(tc: unittest.TestCase, scope: Scope) -> None:
    if scope.failures:
        tc.fail("\n".join(scope.output))
    tc.skipTest(scope.skip_reason or "skipped")
