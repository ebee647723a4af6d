#!/usr/bin/env python3
"""
Directive Line Parser Tests

Tests cover:
- Literal parse scenarios (duplicates, tuples)
- Column accuracy of parse errors
- Determinism: same line yields the same result or the same error
- Unicode values pass through verbatim
- The parser exercised through a fixture of its own
"""

import os
import sys
import unittest

_SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
_REPO_ROOT = os.path.dirname(os.path.dirname(_SCRIPT_DIR))
sys.path.insert(0, os.path.join(_REPO_ROOT, 'src'))

from datadriven import CmdArg, ParseError, parse_line, run_test_from_string
from datadriven.config import RunConfig


def format_parse(cmd, cmd_args) -> str:
    return f'"{cmd}" [{" ".join(str(arg) for arg in cmd_args)}]'


class TestLiteralScenarios(unittest.TestCase):
    """Known lines and their parses."""

    def test_duplicate_keys_preserved_in_order(self):
        cmd, cmd_args = parse_line("xx a=b a=c")
        self.assertEqual(cmd, "xx")
        self.assertEqual(cmd_args, [CmdArg("a", ("b",)), CmdArg("a", ("c",))])

    def test_tuple_argument(self):
        cmd, cmd_args = parse_line("xx a=b b=c c=(1,2,3)")
        self.assertEqual(cmd, "xx")
        self.assertEqual(cmd_args, [
            CmdArg("a", ("b",)),
            CmdArg("b", ("c",)),
            CmdArg("c", ("1", "2", "3")),
        ])
        self.assertEqual(format_parse(cmd, cmd_args), '"xx" [a=b b=c c=(1, 2, 3)]')

    def test_command_only(self):
        self.assertEqual(parse_line("noop"), ("noop", []))

    def test_bare_flag_has_no_values(self):
        _, cmd_args = parse_line("make verbose")
        self.assertEqual(cmd_args, [CmdArg("verbose")])
        self.assertEqual(cmd_args[0].vals, ())

    def test_empty_value(self):
        _, cmd_args = parse_line("make moreIgnore=")
        self.assertEqual(cmd_args, [CmdArg("moreIgnore", ("",))])

    def test_tuple_elements_trimmed(self):
        _, cmd_args = parse_line("make t=(  1 ,two,   three  )")
        self.assertEqual(cmd_args[0].vals, ("1", "two", "three"))

    def test_comma_key_and_value(self):
        _, cmd_args = parse_line("make argString=greedily,impatient a,b,c")
        self.assertEqual(cmd_args, [
            CmdArg("argString", ("greedily,impatient",)),
            CmdArg("a,b,c"),
        ])

    def test_tabs_and_extra_spaces_separate_tokens(self):
        cmd, cmd_args = parse_line("  make\ta=1    b=2  ")
        self.assertEqual(cmd, "make")
        self.assertEqual(cmd_args, [CmdArg("a", ("1",)), CmdArg("b", ("2",))])


class TestUnicode(unittest.TestCase):
    """Non-ASCII text is never re-escaped."""

    def test_unicode_in_tuple(self):
        _, cmd_args = parse_line("make argTuple=(1, 🍌)")
        self.assertEqual(cmd_args[0].vals, ("1", "🍌"))
        self.assertEqual(str(cmd_args[0]), "argTuple=(1, 🍌)")

    def test_unicode_value_and_key(self):
        _, cmd_args = parse_line("greet näme=wörld fruit=🍌")
        self.assertEqual(cmd_args, [
            CmdArg("näme", ("wörld",)),
            CmdArg("fruit", ("🍌",)),
        ])


class TestParseErrors(unittest.TestCase):
    """Errors point at the first unparseable character."""

    def test_garbage_token_column(self):
        with self.assertRaises(ParseError) as ctx:
            parse_line("xx +++")
        self.assertEqual(ctx.exception.column, 4)
        self.assertEqual(str(ctx.exception), "cannot parse directive at column 4: xx +++")

    def test_column_skips_extra_whitespace(self):
        with self.assertRaises(ParseError) as ctx:
            parse_line("xx   +++")
        self.assertEqual(ctx.exception.column, 6)

    def test_unbalanced_tuple(self):
        with self.assertRaises(ParseError) as ctx:
            parse_line("xx ok=1 a=(1,2")
        self.assertEqual(ctx.exception.column, 9)

    def test_trailing_garbage_after_tuple(self):
        with self.assertRaises(ParseError) as ctx:
            parse_line("xx c=(1)x")
        self.assertEqual(ctx.exception.column, 4)

    def test_blank_line_rejected(self):
        for line in ["", "   ", "\t"]:
            with self.subTest(line=repr(line)):
                with self.assertRaises(ParseError) as ctx:
                    parse_line(line)
                self.assertEqual(ctx.exception.column, 1)


class TestDeterminism(unittest.TestCase):
    """parse_line is a pure function."""

    def test_repeated_parses_identical(self):
        lines = [
            "xx a=b a=c",
            "xx a=b b=c c=(1,2,3)",
            "make argTuple=(1, 🍌) argInt=12 argString=greedily,impatient moreIgnore= a,b,c",
            "noop",
        ]
        for line in lines:
            with self.subTest(line=line):
                results = [parse_line(line) for _ in range(10)]
                self.assertTrue(all(r == results[0] for r in results))

    def test_repeated_errors_identical(self):
        columns = set()
        for _ in range(10):
            try:
                parse_line("xx +++")
            except ParseError as e:
                columns.add((e.column, str(e)))
        self.assertEqual(columns, {(4, "cannot parse directive at column 4: xx +++")})


class TestParseLineFixture(unittest.TestCase):
    """The parser driven by a fixture, as users would write one."""

    def test_parse_fixture(self):
        def handler(t, d):
            try:
                cmd, cmd_args = parse_line(d.input)
            except ParseError as e:
                return f"here: {e}"
            return format_parse(cmd, cmd_args)

        run_test_from_string(self, """
parse
xx +++
----
here: cannot parse directive at column 4: xx +++

parse
xx a=b a=c
----
"xx" [a=b a=c]

parse
xx a=b b=c c=(1,2,3)
----
"xx" [a=b b=c c=(1, 2, 3)]
""", handler, RunConfig())


if __name__ == "__main__":
    unittest.main(verbosity=2)
