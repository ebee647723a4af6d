#!/usr/bin/env python3
"""
Execution Driver

Feeds every Block of a fixture, in file order, to a caller-supplied
handler and reconciles the handler's output with the block's expected
section.

Handler contract:
    handler(t: Scope, d: Block) -> str | (str, transform)

    transform is None or a function applied to the output before it is
    written into the fixture in rewrite mode.

Per-block outcomes:
- Output, trailing blank lines trimmed, equal to expected verbatim (or to
  the normalized text the rewriter would write): pass
- Output differs, normal mode: mismatch failure recorded on the scope,
  the run continues with the next block
- Output differs, rewrite mode: the expected section is scheduled for
  replacement instead, unless no expected section can hold the output,
  which fails the block
- Handler called t.error(): no comparison, no rewrite for this block
- Handler called t.fatal() (or an argument lookup failed): the block is
  abandoned, the run continues with the next block
- Handler called t.skip(): the rest of the fixture is skipped and no
  rewrite is produced for it

Fixture syntax errors abandon the fixture. I/O errors and unexpected
handler exceptions propagate to the caller.
"""

import os
import re
import sys
from typing import Callable, Optional, Tuple, Union

from .block import Block
from .config import RunConfig
from .diff import summarize_divergence
from .errors import BlockFatal, BlockSkipped, FixtureSyntaxError
from .reader import FixtureReader, SEPARATOR
from .rewrite import (
    Rewriter,
    can_render,
    normalize_output,
    read_fixture,
    trim_output,
    write_atomic,
)
from .scope import Scope
from .trace import RunTrace


Transform = Callable[[str], str]
HandlerResult = Union[str, Tuple[str, Optional[Transform]]]
Handler = Callable[[Scope, Block], HandlerResult]

# Temp or hidden files skipped by walk(), e.g. ".data.swp", "data~", "#data#"
TEMP_FILE_RE = re.compile(r'(^\..*)|(.*~$)|(^#.*#$)')


def run_fixture(
    t: Scope,
    source_name: str,
    text: str,
    handler: Handler,
    config: Optional[RunConfig] = None,
    trace: Optional[RunTrace] = None
) -> Optional[str]:
    """
    Run every block of one fixture.

    Args:
        t: Scope failures are recorded on (one scope per fixture)
        source_name: Name used in block positions
        text: Fixture text
        handler: Directive handler
        config: Run configuration (default: compare mode)
        trace: Trace to record events into

    Returns:
        In rewrite mode, the complete rewritten fixture text (identical to
        `text` when nothing changed). None in compare mode, and when the
        fixture was skipped or abandoned on a syntax error.
    """
    config = config or RunConfig()
    trace = trace if trace is not None else RunTrace()
    rewriter = Rewriter(text) if config.rewrite else None

    trace.fixture_start(source_name, text)

    blocks = 0
    block = None
    try:
        for block in FixtureReader(source_name, text):
            blocks += 1
            _run_block(t, source_name, block, handler, config, rewriter, trace)
    except FixtureSyntaxError as e:
        t.error(str(e))
        trace.fixture_error(source_name, str(e))
        trace.fixture_complete(source_name, blocks, failed=True)
        return None
    except BlockSkipped as e:
        trace.fixture_skipped(source_name, block.pos, e.reason)
        trace.fixture_complete(source_name, blocks, failed=t.failed)
        return None

    trace.fixture_complete(source_name, blocks, failed=t.failed)

    if rewriter is None:
        return None

    new_text = rewriter.render()
    if rewriter.replaced:
        trace.fixture_rewritten(source_name, new_text, replaced=rewriter.replaced)
    return new_text


def _run_block(
    t: Scope,
    source_name: str,
    block: Block,
    handler: Handler,
    config: RunConfig,
    rewriter: Optional[Rewriter],
    trace: RunTrace
) -> None:
    """Run one block and record its outcome."""
    failures_before = t.failure_count
    try:
        actual, transform = _invoke(t, block, handler)
    except BlockFatal:
        trace.block_failed(source_name, block.pos, block.cmd)
        return

    if t.failure_count > failures_before:
        # The handler already failed this block; its output could corrupt
        # the expected section.
        trace.block_failed(source_name, block.pos, block.cmd)
        return

    actual = trim_output(actual)
    if config.verbose:
        _echo(block, actual)

    # A section written by the rewriter holds the normalized output.
    if actual == block.expected or normalize_output(actual) == block.expected:
        trace.block_pass(source_name, block.pos, block.cmd)
        return

    if rewriter is not None:
        written = normalize_output(transform(actual) if transform else actual)
        if not can_render(written):
            t.error(
                f"{block.pos}: cannot rewrite expected output: it would end the "
                f"{SEPARATOR}/{SEPARATOR} section early\n{written}"
            )
            trace.block_failed(source_name, block.pos, block.cmd)
            return
        rewriter.replace_expected(block, written)
        trace.block_mismatch(source_name, block.pos, block.cmd, rewritten=True)
        return

    t.error(format_mismatch(block, actual, config.max_diff_lines))
    trace.block_mismatch(source_name, block.pos, block.cmd, rewritten=False)


def _invoke(t: Scope, block: Block, handler: Handler) -> Tuple[str, Optional[Transform]]:
    """Call the handler and split its result into (output, transform)."""
    try:
        result = handler(t, block)
    except (BlockFatal, BlockSkipped):
        raise
    except Exception:
        print(f"\nexception during {block.pos}:\n{block.input}", file=sys.stderr)
        raise

    if isinstance(result, str):
        return result, None
    if isinstance(result, tuple) and len(result) == 2 and isinstance(result[0], str):
        return result[0], result[1]
    raise TypeError(
        f"{block.pos}: handler returned {type(result).__name__}, "
        f"expected str or (str, transform)"
    )


def format_mismatch(block: Block, actual: str, max_lines: int) -> str:
    """Failure message for a block whose output differs from expected."""
    message = (
        f"\n{block.pos}: {block.input}\n"
        f"expected:\n{block.expected}\n"
        f"found:\n{actual}"
    )
    if max(block.expected.count("\n"), actual.count("\n")) > max_lines:
        message += "\n" + summarize_divergence(block.pos, block.expected, actual, max_lines)
    return message


def _echo(block: Block, actual: str) -> None:
    print(
        f"\n{block.pos}:\n{block.cmd} [{len(block.cmd_args)} args]\n"
        f"{block.input}\n{SEPARATOR}\n{actual}",
        file=sys.stderr
    )


def run_file(
    t: Scope,
    path: str,
    handler: Handler,
    config: Optional[RunConfig] = None,
    trace: Optional[RunTrace] = None
) -> Optional[str]:
    """
    Run a fixture file.

    In rewrite mode the file is replaced atomically, and only once every
    block has run; a skipped or malformed fixture is left untouched.

    Raises:
        OSError: If the fixture cannot be read or written
    """
    text = read_fixture(path)
    new_text = run_fixture(t, path, text, handler, config, trace)
    if new_text is not None and new_text != text:
        write_atomic(path, new_text)
    return new_text


def walk(t: Scope, path: str, fn: Callable[[Scope, str], None]) -> None:
    """
    Visit `path`, creating one child scope per directory entry.

    A plain file is passed to fn with `t` itself. Directory entries are
    visited in sorted order; temp and hidden files are skipped.
    """
    if not os.path.isdir(path):
        fn(t, path)
        return

    for name in sorted(os.listdir(path)):
        if TEMP_FILE_RE.match(name):
            continue
        walk(t.child(name), os.path.join(path, name), fn)


def run_path(
    t: Scope,
    path: str,
    handler: Handler,
    config: Optional[RunConfig] = None,
    trace: Optional[RunTrace] = None
) -> None:
    """Run a fixture file, or every fixture under a directory."""
    walk(t, path, lambda scope, file_path: run_file(scope, file_path, handler, config, trace))
