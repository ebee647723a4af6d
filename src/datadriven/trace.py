#!/usr/bin/env python3
"""
Deterministic Run Trace

Records what happened to every fixture and block of a run. Each event is
a JSON object with:
- seq: Monotonic sequence number
- event: Event type token
- source: Fixture name
- detail: Deterministic details (positions, commands, hashes)

No timestamps. No durations. Events are accumulated in memory and written
in one pass, so the trace is identical for identical runs.
"""

import hashlib
import json
import os
import sys
from collections import Counter
from typing import Any, Dict, List, Optional, TextIO


# Event type tokens
EVENT_FIXTURE_START = "FIXTURE_START"
EVENT_BLOCK_PASS = "BLOCK_PASS"
EVENT_BLOCK_MISMATCH = "BLOCK_MISMATCH"
EVENT_BLOCK_FAILED = "BLOCK_FAILED"
EVENT_FIXTURE_SKIPPED = "FIXTURE_SKIPPED"
EVENT_FIXTURE_ERROR = "FIXTURE_ERROR"
EVENT_FIXTURE_REWRITTEN = "FIXTURE_REWRITTEN"
EVENT_FIXTURE_COMPLETE = "FIXTURE_COMPLETE"


def sha256_text(text: str) -> str:
    """SHA-256 of the UTF-8 encoding of `text`, as lowercase hex."""
    return hashlib.sha256(text.encode('utf-8')).hexdigest()


class RunTrace:
    """
    Accumulates trace events for a run.

    A single RunTrace may be shared by every fixture of a run; events keep
    the order in which fixtures and blocks were processed.
    """

    def __init__(self):
        self._events: List[Dict[str, Any]] = []
        self._seq = 0

    def _emit(self, event: str, source: str, detail: Optional[Dict[str, Any]] = None) -> None:
        record: Dict[str, Any] = {
            "seq": self._seq,
            "event": event,
            "source": source
        }
        if detail:
            record["detail"] = detail
        self._events.append(record)
        self._seq += 1

    def fixture_start(self, source: str, text: str) -> None:
        self._emit(EVENT_FIXTURE_START, source, {"sha256": sha256_text(text)})

    def block_pass(self, source: str, pos: str, cmd: str) -> None:
        self._emit(EVENT_BLOCK_PASS, source, {"pos": pos, "cmd": cmd})

    def block_mismatch(self, source: str, pos: str, cmd: str, rewritten: bool) -> None:
        self._emit(EVENT_BLOCK_MISMATCH, source, {
            "pos": pos,
            "cmd": cmd,
            "rewritten": rewritten
        })

    def block_failed(self, source: str, pos: str, cmd: str) -> None:
        self._emit(EVENT_BLOCK_FAILED, source, {"pos": pos, "cmd": cmd})

    def fixture_skipped(self, source: str, pos: str, reason: str) -> None:
        self._emit(EVENT_FIXTURE_SKIPPED, source, {"pos": pos, "reason": reason})

    def fixture_error(self, source: str, message: str) -> None:
        self._emit(EVENT_FIXTURE_ERROR, source, {"message": message})

    def fixture_rewritten(self, source: str, text: str, replaced: int) -> None:
        self._emit(EVENT_FIXTURE_REWRITTEN, source, {
            "replaced_blocks": replaced,
            "sha256": sha256_text(text)
        })

    def fixture_complete(self, source: str, blocks: int, failed: bool) -> None:
        self._emit(EVENT_FIXTURE_COMPLETE, source, {"blocks": blocks, "failed": failed})

    def get_events(self) -> List[Dict[str, Any]]:
        """Get accumulated events."""
        return self._events.copy()

    def counts(self) -> Dict[str, int]:
        """Number of events per event type."""
        return dict(Counter(event["event"] for event in self._events))

    def write(self, trace_path: str) -> str:
        """
        Write the trace as JSON lines with sorted keys.

        Args:
            trace_path: File to write; parent directories are created

        Returns:
            Path to written trace file
        """
        directory = os.path.dirname(os.path.abspath(trace_path))
        os.makedirs(directory, exist_ok=True)

        with open(trace_path, 'w', encoding='utf-8', newline='\n') as f:
            for event in self._events:
                line = json.dumps(event, sort_keys=True, ensure_ascii=False)
                f.write(line + '\n')

        return trace_path

    def print_summary(self, output: TextIO = sys.stderr) -> None:
        """Print a human-readable summary of the run."""
        counts = self.counts()

        print("\n" + "=" * 72, file=output)
        print("datadriven run summary", file=output)
        print("=" * 72, file=output)
        print(f"  Fixtures:   {counts.get(EVENT_FIXTURE_START, 0)}", file=output)
        print(f"  Passed:     {counts.get(EVENT_BLOCK_PASS, 0)}", file=output)
        print(f"  Mismatched: {counts.get(EVENT_BLOCK_MISMATCH, 0)}", file=output)
        print(f"  Failed:     {counts.get(EVENT_BLOCK_FAILED, 0)}", file=output)
        print(f"  Skipped:    {counts.get(EVENT_FIXTURE_SKIPPED, 0)}", file=output)
        print(f"  Errors:     {counts.get(EVENT_FIXTURE_ERROR, 0)}", file=output)
        print(f"  Rewritten:  {counts.get(EVENT_FIXTURE_REWRITTEN, 0)}", file=output)
        print("=" * 72 + "\n", file=output)
