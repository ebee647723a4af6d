#!/usr/bin/env python3
"""
Run Scopes - Per-Fixture Reporting Context

A Scope is the handle a handler reports through while a fixture runs.
Scopes form an explicit tree: one root per run, one child per directory
entry or fixture file. Each scope records its own failures, so a failure
in one child never aborts its siblings.

Contract:
- error() records a failure and lets the handler continue
- fatal() records a failure and aborts the current block
- skip() aborts the rest of the fixture; every error reported through the
  scope afterwards is ignored
- log() attaches a message shown alongside the failures of the scope
- Nothing is reported to a host test framework from here; adapters walk
  the finished tree (see unittest_support)
"""

from typing import Iterator, List, Optional, Tuple

from .errors import BlockFatal, BlockSkipped


class Scope:
    """
    A node in the run tree.

    Usage:
        root = Scope()
        child = root.child("basic")
        run_fixture(child, "basic", text, handler)
        if root.failed: ...
    """

    def __init__(self, name: str = "", parent: Optional["Scope"] = None):
        """
        Initialize a scope.

        Args:
            name: Name of this node (file or directory name); empty for a root
            parent: Enclosing scope, None for a root
        """
        self.name = name
        self.parent = parent
        self.children: List["Scope"] = []
        self._failures: List[str] = []
        self._logs: List[str] = []
        self._output: List[str] = []
        self._skip_reason: Optional[str] = None

    def child(self, name: str) -> "Scope":
        """Create and attach an isolated child scope."""
        scope = Scope(name, parent=self)
        self.children.append(scope)
        return scope

    @property
    def full_name(self) -> str:
        """Slash-joined names from the root down to this scope."""
        names = []
        node: Optional[Scope] = self
        while node is not None:
            if node.name:
                names.append(node.name)
            node = node.parent
        return "/".join(reversed(names))

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def error(self, message: str) -> None:
        """Record a failure. Ignored once the scope is skipped."""
        if self.skipped:
            return
        self._failures.append(message)
        self._output.append(message)

    def errorf(self, fmt: str, *args) -> None:
        self.error(fmt % args if args else fmt)

    def fatal(self, message: str) -> None:
        """
        Record a failure and abort the current block.

        Raises:
            BlockFatal: Always, unless the scope is already skipped
            BlockSkipped: If the scope was skipped earlier
        """
        if self.skipped:
            raise BlockSkipped(self._skip_reason)
        self._failures.append(message)
        self._output.append(message)
        raise BlockFatal(message)

    def fatalf(self, fmt: str, *args) -> None:
        self.fatal(fmt % args if args else fmt)

    def skip(self, reason: str = "") -> None:
        """
        Skip the rest of this fixture.

        Raises:
            BlockSkipped: Always
        """
        if self._skip_reason is None:
            self._skip_reason = reason
        raise BlockSkipped(self._skip_reason)

    def log(self, message: str) -> None:
        """Attach a message, reported with the scope's failures."""
        self._logs.append(message)
        self._output.append(message)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def skipped(self) -> bool:
        return self._skip_reason is not None

    @property
    def skip_reason(self) -> Optional[str]:
        return self._skip_reason

    @property
    def failures(self) -> Tuple[str, ...]:
        return tuple(self._failures)

    @property
    def logs(self) -> Tuple[str, ...]:
        return tuple(self._logs)

    @property
    def output(self) -> Tuple[str, ...]:
        """Failures and log messages in the order they were reported."""
        return tuple(self._output)

    @property
    def failure_count(self) -> int:
        return len(self._failures)

    @property
    def failed(self) -> bool:
        """True if this scope or any descendant recorded a failure."""
        if self._failures:
            return True
        return any(child.failed for child in self.children)

    def walk(self) -> Iterator["Scope"]:
        """Yield this scope and all descendants, parents first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def __repr__(self) -> str:
        return (
            f"Scope({self.full_name!r}, failures={len(self._failures)}, "
            f"skipped={self.skipped})"
        )
