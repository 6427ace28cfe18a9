"""Signals — writable state that tracks its readers.

When a Signal is read inside a Computed or Effect evaluation, the reader
becomes one of its dependents. Writing a Signal marks every dependent dirty
and drains the scheduler before returning, unless a batch is active, in
which case propagation waits for the batch to end.
"""

from __future__ import annotations

import logging
from typing import Generic, TypeVar

from ripplegraph import _tracking
from ripplegraph.node import DependencyNode
from ripplegraph.scheduler import scheduler

T = TypeVar("T")

logger = logging.getLogger("ripplegraph.signal")


class Signal(DependencyNode, Generic[T]):
    """A single tracked value. Has no upstream dependencies of its own."""

    __slots__ = ("_value",)

    def __init__(self, value: T) -> None:
        super().__init__()
        self._value = value

    def read(self) -> T:
        """Read the value. If inside an evaluation, registers the dependency."""
        self.register_as_dependency()
        return self._value

    def peek(self) -> T:
        """Read the value without registering a dependency."""
        return self._value

    def write(self, value: T) -> None:
        """Store value and propagate.

        There is no equality check: writing the value the signal already
        holds still re-runs its dependents.
        """
        self._value = value
        if _tracking.is_batching():
            logger.debug("buffer write %r", self)
            _tracking.buffer_write(self)
            return
        self.mark_downstream_dirty_and_schedule()
        scheduler.drain()

    @property
    def value(self) -> T:
        return self.read()

    @value.setter
    def value(self, value: T) -> None:
        self.write(value)

    def run(self) -> None:
        # Nothing to derive.
        self.dirty = False

    def __repr__(self) -> str:
        return f"Signal({self._value!r})"


def create_signal(initial: T) -> Signal[T]:
    """Create a Signal holding initial.

    Usage:
        count = create_signal(0)
        count.read()    # 0
        count.write(5)
        count.peek()    # 5
    """
    return Signal(initial)
