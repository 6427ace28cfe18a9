"""Computed values — derived state with automatic dependency tracking.

A Computed wraps a function. When evaluated, it records which signals and
computeds the function reads and caches the result. When any of them
changes, the scheduler marks it dirty, re-derives it and passes the change
on to its own dependents. A Computed that is only read outside the
scheduler re-derives lazily, on the first read after it went dirty.
"""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

from ripplegraph import _tracking
from ripplegraph.node import DependencyNode
from ripplegraph.scheduler import scheduler

T = TypeVar("T")


class Computed(DependencyNode, Generic[T]):
    """A derived value that auto-tracks dependencies and caches the result."""

    __slots__ = ("_fn", "_value")

    def __init__(self, fn: Callable[[], T]) -> None:
        super().__init__()
        self._fn = fn
        self._value: T | None = None
        self.dirty = True

    def ensure_fresh(self) -> None:
        """Re-derive the cached value if dirty, capturing fresh dependencies.

        If the derivation raises, the evaluation stack is still restored and
        the node stays dirty, so the next read retries.
        """
        if not self.dirty:
            return
        _tracking.guard_cycle(self)
        self.release_upstream()
        with _tracking.evaluating(self):
            self._value = self._fn()
        self.recompute_priority()
        self.dirty = False

    def read(self) -> T:
        """Read the computed value, registering the dependency first."""
        self.register_as_dependency()
        self.ensure_fresh()
        return self._value

    def peek(self) -> T | None:
        """The cached value, untracked and possibly stale."""
        return self._value

    @property
    def value(self) -> T:
        return self.read()

    def run(self) -> None:
        """Called by the scheduler when an upstream dependency changed."""
        self.ensure_fresh()
        self.dirty = False
        self.mark_downstream_dirty_and_schedule()
        scheduler.drain()

    def __repr__(self) -> str:
        name = getattr(self._fn, "__name__", "<fn>")
        state = "dirty" if self.dirty else f"cached={self._value!r}"
        return f"Computed({name}, {state})"


def create_computed(fn: Callable[[], T]) -> Computed[T]:
    """Create a Computed deriving its value from fn."""
    return Computed(fn)


def computed(fn: Callable[[], T]) -> Computed[T]:
    """Decorator/factory to create a Computed from a function.

    Usage:
        count = create_signal(0)

        @computed
        def doubled():
            return count.read() * 2

        doubled.read()  # 0
        count.write(5)
        doubled.read()  # 10
    """
    return Computed(fn)
