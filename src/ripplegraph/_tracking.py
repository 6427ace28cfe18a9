"""Evaluation stack and batch state — the ambient context of the engine.

The evaluation stack records which nodes are currently being evaluated.
When a Signal or Computed is read, the node on top of the stack (if any)
becomes one of its dependents. The stack lives in a contextvar as an
immutable tuple and is only ever pushed/popped through `evaluating()`,
so an exception inside a derivation can never leave a stale entry behind.

Batching: writes inside `batch()` accumulate in `_batch_signals` and are
propagated once, when the outermost batch scope exits.
"""

from __future__ import annotations

import contextvars
from contextlib import contextmanager
from typing import TYPE_CHECKING, Callable, Iterator, TypeVar

from ripplegraph.errors import CircularDependencyError

if TYPE_CHECKING:
    from ripplegraph.node import DependencyNode
    from ripplegraph.signal import Signal

T = TypeVar("T")

# Nodes currently being evaluated, innermost last.
_stack: contextvars.ContextVar[tuple[DependencyNode, ...]] = contextvars.ContextVar(
    "evaluation_stack", default=()
)

# Batch depth counter. When > 0, signal writes are buffered.
_batch_depth: int = 0

# Signals written during a batch, awaiting propagation. Keyed by node id.
_batch_signals: dict[int, Signal] = {}


def current_node() -> DependencyNode | None:
    """The node on top of the evaluation stack, or None outside any evaluation."""
    stack = _stack.get()
    return stack[-1] if stack else None


def is_evaluating(node: DependencyNode) -> bool:
    return any(entry is node for entry in _stack.get())


@contextmanager
def evaluating(node: DependencyNode) -> Iterator[None]:
    """Push node onto the evaluation stack for the duration of the block."""
    token = _stack.set(_stack.get() + (node,))
    try:
        yield
    finally:
        _stack.reset(token)


def guard_cycle(node: DependencyNode) -> None:
    """Raise if node is already being evaluated further down the stack."""
    if is_evaluating(node):
        chain = " -> ".join(repr(entry) for entry in _stack.get())
        raise CircularDependencyError(
            f"Circular dependency detected involving {node!r}. Chain: {chain} -> {node!r}"
        )


def untracked(fn: Callable[[], T]) -> T:
    """Call fn with dependency tracking suspended; reads inside are peeks."""
    token = _stack.set(())
    try:
        return fn()
    finally:
        _stack.reset(token)


# ─── Batch state ─────────────────────────────────────────────────────────────


def is_batching() -> bool:
    """True while inside at least one batch scope."""
    return _batch_depth > 0


def begin_batch() -> None:
    """Enter a batching scope. Nested batches are supported."""
    global _batch_depth
    _batch_depth += 1


def end_batch() -> list[Signal]:
    """Exit a batching scope.

    Returns the buffered signals when the outermost scope exits (and clears
    the buffer), otherwise an empty list. The caller propagates them.
    """
    global _batch_depth
    _batch_depth -= 1
    if _batch_depth > 0:
        return []
    signals = list(_batch_signals.values())
    _batch_signals.clear()
    return signals


def buffer_write(signal: Signal) -> None:
    """Record a signal written during a batch, deduplicated by id."""
    _batch_signals.setdefault(signal.id, signal)


def reset_batch() -> None:
    """Drop all batch state. Intended for test isolation."""
    global _batch_depth
    _batch_depth = 0
    _batch_signals.clear()
