"""Priority scheduler — runs dirty nodes, lowest priority first.

A node's priority approximates how much upstream weight feeds it, so
nodes close to the graph's sources tend to run before nodes further
downstream. This is a heuristic, not a topological sort: with uneven
fan-in a node can still run before one of its indirect inputs settles.

The drain is a plain loop. A drain requested while another drain is
already running (a Computed propagating, a Signal written from inside an
Effect) returns immediately and the outer loop picks up the new work, so
stack depth does not grow with graph depth.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ripplegraph.errors import DrainLimitExceeded

if TYPE_CHECKING:
    from ripplegraph.node import DependencyNode

logger = logging.getLogger("ripplegraph.scheduler")

DEFAULT_DRAIN_LIMIT = 100_000

_drain_limit: int | None = DEFAULT_DRAIN_LIMIT


def set_drain_limit(limit: int | None) -> None:
    """Set the maximum number of node runs allowed in one drain.

    A drain that exceeds it raises DrainLimitExceeded, which usually means an
    effect keeps writing to one of its own dependencies. Pass None to
    disable the guard.
    """
    global _drain_limit
    if limit is not None and limit < 1:
        raise ValueError(f"drain limit must be positive or None, got {limit!r}")
    _drain_limit = limit


def get_drain_limit() -> int | None:
    return _drain_limit


class Scheduler:
    """Deduplicated queue of dirty nodes, drained in priority order."""

    def __init__(self) -> None:
        # Insertion-ordered: gives membership, dedup and tie-break order.
        self._pending: dict[int, DependencyNode] = {}
        self._draining = False

    @property
    def draining(self) -> bool:
        return self._draining

    def submit(self, node: DependencyNode) -> None:
        """Queue node to run. A node already queued is not queued twice."""
        if node.id in self._pending:
            return
        logger.debug("schedule add %r", node)
        self._pending[node.id] = node

    def discard(self, node: DependencyNode) -> None:
        """Remove node from the queue without running it."""
        self._pending.pop(node.id, None)

    def pending_count(self) -> int:
        return len(self._pending)

    def clear(self) -> None:
        """Drop all queued work. Intended for test isolation."""
        self._pending.clear()
        self._draining = False

    def drain(self) -> None:
        """Run queued nodes until the queue is empty.

        Each node is removed from the queue before it runs, so a node
        dirtied again during its own run is queued afresh. Exceptions from a
        node propagate; nodes still queued stay queued for the next drain.
        """
        if self._draining:
            return
        self._draining = True
        steps = 0
        try:
            while self._pending:
                # min() keeps the first of equal priorities, i.e. insertion order.
                node = min(self._pending.values(), key=lambda n: n.priority)
                steps += 1
                if _drain_limit is not None and steps > _drain_limit:
                    # node stays queued along with the rest
                    logger.error(
                        "drain exceeded %d node runs; %d still pending",
                        _drain_limit,
                        len(self._pending),
                    )
                    raise DrainLimitExceeded(
                        f"Scheduler ran more than {_drain_limit} nodes in one drain "
                        f"(next: {node!r}). An effect may be writing to its own dependency."
                    )
                del self._pending[node.id]
                logger.debug("schedule run %r (priority=%d)", node, node.priority)
                node.run()
        finally:
            self._draining = False


# Process-wide scheduler shared by every node.
scheduler = Scheduler()


def get_pending_count() -> int:
    """Number of nodes waiting to run. Useful for testing."""
    return scheduler.pending_count()
