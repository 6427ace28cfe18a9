"""Dependency nodes — the shared base of Signal, Computed and Effect.

Every node keeps two edge maps keyed by node id:

    upstream    nodes this node read during its last evaluation
    downstream  nodes that read this node during their last evaluation

Edges are always mirrored: A is in B.upstream exactly when B is in
A.downstream. Every method here that touches one side touches the other.
"""

from __future__ import annotations

import itertools

from ripplegraph import _tracking
from ripplegraph.scheduler import scheduler

# Node ids: unique for the life of the process.
_id_counter = itertools.count(1)


class DependencyNode:
    """A vertex in the reactive graph. Subclasses override run()."""

    __slots__ = ("id", "priority", "dirty", "upstream", "downstream")

    def __init__(self) -> None:
        self.id: int = next(_id_counter)
        self.priority: int = 1
        self.dirty: bool = False
        self.upstream: dict[int, DependencyNode] = {}
        self.downstream: dict[int, DependencyNode] = {}

    def register_as_dependency(self) -> None:
        """Record that the node currently being evaluated reads this one.

        Outside any evaluation this does nothing. The first read in an
        evaluation creates the edge and adds this node's priority to the
        reader's; later reads of the same node are no-ops.
        """
        consumer = _tracking.current_node()
        if consumer is None or consumer.id in self.downstream:
            return
        self.downstream[consumer.id] = consumer
        consumer.upstream[self.id] = self
        consumer.priority += self.priority

    def release_upstream(self) -> None:
        """Drop every upstream edge and reset priority to 1.

        Called before re-evaluating, so dependencies are captured fresh on
        every run rather than patched.
        """
        for node in self.upstream.values():
            node.downstream.pop(self.id, None)
        self.upstream = {}
        self.priority = 1

    def recompute_priority(self) -> None:
        self.priority = sum(node.priority for node in self.upstream.values())

    def mark_downstream_dirty_and_schedule(self) -> None:
        """Mark every dependent dirty and queue it on the scheduler."""
        for node in list(self.downstream.values()):
            node.dirty = True
            scheduler.submit(node)

    def run(self) -> None:
        self.dirty = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id})"
