import pytest

from ripplegraph import _tracking
from ripplegraph.scheduler import DEFAULT_DRAIN_LIMIT, scheduler, set_drain_limit


@pytest.fixture(autouse=True)
def _reset_engine():
    """Each test starts with an empty scheduler and no open batch."""
    scheduler.clear()
    _tracking.reset_batch()
    set_drain_limit(DEFAULT_DRAIN_LIMIT)
    yield
    scheduler.clear()
    _tracking.reset_batch()
    set_drain_limit(DEFAULT_DRAIN_LIMIT)


def assert_edges_mirrored(*nodes):
    """A in B.upstream iff B in A.downstream, for every node reachable from nodes."""
    seen = {}
    frontier = list(nodes)
    while frontier:
        node = frontier.pop()
        if node.id in seen:
            continue
        seen[node.id] = node
        frontier.extend(node.upstream.values())
        frontier.extend(node.downstream.values())
    for node in seen.values():
        for up in node.upstream.values():
            assert up.downstream.get(node.id) is node, f"{up!r} missing downstream {node!r}"
        for down in node.downstream.values():
            assert down.upstream.get(node.id) is node, f"{down!r} missing upstream {node!r}"
