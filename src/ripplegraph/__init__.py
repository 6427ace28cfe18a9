"""ripplegraph: fine-grained reactive signals, computeds and effects for Python."""

from importlib.metadata import version as _version

__version__ = _version("ripplegraph")

from ripplegraph._tracking import is_batching, untracked
from ripplegraph.errors import ReactiveError, CircularDependencyError, DrainLimitExceeded
from ripplegraph.scheduler import Scheduler, get_pending_count, set_drain_limit
from ripplegraph.node import DependencyNode
from ripplegraph.signal import Signal, create_signal
from ripplegraph.computed import Computed, computed, create_computed
from ripplegraph.effect import Effect, create_effect, effect
from ripplegraph.batch import batch, batched, transaction

__all__ = [
    "DependencyNode",
    "Signal",
    "create_signal",
    "Computed",
    "computed",
    "create_computed",
    "Effect",
    "create_effect",
    "effect",
    "batch",
    "batched",
    "transaction",
    "untracked",
    "is_batching",
    "Scheduler",
    "get_pending_count",
    "set_drain_limit",
    "ReactiveError",
    "CircularDependencyError",
    "DrainLimitExceeded",
]
