"""Batches — coalesced propagation of several writes.

Signal writes inside a batch are stored immediately but not propagated.
When the outermost batch exits, every written signal marks its dependents
dirty and the scheduler drains once, so each dependent runs once and sees
all the writes together instead of each intermediate state.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, ParamSpec, TypeVar

from ripplegraph import _tracking
from ripplegraph.scheduler import scheduler

P = ParamSpec("P")
R = TypeVar("R")

logger = logging.getLogger("ripplegraph.batch")


def _exit() -> None:
    signals = _tracking.end_batch()
    if _tracking.is_batching():
        return
    logger.debug("flush batch: %d signal(s)", len(signals))
    for signal in signals:
        signal.mark_downstream_dirty_and_schedule()
    scheduler.drain()


@contextmanager
def transaction() -> Iterator[None]:
    """Context manager for batching writes.

    Usage:
        with transaction():
            a.write(1)
            b.write(2)
            # effects run here, after both are written

    If the block raises, the writes it made are still propagated. Should
    that propagation fail too, the block's exception is the one re-raised,
    with the propagation error as its __context__.
    """
    _tracking.begin_batch()
    try:
        yield
    except BaseException as exc:
        try:
            _exit()
        except Exception:
            raise exc
        raise
    _exit()


def batch(fn: Callable[[], R]) -> R:
    """Call fn with propagation deferred until it returns.

    Usage:
        batch(lambda: (a.write(2), b.write(2)))
        # an effect reading a and b runs once, seeing (2, 2)
    """
    with transaction():
        return fn()


def batched(fn: Callable[P, R]) -> Callable[P, R]:
    """Decorator: batch all signal writes inside fn.

    Usage:
        @batched
        def swap():
            x, y = a.peek(), b.peek()
            a.write(y)
            b.write(x)
            # effects see both writes at once, not one at a time
    """

    @functools.wraps(fn)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        with transaction():
            return fn(*args, **kwargs)

    return wrapper
