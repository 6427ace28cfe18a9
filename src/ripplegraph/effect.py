"""Effects — side effects re-run when their dependencies change.

Unlike Computed (which holds a value for others to read), an Effect is a
leaf: it runs its body eagerly, re-tracking whatever the body reads, and
nothing depends on it. The body may return a cleanup callable, which is
invoked when the effect is stopped.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ripplegraph import _tracking
from ripplegraph.node import DependencyNode
from ripplegraph.scheduler import scheduler

logger = logging.getLogger("ripplegraph.effect")

Cleanup = Callable[[], None]
EffectFn = Callable[[], Optional[Cleanup]]


class Effect(DependencyNode):
    """A reactive side effect that re-runs when its dependencies change."""

    __slots__ = ("_fn", "_cleanup", "running", "manual")

    def __init__(self, fn: EffectFn, manual: bool = False) -> None:
        super().__init__()
        self._fn = fn
        self._cleanup: Cleanup | None = None
        self.running = False
        self.manual = manual
        if not manual:
            self.run()

    def run(self) -> None:
        """Run the body, re-tracking its dependencies.

        The previous cleanup is not invoked here; it is replaced by whatever
        the body returns this time. If the body stops its own effect, reads
        made after the stop are dropped and the returned cleanup is called
        at once.
        """
        logger.debug("run effect %r", self)
        self.running = True
        with _tracking.evaluating(self):
            self.release_upstream()
            result = self._fn()
        cleanup = result if callable(result) else None
        self.dirty = False
        if not self.running:
            logger.debug("effect %r stopped during its own run", self)
            self.release_upstream()
            scheduler.discard(self)
            if cleanup is not None:
                cleanup()
            return
        self._cleanup = cleanup
        self.recompute_priority()

    def stop(self) -> None:
        """Stop this effect: run cleanup and disconnect from all dependencies.

        Stopping an effect that is not running does nothing.
        """
        if not self.running:
            return
        logger.debug("stop effect %r", self)
        cleanup, self._cleanup = self._cleanup, None
        try:
            if cleanup is not None:
                cleanup()
        finally:
            self.release_upstream()
            self.running = False
            scheduler.discard(self)

    def __repr__(self) -> str:
        name = getattr(self._fn, "__name__", "<fn>")
        state = "running" if self.running else "stopped"
        return f"Effect({name}, {state})"


def create_effect(fn: EffectFn, manual: bool = False) -> Effect:
    """Run fn now (unless manual), then re-run it whenever anything it read changes.

    Returns the Effect (call .stop() to end it).

    Usage:
        count = create_signal(0)
        log = []

        e = create_effect(lambda: log.append(count.read()))
        # log == [0], ran immediately

        count.write(1)
        # log == [0, 1], re-ran because count changed

        e.stop()
        count.write(2)
        # log == [0, 1], stopped
    """
    return Effect(fn, manual)


def effect(fn: EffectFn) -> Effect:
    """Decorator form of create_effect(fn): starts the effect immediately."""
    return Effect(fn)
