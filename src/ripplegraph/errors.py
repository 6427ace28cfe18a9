"""Exceptions raised by the reactive engine."""


class ReactiveError(Exception):
    """Base class for errors raised by ripplegraph itself."""

    pass


class CircularDependencyError(ReactiveError):
    """Raised when a computed value is read while it is still being derived."""

    pass


class DrainLimitExceeded(ReactiveError):
    """Raised when one scheduler drain runs more nodes than the configured limit."""

    pass
