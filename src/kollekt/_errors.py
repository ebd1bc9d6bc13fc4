"""Exception types raised by kollekt."""

from __future__ import annotations


class KollektError(Exception):
    """Base class for all errors raised by kollekt."""


class InvalidArgumentError(KollektError, ValueError):
    """
    Raised when an operation receives arguments it cannot work with.

    Example:
        range_of(1, None)  # bounds are not compatible
    """


class EmptyQueueError(KollektError, IndexError):
    """Raised when taking from a BoundedQueue that holds no items."""

    def __init__(self, message: str = "The queue is empty"):
        super().__init__(message)
