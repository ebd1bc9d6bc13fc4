"""Core base class for tagged function values and the evaluation result."""

from __future__ import annotations

import logging
from abc import ABC
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from kollekt._types import T

logger = logging.getLogger(__name__)

C = TypeVar("C", bound="Combinator")


@dataclass(frozen=True)
class Evaluation(Generic[T]):
    """
    Result of calling a function value without letting errors escape.

    Combinators that must not propagate errors call ``Evaluation.of`` and
    inspect ``ok``/``error`` explicitly instead of hiding a try/except.

    Attributes:
        ok: False if the call raised
        value: The returned value (None when the call raised)
        error: The exception that was raised, if any
    """

    ok: bool
    value: T | None = None
    error: Exception | None = None

    @classmethod
    def of(cls, fn: Callable[..., T], *args: Any) -> Evaluation[T]:
        try:
            return cls(True, fn(*args))
        except Exception as e:
            return cls(False, None, e)

    @property
    def matched(self) -> bool:
        """True when the call succeeded and returned a truthy value."""
        return self.ok and bool(self.value)

    def report(self, where: str) -> Evaluation[T]:
        """Log a swallowed error as a warning and return self."""
        if self.error is not None:
            logger.warning("Ignoring error in %s: %r", where, self.error)
        return self


class Combinator(ABC):
    """
    Base class for tagged function values.

    A combinator wraps a plain callable and records its role through its
    class (Predicate, Mapper or Comparator) rather than through the number
    of parameters the callable declares.

    When ``indexed`` is True the wrapped callable receives
    ``(value, index, collection)``; otherwise it receives only ``value``.
    """

    role: ClassVar[str] = "combinator"

    def __init__(
        self, fn: Callable[..., Any], name: str | None = None, *, indexed: bool = False
    ):
        if not callable(fn):
            raise TypeError(f"{type(self).__name__} requires a callable, got {fn!r}")
        self.fn = fn
        self.name = name or getattr(fn, "__name__", self.role)
        self.indexed = indexed

    def __call__(
        self, value: Any, index: int | None = None, collection: Sequence[Any] | None = None
    ) -> Any:
        if self.indexed:
            return self.fn(value, index, collection)
        return self.fn(value)

    def evaluate(
        self, value: Any, index: int | None = None, collection: Sequence[Any] | None = None
    ) -> Evaluation[Any]:
        """Call this function value, capturing any error in an Evaluation."""
        return Evaluation.of(self, value, index, collection)

    @classmethod
    def of(cls: type[C], candidate: Any, name: str | None = None) -> C:
        """
        Return ``candidate`` tagged with this role.

        Instances of this role are returned unchanged, plain callables are
        wrapped. Anything else, including a function value tagged with a
        different role, raises TypeError.
        """
        if isinstance(candidate, cls):
            return candidate
        if isinstance(candidate, Combinator):
            raise TypeError(f"Expected a {cls.role}, got a {candidate.role}: {candidate!r}")
        if callable(candidate):
            return cls(candidate, name)
        raise TypeError(f"Expected a {cls.role} or a callable, got {candidate!r}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Combinator) or type(other) is not type(self):
            return NotImplemented
        return self.fn == other.fn and self.name == other.name

    def __hash__(self) -> int:
        return hash((type(self), id(self.fn), self.name))
