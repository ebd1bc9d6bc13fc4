"""Mapper function values and common mappers."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Sequence
from typing import Any

from kollekt import _coerce
from kollekt._core import Combinator

logger = logging.getLogger(__name__)


class Mapper(Combinator):
    """
    A function value whose return value replaces the element.

    Mappers compose left to right with ``>>``:

    Example:
        clean = trimmed >> to_lowercase
        clean("  ABC ")  # "abc"
    """

    role = "mapper"

    def __rshift__(self, other: Mapper | Callable[..., Any]) -> Mapper:
        return compose(self, other)


def mapper(fn: Callable[[Any], Any]) -> Mapper:
    """
    Decorator to create a mapper from a single-argument function.

    Example:
        @mapper
        def double(x):
            return x * 2
    """
    return Mapper(fn, fn.__name__)


@mapper
def identity(value: Any) -> Any:
    return value


@mapper
def to_string(value: Any) -> str:
    return _coerce.to_canonical_string(value)


@mapper
def trimmed(value: Any) -> str:
    return _coerce.to_canonical_string(value).strip()


@mapper
def to_number(value: Any) -> int | float:
    """Numeric value of the element, ``nan`` when it is not numeric."""
    return _coerce.to_number(value)


@mapper
def to_valid_number(value: Any) -> int | float:
    """Like ``to_number`` but non-finite results become 0."""
    number = _coerce.to_number(value)
    return number if math.isfinite(number) else 0


@mapper
def to_lowercase(value: Any) -> str:
    return _coerce.to_canonical_string(value).lower()


@mapper
def to_uppercase(value: Any) -> str:
    return _coerce.to_canonical_string(value).upper()


def append(suffix: Any) -> Mapper:
    """Create a mapper that appends ``suffix`` to the canonical string of the element."""
    text = _coerce.to_canonical_string(suffix)
    return Mapper(lambda value: _coerce.to_canonical_string(value) + text, f"append({text!r})")


def prepend(prefix: Any) -> Mapper:
    """Create a mapper that prepends ``prefix`` to the canonical string of the element."""
    text = _coerce.to_canonical_string(prefix)
    return Mapper(lambda value: text + _coerce.to_canonical_string(value), f"prepend({text!r})")


def replace(old: Any, new: Any) -> Mapper:
    """
    Create a mapper that replaces every occurrence of ``old`` with ``new``.

    ``old`` may be a compiled regular expression.

    Example:
        dashes = replace(" ", "-")
        dashes("a b c")  # "a-b-c"
    """
    replacement = _coerce.to_canonical_string(new)
    if hasattr(old, "sub"):

        def substitute(value):
            return old.sub(replacement, _coerce.to_canonical_string(value))

        return Mapper(substitute, f"replace({old.pattern!r}, {replacement!r})")

    target = _coerce.to_canonical_string(old)

    def substitute_text(value):
        return _coerce.to_canonical_string(value).replace(target, replacement)

    return Mapper(substitute_text, f"replace({target!r}, {replacement!r})")


def compose(*mappers: Any) -> Mapper:
    """
    Create a mapper that applies each mapper in turn to the previous result.

    Anything that is not a mapper is logged and skipped. With no mappers the
    result is the identity.
    """
    steps: list[Mapper] = []
    for candidate in mappers:
        try:
            steps.append(Mapper.of(candidate))
        except TypeError as e:
            logger.warning("compose ignored an argument that is not a mapper: %s", e)

    def composed(value, index=None, collection: Sequence[Any] | None = None):
        for step in steps:
            value = step(value, index, collection)
        return value

    return Mapper(composed, " >> ".join(m.name for m in steps) or "identity", indexed=True)
