"""Comparator function values and comparator constructors."""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable, Mapping, Sequence
from decimal import Decimal
from typing import Any

from kollekt import _coerce
from kollekt._core import Combinator

logger = logging.getLogger(__name__)

# rank used by by_type and natural; unknown kinds sort last
TYPE_SORT_ORDER: tuple[tuple[type, ...], ...] = (
    (type(None),),
    (bool,),
    (int, float, Decimal),
    (str,),
    (bytes, bytearray),
    (list, tuple),
    (Mapping,),
)


def _sign(result: Any) -> int:
    return (result > 0) - (result < 0)


class Comparator(Combinator):
    """
    A function value that orders two elements.

    Results are normalised to -1, 0 or 1; 0 means "no preference".
    Comparators chain with ``then`` and reverse with unary minus.

    Example:
        shortest_first = by_length.then(natural)
        sorted(words, key=shortest_first.key)

        longest_first = -by_length
    """

    role = "comparator"

    def __call__(self, a: Any, b: Any) -> int:  # type: ignore[override]
        return _sign(self.fn(a, b))

    @property
    def key(self) -> Callable[[Any], Any]:
        """Adapter for ``sorted(key=...)`` and ``list.sort(key=...)``."""
        return functools.cmp_to_key(self)

    def then(self, other: Comparator | Callable[[Any, Any], Any]) -> Comparator:
        return chain(self, other)

    def __neg__(self) -> Comparator:
        return reverse(self)


def comparator(fn: Callable[[Any, Any], Any]) -> Comparator:
    """
    Decorator to create a comparator from a two-argument function.

    Example:
        @comparator
        def by_second(a, b):
            return a[1] - b[1]
    """
    return Comparator(fn, fn.__name__)


def _collect(comparators: Sequence[Any], where: str) -> list[Comparator]:
    collected: list[Comparator] = []
    for candidate in comparators:
        if isinstance(candidate, (list, tuple)):
            collected.extend(_collect(candidate, where))
            continue
        try:
            collected.append(Comparator.of(candidate))
        except TypeError as e:
            logger.warning("%s ignored an argument that is not a comparator: %s", where, e)
    return collected


def _type_rank(value: Any) -> int:
    for rank, kinds in enumerate(TYPE_SORT_ORDER):
        if isinstance(value, kinds):
            return rank
    return len(TYPE_SORT_ORDER)


@comparator
def compare(a: Any, b: Any) -> int:
    """Plain ``<``/``>`` comparison; values that cannot be ordered compare equal."""
    try:
        return -1 if a < b else 1 if a > b else 0
    except TypeError:
        return 0


@comparator
def no_preference(a: Any, b: Any) -> int:
    return 0


@comparator
def by_string_value(a: Any, b: Any) -> int:
    """Compare the canonical strings of the elements."""
    text_a = _coerce.to_canonical_string(a)
    text_b = _coerce.to_canonical_string(b)
    if not text_a.strip() and not isinstance(a, str):
        text_a = repr(a)
    if not text_b.strip() and not isinstance(b, str):
        text_b = repr(b)
    return compare(text_a, text_b)


@comparator
def by_type(a: Any, b: Any) -> int:
    """Group elements by kind: None, bool, number, str, bytes, sequence, mapping, other."""
    return compare(_type_rank(a), _type_rank(b))


@comparator
def by_length(a: Any, b: Any) -> int:
    """Order elements by the number of characters, items or fields they have."""
    return compare(_coerce.calculate_length(a), _coerce.calculate_length(b))


@comparator
def natural(a: Any, b: Any) -> int:
    """
    Total ordering over mixed values.

    Elements of different kinds are grouped by ``by_type``; elements of the
    same kind use their own ordering, falling back to their string value.
    """
    return by_type(a, b) or compare(a, b) or by_string_value(a, b)


def by_position(
    reference: Sequence[Any] | None,
    position: Callable[[Any, list[Any]], int] | None = None,
    transform: Callable[[Any, list[Any]], Any] | None = None,
) -> Comparator:
    """
    Create a comparator that orders elements by their position in ``reference``.

    Elements missing from the reference sort after those present. Ties are
    broken by string value. ``transform(element, reference)`` maps each
    element before it is looked up; ``position(element, reference)``
    replaces the default index lookup. Errors raised by either are logged
    and the untransformed value or default position is used.

    Example:
        by_rank = by_position(["high", "medium", "low"])
        sorted(["low", "high"], key=by_rank.key)  # ["high", "low"]
    """
    ref: list[Any] = []
    for item in reference or ():
        if isinstance(item, (list, tuple)):
            ref.extend(item)
        else:
            ref.append(item)

    def transformed(elem):
        if transform is None:
            return elem
        try:
            return transform(elem, ref)
        except Exception as e:
            logger.warning("by_position failed to transform %r: %r", elem, e)
            return elem

    def find_position(elem):
        idx = ref.index(elem) if elem in ref else -1
        if position is not None:
            try:
                idx = position(elem, ref)
            except Exception as e:
                logger.warning("by_position failed to find the position of %r: %r", elem, e)
        return len(ref) if idx < 0 else idx

    def compare_positions(a, b):
        if not ref:
            return by_string_value(a, b) or natural(a, b)
        aa, bb = transformed(a), transformed(b)
        return (
            compare(find_position(aa), find_position(bb))
            or by_string_value(aa, bb)
            or by_string_value(a, b)
            or natural(aa, bb)
            or natural(a, b)
        )

    return Comparator(compare_positions, f"by_position({ref!r})")


def chain(*comparators: Any) -> Comparator:
    """
    Create a comparator that returns the first non-zero result of ``comparators``.

    With no comparators every pair compares equal.
    """
    comps = _collect(comparators, "chain")

    def chained(a, b):
        for c in comps:
            result = c(a, b)
            if result:
                return result
        return 0

    return Comparator(chained, f"chain({', '.join(c.name for c in comps)})")


def reverse(c: Comparator | Callable[[Any, Any], Any]) -> Comparator:
    """Create a comparator that negates the result of ``c``."""
    inner = Comparator.of(c)
    return Comparator(lambda a, b: -inner(a, b), f"reverse({inner.name})")


def descending(*comparators: Any) -> Comparator:
    """Create a comparator that negates the first non-zero result of ``comparators``."""
    return reverse(chain(*comparators))
