"""Predicate function values, primitive predicates and predicate constructors."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date
from typing import Any, Generic

from kollekt import _coerce
from kollekt._collections import varargs
from kollekt._core import Combinator
from kollekt._types import T

logger = logging.getLogger(__name__)


class Predicate(Combinator):
    """
    A function value that decides whether an element is retained.

    Calling a predicate always returns a bool. Predicates compose with
    operators:
        &  = all_of (every predicate must match)
        |  = any_of (at least one predicate must match)
        ~  = negation

    Example:
        is_positive = Predicate(lambda x: x > 0, "is_positive")
        is_positive(5)  # True

        # receives (value, index, collection)
        is_first = Predicate(lambda v, i, c: i == 0, "is_first", indexed=True)
    """

    role = "predicate"

    def __call__(
        self, value: Any, index: int | None = None, collection: Sequence[Any] | None = None
    ) -> bool:
        return bool(super().__call__(value, index, collection))

    def __and__(self, other: Predicate | Callable[..., Any]) -> Predicate:
        return all_of(self, other)

    def __or__(self, other: Predicate | Callable[..., Any]) -> Predicate:
        return any_of(self, other)

    def __invert__(self) -> Predicate:
        inner = self

        def negated(value, index=None, collection=None):
            return not inner(value, index, collection)

        return Predicate(negated, f"not({self.name})", indexed=True)


class PredicateFactory(Generic[T]):
    """
    A factory that creates Predicates when called with arguments.

    Used for parameterized predicates like `longer_than(3)`.
    """

    def __init__(self, fn: Callable[..., bool], name: str):
        self._fn = fn
        self._name = name
        self.__name__ = name

    def __call__(self, *args: Any, **kwargs: Any) -> Predicate:
        fn = self._fn
        name = f"{self._name}({', '.join(map(repr, args))})"
        return Predicate(lambda value: fn(value, *args, **kwargs), name)

    def __repr__(self) -> str:
        return f"PredicateFactory({self._name})"


def rule(fn: Callable[[Any], bool]) -> Predicate:
    """
    Decorator to create a simple predicate (single value argument).

    Example:
        @rule
        def is_even(x: int) -> bool:
            return x % 2 == 0

        is_even(4)  # True

    For parameterized predicates, use @rule_args instead.
    """
    return Predicate(fn, fn.__name__)


def rule_args(fn: Callable[..., bool]) -> PredicateFactory[Any]:
    """
    Decorator to create a parameterized predicate factory.

    Example:
        @rule_args
        def longer_than(s: str, n: int) -> bool:
            return len(s) > n

        p = longer_than(3)  # Returns Predicate
        p("abcd")           # True
    """
    return PredicateFactory(fn, fn.__name__)


def _collect(predicates: Iterable[Any], where: str) -> list[Predicate]:
    """Tag each candidate as a Predicate, skipping anything that cannot be one."""
    collected: list[Predicate] = []
    for candidate in varargs(*predicates):
        try:
            collected.append(Predicate.of(candidate))
        except TypeError as e:
            logger.warning("%s ignored an argument that is not a predicate: %s", where, e)
    return collected


def _names(predicates: Sequence[Predicate]) -> str:
    return ", ".join(p.name for p in predicates)


def _num_expected(n: Any) -> int:
    """Coerce the requested number of matches to an int (defaults to 1)."""
    if _coerce.is_numeric(n):
        value = float(_coerce.to_number(n))
        if math.isfinite(value):
            return int(round(value))
    return 1


def _misconfigured(where: str, num_matches: int, num_predicates: int) -> Predicate:
    logger.warning(
        "%s: the number of predicates to match (%d) is greater than the number "
        "of predicates specified (%d); the returned predicate never matches",
        where,
        num_matches,
        num_predicates,
    )
    return Predicate(lambda value: False, f"{where}(misconfigured)")


# =============================================================================
# Primitive predicates
# =============================================================================


@rule
def always(value: Any) -> bool:
    return True


@rule
def never(value: Any) -> bool:
    return False


@rule
def is_none(value: Any) -> bool:
    return value is None


@rule
def is_not_none(value: Any) -> bool:
    return value is not None


@rule
def is_string(value: Any) -> bool:
    return isinstance(value, str)


@rule
def is_empty_string(value: Any) -> bool:
    return isinstance(value, str) and value == ""


@rule
def is_whitespace(value: Any) -> bool:
    """Strings made only of whitespace (the empty string included)."""
    return isinstance(value, str) and value.strip() == ""


@rule
def is_populated_string(value: Any) -> bool:
    return isinstance(value, str) and value != ""


@rule
def is_non_whitespace(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


@rule
def is_number(value: Any) -> bool:
    """Ints and floats (nan and infinities included), never booleans."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@rule
def is_numeric(value: Any) -> bool:
    """Numbers and strings that parse as numbers."""
    return _coerce.is_numeric(value)


@rule
def is_integer(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if isinstance(value, int):
        return True
    return math.isfinite(value) and abs(value - round(value)) < 1e-10


@rule
def is_valid_number(value: Any) -> bool:
    """Finite ints and floats."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


@rule
def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


@rule
def is_callable(value: Any) -> bool:
    return callable(value)


@rule
def is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))


@rule
def is_mapping(value: Any) -> bool:
    return isinstance(value, Mapping)


@rule
def is_regexp(value: Any) -> bool:
    return isinstance(value, re.Pattern)


@rule
def is_date(value: Any) -> bool:
    return isinstance(value, date)


@rule
def is_populated_array(value: Any) -> bool:
    return isinstance(value, (list, tuple)) and len(value) > 0


@rule
def is_populated_object(value: Any) -> bool:
    """Non-empty containers, or objects with at least one public field."""
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return len(value) > 0
    if value is None or isinstance(value, (str, bytes, bool, int, float)) or callable(value):
        return False
    return len(_coerce.object_values(value)) > 0


@rule
def non_blank(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


# =============================================================================
# Predicate constructors
# =============================================================================


def all_of(*predicates: Any) -> Predicate:
    """
    Create a predicate that matches only if every predicate matches.

    An error raised by any predicate counts as a mismatch and ends the
    evaluation. With no predicates the result always matches.

    Example:
        is_short_word = all_of(is_string, lambda s: len(s) < 5)
        is_short_word("abc")  # True
    """
    preds = _collect(predicates, "all_of")

    def matches_all(value, index=None, collection=None):
        for p in preds:
            if not p.evaluate(value, index, collection).report(f"all_of: {p.name}").matched:
                return False
        return True

    return Predicate(matches_all, f"all_of({_names(preds)})", indexed=True)


def any_of(*predicates: Any) -> Predicate:
    """
    Create a predicate that matches if at least one predicate matches.

    Evaluation stops at the first match. Errors are logged and skipped.
    With no predicates the result never matches.
    """
    preds = _collect(predicates, "any_of")

    def matches_any(value, index=None, collection=None):
        for p in preds:
            if p.evaluate(value, index, collection).report(f"any_of: {p.name}").matched:
                return True
        return False

    return Predicate(matches_any, f"any_of({_names(preds)})", indexed=True)


def none_of(*predicates: Any) -> Predicate:
    """Create a predicate that matches if no predicate matches."""
    preds = _collect(predicates, "none_of")
    matches = any_of(*preds)

    def matches_none(value, index=None, collection=None):
        return not matches(value, index, collection)

    return Predicate(matches_none, f"none_of({_names(preds)})", indexed=True)


def _count_matches(
    preds: Sequence[Predicate], value: Any, index: int | None, collection: Any, where: str
) -> float:
    """Count matching predicates; any error makes the count infinite."""
    count = 0
    for p in preds:
        result = p.evaluate(value, index, collection).report(f"{where}: {p.name}")
        if not result.ok:
            return math.inf
        if result.matched:
            count += 1
    return count


def matches_at_least_n(n: Any, *predicates: Any) -> Predicate:
    """
    Create a predicate that matches when ``n`` or more predicates match.

    Example:
        two_of_three = matches_at_least_n(2, is_string, non_blank, is_numeric)
        two_of_three("abc")  # True
    """
    num = _num_expected(n)
    preds = _collect(predicates, "matches_at_least_n")
    if num > len(preds):
        return _misconfigured("matches_at_least_n", num, len(preds))

    def matches_n_plus(value, index=None, collection=None):
        count = 0
        for p in preds:
            result = p.evaluate(value, index, collection).report(f"matches_at_least_n: {p.name}")
            if result.matched:
                count += 1
                if count >= num:
                    return True
        return count >= num

    return Predicate(matches_n_plus, f"matches_at_least_n({num}, {_names(preds)})", indexed=True)


def matches_exactly_n(n: Any, *predicates: Any) -> Predicate:
    """
    Create a predicate that matches when exactly ``n`` predicates match.

    An error in any predicate makes the element fail.
    """
    num = _num_expected(n)
    preds = _collect(predicates, "matches_exactly_n")
    if num > len(preds):
        return _misconfigured("matches_exactly_n", num, len(preds))

    def matches_exactly(value, index=None, collection=None):
        return _count_matches(preds, value, index, collection, "matches_exactly_n") == num

    return Predicate(matches_exactly, f"matches_exactly_n({num}, {_names(preds)})", indexed=True)


def matches_less_than_n(n: Any, *predicates: Any) -> Predicate:
    """
    Create a predicate that matches when fewer than ``n`` predicates match.

    An error in any predicate makes the element fail.
    """
    num = _num_expected(n)
    preds = _collect(predicates, "matches_less_than_n")
    if num > len(preds):
        return _misconfigured("matches_less_than_n", num, len(preds))

    def matches_fewer(value, index=None, collection=None):
        return _count_matches(preds, value, index, collection, "matches_less_than_n") < num

    return Predicate(matches_fewer, f"matches_less_than_n({num}, {_names(preds)})", indexed=True)


def type_of(*types: Any) -> Predicate:
    """
    Create a predicate that matches instances of any of the given types.

    Example:
        is_text = type_of(str, bytes)
        is_text(b"abc")  # True
    """
    accepted = []
    for t in varargs(*types):
        if isinstance(t, type):
            accepted.append(t)
        else:
            logger.warning("type_of ignored an argument that is not a type: %r", t)
    kinds = tuple(accepted)

    def matches_type(value):
        return bool(kinds) and isinstance(value, kinds)

    return Predicate(matches_type, f"type_of({', '.join(t.__name__ for t in kinds)})")


def matches_regex(pattern: str | re.Pattern[str] | None = None, flags: int = 0) -> Predicate:
    """
    Create a predicate that matches strings in which ``pattern`` is found.

    Values that are not strings never match. Without a pattern every
    string matches.
    """
    if pattern is None:
        rx = re.compile(".*", re.DOTALL)
    elif isinstance(pattern, re.Pattern):
        rx = pattern
    else:
        rx = re.compile(pattern, flags)

    def matches_pattern(value):
        return isinstance(value, str) and rx.search(value) is not None

    return Predicate(matches_pattern, f"matches_regex({rx.pattern!r})")


def _affixes(values: tuple[Any, ...]) -> list[str]:
    return [_coerce.to_canonical_string(v) for v in varargs(*values)]


def starts_with_any(*prefixes: Any) -> Predicate:
    """
    Create a predicate that matches strings starting with any prefix.

    Values are compared through their canonical string. Empty prefixes are
    ignored; with no prefixes at all only blank strings match.
    """
    candidates = _affixes(prefixes)
    populated = tuple(p for p in candidates if p)

    def matches_prefix(value):
        text = _coerce.to_canonical_string(value)
        if not candidates:
            return text.strip() == ""
        return bool(populated) and text.startswith(populated)

    return Predicate(matches_prefix, f"starts_with_any({', '.join(map(repr, candidates))})")


def ends_with_any(*suffixes: Any) -> Predicate:
    """
    Create a predicate that matches strings ending with any suffix.

    Same rules as ``starts_with_any``.
    """
    candidates = _affixes(suffixes)
    populated = tuple(s for s in candidates if s)

    def matches_suffix(value):
        text = _coerce.to_canonical_string(value)
        if not candidates:
            return text.strip() == ""
        return bool(populated) and text.endswith(populated)

    return Predicate(matches_suffix, f"ends_with_any({', '.join(map(repr, candidates))})")


def _contains(values: Sequence[Any], value: Any) -> bool:
    # equality scan so unhashable members are supported
    return any(v is value or v == value for v in values)


def is_in(*values: Any) -> Predicate:
    """
    Create a predicate that matches members of ``values``.

    Example:
        is_vowel = is_in("a", "e", "i", "o", "u")
        is_vowel("e")  # True
    """
    members = varargs(*values)
    return Predicate(lambda value: _contains(members, value), f"is_in({members!r})")


def not_in(*values: Any) -> Predicate:
    """Create a predicate that matches values that are not members of ``values``."""
    members = varargs(*values)
    return Predicate(lambda value: not _contains(members, value), f"not_in({members!r})")


non_empty = any_of(
    is_populated_string, is_populated_object, is_valid_number, is_callable, is_boolean
)
non_empty.name = "non_empty"

is_populated = any_of(
    is_populated_string,
    is_valid_number,
    is_boolean,
    is_regexp,
    is_date,
    is_populated_object,
    is_populated_array,
)
is_populated.name = "is_populated"
