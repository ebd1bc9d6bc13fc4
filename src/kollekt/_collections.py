"""Conversion of arbitrary values into lists, and list post-processing."""

from __future__ import annotations

import dataclasses
import itertools
import logging
import math
from collections.abc import Callable, Hashable, Iterable, Mapping
from dataclasses import dataclass
from functools import singledispatch
from typing import Any

from kollekt._comparators import Comparator, natural
from kollekt._core import Combinator

logger = logging.getLogger(__name__)

DEFAULT_ITERABLE_LIMIT = 32_768


@dataclass(frozen=True)
class AsArrayOptions:
    """
    Options controlling how ``as_array`` builds and post-processes a list.

    Attributes:
        flatten: True to flatten nested lists completely, or a depth
        split_on: Separator used to split a string into parts
        filter: Predicate (or callable) an element must satisfy to be kept
        sanitize: Drop None and empty strings
        type: Type (or tuple of types) every kept element must be an instance of
        unique: Drop duplicates, keeping the first occurrence
        comparator: Comparator used to sort the result
        iterable_limit: Maximum number of elements taken from a non-list iterable
        remove_nan: Drop nan
        remove_infinity: Drop positive and negative infinity
    """

    flatten: bool | int = False
    split_on: str | None = None
    filter: Callable[..., Any] | None = None
    sanitize: bool = False
    type: type | tuple[type, ...] | None = None
    unique: bool = False
    comparator: Callable[[Any, Any], Any] | None = None
    iterable_limit: int = DEFAULT_ITERABLE_LIMIT
    remove_nan: bool = False
    remove_infinity: bool = False


DEFAULT_AS_ARRAY_OPTIONS = AsArrayOptions()


def _is_float(value: Any) -> bool:
    return isinstance(value, float)


# =============================================================================
# Conversion
# =============================================================================


@singledispatch
def into_sequence(value: Any, options: AsArrayOptions = DEFAULT_AS_ARRAY_OPTIONS) -> list[Any]:
    """
    Convert ``value`` into a new list.

    Iterables contribute at most ``options.iterable_limit`` elements;
    anything else becomes a one-element list.
    """
    if isinstance(value, Iterable):
        limit = max(1, options.iterable_limit)
        return list(itertools.islice(value, limit))
    return [value]


@into_sequence.register(type(None))
def _(value: None, options: AsArrayOptions = DEFAULT_AS_ARRAY_OPTIONS) -> list[Any]:
    return []


@into_sequence.register(str)
def _(value: str, options: AsArrayOptions = DEFAULT_AS_ARRAY_OPTIONS) -> list[Any]:
    if value == "":
        return []
    if options.split_on:
        return value.split(options.split_on)
    return [value]


@into_sequence.register(bytes)
@into_sequence.register(bytearray)
def _(value: bytes, options: AsArrayOptions = DEFAULT_AS_ARRAY_OPTIONS) -> list[Any]:
    return [value]


@into_sequence.register(list)
@into_sequence.register(tuple)
def _(value: list[Any], options: AsArrayOptions = DEFAULT_AS_ARRAY_OPTIONS) -> list[Any]:
    return list(value)


@into_sequence.register(Mapping)
def _(value: Mapping[Any, Any], options: AsArrayOptions = DEFAULT_AS_ARRAY_OPTIONS) -> list[Any]:
    return list(value.values())


def as_array(
    value: Any, options: AsArrayOptions | None = None, **overrides: Any
) -> list[Any]:
    """
    Return a new list built from ``value`` and post-processed by ``options``.

    Keyword arguments override individual fields of ``options``.

    Example:
        as_array("a.b.c", split_on=".")                     # ["a", "b", "c"]
        as_array([3, None, 1, 3], sanitize=True, unique=True,
                 comparator=natural)                         # [1, 3]
    """
    opts = options or DEFAULT_AS_ARRAY_OPTIONS
    if overrides:
        opts = dataclasses.replace(opts, **overrides)
    return process_options(into_sequence(value, opts), opts)


def process_options(values: Iterable[Any], options: AsArrayOptions | None = None) -> list[Any]:
    """
    Apply the post-processing steps of ``options`` to a copy of ``values``.

    Steps run in order: flatten, sanitize, type, remove nan, remove
    infinity, filter, unique, sort.
    """
    opts = options or DEFAULT_AS_ARRAY_OPTIONS
    arr = list(values)

    if opts.flatten is not False and opts.flatten is not None:
        depth = opts.flatten
        if isinstance(depth, bool) or depth <= 0:
            depth = math.inf
        arr = flatten(arr, depth)

    if opts.sanitize:
        arr = [e for e in arr if e is not None and e != ""]

    if opts.type is not None:
        arr = [e for e in arr if isinstance(e, opts.type)]

    if opts.remove_nan:
        arr = [e for e in arr if not (_is_float(e) and math.isnan(e))]

    if opts.remove_infinity:
        arr = [e for e in arr if not (_is_float(e) and math.isinf(e))]

    if opts.filter is not None:
        arr = _apply_filter(arr, opts.filter)

    if opts.unique:
        arr = unique(arr)

    if opts.comparator is not None:
        arr = sort_values(arr, opts.comparator)

    return arr


def _apply_filter(arr: list[Any], predicate: Callable[..., Any]) -> list[Any]:
    if isinstance(predicate, Combinator):
        return [e for i, e in enumerate(arr) if predicate(e, i, arr)]
    return [e for e in arr if predicate(e)]


# =============================================================================
# Helpers
# =============================================================================


def flatten(values: Iterable[Any], depth: float = math.inf) -> list[Any]:
    """
    Return a new list with nested lists and tuples expanded up to ``depth`` levels.

    Example:
        flatten([1, [2, [3, [4]]]])     # [1, 2, 3, 4]
        flatten([1, [2, [3, [4]]]], 1)  # [1, 2, [3, [4]]]
    """
    result: list[Any] = []
    for value in values:
        if isinstance(value, (list, tuple)) and depth > 0:
            result.extend(flatten(value, depth - 1))
        else:
            result.append(value)
    return result


def _identity_key(value: Any) -> Any:
    # 1, 1.0 and True are distinct elements here
    return (type(value), value)


def unique(values: Iterable[Any]) -> list[Any]:
    """
    Return the distinct elements of ``values`` in first-seen order.

    Unhashable elements (lists, dicts) are compared by equality.
    """
    seen: set[Any] = set()
    unhashable: list[Any] = []
    result: list[Any] = []
    for value in values:
        if isinstance(value, Hashable):
            try:
                key = _identity_key(value)
                if key in seen:
                    continue
                seen.add(key)
                result.append(value)
                continue
            except TypeError:
                # tuples holding unhashable members
                pass
        if any(type(u) is type(value) and u == value for u in unhashable):
            continue
        unhashable.append(value)
        result.append(value)
    return result


def prune(values: Any, reject_nan: bool = True, *rejected_types: type) -> list[Any]:
    """
    Return a list of the elements of ``values`` with None and empty strings removed.

    When ``reject_nan`` is True, nan and infinite floats are also removed.
    Elements that are instances of ``rejected_types`` are removed.
    """
    pruned = as_array(values, sanitize=True)
    if rejected_types:
        pruned = [e for e in pruned if not isinstance(e, rejected_types)]
    if reject_nan:
        pruned = [e for e in pruned if not (_is_float(e) and not math.isfinite(e))]
    return pruned


def varargs(*args: Any) -> list[Any]:
    """
    Normalise variadic arguments into a list.

    A single list or tuple argument is expanded so that ``f([a, b])`` and
    ``f(a, b)`` are equivalent.
    """
    if len(args) == 1 and isinstance(args[0], (list, tuple)):
        return list(args[0])
    return list(args)


def sort_values(
    values: Iterable[Any], comparator: Callable[[Any, Any], Any] | None = None
) -> list[Any]:
    """
    Return a sorted copy of ``values``.

    Without a comparator the ``natural`` ordering is used. If the
    comparator raises, a warning is logged and the unsorted copy returned.
    """
    arr = list(values)
    comp = Comparator.of(comparator) if comparator is not None else natural
    try:
        return sorted(arr, key=comp.key)
    except Exception as e:
        logger.warning("Failed to sort values with %r: %r", comp, e)
        return arr
