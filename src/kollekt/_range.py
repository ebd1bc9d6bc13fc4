"""Lazy numeric and character sequences."""

from __future__ import annotations

import dataclasses
import logging
import math
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from decimal import Decimal
from enum import IntEnum
from typing import Any

from kollekt import _coerce
from kollekt._collections import unique
from kollekt._errors import InvalidArgumentError

logger = logging.getLogger(__name__)

Number = int | float


class IncrementRule(IntEnum):
    """How the step between successive values of a range is computed."""

    SEQUENCE_LENGTH = -1
    """Step by the number of distinct characters (or parts) of the value"""

    DERIVE = 0
    """Step by the power of ten of the value"""

    INCREMENT = 1
    """Step by 1, or by the smallest decimal place of a fractional value"""

    SEQUENCE_PLUS_LAST_SKIP = 2
    """Step by the sequence length plus the gap between the last two characters, plus 1"""


@dataclass(frozen=True)
class RangeOptions:
    """
    Options for range_of.

    Attributes:
        inclusive: If True the end value is produced when it is reached
        increment_rule: How the step between values is computed
    """

    inclusive: bool = False
    increment_rule: IncrementRule = IncrementRule.INCREMENT


DEFAULT_NUMERIC_RANGE_OPTIONS = RangeOptions(
    inclusive=False, increment_rule=IncrementRule.INCREMENT
)
DEFAULT_CHARACTER_RANGE_OPTIONS = RangeOptions(
    inclusive=True, increment_rule=IncrementRule.SEQUENCE_LENGTH
)


def extract_scalar(value: Any, from_end: bool = False, _depth: int = 0) -> Any:
    """
    Return the first (or last) scalar nested in ``value``.

    Example:
        extract_scalar([[1, 2], [3, 4]])                 # 1
        extract_scalar([[1, 2], [3, 4]], from_end=True)  # 4
        extract_scalar("abc")                            # "abc"
    """
    if isinstance(value, Mapping):
        value = list(value.values())
    if not isinstance(value, (list, tuple)):
        return value
    if not value:
        return None
    element = value[-1] if from_end else value[0]
    if isinstance(element, (list, tuple, Mapping)) and _depth < 6:
        return extract_scalar(element, from_end, _depth + 1)
    return element


def find_exponent(value: Any) -> int:
    """
    Return the power of ten of a number's least significant digit.

    Fractional numbers return minus the count of significant decimal
    places; whole numbers return one less than their digit count. For a
    sequence the smallest exponent of its parts is returned.

    Example:
        find_exponent(10.25)  # -2
        find_exponent(500)    # 2
        find_exponent(0)      # 0
    """
    if isinstance(value, (list, tuple)):
        return min((find_exponent(v) for v in value), default=0)
    if not _coerce.is_numeric(value):
        return 0
    number = _coerce.to_number(value)
    if not math.isfinite(number):
        return 0
    integer, _, fraction = _coerce.to_canonical_string(abs(number)).partition(".")
    if integer.startswith("0"):
        integer = integer[1:]
    integer = integer or "0"
    fraction = fraction.rstrip("0")
    return -len(fraction) if fraction else len(integer) - 1


def _sequence_length(value: Any) -> int:
    if isinstance(value, (list, tuple)):
        return len(unique(value))
    if isinstance(value, str) and not _coerce.is_numeric(value):
        return len(set(value))
    return 1


def _last_skip(value: Any) -> Number:
    if isinstance(value, str):
        return ord(value[-1]) - ord(value[-2])
    return _coerce.to_number(value[-1]) - _coerce.to_number(value[-2])


def calculate_increment(value: Any, rule: IncrementRule | int) -> tuple[Number, int]:
    """
    Return ``(increment, power)`` for a range bound under ``rule``.

    A rule that yields a non-positive increment falls back to DERIVE.

    Example:
        calculate_increment(10.5, IncrementRule.INCREMENT)        # (0.1, -1)
        calculate_increment("ace", IncrementRule.SEQUENCE_LENGTH) # (3, 0)
    """
    rule = _parse_rule(rule)
    power = find_exponent(value) if _coerce.is_numeric(extract_scalar(value)) else 0
    derived: Number = 10**power

    if rule is IncrementRule.SEQUENCE_LENGTH:
        increment: Number = _sequence_length(value)
    elif rule is IncrementRule.SEQUENCE_PLUS_LAST_SKIP:
        length = _sequence_length(value)
        increment = length + (_last_skip(value) if length > 1 else 0) + 1
    elif rule is IncrementRule.INCREMENT:
        increment = min(1, derived)
    else:
        increment = derived

    if increment <= 0:
        logger.debug("Increment %r for %r is not positive; deriving it instead", increment, value)
        increment = derived
    return increment, power


def _parse_rule(rule: Any) -> IncrementRule:
    try:
        return IncrementRule(rule)
    except ValueError:
        raise InvalidArgumentError(f"Unknown increment rule: {rule!r}") from None


def _check_bound(value: Any, name: str) -> None:
    if value is None or isinstance(value, bool):
        raise InvalidArgumentError(f"The {name} of a range cannot be {value!r}")
    if isinstance(value, Mapping):
        raise InvalidArgumentError(f"The {name} of a range cannot be a mapping")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidArgumentError(f"The {name} of a range must be finite, got {value!r}")
    if isinstance(value, Decimal) and not value.is_finite():
        raise InvalidArgumentError(f"The {name} of a range must be finite, got {value!r}")
    if not isinstance(value, (int, float, Decimal, str, list, tuple)):
        raise InvalidArgumentError(
            f"The {name} of a range must be a number or a string, got {type(value).__name__}"
        )


def _resolve_options(
    options: RangeOptions | Mapping[str, Any] | bool | None,
    defaults: RangeOptions,
    inclusive: bool | None,
    increment_rule: IncrementRule | int | None,
) -> RangeOptions:
    if isinstance(options, RangeOptions):
        resolved = options
    elif isinstance(options, bool):
        resolved = dataclasses.replace(defaults, inclusive=options)
    elif isinstance(options, Mapping):
        resolved = dataclasses.replace(
            defaults, **{k: v for k, v in options.items() if k in ("inclusive", "increment_rule")}
        )
    else:
        resolved = defaults
    if inclusive is not None:
        resolved = dataclasses.replace(resolved, inclusive=inclusive)
    if increment_rule is not None:
        resolved = dataclasses.replace(resolved, increment_rule=increment_rule)
    return dataclasses.replace(
        resolved,
        inclusive=bool(resolved.inclusive),
        increment_rule=_parse_rule(resolved.increment_rule),
    )


def _round_half_up(value: float, places: int) -> Number:
    if places <= 0:
        return math.floor(value + 0.5)
    scale = 10**places
    return math.floor(value * scale + 0.5) / scale


class Range:
    """
    A lazy, finite sequence from one bound towards another.

    Numeric bounds (numbers, numeric strings, or a sequence of numbers as
    the start) produce numbers; any non-numeric string bound switches to
    character mode, where every character of the value is stepped
    independently until a value reaches the last character of the end
    bound. Each ``iter()`` starts a fresh pass that holds only the current
    value.

    Example:
        list(Range(0, 5))                          # [0, 1, 2, 3, 4]
        list(Range(5, 0))                          # [5, 4, 3, 2, 1]
        list(Range("a", "e"))                      # ["a", "b", "c", "d", "e"]
        list(Range("abc", "xyz", inclusive=True))  # ["abc", "def", ..., "vwx", "yz"]

    Raises:
        InvalidArgumentError: If the bounds are not compatible
    """

    def __init__(
        self,
        from_: Any,
        to: Any,
        options: RangeOptions | Mapping[str, Any] | bool | None = None,
        *,
        inclusive: bool | None = None,
        increment_rule: IncrementRule | int | None = None,
    ):
        _check_bound(from_, "start")
        _check_bound(to, "end")
        if isinstance(to, (list, tuple)):
            raise InvalidArgumentError("The end of a range must be a number or a string")

        if isinstance(from_, (list, tuple)):
            if not from_ or not all(
                _coerce.is_numeric(p) and math.isfinite(_coerce.to_number(p)) for p in from_
            ):
                raise InvalidArgumentError(
                    "The start of a range must be a number, a string, or a sequence of numbers"
                )
            if not _coerce.is_numeric(to):
                raise InvalidArgumentError("A sequence of numbers can only range to a number")

        parts = list(from_) if isinstance(from_, (list, tuple)) else [from_]
        self.numeric = all(_coerce.is_numeric(p) for p in parts) and _coerce.is_numeric(to)

        if self.numeric:
            start = (
                [_coerce.to_number(p) for p in from_]
                if isinstance(from_, (list, tuple))
                else _coerce.to_number(from_)
            )
            end = _coerce.to_number(to)
            if not math.isfinite(extract_scalar(start, True)) or not math.isfinite(end):
                raise InvalidArgumentError("The bounds of a range must be finite")
            defaults = DEFAULT_NUMERIC_RANGE_OPTIONS
        else:
            start = _coerce.to_canonical_string(from_)
            end = _coerce.to_canonical_string(to)
            if not end:
                raise InvalidArgumentError("The end of a character range cannot be empty")
            defaults = DEFAULT_CHARACTER_RANGE_OPTIONS

        self.from_ = start
        self.to = end
        self.options = _resolve_options(options, defaults, inclusive, increment_rule)

        rule = self.options.increment_rule
        if self.numeric:
            self.sign = -1 if extract_scalar(start, True) > end else 1
            inc_from, power_from = calculate_increment(start, rule)
            inc_to, power_to = calculate_increment(end, rule)
            self.increment: Number = min(inc_from, inc_to) * self.sign
            self.precision = max(-power_from, -power_to)
        else:
            self.sign = -1 if start > end else 1
            inc_from, _ = calculate_increment(start, rule)
            self.increment = max(1, int(inc_from)) * self.sign
            self.precision = 0

        logger.debug(
            "Range %r -> %r: increment=%r precision=%d options=%r",
            self.from_,
            self.to,
            self.increment,
            self.precision,
            self.options,
        )

    @property
    def inclusive(self) -> bool:
        return self.options.inclusive

    def __iter__(self) -> Iterator[Any]:
        if self.numeric:
            return self._numbers()
        return self._characters()

    def __repr__(self) -> str:
        return (
            f"Range({self.from_!r}, {self.to!r}, inclusive={self.inclusive}, "
            f"increment_rule={self.options.increment_rule.name})"
        )

    # -------------------------------------------------
    # Numeric mode
    # -------------------------------------------------

    def _within_numbers(self, value: Any) -> bool:
        current = extract_scalar(value, True)
        if self.sign > 0:
            return current <= self.to if self.inclusive else current < self.to
        return current >= self.to if self.inclusive else current > self.to

    def _step_number(self, value: Number) -> Number:
        stepped = value + self.increment
        if isinstance(stepped, int):
            return stepped
        return _round_half_up(stepped, self.precision)

    def _advances(self, value: Any, stepped: Any) -> bool:
        moved = extract_scalar(stepped, True) - extract_scalar(value, True)
        return moved * self.sign > 0

    def _numbers(self) -> Iterator[Any]:
        value = self.from_
        while self._within_numbers(value):
            if isinstance(value, list):
                yield list(value)
                stepped = [self._step_number(v) for v in value]
            else:
                yield value
                stepped = self._step_number(value)
            # float precision can swallow the increment near large bounds
            if not self._advances(value, stepped):
                logger.warning(
                    "Range %r -> %r stopped at %r: a step of %r no longer advances",
                    self.from_,
                    self.to,
                    value,
                    self.increment,
                )
                return
            value = stepped

    # -------------------------------------------------
    # Character mode
    # -------------------------------------------------

    def _within_characters(self, value: str, stop: str) -> bool:
        first = value[:1]
        if not first:
            return False
        if self.sign > 0:
            return first <= stop if self.inclusive else first < stop
        return first >= stop if self.inclusive else first > stop

    def _shift(self, text: str, stop: str | None = None) -> str:
        """Step every character by the increment, dropping those past ``stop``."""
        limit = ord(stop) if stop is not None else None
        shifted = []
        for char in text:
            code = ord(char) + self.increment
            # no carry and no wraparound
            if not 0 <= code <= 0x10FFFF:
                continue
            if limit is not None and (code - limit) * self.sign > 0:
                continue
            shifted.append(chr(code))
        return "".join(shifted)

    def _characters(self) -> Iterator[str]:
        stop = self.to[-1]
        length = len(self.from_)
        value = self.from_
        while self._within_characters(value, stop):
            yield value
            if stop in value:
                break
            if len(value) < length:
                value += self._shift(value[-1])
            value = self._shift(value, stop)
            if stop in value:
                value = value[: value.rindex(stop)] + (stop if self.inclusive else "")


def range_of(
    from_: Any,
    to: Any,
    options: RangeOptions | Mapping[str, Any] | bool | None = None,
    *,
    inclusive: bool | None = None,
    increment_rule: IncrementRule | int | None = None,
) -> Range:
    """
    Return a lazy range from ``from_`` towards ``to``.

    Numeric ranges exclude the end by default and step by
    ``IncrementRule.INCREMENT``; character ranges include it and step by
    ``IncrementRule.SEQUENCE_LENGTH``. ``options`` may be a RangeOptions,
    a mapping of its fields, or a bool meaning ``inclusive``; the keyword
    arguments override it.

    Example:
        list(range_of(0, 10, inclusive=True))  # [0, 1, ..., 10]
        list(range_of(0.0, 1.5))               # [0.0, 0.1, ..., 1.4]
        list(range_of("ace", "z", increment_rule=IncrementRule.SEQUENCE_PLUS_LAST_SKIP))
        # ["ace", "gik", "moq", "suw", "y"]

    Raises:
        InvalidArgumentError: If the bounds are not compatible
    """
    return Range(from_, to, options, inclusive=inclusive, increment_rule=increment_rule)
