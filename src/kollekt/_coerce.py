"""Value coercion helpers shared by the combinators, ranges and collections."""

from __future__ import annotations

import dataclasses
import math
from collections.abc import Mapping, Sized
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any


def is_number(value: Any) -> bool:
    """True for real numbers. Booleans are not numbers here."""
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _fixed_point(value: float | Decimal) -> str:
    text = format(Decimal(repr(value)) if isinstance(value, float) else value, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


def to_canonical_string(value: Any) -> str:
    """
    Return the canonical string form of a value.

    Floats and Decimals are rendered in fixed-point notation without
    trailing zeros (``1e-07`` becomes ``"0.0000001"``, ``10.0`` becomes
    ``"10"``), which is what the range generator relies on to find the
    decimal power of a bound.

    Example:
        to_canonical_string(None)     # ""
        to_canonical_string(2.50)     # "2.5"
        to_canonical_string([1, "a"]) # "1,a"
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (float, Decimal)):
        finite = value.is_finite() if isinstance(value, Decimal) else math.isfinite(value)
        return _fixed_point(value) if finite else str(value)
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(to_canonical_string(v) for v in value)
    return str(value)


def to_number(value: Any) -> int | float:
    """
    Convert a value to an int or float, or ``nan`` when it is not numeric.

    Integral strings become ints so that integer ranges stay integers.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (str, bytes)):
        text = to_canonical_string(value).strip()
        if not text:
            return math.nan
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(Decimal(text))
        except (InvalidOperation, ValueError):
            return math.nan
    return math.nan


def is_numeric(value: Any) -> bool:
    """True for numbers and strings that parse as numbers (never for booleans)."""
    if isinstance(value, bool):
        return False
    if is_number(value):
        return not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return not math.isnan(to_number(value))
    return False


def object_values(obj: Any) -> list[Any]:
    """
    Return the values of an object's public fields.

    Mappings yield their values, dataclass instances their field values,
    and plain objects the values of their non-underscore attributes.
    """
    if obj is None:
        return []
    if isinstance(obj, Mapping):
        return list(obj.values())
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return [getattr(obj, f.name) for f in dataclasses.fields(obj)]
    attributes = getattr(obj, "__dict__", None)
    if attributes is None:
        return []
    return [v for k, v in attributes.items() if not k.startswith("_")]


def calculate_length(value: Any) -> int:
    """
    Return the number of characters, elements or fields of a value.

    Numbers and booleans are measured by their canonical string.
    """
    if value is None:
        return 0
    if isinstance(value, (str, bytes, bytearray)):
        return len(value)
    if isinstance(value, (bool, int, float, Decimal)):
        return len(to_canonical_string(value))
    if isinstance(value, Sized):
        return len(value)
    return len(object_values(value))
