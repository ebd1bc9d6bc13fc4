"""
Tests for kollekt predicates and predicate constructors

Run with: pytest tests/test_predicates.py -v
"""

import logging
import re
from dataclasses import dataclass
from datetime import date

import pytest

from kollekt import (
    Mapper,
    Predicate,
    all_of,
    always,
    any_of,
    ends_with_any,
    is_in,
    is_integer,
    is_number,
    is_numeric,
    is_populated,
    is_populated_object,
    is_string,
    is_valid_number,
    is_whitespace,
    matches_at_least_n,
    matches_exactly_n,
    matches_less_than_n,
    matches_regex,
    never,
    non_blank,
    non_empty,
    none_of,
    not_in,
    rule,
    rule_args,
    starts_with_any,
    type_of,
)

# =============================================================================
# Test Fixtures
# =============================================================================


@dataclass
class Point:
    x: int
    y: int


@pytest.fixture
def boom():
    def explode(value):
        raise RuntimeError("boom")

    return Predicate(explode, "boom")


# =============================================================================
# Predicate Basics
# =============================================================================


class TestPredicate:
    """Test the Predicate function value."""

    def test_simple_predicate(self):
        is_positive = Predicate(lambda x: x > 0, "is_positive")
        assert is_positive(5) is True
        assert is_positive(-5) is False

    def test_result_is_always_bool(self):
        truthy = Predicate(lambda x: x)
        assert truthy("abc") is True
        assert truthy("") is False

    def test_indexed_predicate_receives_position(self):
        is_first = Predicate(lambda v, i, c: i == 0, "is_first", indexed=True)
        assert is_first("a", 0, ["a", "b"]) is True
        assert is_first("b", 1, ["a", "b"]) is False

    def test_rule_decorator(self):
        @rule
        def is_even(x):
            return x % 2 == 0

        assert is_even(4) is True
        assert is_even(3) is False
        assert repr(is_even) == "Predicate(is_even)"

    def test_rule_args_decorator(self):
        @rule_args
        def longer_than(s, n):
            return len(s) > n

        p = longer_than(3)
        assert isinstance(p, Predicate)
        assert p("abcd") is True
        assert p("abc") is False
        assert p.name == "longer_than(3)"

    def test_requires_callable(self):
        with pytest.raises(TypeError):
            Predicate(5)

    def test_of_wraps_plain_callables(self):
        p = Predicate.of(lambda x: x == 1)
        assert isinstance(p, Predicate)
        assert p(1) is True

    def test_of_rejects_other_roles(self):
        with pytest.raises(TypeError):
            Predicate.of(Mapper(str.upper))

    def test_evaluate_captures_errors(self, boom):
        result = boom.evaluate(1)
        assert result.ok is False
        assert isinstance(result.error, RuntimeError)
        assert result.matched is False


class TestOperators:
    """Test predicate operators."""

    def test_and(self):
        p = is_string & non_blank
        assert p("a") is True
        assert p(" ") is False
        assert p(1) is False

    def test_or(self):
        p = is_number | is_string
        assert p("x") is True
        assert p(None) is False

    def test_invert(self):
        p = ~is_string
        assert p(5) is True
        assert p("a") is False
        assert p.name == "not(is_string)"

    def test_operators_accept_plain_callables(self):
        p = is_number & (lambda x: x > 10)
        assert p(11) is True
        assert p(9) is False


# =============================================================================
# Primitive Predicates
# =============================================================================


class TestPrimitives:
    """Parameterized tests for the primitive predicates."""

    def test_always_and_never(self):
        assert always(None) is True
        assert never("anything") is False

    @pytest.mark.parametrize(
        "value,expected",
        [("", True), ("  \t", True), ("a", False), (None, False)],
    )
    def test_is_whitespace(self, value, expected):
        assert is_whitespace(value) is expected

    @pytest.mark.parametrize(
        "value,expected",
        [(2, True), (2.0, True), (2.5, False), (True, False), ("2", False)],
    )
    def test_is_integer(self, value, expected):
        assert is_integer(value) is expected

    @pytest.mark.parametrize(
        "value,expected",
        [(3, True), (0.5, True), (float("nan"), False), (float("inf"), False), (True, False)],
    )
    def test_is_valid_number(self, value, expected):
        assert is_valid_number(value) is expected

    @pytest.mark.parametrize(
        "value,expected",
        [(1, True), ("12.5", True), (" 7 ", True), ("abc", False), (True, False), (None, False)],
    )
    def test_is_numeric(self, value, expected):
        assert is_numeric(value) is expected

    @pytest.mark.parametrize(
        "value,expected",
        [({}, False), ({"a": 1}, True), ([1], True), ("x", False), (Point(1, 2), True)],
    )
    def test_is_populated_object(self, value, expected):
        assert is_populated_object(value) is expected

    @pytest.mark.parametrize(
        "value,expected",
        [("", False), (0, True), (False, True), ([], False), ({"a": 1}, True), (None, False)],
    )
    def test_non_empty(self, value, expected):
        assert non_empty(value) is expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, False),
            ("a", True),
            (re.compile("x"), True),
            (date(2024, 1, 1), True),
            ([], False),
        ],
    )
    def test_is_populated(self, value, expected):
        assert is_populated(value) is expected


# =============================================================================
# Predicate Constructors
# =============================================================================


class TestLogicalConstructors:
    """Test all_of, any_of and none_of."""

    def test_all_of(self):
        p = all_of(is_string, lambda s: len(s) < 5)
        assert p("abc") is True
        assert p("abcdef") is False

    def test_all_of_empty_always_matches(self):
        assert all_of()(None) is True

    def test_all_of_error_counts_as_false(self, boom, caplog):
        with caplog.at_level(logging.WARNING):
            assert all_of(always, boom)(1) is False
        assert "boom" in caplog.text

    def test_all_of_stops_at_first_failure(self):
        calls = []
        spy = Predicate(lambda v: calls.append(v) or True)
        all_of(never, spy)(1)
        assert calls == []

    def test_any_of_swallows_errors_and_continues(self, boom, caplog):
        with caplog.at_level(logging.WARNING):
            assert any_of(boom, always)(1) is True
        assert "Ignoring error" in caplog.text

    def test_any_of_empty_never_matches(self):
        assert any_of()(1) is False

    def test_none_of(self):
        p = none_of(is_string, is_number)
        assert p(None) is True
        assert p("a") is False
        assert none_of()(1) is True

    def test_accepts_a_list_of_predicates(self):
        p = all_of([is_string, non_blank])
        assert p("a") is True
        assert p(" ") is False

    def test_skips_non_callables(self, caplog):
        with caplog.at_level(logging.WARNING):
            p = all_of(is_string, 42)
        assert p("a") is True
        assert "not a predicate" in caplog.text


class TestCountingConstructors:
    """Test the matches_*_n constructors."""

    def test_matches_at_least_n(self):
        p = matches_at_least_n(2, is_string, non_blank, is_numeric)
        assert p("abc") is True
        assert p("") is False

    def test_matches_exactly_n(self):
        p = matches_exactly_n(1, is_string, non_blank, is_numeric)
        assert p("  ") is True
        assert p("abc") is False

    def test_matches_exactly_n_fails_on_error(self, boom):
        assert matches_exactly_n(1, always, boom)(1) is False

    def test_matches_less_than_n(self):
        p = matches_less_than_n(2, is_string, non_blank, is_numeric)
        assert p(" ") is True
        assert p("1") is False

    @pytest.mark.parametrize("constructor", [matches_at_least_n, matches_exactly_n])
    def test_asking_for_too_many_matches_never_matches(self, constructor, caplog):
        with caplog.at_level(logging.WARNING):
            p = constructor(3, always, always)
        assert "greater than the number" in caplog.text
        assert p("anything") is False

    def test_n_is_coerced(self):
        assert matches_at_least_n("1", always)(None) is True


class TestValueConstructors:
    """Test constructors that compare against supplied values."""

    def test_type_of(self):
        is_text = type_of(str, bytes)
        assert is_text(b"x") is True
        assert is_text(1) is False

    def test_type_of_without_types_never_matches(self):
        assert type_of()("x") is False

    def test_matches_regex(self):
        p = matches_regex(r"^a\d")
        assert p("a1b") is True
        assert p("b1") is False
        assert p(5) is False

    def test_matches_regex_compiled_and_default(self):
        assert matches_regex(re.compile("x", re.I))("X") is True
        assert matches_regex()("") is True

    def test_starts_with_any(self):
        p = starts_with_any("ab", "x")
        assert p("abc") is True
        assert p("xyz") is True
        assert p("zab") is False

    def test_starts_with_any_without_prefixes_matches_blank(self):
        p = starts_with_any()
        assert p(" ") is True
        assert p("a") is False

    def test_starts_with_only_empty_prefixes_never_matches(self):
        assert starts_with_any("")("abc") is False

    def test_ends_with_any_uses_canonical_strings(self):
        p = ends_with_any(1)
        assert p("v1") is True
        assert p(21) is True
        assert p("v2") is False

    def test_is_in_and_not_in(self):
        assert is_in(1, 2, 3)(2) is True
        assert is_in([1, 2, 3])(4) is False
        assert not_in("a")("b") is True
        assert not_in("a")("a") is False

    def test_is_in_supports_unhashable_members(self):
        assert is_in([[1], [2]])([1]) is True
