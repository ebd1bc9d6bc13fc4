"""
Tests for kollekt comparators

Run with: pytest tests/test_comparators.py -v
"""

import logging

import pytest

from kollekt import (
    Comparator,
    by_length,
    by_position,
    by_string_value,
    by_type,
    chain,
    compare,
    comparator,
    descending,
    natural,
    no_preference,
    reverse,
)


class TestComparator:
    """Test the Comparator function value."""

    def test_results_are_normalised(self):
        diff = Comparator(lambda a, b: a - b, "diff")
        assert diff(1, 10) == -1
        assert diff(10, 1) == 1
        assert diff(3, 3) == 0

    def test_comparator_decorator(self):
        @comparator
        def by_second(a, b):
            return a[1] - b[1]

        assert sorted([(1, 9), (2, 3)], key=by_second.key) == [(2, 3), (1, 9)]

    def test_then_breaks_ties(self):
        c = by_length.then(by_string_value)
        assert sorted(["bb", "a", "ab"], key=c.key) == ["a", "ab", "bb"]

    def test_negation_reverses(self):
        assert sorted(["a", "ccc", "bb"], key=(-by_length).key) == ["ccc", "bb", "a"]


class TestBuiltinComparators:
    """Test the built-in comparators."""

    def test_compare(self):
        assert compare(1, 2) == -1
        assert compare("b", "a") == 1
        assert compare(1, 1) == 0

    def test_compare_unorderable_values_are_equal(self):
        assert compare(1, "a") == 0

    def test_no_preference_keeps_order(self):
        assert sorted([3, 1, 2], key=no_preference.key) == [3, 1, 2]

    def test_by_string_value(self):
        assert by_string_value(10, 9) == -1
        assert by_string_value("a", "a") == 0

    def test_by_length(self):
        assert sorted(["ccc", "a", "bb"], key=by_length.key) == ["a", "bb", "ccc"]

    def test_by_length_counts_digits_of_numbers(self):
        assert by_length(100, 99) == 1

    def test_by_type_groups_kinds(self):
        values = ["a", 1, None, [1], True]
        assert sorted(values, key=by_type.key) == [None, True, 1, "a", [1]]

    def test_natural_orders_mixed_values(self):
        values = [3, "b", None, 1.5, "a", True]
        assert sorted(values, key=natural.key) == [None, True, 1.5, 3, "a", "b"]


class TestByPosition:
    """Test ordering by a reference sequence."""

    def test_orders_by_reference(self):
        by_rank = by_position(["high", "medium", "low"])
        values = ["low", "unknown", "high", "medium"]
        assert sorted(values, key=by_rank.key) == ["high", "medium", "low", "unknown"]

    def test_transform_before_lookup(self):
        c = by_position(["b", "a"], transform=lambda e, ref: e.lower())
        assert sorted(["A", "B"], key=c.key) == ["B", "A"]

    def test_custom_position(self):
        c = by_position(["x"], position=lambda e, ref: len(e))
        assert sorted(["ccc", "a", "bb"], key=c.key) == ["a", "bb", "ccc"]

    def test_position_errors_fall_back(self, caplog):
        def broken(e, ref):
            raise KeyError(e)

        c = by_position(["b", "a"], position=broken)
        with caplog.at_level(logging.WARNING):
            assert sorted(["a", "b"], key=c.key) == ["b", "a"]
        assert "position" in caplog.text

    def test_empty_reference_orders_by_string_value(self):
        assert sorted(["b", "a"], key=by_position([]).key) == ["a", "b"]


class TestChaining:
    """Test chain, reverse and descending."""

    def test_chain_returns_first_non_zero(self):
        c = chain(by_length, by_string_value)
        assert c("ab", "b") == 1
        assert c("a", "b") == -1

    def test_empty_chain_has_no_preference(self):
        assert chain()(1, 2) == 0

    @pytest.mark.parametrize(
        "a,b",
        [("a", "bb"), ("bb", "a"), ("ab", "ba"), ("x", "x"), ("", "zz")],
    )
    def test_reverse_of_chain_negates_chain(self, a, b):
        c = chain(by_length, by_string_value)
        assert reverse(c)(a, b) == -c(a, b)

    def test_descending(self):
        c = descending(by_length, by_string_value)
        assert sorted(["a", "bb", "ab"], key=c.key) == ["bb", "ab", "a"]

    def test_reverse_does_not_alter_original(self):
        reverse(by_length)
        assert by_length("a", "bb") == -1
