"""
Kollekt - Composable Collection Combinators, Ranges & Bounded Queues

A Python library for filtering, mapping and sorting collections with
composable function values, replaying those steps as reusable pipelines,
generating lazy numeric and character ranges, and buffering items in
bounded, evicting queues.

Operators:
    &  = all_of for predicates, concatenation for chains
    |  = any_of for predicates
    ~  = negation for predicates
    >> = composition for mappers
    -  = reversal for comparators

Example:
    from kollekt import Transformer, TransformerChain, natural, non_blank, rule, trimmed

    @rule
    def is_short(s):
        return len(s) < 4

    pipeline = TransformerChain(
        Transformer("map", trimmed),
        Transformer("filter", is_short & non_blank),
        Transformer("sort", natural),
    )

    pipeline.apply([" pear ", "fig", "  ", "kiwi"])  # ["fig"]
"""

from __future__ import annotations

from kollekt._coerce import (
    calculate_length,
    is_numeric as is_numeric_value,
    object_values,
    to_canonical_string,
    to_number as to_number_value,
)
from kollekt._collections import (
    DEFAULT_AS_ARRAY_OPTIONS,
    AsArrayOptions,
    as_array,
    flatten,
    into_sequence,
    process_options,
    prune,
    sort_values,
    unique,
    varargs,
)
from kollekt._comparators import (
    TYPE_SORT_ORDER,
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
from kollekt._core import Combinator, Evaluation
from kollekt._errors import EmptyQueueError, InvalidArgumentError, KollektError
from kollekt._mappers import (
    Mapper,
    append,
    compose,
    identity,
    mapper,
    prepend,
    replace,
    to_lowercase,
    to_number,
    to_string,
    to_uppercase,
    to_valid_number,
    trimmed,
)
from kollekt._predicates import (
    Predicate,
    PredicateFactory,
    all_of,
    always,
    any_of,
    ends_with_any,
    is_array,
    is_boolean,
    is_callable,
    is_date,
    is_empty_string,
    is_in,
    is_integer,
    is_mapping,
    is_non_whitespace,
    is_none,
    is_not_none,
    is_number,
    is_numeric,
    is_populated,
    is_populated_array,
    is_populated_object,
    is_populated_string,
    is_regexp,
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
from kollekt._queue import (
    MAX_QUEUE_SIZE,
    AsyncBoundedQueue,
    BoundedQueue,
    EvictionResult,
    enqueue,
)
from kollekt._range import (
    DEFAULT_CHARACTER_RANGE_OPTIONS,
    DEFAULT_NUMERIC_RANGE_OPTIONS,
    IncrementRule,
    Range,
    RangeOptions,
    calculate_increment,
    extract_scalar,
    find_exponent,
    range_of,
)
from kollekt._tracing import (
    LoggingHook,
    OpenTelemetryHook,
    PrintHook,
    TraceConfig,
    TraceHook,
    run_traced,
    use_tracing,
)
from kollekt._transformer import (
    SPLIT_ON_DOT,
    TO_NON_BLANK_STRINGS,
    TO_NON_EMPTY_STRINGS,
    TRIMMED_NON_BLANK_STRINGS,
    TRIMMED_NON_EMPTY_STRINGS,
    ComparatorChain,
    FilterChain,
    MapperChain,
    Operation,
    Transformer,
    TransformerChain,
    chain_filters,
    chain_mappers,
    to_non_blank_strings,
    to_non_empty_strings,
    to_trimmed_non_blank_strings,
    to_trimmed_non_empty_strings,
)

__version__ = "0.1.0"
__all__ = [
    # Core
    "Combinator",
    "Evaluation",
    # Errors
    "KollektError",
    "InvalidArgumentError",
    "EmptyQueueError",
    # Coercion
    "to_canonical_string",
    "to_number_value",
    "is_numeric_value",
    "object_values",
    "calculate_length",
    # Predicates
    "Predicate",
    "PredicateFactory",
    "rule",
    "rule_args",
    "always",
    "never",
    "is_none",
    "is_not_none",
    "is_string",
    "is_empty_string",
    "is_whitespace",
    "is_populated_string",
    "is_non_whitespace",
    "is_number",
    "is_numeric",
    "is_integer",
    "is_valid_number",
    "is_boolean",
    "is_callable",
    "is_array",
    "is_mapping",
    "is_regexp",
    "is_date",
    "is_populated_array",
    "is_populated_object",
    "non_empty",
    "is_populated",
    "non_blank",
    "all_of",
    "any_of",
    "none_of",
    "matches_at_least_n",
    "matches_exactly_n",
    "matches_less_than_n",
    "type_of",
    "matches_regex",
    "starts_with_any",
    "ends_with_any",
    "is_in",
    "not_in",
    # Mappers
    "Mapper",
    "mapper",
    "identity",
    "to_string",
    "trimmed",
    "to_number",
    "to_valid_number",
    "to_lowercase",
    "to_uppercase",
    "append",
    "prepend",
    "replace",
    "compose",
    # Comparators
    "Comparator",
    "TYPE_SORT_ORDER",
    "comparator",
    "compare",
    "no_preference",
    "natural",
    "by_string_value",
    "by_type",
    "by_length",
    "by_position",
    "chain",
    "reverse",
    "descending",
    # Collections
    "AsArrayOptions",
    "DEFAULT_AS_ARRAY_OPTIONS",
    "into_sequence",
    "as_array",
    "process_options",
    "flatten",
    "unique",
    "prune",
    "varargs",
    "sort_values",
    # Pipelines
    "Operation",
    "Transformer",
    "TransformerChain",
    "FilterChain",
    "MapperChain",
    "ComparatorChain",
    "TO_NON_EMPTY_STRINGS",
    "TO_NON_BLANK_STRINGS",
    "TRIMMED_NON_EMPTY_STRINGS",
    "TRIMMED_NON_BLANK_STRINGS",
    "SPLIT_ON_DOT",
    "to_non_empty_strings",
    "to_non_blank_strings",
    "to_trimmed_non_empty_strings",
    "to_trimmed_non_blank_strings",
    "chain_filters",
    "chain_mappers",
    # Tracing
    "TraceHook",
    "TraceConfig",
    "use_tracing",
    "run_traced",
    "PrintHook",
    "LoggingHook",
    "OpenTelemetryHook",
    # Ranges
    "IncrementRule",
    "RangeOptions",
    "DEFAULT_NUMERIC_RANGE_OPTIONS",
    "DEFAULT_CHARACTER_RANGE_OPTIONS",
    "find_exponent",
    "calculate_increment",
    "extract_scalar",
    "Range",
    "range_of",
    # Queues
    "MAX_QUEUE_SIZE",
    "EvictionResult",
    "BoundedQueue",
    "AsyncBoundedQueue",
    "enqueue",
]
