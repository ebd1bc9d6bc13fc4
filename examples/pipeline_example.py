"""
Example: Cleaning and ordering collections with Kollekt

This example shows how kollekt function values compose into reusable
pipelines, how those pipelines are traced, and how ranges and bounded
queues fit around them.
"""

import logging

from kollekt import (
    BoundedQueue,
    ComparatorChain,
    IncrementRule,
    LoggingHook,
    Transformer,
    TransformerChain,
    as_array,
    by_length,
    by_position,
    natural,
    non_blank,
    range_of,
    rule,
    rule_args,
    run_traced,
    to_lowercase,
    trimmed,
)

# =============================================================================
# 1. Predicates compose with & | ~
# =============================================================================


@rule
def is_tag(value) -> bool:
    """Tags are short strings without spaces."""
    return isinstance(value, str) and " " not in value


@rule_args
def shorter_than(value, n: int) -> bool:
    return len(value) < n


valid_tag = non_blank & is_tag & shorter_than(12)


# =============================================================================
# 2. Pipelines replay steps over any collection
# =============================================================================

clean_tags = TransformerChain(
    Transformer("map", trimmed >> to_lowercase),
    Transformer("filter", valid_tag),
    ("sort", natural),
)

by_priority = ComparatorChain(by_position(["urgent", "high"]), by_length)


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    raw = ["  Python ", "", "data science", "CLI", None, "a-very-long-tag", "urgent"]

    # --- 1. Predicates ---
    print("=== 1. Predicates ===")
    print("Rule: non_blank & is_tag & shorter_than(12)\n")
    for value in ["cli", "two words", "x" * 20]:
        print(f"  {value!r:24s} -> {valid_tag(value)}")

    # --- 2. Pipelines ---
    print("\n=== 2. Pipelines ===")
    print("Steps: map(trimmed >> to_lowercase), filter(valid_tag), sort(natural)\n")
    print(f"  {clean_tags.apply(raw)}")

    # --- 3. Ordering ---
    print("\n=== 3. Comparator Chains ===\n")
    print(f"  {by_priority.sort(['low', 'high', 'urgent', 'normal'])}")

    # --- 4. Tracing ---
    print("\n=== 4. Tracing ===\n")
    run_traced(clean_tags, raw, LoggingHook(logging.getLogger("kollekt.example")))

    # --- 5. Lists ---
    print("\n=== 5. as_array ===\n")
    print(f"  {as_array('b.a.b', split_on='.', unique=True, comparator=natural)}")

    # --- 6. Ranges ---
    print("\n=== 6. Ranges ===\n")
    print(f"  {list(range_of(0.0, 0.5))}")
    print(f"  {list(range_of('ace', 'z', increment_rule=IncrementRule.SEQUENCE_PLUS_LAST_SKIP))}")

    # --- 7. Bounded queues ---
    print("\n=== 7. Bounded Queues ===\n")
    recent = BoundedQueue(3)
    for tag in clean_tags.apply(raw) + ["rust", "go"]:
        result = recent.enqueue(tag)
        if result.exceeded_bounds:
            print(f"  evicted {result.evicted[0]!r}")
    print(f"  {recent.values}")
