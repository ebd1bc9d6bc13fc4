"""Transformer steps and the chains that replay them over collections."""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

from kollekt import _mappers, _predicates
from kollekt._collections import flatten, into_sequence
from kollekt._comparators import Comparator, chain, no_preference
from kollekt._errors import InvalidArgumentError
from kollekt._mappers import Mapper
from kollekt._predicates import Predicate
from kollekt._tracing import TraceConfig, TraceHook
from kollekt._types import _trace_config, _trace_hook

logger = logging.getLogger(__name__)


class Operation(str, Enum):
    """The kind of step a Transformer performs."""

    FILTER = "filter"
    MAP = "map"
    SORT = "sort"
    FLATTEN = "flatten"

    @classmethod
    def parse(cls, value: Any) -> Operation:
        """
        Return the operation named by ``value``.

        Accepts members and their names case-insensitively; ``"flat"`` is an
        alias of FLATTEN.

        Raises:
            InvalidArgumentError: If ``value`` names no operation
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            name = value.strip().lower()
            if name == "flat":
                return cls.FLATTEN
            for op in cls:
                if op.value == name:
                    return op
        raise InvalidArgumentError(f"Unknown transformer operation: {value!r}")


def _flatten_depth(argument: Any) -> float:
    if argument is None:
        return math.inf
    if isinstance(argument, (int, float)) and not isinstance(argument, bool) and argument >= 0:
        return argument if math.isinf(argument) else int(argument)
    logger.warning("Invalid flatten depth %r; flattening completely", argument)
    return math.inf


def _role_argument(role: type, argument: Any, default: Any, operation: Operation) -> Any:
    if argument is None:
        return default
    try:
        return role.of(argument)
    except TypeError as e:
        logger.warning("Invalid argument for a %s step, using %s: %s", operation.value, default, e)
        return default


@dataclass(frozen=True)
class Transformer:
    """
    One filter, map, sort or flatten step.

    An argument that is missing or has the wrong role is replaced with the
    default for the operation: ``always`` for filters, ``identity`` for
    maps, ``no_preference`` for sorts and infinite depth for flattening.

    Example:
        Transformer("filter", non_blank).apply(["a", " ", "b"])  # ["a", "b"]
        Transformer(Operation.FLATTEN, 1).apply([1, [2, [3]]])   # [1, 2, [3]]
    """

    operation: Operation
    argument: Any = None

    def __post_init__(self) -> None:
        operation = Operation.parse(self.operation)
        object.__setattr__(self, "operation", operation)
        if operation is Operation.FILTER:
            argument = _role_argument(Predicate, self.argument, _predicates.always, operation)
        elif operation is Operation.MAP:
            argument = _role_argument(Mapper, self.argument, _mappers.identity, operation)
        elif operation is Operation.SORT:
            argument = _role_argument(Comparator, self.argument, no_preference, operation)
        else:
            argument = _flatten_depth(self.argument)
        object.__setattr__(self, "argument", argument)

    @property
    def name(self) -> str:
        label = getattr(self.argument, "name", self.argument)
        return f"Transformer({self.operation.value}: {label})"

    def apply(self, collection: Any) -> list[Any]:
        """Return a new list with this step applied to ``collection``."""
        arr = into_sequence(collection)
        if self.operation is Operation.FILTER:
            return [e for i, e in enumerate(arr) if self.argument(e, i, arr)]
        if self.operation is Operation.MAP:
            return [self.argument(e, i, arr) for i, e in enumerate(arr)]
        if self.operation is Operation.SORT:
            return sorted(arr, key=self.argument.key)
        return flatten(arr, self.argument)


Step = Any  # Transformer | TransformerChain | tuple[str | Operation, Any]


def _is_raw_pair(step: Any) -> bool:
    return (
        isinstance(step, tuple)
        and len(step) == 2
        and isinstance(step[0], (str, Operation))
    )


def _normalize_steps(steps: Iterable[Any]) -> tuple[Step, ...]:
    normalized: list[Step] = []
    for step in steps:
        if isinstance(step, list):
            normalized.extend(_normalize_steps(step))
        elif isinstance(step, (Transformer, TransformerChain)) or _is_raw_pair(step):
            normalized.append(step)
        elif callable(getattr(step, "apply", None)):
            normalized.append(step)
        else:
            logger.warning("TransformerChain ignored a step it cannot apply: %r", step)
    return tuple(normalized)


def _step_name(step: Step) -> str:
    if _is_raw_pair(step):
        return f"({step[0]!r}, {getattr(step[1], 'name', step[1])!r})"
    return getattr(step, "name", repr(step))


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


class TransformerChain:
    """
    An ordered sequence of steps applied one after another.

    Steps may be Transformers, nested chains, or raw ``(operation,
    argument)`` pairs. Application stops as soon as the working list is
    empty. A step that raises is logged and skipped, keeping the list it
    received. The input collection is never modified and a chain holds no
    per-call state, so it can be reused.

    Example:
        pipeline = TransformerChain(
            Transformer("map", trimmed),
            ("filter", non_blank),
            Transformer("sort", natural),
        )
        pipeline.apply([" b", "  ", "a "])  # ["a", "b"]

        # chains compose with &
        full = pipeline & MapperChain(to_uppercase)
    """

    def __init__(self, *steps: Any):
        self._steps = _normalize_steps(steps)

    @property
    def steps(self) -> tuple[Step, ...]:
        return self._steps

    @property
    def name(self) -> str:
        return type(self).__name__

    def apply(self, collection: Any) -> list[Any]:
        """Return a new list with every step applied to ``collection``."""
        return self._apply(into_sequence(collection), 0)

    def _apply(self, values: list[Any], depth: int) -> list[Any]:
        hook = _trace_hook.get()
        config = _trace_config.get() or TraceConfig()
        traced = hook is not None and config.traces(depth)

        span = hook.on_enter(self.name, values, depth) if traced else None
        start = time.perf_counter()

        working = list(values)
        for step in self.steps:
            working = self._run_step(step, working, depth + 1, hook, config)
            if not working:
                break

        if traced:
            hook.on_exit(span, self.name, bool(working), _elapsed_ms(start), depth)
        return working

    def _run_step(
        self,
        step: Step,
        working: list[Any],
        depth: int,
        hook: TraceHook | None,
        config: TraceConfig,
    ) -> list[Any]:
        name = _step_name(step)
        traced = (
            hook is not None
            and config.traces(depth)
            and not isinstance(step, TransformerChain)
        )
        span = hook.on_enter(name, working, depth) if traced else None
        start = time.perf_counter()
        try:
            if isinstance(step, TransformerChain):
                result = step._apply(working, depth)
            elif _is_raw_pair(step):
                result = Transformer(*step).apply(working)
            else:
                result = step.apply(working)
        except Exception as e:
            logger.warning(
                "Ignoring error in %s while transforming %d values: %r", name, len(working), e
            )
            if traced:
                hook.on_error(span, name, e, _elapsed_ms(start), depth)
            return working

        result = list(result)
        if traced:
            hook.on_exit(span, name, bool(result), _elapsed_ms(start), depth)
        return result

    def __and__(self, other: TransformerChain | Transformer) -> TransformerChain:
        return TransformerChain(self, other)

    def __iter__(self) -> Iterator[Step]:
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def __repr__(self) -> str:
        return f"{self.name}({', '.join(_step_name(s) for s in self.steps)})"


class FilterChain(TransformerChain):
    """A chain of filter steps; an element is kept only if every predicate keeps it."""

    def __init__(self, *predicates: Any):
        super().__init__(*(Transformer(Operation.FILTER, p) for p in _flat(predicates)))

    def apply_filters(self, collection: Any) -> list[Any]:
        return self.apply(collection)


class MapperChain(TransformerChain):
    """A chain of map steps applied in order."""

    def __init__(self, *mappers: Any):
        super().__init__(*(Transformer(Operation.MAP, m) for m in _flat(mappers)))

    def apply_mappers(self, collection: Any) -> list[Any]:
        return self.apply(collection)


class ComparatorChain(TransformerChain):
    """
    A chain of comparators used as one ordering.

    The collection is sorted once with the chained comparator; later
    comparators only break ties left by earlier ones. The chain holds a
    single sort step.
    """

    def __init__(self, *comparators: Any):
        sorts = [Transformer(Operation.SORT, c) for c in _flat(comparators)]
        self._comparator = chain(*(t.argument for t in sorts))
        super().__init__(Transformer(Operation.SORT, self._comparator))

    @property
    def comparator(self) -> Comparator:
        return self._comparator

    def sort(self, collection: Any) -> list[Any]:
        return self.apply(collection)


def _flat(args: tuple[Any, ...]) -> list[Any]:
    flattened: list[Any] = []
    for arg in args:
        if isinstance(arg, (list, tuple)):
            flattened.extend(arg)
        else:
            flattened.append(arg)
    return flattened


# =============================================================================
# Prebuilt chains
# =============================================================================

TO_NON_EMPTY_STRINGS = TransformerChain(
    Transformer(Operation.FILTER, _predicates.is_populated),
    Transformer(Operation.MAP, _mappers.to_string),
    Transformer(Operation.FILTER, _predicates.non_empty),
)

TO_NON_BLANK_STRINGS = TransformerChain(
    Transformer(Operation.FILTER, _predicates.is_populated),
    Transformer(Operation.MAP, _mappers.to_string),
    Transformer(Operation.FILTER, _predicates.non_blank),
)

TRIMMED_NON_EMPTY_STRINGS = TransformerChain(
    Transformer(Operation.FILTER, _predicates.is_populated),
    Transformer(Operation.MAP, _mappers.trimmed),
    Transformer(Operation.FILTER, _predicates.non_empty),
)

TRIMMED_NON_BLANK_STRINGS = TransformerChain(
    Transformer(Operation.FILTER, _predicates.is_populated),
    Transformer(Operation.MAP, _mappers.trimmed),
    Transformer(Operation.FILTER, _predicates.non_blank),
)

SPLIT_ON_DOT = TransformerChain(
    TRIMMED_NON_BLANK_STRINGS,
    Transformer(Operation.MAP, Mapper(lambda s: s.split("."), "split_on_dot")),
    Transformer(Operation.FLATTEN, 1),
    TRIMMED_NON_BLANK_STRINGS,
)


def to_non_empty_strings(values: Any) -> list[str]:
    return TO_NON_EMPTY_STRINGS.apply(values)


def to_non_blank_strings(values: Any) -> list[str]:
    return TO_NON_BLANK_STRINGS.apply(values)


def to_trimmed_non_empty_strings(values: Any) -> list[str]:
    return TRIMMED_NON_EMPTY_STRINGS.apply(values)


def to_trimmed_non_blank_strings(values: Any) -> list[str]:
    return TRIMMED_NON_BLANK_STRINGS.apply(values)


def chain_filters(values: Any, *predicates: Any) -> list[Any]:
    """Return the elements of ``values`` kept by every predicate."""
    return FilterChain(*predicates).apply(values)


def chain_mappers(values: Any, *mappers: Any) -> list[Any]:
    """Return ``values`` with each mapper applied in turn."""
    return MapperChain(*mappers).apply(values)
