"""Shared type variables, callback aliases and context variables."""

from __future__ import annotations

from collections.abc import Callable
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from kollekt._tracing import TraceConfig, TraceHook

T = TypeVar("T")
U = TypeVar("U")

PredicateFn = Callable[..., Any]
"""Signature of a raw predicate: (value[, index, collection]) -> truthy"""

MapperFn = Callable[..., Any]
"""Signature of a raw mapper: (value[, index, collection]) -> value"""

ComparatorFn = Callable[[Any, Any], int]
"""Signature of a raw comparator: (a, b) -> negative, zero or positive"""

# Context variables for scoped tracing
_trace_hook: ContextVar[TraceHook | None] = ContextVar("trace_hook", default=None)
_trace_config: ContextVar[TraceConfig | None] = ContextVar(
    "trace_config", default=None
)
