"""Trace hooks reporting the steps of transformer chains."""

from __future__ import annotations

from collections.abc import Iterable, Sized
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from kollekt._types import _trace_config, _trace_hook

try:
    from opentelemetry.trace import (
        Link as _Link,
    )
    from opentelemetry.trace import (
        Status as _Status,
    )
    from opentelemetry.trace import (
        StatusCode as _StatusCode,
    )
    from opentelemetry.trace import (
        set_span_in_context as _set_span_in_context,
    )

    _HAS_OPENTELEMETRY = True
except ImportError:
    _HAS_OPENTELEMETRY = False
    _Link = None
    _Status = None
    _StatusCode = None
    _set_span_in_context = None


@runtime_checkable
class TraceHook(Protocol):
    """
    Protocol for trace hooks.

    Implement this to integrate with logging, OpenTelemetry, or other
    tracing systems.

    Example:
        class MyHook:
            def on_enter(self, name, ctx, depth):
                print(f"{'  ' * depth}-> {name} ({len(ctx)} items)")
                return None  # span token

            def on_exit(self, span, name, ok, duration_ms, depth):
                print(f"{'  ' * depth}<- {name} ({duration_ms:.2f}ms)")

            def on_error(self, span, name, error, duration_ms, depth):
                print(f"{'  ' * depth}<- {name} ERROR: {error}")
    """

    def on_enter(self, name: str, ctx: Any, depth: int) -> Any:
        """
        Called before a chain or one of its steps runs.

        Args:
            name: Name of the chain or step
            ctx: The list the step receives
            depth: Nesting depth (0 = outermost chain)

        Returns:
            Span token to pass to on_exit (can be None)
        """
        ...

    def on_exit(
        self, span: Any, name: str, ok: bool, duration_ms: float, depth: int
    ) -> None:
        """
        Called after a chain or step completes.

        Args:
            span: Token returned from on_enter
            name: Name of the chain or step
            ok: False when the step left the working list empty
            duration_ms: Execution time in milliseconds
            depth: Nesting depth
        """
        ...

    def on_error(
        self, span: Any, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        """
        Called if a step raises. The chain keeps the list it had before the step.

        Args:
            span: Token returned from on_enter
            name: Name of the step
            error: The exception that was raised
            duration_ms: Execution time in milliseconds
            depth: Nesting depth
        """
        ...


@dataclass
class TraceConfig:
    """
    Configuration for tracing behavior.

    Attributes:
        nested: If True, trace the steps of chains nested inside a chain
        max_depth: Maximum depth to trace (None = unlimited)
    """

    nested: bool = True
    max_depth: int | None = None

    def traces(self, depth: int) -> bool:
        """True if events at ``depth`` should reach the hook."""
        if self.max_depth is not None and depth > self.max_depth:
            return False
        return self.nested or depth <= 1


@contextmanager
def use_tracing(hook: TraceHook, config: TraceConfig | None = None):
    """
    Context manager to enable tracing for every chain applied in scope.

    Args:
        hook: TraceHook implementation to receive trace events
        config: Optional TraceConfig to customize tracing behavior

    Example:
        with use_tracing(LoggingHook(logger)):
            TO_NON_BLANK_STRINGS.apply(values)  # This will be traced

        # Or with custom config
        with use_tracing(PrintHook(), TraceConfig(max_depth=1)):
            pipeline.apply(values)
    """
    hook_token = _trace_hook.set(hook)
    config_token = _trace_config.set(config or TraceConfig())
    try:
        yield
    finally:
        _trace_hook.reset(hook_token)
        _trace_config.reset(config_token)


def run_traced(
    chain: Any, values: Iterable[Any], hook: TraceHook, config: TraceConfig | None = None
) -> list[Any]:
    """
    Apply a chain with explicit tracing.

    Example:
        result = run_traced(pipeline, ["a", " ", "b"], PrintHook())
    """
    with use_tracing(hook, config):
        return chain.apply(values)


# =============================================================================
# Built-in Trace Hooks
# =============================================================================


def _size(ctx: Any) -> int:
    return len(ctx) if isinstance(ctx, Sized) else 0


class PrintHook:
    """
    Trace hook that prints each chain and step with the number of values it receives.

    Example:
        with use_tracing(PrintHook()):
            TRIMMED_NON_BLANK_STRINGS.apply([" a ", "  "])

        # Output:
        # -> TransformerChain [2]
        #   -> Transformer(map: trimmed) [2]
        #   <- Transformer(map: trimmed) ✔ (0.02ms)
        #   -> Transformer(filter: non_blank) [2]
        #   <- Transformer(filter: non_blank) ✔ (0.01ms)
        # <- TransformerChain ✔ (0.09ms)
    """

    def __init__(self, indent: str = "  ", show_values: bool = False):
        self.indent = indent
        self.show_values = show_values

    def on_enter(self, name: str, ctx: Any, depth: int) -> int:
        size = _size(ctx)
        line = f"{self.indent * depth}-> {name} [{size}]"
        print(f"{line} {ctx!r}" if self.show_values else line)
        return size

    def on_exit(
        self, span: int, name: str, ok: bool, duration_ms: float, depth: int
    ) -> None:
        status = "✔" if ok else "✗ empty"
        print(f"{self.indent * depth}<- {name} {status} ({duration_ms:.2f}ms)")

    def on_error(
        self, span: int, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        print(
            f"{self.indent * depth}<- {name} ERROR: {error}, "
            f"kept {span} values ({duration_ms:.2f}ms)"
        )


class LoggingHook:
    """
    Trace hook that logs to a Python logger.

    Entry records carry the depth and the number of values the chain or
    step receives; a failed step is logged at ERROR with the number of
    values kept in its place.

    Example:
        import logging
        logger = logging.getLogger("kollekt")

        with use_tracing(LoggingHook(logger)):
            pipeline.apply(values)
    """

    def __init__(self, logger, level: int = 10):  # 10 = DEBUG
        self.logger = logger
        self.level = level

    def on_enter(self, name: str, ctx: Any, depth: int) -> int:
        size = _size(ctx)
        self.logger.log(self.level, "[ENTER] %s (depth=%d, values=%d)", name, depth, size)
        return size

    def on_exit(
        self, span: int, name: str, ok: bool, duration_ms: float, depth: int
    ) -> None:
        status = "OK" if ok else "EMPTY"
        self.logger.log(self.level, "[EXIT] %s -> %s (%.2fms)", name, status, duration_ms)

    def on_error(
        self, span: int, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        self.logger.error(
            "[ERROR] %s -> %r, kept %d values (%.2fms)", name, error, span, duration_ms
        )


class OpenTelemetryHook:
    """
    OpenTelemetry trace hook for transformer chains with:

    - Parent/child span hierarchy (chain spans contain step spans)
    - Depth-based span suppression
    - Optional sibling span linking
    - Input size and operation attributes

    Requires: pip install opentelemetry-api
    """

    def __init__(
        self,
        tracer,
        *,
        max_span_depth: int | None = None,
        link_sibling_spans: bool = True,
    ):
        if not _HAS_OPENTELEMETRY:
            raise ImportError(
                "OpenTelemetry is not installed. "
                "Install it with: pip install opentelemetry-api"
            )
        self.tracer = tracer
        self.max_span_depth = max_span_depth
        self.link_sibling_spans = link_sibling_spans

        self._span_stack: list[Any] = []
        self._last_span_at_depth: dict[int, Any] = {}

    def on_enter(self, name: str, ctx: Any, depth: int) -> Any:
        # These are guaranteed non-None because __init__ checks _HAS_OPENTELEMETRY
        assert _set_span_in_context is not None
        assert _Link is not None

        if self.max_span_depth is not None and depth > self.max_span_depth:
            return None

        parent = self._span_stack[-1] if self._span_stack else None
        parent_ctx = _set_span_in_context(parent) if parent else None

        links = []
        if self.link_sibling_spans and depth in self._last_span_at_depth:
            links.append(_Link(self._last_span_at_depth[depth].get_span_context()))

        span = self.tracer.start_span(name, context=parent_ctx, links=links or None)
        self._annotate_span(span, name, ctx, depth)

        self._span_stack.append(span)
        self._last_span_at_depth[depth] = span
        return span

    def on_exit(
        self,
        span: Any,
        name: str,
        ok: bool,
        duration_ms: float,
        depth: int,
    ) -> None:
        if span is None:
            return

        span.set_attribute("kollekt.success", ok)
        span.set_attribute("kollekt.duration_ms", duration_ms)
        span.end()
        self._span_stack.pop()

    def on_error(
        self,
        span: Any,
        name: str,
        error: Exception,
        duration_ms: float,
        depth: int,
    ) -> None:
        if span is None:
            return

        # These are guaranteed non-None because __init__ checks _HAS_OPENTELEMETRY
        assert _Status is not None
        assert _StatusCode is not None

        span.set_attribute("kollekt.success", False)
        span.set_attribute("kollekt.duration_ms", duration_ms)
        span.record_exception(error)
        span.set_status(_Status(_StatusCode.ERROR, str(error)))
        span.end()
        self._span_stack.pop()

    def _annotate_span(self, span: Any, name: str, ctx: Any, depth: int) -> None:
        if name.startswith("Transformer("):
            span.set_attribute("kollekt.node_type", "step")
            span.set_attribute("kollekt.operation", name[len("Transformer(") :].split(":")[0])
        else:
            span.set_attribute("kollekt.node_type", "chain")
        span.set_attribute("kollekt.name", name)
        span.set_attribute("kollekt.depth", depth)
        span.set_attribute("kollekt.input_size", _size(ctx))
