"""
Tests for kollekt trace hooks

Run with: pytest tests/test_tracing.py -v
"""

import logging
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from kollekt import (
    ComparatorChain,
    LoggingHook,
    Mapper,
    OpenTelemetryHook,
    PrintHook,
    TraceConfig,
    TraceHook,
    Transformer,
    TransformerChain,
    by_length,
    by_string_value,
    non_blank,
    run_traced,
    trimmed,
    use_tracing,
)

# =============================================================================
# Test Fixtures
# =============================================================================


@pytest.fixture
def pipeline():
    return TransformerChain(
        Transformer("map", trimmed),
        Transformer("filter", non_blank),
    )


@pytest.fixture
def failing():
    def explode(value):
        raise RuntimeError("bad value")

    return TransformerChain(Transformer("map", Mapper(explode, "explode")))


def entered(hook):
    return [c.args[0] for c in hook.on_enter.call_args_list]


# =============================================================================
# Scoped Tracing
# =============================================================================


class TestUseTracing:
    """Test that hooks receive chain and step events."""

    def test_hook_receives_events(self, pipeline):
        hook = MagicMock()
        with use_tracing(hook):
            pipeline.apply([" a ", "  "])

        assert entered(hook) == [
            "TransformerChain",
            "Transformer(map: trimmed)",
            "Transformer(filter: non_blank)",
        ]
        assert hook.on_exit.call_count == 3
        hook.on_error.assert_not_called()

    def test_depths(self, pipeline):
        hook = MagicMock()
        with use_tracing(hook):
            pipeline.apply(["a"])
        depths = [c.args[2] for c in hook.on_enter.call_args_list]
        assert depths == [0, 1, 1]

    def test_exit_reports_empty_result(self):
        hook = MagicMock()
        chain = TransformerChain(Transformer("filter", non_blank))
        with use_tracing(hook):
            chain.apply(["  "])
        oks = [c.args[2] for c in hook.on_exit.call_args_list]
        assert oks == [False, False]

    def test_error_reaches_hook(self, failing):
        hook = MagicMock()
        with use_tracing(hook):
            assert failing.apply(["a"]) == ["a"]
        hook.on_error.assert_called_once()
        assert hook.on_error.call_args.args[1] == "Transformer(map: explode)"
        assert isinstance(hook.on_error.call_args.args[2], RuntimeError)

    def test_no_events_outside_scope(self, pipeline):
        hook = MagicMock()
        with use_tracing(hook):
            pass
        pipeline.apply(["a"])
        hook.on_enter.assert_not_called()

    def test_max_depth(self, pipeline):
        hook = MagicMock()
        with use_tracing(hook, TraceConfig(max_depth=0)):
            pipeline.apply(["a"])
        assert entered(hook) == ["TransformerChain"]

    def test_nested_chains(self, pipeline):
        hook = MagicMock()
        outer = TransformerChain(pipeline, Transformer("map", trimmed))
        with use_tracing(hook):
            outer.apply(["a"])
        assert entered(hook) == [
            "TransformerChain",
            "TransformerChain",
            "Transformer(map: trimmed)",
            "Transformer(filter: non_blank)",
            "Transformer(map: trimmed)",
        ]

    def test_nested_false_skips_inner_steps(self, pipeline):
        hook = MagicMock()
        outer = TransformerChain(pipeline, Transformer("map", trimmed))
        with use_tracing(hook, TraceConfig(nested=False)):
            outer.apply(["a"])
        assert entered(hook) == [
            "TransformerChain",
            "TransformerChain",
            "Transformer(map: trimmed)",
        ]

    def test_run_traced(self, pipeline):
        hook = MagicMock()
        assert run_traced(pipeline, [" a "], hook) == ["a"]
        assert hook.on_enter.call_count == 3

    def test_comparator_chain_reports_chain_and_step(self):
        hook = MagicMock()
        ordering = ComparatorChain(by_length, by_string_value)
        assert run_traced(ordering, ["bb", "a"], hook) == ["a", "bb"]
        assert entered(hook) == [
            "ComparatorChain",
            "Transformer(sort: chain(by_length, by_string_value))",
        ]
        assert [c.args[2] for c in hook.on_enter.call_args_list] == [0, 1]
        assert [c.args[1] for c in hook.on_exit.call_args_list] == [
            "Transformer(sort: chain(by_length, by_string_value))",
            "ComparatorChain",
        ]


# =============================================================================
# Built-in Hooks
# =============================================================================


class TestBuiltinHooks:
    """Test the print and logging hooks."""

    def test_hooks_satisfy_protocol(self):
        assert isinstance(PrintHook(), TraceHook)
        assert isinstance(LoggingHook(MagicMock()), TraceHook)

    def test_print_hook(self, pipeline, capsys):
        run_traced(pipeline, [" a ", "  "], PrintHook())
        out = capsys.readouterr().out
        assert "-> TransformerChain [2]" in out
        assert "  -> Transformer(filter: non_blank) [2]" in out
        assert "<- TransformerChain ✔" in out

    def test_print_hook_reports_empty_result(self, capsys):
        chain = TransformerChain(Transformer("filter", non_blank))
        run_traced(chain, ["  "], PrintHook())
        assert "<- TransformerChain ✗ empty" in capsys.readouterr().out

    def test_print_hook_error(self, failing, capsys):
        run_traced(failing, ["a", "b"], PrintHook())
        out = capsys.readouterr().out
        assert "ERROR: bad value, kept 2 values" in out

    def test_logging_hook(self, pipeline):
        logger = MagicMock()
        run_traced(pipeline, ["a"], LoggingHook(logger))
        logger.log.assert_any_call(
            10, "[ENTER] %s (depth=%d, values=%d)", "TransformerChain", 0, 1
        )
        calls = logger.log.call_args_list
        exits = [c.args[2:4] for c in calls if c.args[1].startswith("[EXIT]")]
        assert ("TransformerChain", "OK") in exits

    def test_logging_hook_formats_records(self, pipeline, caplog):
        with caplog.at_level(logging.DEBUG, logger="kollekt.trace"):
            run_traced(pipeline, [" a ", "  "], LoggingHook(logging.getLogger("kollekt.trace")))
        assert "[ENTER] TransformerChain (depth=0, values=2)" in caplog.text
        assert "[ENTER] Transformer(map: trimmed) (depth=1, values=2)" in caplog.text
        assert "[EXIT] TransformerChain -> OK" in caplog.text

    def test_logging_hook_error(self, failing):
        logger = MagicMock()
        run_traced(failing, ["a"], LoggingHook(logger, level=20))
        logger.error.assert_called_once()
        assert logger.error.call_args.args[1] == "Transformer(map: explode)"
        assert logger.error.call_args.args[3] == 1
        assert logger.log.call_args_list[0].args[0] == 20


class TestOpenTelemetryHook:
    """Test spans emitted through the OpenTelemetry SDK."""

    @pytest.fixture
    def exporter(self):
        pytest.importorskip("opentelemetry.sdk")
        from opentelemetry.sdk.trace import TracerProvider
        from opentelemetry.sdk.trace.export import SimpleSpanProcessor
        from opentelemetry.sdk.trace.export.in_memory_span_exporter import (
            InMemorySpanExporter,
        )

        exporter = InMemorySpanExporter()
        provider = TracerProvider()
        provider.add_span_processor(SimpleSpanProcessor(exporter))
        return SimpleNamespace(
            tracer=provider.get_tracer("kollekt-tests"),
            get_finished_spans=exporter.get_finished_spans,
        )

    def test_spans_form_a_hierarchy(self, exporter, pipeline):
        run_traced(pipeline, [" a ", "  "], OpenTelemetryHook(exporter.tracer))
        spans = {s.name: s for s in exporter.get_finished_spans()}

        root = spans["TransformerChain"]
        step = spans["Transformer(map: trimmed)"]
        assert step.parent.span_id == root.context.span_id
        assert step.attributes["kollekt.node_type"] == "step"
        assert step.attributes["kollekt.operation"] == "map"
        assert step.attributes["kollekt.input_size"] == 2
        assert root.attributes["kollekt.node_type"] == "chain"
        assert root.attributes["kollekt.success"] is True

    def test_siblings_are_linked(self, exporter, pipeline):
        run_traced(pipeline, ["a"], OpenTelemetryHook(exporter.tracer))
        spans = {s.name: s for s in exporter.get_finished_spans()}
        first = spans["Transformer(map: trimmed)"]
        second = spans["Transformer(filter: non_blank)"]
        assert [link.context.span_id for link in second.links] == [first.context.span_id]

    def test_max_span_depth(self, exporter, pipeline):
        run_traced(pipeline, ["a"], OpenTelemetryHook(exporter.tracer, max_span_depth=0))
        assert [s.name for s in exporter.get_finished_spans()] == ["TransformerChain"]

    def test_error_status(self, exporter, failing):
        from opentelemetry.trace import StatusCode

        run_traced(failing, ["a"], OpenTelemetryHook(exporter.tracer))
        spans = {s.name: s for s in exporter.get_finished_spans()}
        step = spans["Transformer(map: explode)"]
        assert step.status.status_code == StatusCode.ERROR
        assert step.attributes["kollekt.success"] is False
        assert step.events[0].name == "exception"
