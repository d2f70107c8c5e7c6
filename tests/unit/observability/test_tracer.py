"""
Unit tests for tracer protocol and implementations.

Tests for:
- Tracer Protocol (runtime_checkable)
- NullTracer class
- OpenTelemetryTracer class
- MockTracer class
- create_tracer() factory function
"""

from __future__ import annotations

import pytest

from helixsub.observability import (
    OTEL_AVAILABLE,
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    SpanKindEnum,
    Tracer,
    create_tracer,
    should_trace,
)


class TestTracerProtocol:
    """Tests for Tracer protocol."""

    def test_null_tracer_implements_protocol(self):
        assert isinstance(NullTracer(), Tracer)

    def test_mock_tracer_implements_protocol(self):
        assert isinstance(MockTracer(), Tracer)

    @pytest.mark.skipif(not OTEL_AVAILABLE, reason="OTEL not installed")
    def test_otel_tracer_implements_protocol(self):
        assert isinstance(OpenTelemetryTracer(__name__), Tracer)


class TestNullTracer:
    """Tests for NullTracer class."""

    def test_span_yields_none(self):
        tracer = NullTracer()
        with tracer.span("helixsub.test", {"key": "value"}) as span:
            assert span is None

    def test_enabled_is_false(self):
        assert NullTracer().enabled is False

    def test_span_with_kind(self):
        with NullTracer().span_with_kind("helixsub.test", SpanKindEnum.CLIENT) as span:
            assert span is None

    def test_exceptions_propagate(self):
        """span() does not swallow exceptions."""
        with pytest.raises(ValueError, match="boom"), NullTracer().span("helixsub.test"):
            raise ValueError("boom")


class TestOpenTelemetryTracer:
    """Tests for OpenTelemetryTracer class."""

    @pytest.mark.skipif(not OTEL_AVAILABLE, reason="OTEL not installed")
    def test_creates_real_spans(self):
        tracer = OpenTelemetryTracer(__name__)
        with tracer.span("helixsub.test") as span:
            assert span is not None
            assert hasattr(span, "set_attribute")

    @pytest.mark.skipif(not OTEL_AVAILABLE, reason="OTEL not installed")
    def test_enabled_is_true(self):
        assert OpenTelemetryTracer(__name__).enabled is True

    @pytest.mark.skipif(not OTEL_AVAILABLE, reason="OTEL not installed")
    def test_span_with_kind(self):
        tracer = OpenTelemetryTracer(__name__)
        with tracer.span_with_kind("helixsub.test", SpanKindEnum.SERVER) as span:
            assert span is not None

    @pytest.mark.skipif(OTEL_AVAILABLE, reason="OTEL is installed")
    def test_raises_without_otel(self):
        with pytest.raises(ImportError):
            OpenTelemetryTracer(__name__)


class TestMockTracer:
    """Tests for MockTracer class."""

    def test_records_spans(self):
        tracer = MockTracer()
        with tracer.span("first", {"key": "value"}):
            pass
        with tracer.span_with_kind("second"):
            pass

        assert tracer.spans == [("first", {"key": "value"}), ("second", None)]
        assert tracer.span_names == ["first", "second"]
        assert tracer.kinds == {"first": SpanKindEnum.INTERNAL, "second": SpanKindEnum.INTERNAL}

    def test_records_span_kinds(self):
        tracer = MockTracer()
        with tracer.span_with_kind("outbound", SpanKindEnum.CLIENT):
            pass
        with tracer.span_with_kind("inbound", SpanKindEnum.SERVER):
            pass

        assert tracer.kinds == {"outbound": SpanKindEnum.CLIENT, "inbound": SpanKindEnum.SERVER}

    def test_clear(self):
        tracer = MockTracer()
        with tracer.span("first"):
            pass

        tracer.clear()

        assert tracer.spans == []
        assert tracer.kinds == {}

    def test_enabled_is_true(self):
        assert MockTracer().enabled is True


class TestCreateTracer:
    """Tests for create_tracer() and should_trace()."""

    def test_disabled_returns_null_tracer(self):
        assert isinstance(create_tracer(__name__, enable_tracing=False), NullTracer)

    @pytest.mark.skipif(not OTEL_AVAILABLE, reason="OTEL not installed")
    def test_enabled_returns_otel_tracer(self):
        assert isinstance(create_tracer(__name__), OpenTelemetryTracer)

    @pytest.mark.skipif(OTEL_AVAILABLE, reason="OTEL is installed")
    def test_enabled_without_otel_returns_null_tracer(self):
        assert isinstance(create_tracer(__name__), NullTracer)

    def test_should_trace(self):
        assert should_trace(False) is False
        assert should_trace(True) is OTEL_AVAILABLE
