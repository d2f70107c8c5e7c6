"""
Observability utilities for helixsub.

Tracing is composition-based: components accept a ``Tracer`` and fall back
to ``create_tracer(__name__, enable_tracing)``. OpenTelemetry is optional;
without it every component uses ``NullTracer``.
"""

from helixsub.observability.tracer import (
    MockTracer,
    NullTracer,
    OpenTelemetryTracer,
    SpanKindEnum,
    Tracer,
    create_tracer,
)
from helixsub.observability.tracing import OTEL_AVAILABLE, get_tracer, should_trace

__all__ = [
    "OTEL_AVAILABLE",
    "get_tracer",
    "should_trace",
    "Tracer",
    "NullTracer",
    "OpenTelemetryTracer",
    "MockTracer",
    "SpanKindEnum",
    "create_tracer",
]
