"""OpenTelemetry tracing support for the Triton Load Balancer Operator."""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Span, Tracer

logger = logging.getLogger(__name__)

# Global tracer instance
_tracer: Tracer | None = None


def initialize_tracing(service_name: str = "triton-lb-operator") -> None:
    """Initialize OpenTelemetry tracing.

    Args:
        service_name: Name of the service for tracing

    Environment Variables:
        OTEL_EXPORTER_OTLP_ENDPOINT: OTLP endpoint URL (default: http://localhost:4317)
        OTEL_SERVICE_NAME: Service name (default: triton-lb-operator)
        OTEL_TRACES_ENABLED: Enable/disable tracing (default: true)
    """
    global _tracer

    if os.getenv("OTEL_TRACES_ENABLED", "true").lower() == "false":
        return

    try:
        service_name = os.getenv("OTEL_SERVICE_NAME", service_name)
        endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://localhost:4317")

        resource = Resource.create({
            "service.name": service_name,
            "service.version": os.getenv("OTEL_SERVICE_VERSION", "unknown"),
        })

        provider = TracerProvider(resource=resource)
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        trace.set_tracer_provider(provider)

        _tracer = trace.get_tracer(service_name)
    except Exception as e:
        # Tracing initialization failures should not break the operator
        logger.warning(f"Failed to initialize tracing: {e}")


def get_tracer() -> Tracer | None:
    """Get the global tracer instance, or None if tracing is not initialized."""
    return _tracer


@contextmanager
def trace_span(
    name: str,
    kind: str | None = None,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span | None]:
    """Context manager for creating a trace span.

    Args:
        name: Name of the span
        kind: Resource kind (e.g., "Service")
        attributes: Additional span attributes

    Yields:
        Span object or None if tracing is not initialized
    """
    tracer = get_tracer()
    if tracer is None:
        yield None
        return

    attrs = dict(attributes or {})
    if kind:
        attrs["resource.kind"] = kind

    with tracer.start_as_current_span(name, attributes=attrs) as span:
        try:
            yield span
        except Exception as e:
            if span.is_recording():
                span.record_exception(e)
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
            raise
