"""OpenTelemetry tracing helpers."""

from __future__ import annotations

from typing import Any

from opentelemetry import trace


def get_tracer(name: str) -> trace.Tracer:
    """Get an OpenTelemetry tracer for manual instrumentation.

    Args:
        name: Tracer name (typically __name__).

    Returns:
        OpenTelemetry tracer instance.
    """
    return trace.get_tracer(name)


def create_span(name: str, attributes: dict[str, Any] | None = None) -> Any:
    """Create a new span for tracing.

    Args:
        name: Span name.
        attributes: Optional span attributes.

    Returns:
        Context manager for the span.
    """
    tracer = get_tracer("universal_sql")
    return tracer.start_as_current_span(name, attributes=attributes or {})
