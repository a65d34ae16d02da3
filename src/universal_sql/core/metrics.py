"""Custom metrics for observability."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from opentelemetry import metrics

if TYPE_CHECKING:
    from opentelemetry.metrics import Counter, Histogram

_metrics: dict[str, Any] = {}


def get_meter(name: str = "universal_sql") -> metrics.Meter:
    """Get an OpenTelemetry meter for custom metrics.

    Without a configured MeterProvider the API hands back a no-op meter.

    Args:
        name: Meter name.

    Returns:
        OpenTelemetry meter instance.
    """
    return metrics.get_meter(name)


def get_query_counter() -> Counter:
    """Get counter for tracking queries served per engine."""
    if "query_counter" not in _metrics:
        meter = get_meter()
        _metrics["query_counter"] = meter.create_counter(
            "universal_sql.queries.total",
            description="Total number of queries served",
            unit="1",
        )
    return _metrics["query_counter"]


def get_fallback_counter() -> Counter:
    """Get counter for tracking remote-to-local fallbacks."""
    if "fallback_counter" not in _metrics:
        meter = get_meter()
        _metrics["fallback_counter"] = meter.create_counter(
            "universal_sql.queries.fallbacks",
            description="Queries that fell back from the remote to the local engine",
            unit="1",
        )
    return _metrics["fallback_counter"]


def get_query_latency_histogram() -> Histogram:
    """Get histogram for tracking query latency."""
    if "query_latency" not in _metrics:
        meter = get_meter()
        _metrics["query_latency"] = meter.create_histogram(
            "universal_sql.queries.latency",
            description="Query latency including fallback",
            unit="ms",
        )
    return _metrics["query_latency"]


def record_query(engine: str, success: bool, duration_ms: float) -> None:
    """Record a routed query.

    Args:
        engine: Engine that served the query ('remote' or 'local').
        success: Whether the query succeeded.
        duration_ms: Query duration in milliseconds.
    """
    counter = get_query_counter()
    counter.add(1, {"engine": engine, "success": str(success)})

    histogram = get_query_latency_histogram()
    histogram.record(duration_ms, {"engine": engine})


def record_fallback(reason: str) -> None:
    """Record a fallback from the remote engine.

    Args:
        reason: Error code of the remote failure.
    """
    get_fallback_counter().add(1, {"reason": reason})
