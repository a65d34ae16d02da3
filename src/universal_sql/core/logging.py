"""Structured logging configuration with structlog."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from structlog.types import Processor

if TYPE_CHECKING:
    from universal_sql.core.config import Settings


def add_opentelemetry_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add OpenTelemetry trace context to log entries for correlation."""
    span = trace.get_current_span()
    if span.is_recording():
        ctx = span.get_span_context()
        event_dict["trace_id"] = format(ctx.trace_id, "032x")
        event_dict["span_id"] = format(ctx.span_id, "016x")
    return event_dict


def add_service_context(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add service metadata to all log entries."""
    event_dict.setdefault("service", "universal-sql")
    return event_dict


def _select_renderer(settings: Settings) -> tuple[list[Processor], Processor]:
    """Pick exception formatting and the final renderer for the environment."""
    if settings.ENVIRONMENT == "development" and sys.stderr.isatty():
        return [structlog.processors.ExceptionPrettyPrinter()], structlog.dev.ConsoleRenderer(
            colors=True
        )
    return [
        structlog.processors.format_exc_info,
        structlog.processors.dict_tracebacks,
    ], structlog.processors.JSONRenderer()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and route stdlib logging through it.

    Orchestration modules log through structlog; the engine modules use
    stdlib ``logging`` with ``extra=`` fields, which are merged into the
    same event dicts and rendered identically. DEBUG mode lowers the level
    to DEBUG regardless of LOG_LEVEL.

    Args:
        settings: Application settings. If None, uses defaults.
    """
    if settings is None:
        from universal_sql.core.config import get_settings

        settings = get_settings()

    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    if settings.DEBUG is True:
        log_level = logging.DEBUG

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        add_opentelemetry_context,
        add_service_context,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    exception_processors, renderer = _select_renderer(settings)

    structlog.configure(
        processors=[*shared_processors, *exception_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        logger_factory=structlog.WriteLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=[
                *shared_processors,
                structlog.stdlib.add_logger_name,
                structlog.stdlib.ExtraAdder(),
            ],
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *exception_processors,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(log_level)

    logging.getLogger("universal_sql").setLevel(log_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a configured structlog logger.

    Args:
        name: Logger name. If None, uses caller's module name.

    Returns:
        Configured bound logger with context support.
    """
    return structlog.get_logger(name)
