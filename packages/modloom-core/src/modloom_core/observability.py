"""Structured logging and OpenTelemetry spans for modloom-core.

This module provides:
- Structured logging setup via structlog
- OpenTelemetry span helper for load pipeline stages
- structlog_sink: LogSink adapter writing loader messages to structlog
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

# Module-level logger and tracer
_logger: BoundLogger | None = None
_tracer: Tracer | None = None

# Tracer and logger name
TRACER_NAME = "modloom"

# Sink levels that structlog spells differently
_SINK_LEVEL_ALIASES = {"warn": "warning", "log": "info", "trace": "debug"}


def get_logger() -> BoundLogger:
    """Get the module logger, creating it if necessary.

    Returns:
        Configured structlog BoundLogger instance.

    Example:
        >>> logger = get_logger()
        >>> logger.info("module_loaded", path="/app/main.py")
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(TRACER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for modloom.

    Without an SDK configured by the host, spans are no-ops.
    """
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def configure_logging(
    *,
    log_level: str = "INFO",
    json_format: bool = True,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for modloom.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(log_level="DEBUG", json_format=False)
    """
    import logging

    processors: list[Any] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, log_level.upper()),
    )


@contextmanager
def load_span(
    name: str,
    *,
    attributes: dict[str, Any] | None = None,
) -> Iterator[Span]:
    """Create an OpenTelemetry span around one pipeline stage.

    Failures are recorded on the span and logged, then re-raised.

    Args:
        name: Span name (e.g., "modloom.transform", "modloom.load").
        attributes: Optional span attributes.

    Yields:
        OpenTelemetry Span instance.

    Example:
        >>> with load_span("modloom.load", attributes={"modloom.path": path}):
        ...     await create_module(...)
    """
    tracer = get_tracer()
    attrs = attributes or {}

    with tracer.start_as_current_span(name, kind=SpanKind.INTERNAL, attributes=attrs) as s:
        try:
            yield s
            s.set_status(Status(StatusCode.OK))
        except Exception as exc:
            s.set_status(Status(StatusCode.ERROR, str(exc)))
            s.record_exception(exc)
            get_logger().debug(f"{name}_failed", error=str(exc), **attrs)
            raise


def structlog_sink(logger: BoundLogger | None = None) -> Callable[..., None]:
    """Build a LogSink that forwards loader messages to structlog.

    The loader calls sinks as ``log(level, *values)``. Values are joined with
    spaces into the event text; unknown levels fall back to info.

    Args:
        logger: Logger to write to. Defaults to the modloom logger.

    Returns:
        Callable usable as ``LoaderConfig.log``.

    Example:
        >>> config = LoaderConfig(log=structlog_sink())
    """
    target = logger or get_logger()

    def sink(level: str, *values: Any) -> None:
        method_name = _SINK_LEVEL_ALIASES.get(level, level)
        method = getattr(target, method_name, target.info)
        method(" ".join(str(value) for value in values))

    return sink
