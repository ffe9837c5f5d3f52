"""Structured logging and metric hooks.

Log entries are JSON objects carrying the node and request id of the
exchange they belong to. Metrics are pushed to registered callbacks so
applications can forward them to whatever backend they use.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)
node_var: ContextVar[str | None] = ContextVar("node", default=None)


class LogLevel(str, Enum):
    """Log levels matching Python's logging module."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class LogContext:
    """Context data to include with every log entry."""

    request_id: str | None = None
    node: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def current(cls) -> "LogContext":
        """Get current context from context variables."""
        return cls(request_id=request_id_var.get(), node=node_var.get())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, excluding None values."""
        result: dict[str, Any] = {}
        if self.request_id:
            result["request_id"] = self.request_id
        if self.node:
            result["node"] = self.node
        result.update(self.extra)
        return result


class StructuredFormatter(logging.Formatter):
    """Formats log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        context = LogContext.current().to_dict()
        if hasattr(record, "context") and isinstance(record.context, dict):
            context.update(record.context)

        data: dict[str, Any] = {
            "level": record.levelname,
            "message": record.getMessage(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "logger": record.name,
        }
        if context:
            data["context"] = context
        if record.exc_info and record.exc_info[0]:
            data["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]) if record.exc_info[1] else "",
            }
        duration_ms = getattr(record, "duration_ms", None)
        if duration_ms is not None:
            data["duration_ms"] = duration_ms
        return json.dumps(data, default=str)


class StructuredLogger:
    """Wrapper around Python logging with structured output.

    Example:
        logger = get_logger(__name__)
        logger.debug("Request sent", context={"path": "/db/query"})
        logger.warning("Send failed", error=exc)
    """

    def __init__(self, name: str) -> None:
        self.logger = logging.getLogger(name)

    def _log(
        self,
        level: LogLevel,
        message: str,
        context: dict[str, Any] | None = None,
        error: Exception | None = None,
        duration_ms: float | None = None,
    ) -> None:
        extra: dict[str, Any] = {}
        if context:
            extra["context"] = context
        if duration_ms is not None:
            extra["duration_ms"] = duration_ms

        log_func = getattr(self.logger, level.value.lower())
        if error:
            log_func(message, exc_info=(type(error), error, error.__traceback__), extra=extra)
        else:
            log_func(message, extra=extra)

    def debug(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at DEBUG level."""
        self._log(LogLevel.DEBUG, message, context, duration_ms=duration_ms)

    def info(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at INFO level."""
        self._log(LogLevel.INFO, message, context, duration_ms=duration_ms)

    def warning(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        error: Exception | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at WARNING level."""
        self._log(LogLevel.WARNING, message, context, error, duration_ms)

    def error(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        error: Exception | None = None,
        duration_ms: float | None = None,
    ) -> None:
        """Log at ERROR level."""
        self._log(LogLevel.ERROR, message, context, error, duration_ms)


class RequestContext:
    """Context manager binding a request id and node to log entries.

    Example:
        async with RequestContext(node="127.0.0.1:4001"):
            logger.debug("Sending request")
    """

    def __init__(self, request_id: str | None = None, node: str | None = None) -> None:
        self.request_id = request_id or uuid.uuid4().hex[:8]
        self.node = node
        self._tokens: list[tuple[ContextVar, Any]] = []

    def __enter__(self) -> "RequestContext":
        self._tokens.append((request_id_var, request_id_var.set(self.request_id)))
        if self.node:
            self._tokens.append((node_var, node_var.set(self.node)))
        return self

    def __exit__(self, *args: Any) -> None:
        for var, token in reversed(self._tokens):
            var.reset(token)
        self._tokens.clear()

    async def __aenter__(self) -> "RequestContext":
        return self.__enter__()

    async def __aexit__(self, *args: Any) -> None:
        self.__exit__(*args)


class Timer:
    """Context manager for timing operations.

    Example:
        with Timer() as t:
            response = await client.send(request)
        logger.debug("Response received", duration_ms=t.duration_ms)
    """

    def __init__(self) -> None:
        self.start_time: float = 0
        self.end_time: float = 0

    @property
    def duration_ms(self) -> float:
        """Get duration in milliseconds."""
        return (self.end_time - self.start_time) * 1000

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args: Any) -> None:
        self.end_time = time.perf_counter()


# Metric collection hook type
MetricCallback = Callable[[str, float, dict[str, Any]], None]

_metric_callbacks: list[MetricCallback] = []


def register_metric_callback(callback: MetricCallback) -> None:
    """Register a callback to receive metric events.

    Args:
        callback: Function(name, value, labels) to call on metrics
    """
    _metric_callbacks.append(callback)


def unregister_metric_callback(callback: MetricCallback) -> None:
    """Remove a previously registered callback."""
    if callback in _metric_callbacks:
        _metric_callbacks.remove(callback)


def emit_metric(name: str, value: float, labels: dict[str, Any] | None = None) -> None:
    """Emit a metric to all registered callbacks.

    The current node is added as a label when one is bound.
    """
    labels = labels or {}

    context = LogContext.current()
    if context.node:
        labels.setdefault("node", context.node)

    for callback in _metric_callbacks:
        try:
            callback(name, value, labels)
        except Exception:
            pass  # Don't let metric errors affect main flow


def emit_counter(name: str, labels: dict[str, Any] | None = None) -> None:
    """Emit a counter metric (increment by 1)."""
    emit_metric(name, 1.0, labels)


def emit_timer(name: str, duration_ms: float, labels: dict[str, Any] | None = None) -> None:
    """Emit a timer metric."""
    emit_metric(name, duration_ms, labels)


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    format: str = "json",
) -> None:
    """Configure the rqlite_client logger hierarchy.

    Args:
        level: Minimum log level
        format: Output format ("json" or "text")
    """
    root_logger = logging.getLogger("rqlite_client")
    root_logger.setLevel(level.value)
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if format == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        ))
    root_logger.addHandler(handler)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module.

    Handlers are left to the application (or ``configure_logging``).
    """
    return StructuredLogger(name)
