"""Structured logging infrastructure for errorhandler.

Provides structured logging using structlog with a component name bound
to every entry. Supports console and JSON output, plus a rotating log
file.

Example usage:
    from errorhandler.core.logging import get_logger, configure_logging

    # Configure once at startup
    configure_logging(level="DEBUG", format="console")

    # Get a component-specific logger
    logger = get_logger("backoff")

    # Log with key-value context
    logger.info("backoff.sleeping", attempt=2, delay_seconds=2.4)

    # Bind context for a scope
    call_logger = logger.bind(operation="fetch_sheet")
    call_logger.debug("backoff.attempt_failed")
"""

from __future__ import annotations

import logging
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Literal

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

# Sensitive field patterns that should never be logged
SENSITIVE_PATTERNS = frozenset({
    "api_key",
    "apikey",
    "api-key",
    "token",
    "secret",
    "password",
    "credential",
    "bearer",
    "authorization",
})

def _sanitize_value(key: str, value: Any) -> Any:
    """Sanitize potentially sensitive values.

    Args:
        key: The key/field name being logged.
        value: The value to potentially sanitize.

    Returns:
        Original value if safe, "[REDACTED]" if sensitive.
    """
    key_lower = key.lower()
    for pattern in SENSITIVE_PATTERNS:
        if pattern in key_lower:
            return "[REDACTED]"
    return value


def _sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that redacts sensitive fields.

    Nested dicts (such as an error record's ``custom_params``) are
    sanitized one level deep.
    """
    sanitized: EventDict = {}
    for key, value in event_dict.items():
        if isinstance(value, dict):
            sanitized[key] = {
                k: _sanitize_value(k, v) for k, v in value.items()
            }
        else:
            sanitized[key] = _sanitize_value(key, value)
    return sanitized


def _add_timestamp(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Structlog processor that adds ISO8601 UTC timestamp."""
    event_dict["timestamp"] = datetime.now(UTC).isoformat()
    return event_dict


class ErrorHandlerLogger:
    """Logger wrapper around structlog bound to a component name.

    Provides debug, info, warning, error, critical and exception methods.
    The underlying structlog logger is fetched lazily on every call so that
    loggers created at module import time still respect configuration set
    later via configure_logging().
    """

    def __init__(
        self,
        component: str,
        **initial_context: Any,
    ) -> None:
        """Initialize a logger for a component.

        Args:
            component: The component name (e.g., "backoff", "reporter").
            **initial_context: Additional context to bind.
        """
        self._component = component
        self._context: dict[str, Any] = {"component": component, **initial_context}

    def _get_logger(self) -> structlog.stdlib.BoundLogger:
        logger: structlog.stdlib.BoundLogger = structlog.get_logger().bind(**self._context)
        return logger

    def bind(self, **context: Any) -> ErrorHandlerLogger:
        """Create a new logger with additional bound context.

        Args:
            **context: Additional context to bind.

        Returns:
            A new ErrorHandlerLogger with the additional context bound.
        """
        new_logger = ErrorHandlerLogger.__new__(ErrorHandlerLogger)
        new_logger._component = self._component
        new_logger._context = {**self._context, **context}
        return new_logger

    def debug(self, event: str, **kw: Any) -> None:
        self._get_logger().debug(event, **kw)

    def info(self, event: str, **kw: Any) -> None:
        self._get_logger().info(event, **kw)

    def warning(self, event: str, **kw: Any) -> None:
        self._get_logger().warning(event, **kw)

    def error(self, event: str, **kw: Any) -> None:
        self._get_logger().error(event, **kw)

    def critical(self, event: str, **kw: Any) -> None:
        self._get_logger().critical(event, **kw)

    def exception(self, event: str, **kw: Any) -> None:
        """Log an exception with traceback.

        Should be called from within an exception handler.
        """
        self._get_logger().exception(event, **kw)


def _get_processors(include_timestamps: bool) -> list[Processor]:
    """Build the shared structlog processor chain.

    Rendering is left to each handler's ProcessorFormatter, so one event
    can be written as console text and as JSON at the same time.
    """
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,  # Filter before processing
        structlog.stdlib.add_log_level,
        _sanitize_event_dict,
    ]

    if include_timestamps:
        processors.append(_add_timestamp)

    processors.extend([
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ])

    return processors


def _formatter(renderer: Processor) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def configure_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO",
    format: Literal["json", "console", "both"] = "console",  # noqa: A002
    file_path: Path | None = None,
    max_file_size_mb: int = 50,
    backup_count: int = 5,
    include_timestamps: bool = True,
) -> None:
    """Configure structured logging.

    This should be called once at application startup before any logging occurs.

    Args:
        level: Minimum log level to capture.
        format: Output format - "json" for structured, "console" for human-readable,
            "both" for console to stderr and JSON to file (requires file_path).
        file_path: Optional file path for log output. Required if format="both".
        max_file_size_mb: Maximum log file size before rotation (MB).
        backup_count: Number of rotated log files to keep.
        include_timestamps: Whether to include ISO8601 timestamps in log entries.

    Raises:
        ValueError: If format="both" but file_path is not provided.
    """
    if format == "both" and file_path is None:
        raise ValueError("file_path is required when format='both'")

    log_level = getattr(logging, level)

    console_formatter = _formatter(structlog.dev.ConsoleRenderer(colors=False))
    json_formatter = _formatter(structlog.processors.JSONRenderer())

    handlers: list[logging.Handler] = []

    if format == "console" or format == "both":
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(console_formatter)
        handlers.append(console_handler)

    if format == "json" or format == "both":
        if file_path:
            file_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = RotatingFileHandler(
                file_path,
                maxBytes=max_file_size_mb * 1024 * 1024,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(json_formatter)
            handlers.append(file_handler)
        else:
            # JSON to stdout if no file specified
            json_handler = logging.StreamHandler(sys.stdout)
            json_handler.setLevel(log_level)
            json_handler.setFormatter(json_formatter)
            handlers.append(json_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    for handler in handlers:
        root_logger.addHandler(handler)

    # cache_logger_on_first_use=False keeps module-level loggers in sync
    # with configuration applied after import.
    structlog.configure(
        processors=_get_processors(include_timestamps),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(component: str, **initial_context: Any) -> ErrorHandlerLogger:
    """Get a logger for a component.

    Args:
        component: The component name (e.g., "backoff", "reporter").
        **initial_context: Additional context to bind.

    Returns:
        An ErrorHandlerLogger instance bound to the component.
    """
    return ErrorHandlerLogger(component, **initial_context)


__all__ = [
    "ErrorHandlerLogger",
    "SENSITIVE_PATTERNS",
    "configure_logging",
    "get_logger",
]
