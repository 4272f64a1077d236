"""Core domain models, configuration and logging."""

from errorhandler.core.config import BackoffOptions, ErrorHandlerConfig, LogConfig, ReporterConfig
from errorhandler.core.errors import NormalizedError, ReportedError

__all__ = [
    "BackoffOptions",
    "ErrorHandlerConfig",
    "LogConfig",
    "NormalizedError",
    "ReportedError",
    "ReporterConfig",
]
