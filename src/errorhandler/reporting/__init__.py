"""Structured error reporting and log sinks."""

from errorhandler.reporting.reporter import ErrorReporter, default_reporter, log_error
from errorhandler.reporting.sinks import LogSink, NullSink, Severity, StructlogSink

__all__ = [
    "ErrorReporter",
    "LogSink",
    "NullSink",
    "Severity",
    "StructlogSink",
    "default_reporter",
    "log_error",
]
