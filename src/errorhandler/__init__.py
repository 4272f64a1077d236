"""errorhandler: error normalization, structured reporting and retries.

Example usage:
    from errorhandler import exp_backoff, log_error

    rows = exp_backoff(lambda: sheet.get_values(), throw_on_failure=True)

    try:
        send_mail(recipients)
    except Exception as e:
        log_error(e, {"recipient_count": len(recipients)})
"""

from errorhandler.core.config import BackoffOptions, ErrorHandlerConfig, LogConfig, ReporterConfig
from errorhandler.core.errors import (
    ERROR_CATALOG,
    NO_RETRY_ERRORS,
    ErrorContext,
    ErrorNormalizer,
    ExtractedVariable,
    HttpResponseError,
    NormalizedError,
    RemoteScriptError,
    ReportedError,
    ReportLocation,
    format_stack,
    get_error_locale,
    get_normalized_error,
)
from errorhandler.core.logging import configure_logging, get_logger
from errorhandler.execution import BackoffExecutor, exp_backoff, url_fetch_with_backoff
from errorhandler.host import HostServices
from errorhandler.reporting import (
    ErrorReporter,
    LogSink,
    NullSink,
    StructlogSink,
    log_error,
)

__version__ = "0.4.0"

__all__ = [
    "ERROR_CATALOG",
    "NO_RETRY_ERRORS",
    "BackoffExecutor",
    "BackoffOptions",
    "ErrorContext",
    "ErrorHandlerConfig",
    "ErrorNormalizer",
    "ErrorReporter",
    "ExtractedVariable",
    "HostServices",
    "HttpResponseError",
    "LogConfig",
    "LogSink",
    "NormalizedError",
    "NullSink",
    "RemoteScriptError",
    "ReportLocation",
    "ReportedError",
    "ReporterConfig",
    "StructlogSink",
    "__version__",
    "configure_logging",
    "exp_backoff",
    "format_stack",
    "get_error_locale",
    "get_logger",
    "get_normalized_error",
    "log_error",
    "url_fetch_with_backoff",
]
