"""Global constants for errorhandler.

Centralizes the retry policy numbers so they are discoverable and easy
to tune. The rate-limit ceiling and the retried status codes are policy
choices, not structural invariants.
"""

# =============================================================================
# Retry Budget
# =============================================================================

DEFAULT_MAX_RETRIES = 5
"""Retries performed after the first attempt when none is configured."""

MIN_RETRIES = 1
"""Smallest accepted retry count; anything lower falls back to the default."""

MAX_RETRIES = 6
"""Largest accepted retry count; anything higher falls back to the default."""

# =============================================================================
# Backoff Timing (seconds)
# =============================================================================

BACKOFF_BASE_SECONDS = 1.0
"""Delay before the first retry; doubles on each following retry."""

BACKOFF_JITTER_SECONDS = 1.0
"""Upper bound (exclusive) of the random jitter added to each backoff delay."""

RATE_LIMIT_MAX_WAIT_SECONDS = 32.0
"""Server-specified waits at or above this are not honoured; the call fails."""

RATE_LIMIT_BUFFER_SECONDS = 1.0
"""Added to a server-specified resume time before retrying."""

# =============================================================================
# HTTP
# =============================================================================

RETRY_STATUS_CODES = frozenset({500})
"""Response status codes treated as a retryable failure."""

FETCH_TIMEOUT_SECONDS = 30.0
"""Timeout of the HTTP client created when the caller supplies none."""

# =============================================================================
# Reporting
# =============================================================================

BACKOFF_LOG_CONTEXT = "Exponential Backoff"
"""Value of the ``context`` custom param on every executor report."""

UNKNOWN_FUNCTION = "[unknown function]"
"""Placeholder for stack frames without a function name."""

TRUNCATE_ERROR_MESSAGE_CHARS = 200
"""Messages of truncated error kinds longer than this are cut to one sentence."""

DEFAULT_DEEP_LINK_TEMPLATE = (
    "https://script.google.com/macros/d/{script_id}/edit?f={file}&s={line}"
)
"""Deep link to the failing source line; formatted with script_id, file, line."""
