"""Retry execution: the backoff executor and its HTTP adapter."""

from errorhandler.execution.backoff import (
    BackoffAttempt,
    BackoffExecutor,
    BackoffResult,
    Failure,
    HttpOutcome,
    Outcome,
    Success,
    exp_backoff,
    invoke,
)
from errorhandler.execution.fetch import url_fetch_with_backoff

__all__ = [
    "BackoffAttempt",
    "BackoffExecutor",
    "BackoffResult",
    "Failure",
    "HttpOutcome",
    "Outcome",
    "Success",
    "exp_backoff",
    "invoke",
    "url_fetch_with_backoff",
]
