"""Exponential backoff executor.

Runs an operation, retrying transient failures with delays of about
1, 2, 4, 8 and 16 seconds plus jitter. Failures are classified through
the error normalizer:

- Rate limits that name a resume time are waited out exactly when the wait
  is under 32 seconds; those waits do not consume the retry budget.
- Errors in NO_RETRY_ERRORS stop the loop at once.
- Unknown and retryable errors are retried until the budget is spent.
- ``httpx.Response`` results with status 500 are retried; when retries run
  out the last response is handed back, not an error.

Every terminal failure is reported exactly once, at the point the loop
ends. The executor itself never raises; ``BackoffResult.unwrap`` raises
the ReportedError when ``throw_on_failure`` is set.

Example usage:
    from errorhandler.execution import exp_backoff

    values = exp_backoff(lambda: sheet.get_values(), max_retries=3)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx

from errorhandler.core.config import BackoffOptions
from errorhandler.core.constants import (
    BACKOFF_BASE_SECONDS,
    BACKOFF_JITTER_SECONDS,
    BACKOFF_LOG_CONTEXT,
    RATE_LIMIT_BUFFER_SECONDS,
    RATE_LIMIT_MAX_WAIT_SECONDS,
    RETRY_STATUS_CODES,
)
from errorhandler.core.errors import (
    NO_RETRY_ERRORS,
    HttpResponseError,
    Normalization,
    NormalizedError,
    ReportedError,
)
from errorhandler.core.logging import get_logger
from errorhandler.host import HostServices
from errorhandler.reporting import ErrorReporter, default_reporter
from errorhandler.utils.time import parse_timestamp

_logger = get_logger("backoff")

T = TypeVar("T")


# =============================================================================
# Attempt outcomes
# =============================================================================


@dataclass(frozen=True)
class Success(Generic[T]):
    """The operation returned a value."""

    value: T


@dataclass(frozen=True)
class HttpOutcome:
    """The operation returned a transport response."""

    response: httpx.Response

    @property
    def failed(self) -> bool:
        return self.response.status_code in RETRY_STATUS_CODES


@dataclass(frozen=True)
class Failure:
    """The operation raised."""

    error: Exception


Outcome = Success[Any] | HttpOutcome | Failure


def invoke(operation: Callable[[], Any]) -> Outcome:
    """Run ``operation`` once and tag what it produced."""
    try:
        value = operation()
    except Exception as e:
        return Failure(e)
    if isinstance(value, httpx.Response):
        return HttpOutcome(value)
    return Success(value)


# =============================================================================
# Results
# =============================================================================


@dataclass
class BackoffAttempt:
    """Per-call retry state. Never shared between calls.

    Attributes:
        retries: Retries consumed from the budget.
        invocations: Times the operation has been called.
        last_error: Error of the most recent failed attempt.
        retry_delay: Server-specified wait to honour before the next attempt.
        previous_retry_delay: Server-specified wait honoured before this attempt.
        last_delay: Seconds slept before the most recent attempt.
    """

    retries: int = 0
    invocations: int = 0
    last_error: Exception | None = None
    retry_delay: float | None = None
    previous_retry_delay: float | None = None
    last_delay: float | None = None


@dataclass
class BackoffResult(Generic[T]):
    """Terminal outcome of a backoff call: a value or a ReportedError."""

    value: T | None = None
    error: ReportedError | None = None
    invocations: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self, throw_on_failure: bool = False) -> T | ReportedError:
        """Return the value, or the error (raised when ``throw_on_failure``)."""
        if self.error is None:
            return self.value  # type: ignore[return-value]
        if throw_on_failure:
            raise self.error from self.error.cause
        return self.error


# =============================================================================
# Executor
# =============================================================================


class BackoffExecutor:
    """Retries an operation with exponential backoff.

    Stateless between calls: each ``run`` owns its BackoffAttempt, so one
    executor can be shared by concurrent callers as long as the injected
    host capabilities and sink are themselves thread-safe.
    """

    def __init__(
        self,
        options: BackoffOptions | None = None,
        *,
        reporter: ErrorReporter | None = None,
        host: HostServices | None = None,
    ) -> None:
        """Initialize the executor.

        Args:
            options: Retry options. Defaults to BackoffOptions().
            reporter: Reporter for terminal failures. Defaults to the
                package reporter, or a new one bound to ``host``.
            host: Sleep, clock and jitter source. Defaults to the reporter's.
        """
        self.options = options or BackoffOptions()
        if reporter is None:
            reporter = default_reporter if host is None else ErrorReporter(host=host)
        self.reporter = reporter
        self.host = host or reporter.host

    def execute(self, operation: Callable[[], T]) -> T | ReportedError:
        """Run ``operation``; return its value or the ReportedError.

        Raises:
            ReportedError: On terminal failure when ``throw_on_failure`` is set.
        """
        return self.run(operation).unwrap(self.options.throw_on_failure)

    def run(self, operation: Callable[[], T]) -> BackoffResult[T]:
        """Run ``operation`` with retries. Never raises."""
        max_retries = self.options.max_retries
        state = BackoffAttempt()
        last_response: httpx.Response | None = None

        while True:
            if state.invocations:
                self._wait(state)

            outcome = invoke(operation)
            state.invocations += 1

            if isinstance(outcome, HttpOutcome) and outcome.failed:
                last_response = outcome.response
                error: Exception = HttpResponseError(
                    outcome.response.text, outcome.response.status_code
                )
            elif isinstance(outcome, Failure):
                last_response = None
                error = outcome.error
            else:
                value = outcome.response if isinstance(outcome, HttpOutcome) else outcome.value
                self._report_recovery(state)
                return BackoffResult(value=value, invocations=state.invocations)

            _logger.debug(
                "backoff.attempt_failed",
                invocation=state.invocations,
                retries=state.retries,
                error_type=type(error).__name__,
                error=str(error)[:200],
            )

            state.last_error = error
            state.previous_retry_delay = state.retry_delay
            state.retry_delay = None

            if last_response is None:
                terminal = self._classify(error, state)
                if terminal is not None:
                    return BackoffResult(error=terminal, invocations=state.invocations)
                if state.retry_delay is not None:
                    continue

            if state.retries >= max_retries:
                break
            state.retries += 1

        return self._exhausted(state, last_response)

    def _wait(self, state: BackoffAttempt) -> None:
        if state.retry_delay is not None:
            delay = max(0.0, state.retry_delay)
        else:
            delay = (
                BACKOFF_BASE_SECONDS * 2 ** (state.retries - 1)
                + self.host.random() * BACKOFF_JITTER_SECONDS
            )
        state.last_delay = delay
        _logger.debug("backoff.sleeping", delay_seconds=round(delay, 3), retries=state.retries)
        self.host.sleep(delay)

    def _classify(self, error: Exception, state: BackoffAttempt) -> ReportedError | None:
        """Decide what a raised error means for the loop.

        Returns a ReportedError when the loop must stop now. Sets
        ``state.retry_delay`` when the server named a resume time that is
        worth waiting for.
        """
        normalization: Normalization = self.reporter.normalizer.normalize(str(error))
        variables_by_name = {v.name: v.value for v in normalization.variables}

        if normalization.error is NormalizedError.USER_RATE_LIMIT_EXCEEDED_RETRY_AFTER_SPECIFIED_TIME:
            resume_at = parse_timestamp(variables_by_name.get("timestamp", ""))
            if resume_at is not None:
                retry_delay = (
                    (resume_at - self.host.now()).total_seconds() + RATE_LIMIT_BUFFER_SECONDS
                )
                if state.previous_retry_delay is not None:
                    self._report(
                        error,
                        state,
                        fail_reason=(
                            f"Failed after waiting {state.previous_retry_delay:.1f}s "
                            "following a rate limit with a resume time"
                        ),
                        retry_delay=retry_delay,
                        as_warning=True,
                    )
                if retry_delay < RATE_LIMIT_MAX_WAIT_SECONDS:
                    state.retry_delay = retry_delay
                    return None
                return self._report(
                    error,
                    state,
                    fail_reason=f"Retry delay >= {RATE_LIMIT_MAX_WAIT_SECONDS:.0f}s",
                    retry_delay=retry_delay,
                    do_not_log_known_errors=self.options.do_not_log_known_errors,
                )

        if normalization.error in NO_RETRY_ERRORS:
            return self._report(
                error,
                state,
                fail_reason="No retry needed",
                do_not_log_known_errors=self.options.do_not_log_known_errors,
            )

        return None

    def _report_recovery(self, state: BackoffAttempt) -> None:
        """Log the error that was overcome, for verbose callers."""
        if state.invocations <= 1 or not self.options.verbose:
            return
        self._report(
            state.last_error,
            state,
            successful=True,
            retry_delay=state.last_delay,
            as_warning=True,
        )

    def _exhausted(
        self,
        state: BackoffAttempt,
        last_response: httpx.Response | None,
    ) -> BackoffResult[Any]:
        fail_reason = f"Failed after {state.retries} retries"
        if last_response is not None:
            self._report(
                state.last_error,
                state,
                fail_reason=fail_reason,
                url_fetch_with_mute_http_exceptions=True,
            )
            return BackoffResult(value=last_response, invocations=state.invocations)

        reported = self._report(
            state.last_error,
            state,
            fail_reason=fail_reason,
            do_not_log_known_errors=self.options.do_not_log_known_errors,
        )
        return BackoffResult(error=reported, invocations=state.invocations)

    def _report(
        self,
        error: Exception | None,
        state: BackoffAttempt,
        *,
        as_warning: bool = False,
        do_not_log_known_errors: bool = False,
        retry_delay: float | None = None,
        **params: Any,
    ) -> ReportedError:
        custom_params: dict[str, Any] = {
            "context": BACKOFF_LOG_CONTEXT,
            "number_retry": state.invocations - 1,
            **params,
        }
        if retry_delay is not None:
            custom_params["retry_delay"] = round(retry_delay, 3)
        return self.reporter.report(
            error,
            custom_params,
            as_warning=as_warning,
            do_not_log_known_errors=do_not_log_known_errors,
        )


def exp_backoff(
    operation: Callable[[], T],
    options: BackoffOptions | None = None,
    *,
    reporter: ErrorReporter | None = None,
    host: HostServices | None = None,
    **overrides: Any,
) -> T | ReportedError:
    """Invoke ``operation`` with exponential backoff.

    Args:
        operation: Zero-argument callable to run.
        options: Retry options; keyword ``overrides`` (``max_retries=3``,
            ``throw_on_failure=True``, ...) are applied on top.
        reporter: Reporter for terminal failures.
        host: Sleep, clock and jitter source.

    Returns:
        The operation's value, or a ReportedError on terminal failure.

    Raises:
        ReportedError: On terminal failure when ``throw_on_failure`` is set.
    """
    if overrides:
        base = options.model_dump() if options is not None else {}
        options = BackoffOptions.model_validate({**base, **overrides})
    return BackoffExecutor(options, reporter=reporter, host=host).execute(operation)
