"""Tests for errorhandler.execution.backoff module."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import timedelta
from typing import Any

import httpx
import pytest

from errorhandler.core.config import BackoffOptions
from errorhandler.core.errors import ReportedError
from errorhandler.execution import (
    BackoffExecutor,
    Failure,
    HttpOutcome,
    Success,
    exp_backoff,
    invoke,
)
from errorhandler.host import HostServices

SERVER_ERROR = "We're sorry, a server error occurred. Please wait a bit and try again."
NO_AUTH = "Authorization is required to perform that action."


def scripted(*steps: Any) -> tuple[Callable[[], Any], list[int]]:
    """Build an operation that raises or returns each step in turn.

    The last step repeats forever. Returns the operation and a one-item
    list counting invocations.
    """
    calls = [0]

    def operation() -> Any:
        step = steps[min(calls[0], len(steps) - 1)]
        calls[0] += 1
        if isinstance(step, BaseException):
            raise step
        if callable(step):
            return step()
        return step

    return operation, calls


def rate_limited(resume_at: str) -> Exception:
    return Exception(f"User-rate limit exceeded.  Retry after {resume_at}")


def iso(clock, seconds: float) -> str:
    """ISO timestamp ``seconds`` after the fake clock's current time."""
    return (clock.current + timedelta(seconds=seconds)).isoformat().replace("+00:00", "Z")


def params_of(records: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
    return [record["custom_params"] for record in records]


# =============================================================================
# invoke
# =============================================================================


class TestInvoke:
    """Tests for single-attempt outcome tagging."""

    def test_value(self):
        assert invoke(lambda: 42) == Success(42)

    def test_response(self):
        response = httpx.Response(200)
        assert invoke(lambda: response) == HttpOutcome(response)

    def test_exception(self):
        error = ValueError("boom")

        def operation():
            raise error

        outcome = invoke(operation)
        assert isinstance(outcome, Failure)
        assert outcome.error is error


# =============================================================================
# Success paths
# =============================================================================


class TestSuccess:
    """Tests for operations that eventually succeed."""

    def test_first_attempt(self, reporter, sink, clock):
        operation, calls = scripted("ok")

        result = BackoffExecutor(reporter=reporter).execute(operation)

        assert result == "ok"
        assert calls[0] == 1
        assert clock.sleeps == []
        assert sink.records == []

    def test_after_transient_failures(self, reporter, sink, clock):
        operation, calls = scripted(Exception(SERVER_ERROR), Exception(SERVER_ERROR), "ok")

        result = BackoffExecutor(reporter=reporter).execute(operation)

        assert result == "ok"
        assert calls[0] == 3
        assert clock.sleeps == [1.0, 2.0]
        assert sink.records == []

    def test_verbose_reports_recovered_error_as_warning(self, reporter, sink, clock):
        operation, _ = scripted(Exception(SERVER_ERROR), "ok")

        result = BackoffExecutor(BackoffOptions(verbose=True), reporter=reporter).execute(operation)

        assert result == "ok"
        assert sink.severities == ["warning"]
        assert sink.records[0]["custom_params"] == {
            "context": "Exponential Backoff",
            "number_retry": 1,
            "successful": True,
            "retry_delay": 1.0,
        }

    def test_verbose_first_attempt_reports_nothing(self, reporter, sink):
        BackoffExecutor(BackoffOptions(verbose=True), reporter=reporter).execute(lambda: "ok")
        assert sink.records == []


# =============================================================================
# Retry schedule
# =============================================================================


class TestRetrySchedule:
    """Tests for delay growth and the retry budget."""

    def test_exhausts_budget_with_doubling_delays(self, reporter, sink, clock):
        operation, calls = scripted(Exception(SERVER_ERROR))

        result = BackoffExecutor(BackoffOptions(max_retries=5), reporter=reporter).execute(operation)

        assert isinstance(result, ReportedError)
        assert calls[0] == 6
        assert clock.sleeps == [1.0, 2.0, 4.0, 8.0, 16.0]
        assert len(sink.records) == 1
        assert sink.records[0]["custom_params"] == {
            "context": "Exponential Backoff",
            "number_retry": 5,
            "fail_reason": "Failed after 5 retries",
        }

    def test_jitter_is_added(self, clock):
        host = HostServices(sleep=clock.sleep, now=clock.now, random=lambda: 0.5)
        operation, _ = scripted(Exception("flaky"))

        BackoffExecutor(BackoffOptions(max_retries=3), host=host).run(operation)

        assert clock.sleeps == [1.5, 2.5, 4.5]

    def test_delays_stay_within_jitter_bounds(self, clock):
        host = HostServices(sleep=clock.sleep, now=clock.now)
        operation, _ = scripted(Exception("flaky"))

        BackoffExecutor(BackoffOptions(max_retries=4), host=host).run(operation)

        for n, delay in enumerate(clock.sleeps, start=1):
            assert 2 ** (n - 1) <= delay < 2 ** (n - 1) + 1

    @pytest.mark.parametrize(
        ("configured", "expected_calls"),
        [(1, 2), (3, 4), (6, 7), (0, 6), (7, 6), (-2, 6), (None, 6)],
    )
    def test_out_of_range_max_retries_falls_back_to_default(
        self, reporter, configured, expected_calls
    ):
        operation, calls = scripted(Exception("flaky"))

        BackoffExecutor(BackoffOptions(max_retries=configured), reporter=reporter).run(operation)

        assert calls[0] == expected_calls

    def test_unknown_errors_are_retried(self, reporter):
        operation, calls = scripted(KeyError("missing"), "ok")
        assert BackoffExecutor(reporter=reporter).execute(operation) == "ok"
        assert calls[0] == 2


# =============================================================================
# Terminal failures
# =============================================================================


class TestTerminalFailures:
    """Tests for how failures end the loop."""

    def test_no_retry_error_stops_immediately(self, reporter, sink, clock):
        operation, calls = scripted(Exception(NO_AUTH))

        result = BackoffExecutor(reporter=reporter).execute(operation)

        assert isinstance(result, ReportedError)
        assert result.message == NO_AUTH
        assert result.context.known_error is True
        assert calls[0] == 1
        assert clock.sleeps == []
        assert params_of(sink.records) == [
            {"context": "Exponential Backoff", "number_retry": 0, "fail_reason": "No retry needed"}
        ]

    def test_localized_no_retry_error(self, reporter):
        operation, calls = scripted(
            Exception("Une autorisation est requise pour effectuer cette action.")
        )

        result = BackoffExecutor(reporter=reporter).execute(operation)

        assert result.message == NO_AUTH
        assert result.context.locale == "fr"
        assert calls[0] == 1

    def test_throw_on_failure_raises_from_raw_error(self, reporter, sink):
        raw = Exception(NO_AUTH)
        operation, _ = scripted(raw)

        with pytest.raises(ReportedError) as exc_info:
            BackoffExecutor(BackoffOptions(throw_on_failure=True), reporter=reporter).execute(
                operation
            )

        assert exc_info.value.__cause__ is raw
        assert exc_info.value.cause is raw
        assert len(sink.records) == 1

    def test_do_not_log_known_errors_suppresses_known_terminal(self, reporter, sink):
        operation, _ = scripted(Exception(NO_AUTH))
        options = BackoffOptions(do_not_log_known_errors=True)

        result = BackoffExecutor(options, reporter=reporter).execute(operation)

        assert isinstance(result, ReportedError)
        assert sink.records == []

    def test_do_not_log_known_errors_keeps_unknown_terminal(self, reporter, sink):
        operation, _ = scripted(Exception("flaky"))
        options = BackoffOptions(do_not_log_known_errors=True, max_retries=1)

        BackoffExecutor(options, reporter=reporter).execute(operation)

        assert len(sink.records) == 1

    def test_exhausted_error_is_the_last_one(self, reporter):
        operation, _ = scripted(Exception("first"), Exception("second"))

        result = BackoffExecutor(BackoffOptions(max_retries=1), reporter=reporter).execute(operation)

        assert result.message == "second"


# =============================================================================
# Rate limits with a resume time
# =============================================================================


class TestRateLimit:
    """Tests for server-specified retry times."""

    def test_waits_until_resume_time_plus_buffer(self, reporter, sink, clock):
        operation, calls = scripted(rate_limited(iso(clock, 10)), "ok")

        result = BackoffExecutor(reporter=reporter).execute(operation)

        assert result == "ok"
        assert calls[0] == 2
        assert clock.sleeps == [pytest.approx(11.0)]
        assert sink.records == []

    def test_explicit_waits_do_not_consume_retries(self, reporter, sink, clock):
        first = rate_limited(iso(clock, 10))
        # Resume time of the second failure is relative to the clock after the first wait.
        second = rate_limited(iso(clock, 11 + 5))
        operation, calls = scripted(first, second, "ok")

        result = BackoffExecutor(BackoffOptions(max_retries=1), reporter=reporter).execute(
            operation
        )

        assert result == "ok"
        assert calls[0] == 3
        assert clock.sleeps == [pytest.approx(11.0), pytest.approx(6.0)]

    def test_repeated_rate_limit_logs_warning(self, reporter, sink, clock):
        first = rate_limited(iso(clock, 10))
        second = rate_limited(iso(clock, 11 + 5))
        operation, _ = scripted(first, second, "ok")

        BackoffExecutor(reporter=reporter).execute(operation)

        assert sink.severities == ["warning"]
        params = sink.records[0]["custom_params"]
        assert params["context"] == "Exponential Backoff"
        assert params["retry_delay"] == pytest.approx(6.0)
        assert "11.0s" in params["fail_reason"]

    def test_long_wait_fails_immediately(self, reporter, sink, clock):
        operation, calls = scripted(rate_limited(iso(clock, 60)))

        result = BackoffExecutor(reporter=reporter).execute(operation)

        assert isinstance(result, ReportedError)
        assert calls[0] == 1
        assert clock.sleeps == []
        params = sink.records[0]["custom_params"]
        assert params["fail_reason"] == "Retry delay >= 32s"
        assert params["retry_delay"] == pytest.approx(61.0)

    def test_wait_just_under_ceiling_is_honoured(self, reporter, clock):
        operation, _ = scripted(rate_limited(iso(clock, 30.5)), "ok")

        assert BackoffExecutor(reporter=reporter).execute(operation) == "ok"
        assert clock.sleeps == [pytest.approx(31.5)]

    def test_resume_time_in_the_past_does_not_sleep_negative(self, reporter, clock):
        operation, _ = scripted(rate_limited(iso(clock, -5)), "ok")

        assert BackoffExecutor(reporter=reporter).execute(operation) == "ok"
        assert clock.sleeps == [0.0]

    def test_unparseable_resume_time_uses_backoff(self, reporter, clock):
        operation, _ = scripted(rate_limited("soonZ"), "ok")

        assert BackoffExecutor(reporter=reporter).execute(operation) == "ok"
        assert clock.sleeps == [1.0]


# =============================================================================
# HTTP responses
# =============================================================================


class TestHttpResponses:
    """Tests for operations that return httpx responses."""

    def test_server_error_is_retried_then_returned(self, reporter, sink, clock):
        response = httpx.Response(500, text="Internal Server Error")
        operation, calls = scripted(response)

        result = BackoffExecutor(BackoffOptions(max_retries=2), reporter=reporter).execute(
            operation
        )

        assert result is response
        assert calls[0] == 3
        assert clock.sleeps == [1.0, 2.0]
        assert len(sink.records) == 1
        record = sink.records[0]
        assert record["custom_params"]["url_fetch_with_mute_http_exceptions"] is True
        assert record["custom_params"]["fail_reason"] == "Failed after 2 retries"
        assert record["context"]["response_code"] == 500

    def test_exhausted_response_is_returned_even_with_throw_on_failure(self, reporter):
        response = httpx.Response(500, text="Internal Server Error")
        options = BackoffOptions(max_retries=1, throw_on_failure=True)

        assert BackoffExecutor(options, reporter=reporter).execute(lambda: response) is response

    def test_other_statuses_are_returned_immediately(self, reporter, sink, clock):
        response = httpx.Response(404, text="Not Found")
        operation, calls = scripted(response)

        assert BackoffExecutor(reporter=reporter).execute(operation) is response
        assert calls[0] == 1
        assert clock.sleeps == []
        assert sink.records == []

    def test_recovers_after_server_error(self, reporter):
        ok = httpx.Response(200, text="fine")
        operation, calls = scripted(httpx.Response(500, text="oops"), ok)

        assert BackoffExecutor(reporter=reporter).execute(operation) is ok
        assert calls[0] == 2

    def test_exception_after_server_error_is_reported_as_error(self, reporter):
        operation, _ = scripted(httpx.Response(500, text="oops"), Exception("flaky"))

        result = BackoffExecutor(BackoffOptions(max_retries=1), reporter=reporter).execute(
            operation
        )

        assert isinstance(result, ReportedError)
        assert result.message == "flaky"


# =============================================================================
# exp_backoff
# =============================================================================


class TestExpBackoff:
    """Tests for the functional entry point."""

    def test_overrides_apply_on_top_of_options(self, reporter, sink):
        operation, calls = scripted(Exception("flaky"))

        exp_backoff(
            operation,
            BackoffOptions(do_not_log_known_errors=True),
            reporter=reporter,
            max_retries=2,
        )

        assert calls[0] == 3

    def test_overrides_are_validated(self, reporter):
        operation, calls = scripted(Exception("flaky"))

        exp_backoff(operation, reporter=reporter, max_retries=99)

        assert calls[0] == 6

    def test_throw_on_failure_override(self, reporter):
        with pytest.raises(ReportedError):
            exp_backoff(lambda: 1 / 0, reporter=reporter, max_retries=1, throw_on_failure=True)

    def test_host_without_reporter(self, clock):
        host = HostServices(sleep=clock.sleep, now=clock.now, random=lambda: 0.0)
        operation, _ = scripted(Exception(SERVER_ERROR), "ok")

        assert exp_backoff(operation, host=host) == "ok"
        assert clock.sleeps == [1.0]

    def test_calls_do_not_share_state(self, reporter, clock):
        operation, _ = scripted(rate_limited(iso(clock, 10)), "ok")
        exp_backoff(operation, reporter=reporter)

        second, _ = scripted(Exception("flaky"), "ok")
        exp_backoff(second, reporter=reporter)

        assert clock.sleeps == [pytest.approx(11.0), 1.0]
