"""Tests for errorhandler.execution.fetch module."""

import json

import httpx
import pytest

from errorhandler.core.config import BackoffOptions
from errorhandler.core.errors import ReportedError
from errorhandler.execution import url_fetch_with_backoff

URL = "https://api.example.com/v1/items"


def mock_client(*statuses: int) -> tuple[httpx.Client, list[httpx.Request]]:
    """Client whose transport answers with ``statuses`` in turn; the last repeats."""
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        status = statuses[min(len(requests), len(statuses)) - 1]
        return httpx.Response(status, text=f"status {status}")

    return httpx.Client(transport=httpx.MockTransport(handler)), requests


class TestUrlFetchWithBackoff:
    """Tests for the HTTP adapter."""

    def test_success(self, reporter, clock):
        client, requests = mock_client(200)

        response = url_fetch_with_backoff(URL, client=client, reporter=reporter)

        assert response.status_code == 200
        assert len(requests) == 1
        assert requests[0].method == "GET"
        assert clock.sleeps == []

    def test_method_and_params_are_forwarded(self, reporter):
        client, requests = mock_client(201)
        params = {"method": "post", "json": {"name": "x"}, "headers": {"X-Trace": "t-1"}}

        url_fetch_with_backoff(URL, params, client=client, reporter=reporter)

        request = requests[0]
        assert request.method == "POST"
        assert request.headers["X-Trace"] == "t-1"
        assert json.loads(request.content) == {"name": "x"}
        assert params["method"] == "post"

    def test_error_statuses_do_not_raise(self, reporter, sink):
        client, requests = mock_client(403)

        response = url_fetch_with_backoff(
            URL, {"mute_http_exceptions": False}, client=client, reporter=reporter
        )

        assert response.status_code == 403
        assert len(requests) == 1
        assert sink.records == []

    def test_server_error_is_retried(self, reporter, clock):
        client, requests = mock_client(500, 500, 200)

        response = url_fetch_with_backoff(URL, client=client, reporter=reporter)

        assert response.status_code == 200
        assert len(requests) == 3
        assert clock.sleeps == [1.0, 2.0]

    def test_last_server_error_is_returned_when_retries_run_out(self, reporter, sink):
        client, requests = mock_client(500)

        response = url_fetch_with_backoff(
            URL, client=client, options=BackoffOptions(max_retries=2), reporter=reporter
        )

        assert response.status_code == 500
        assert response.text == "status 500"
        assert len(requests) == 3
        assert sink.records[0]["custom_params"]["url_fetch_with_mute_http_exceptions"] is True

    def test_transport_failure_raises_reported_error(self, reporter, sink):
        attempts = []

        def handler(request: httpx.Request) -> httpx.Response:
            attempts.append(request)
            raise httpx.ConnectError("Connection refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))

        with pytest.raises(ReportedError) as exc_info:
            url_fetch_with_backoff(
                URL, client=client, options=BackoffOptions(max_retries=1), reporter=reporter
            )

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert len(attempts) == 2
        assert len(sink.records) == 1

    def test_explicit_throw_on_failure_false_rejected(self, reporter):
        client, requests = mock_client(200)

        with pytest.raises(ValueError, match="throw_on_failure"):
            url_fetch_with_backoff(
                URL,
                client=client,
                options=BackoffOptions(throw_on_failure=False),
                reporter=reporter,
            )

        assert requests == []

    def test_default_throw_on_failure_is_replaced(self, reporter):
        """Options that leave throw_on_failure unset still raise on transport failure."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))

        with pytest.raises(ReportedError):
            url_fetch_with_backoff(
                URL, client=client, options=BackoffOptions(verbose=True, max_retries=1), reporter=reporter
            )
