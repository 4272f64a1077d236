"""HTTP fetch with exponential backoff.

Wraps a single httpx request in the backoff executor. HTTP error statuses
never raise: status 500 is retried and, once retries run out, the last
response is returned to the caller as-is. Any other status is returned
immediately.

Example usage:
    from errorhandler.execution import url_fetch_with_backoff

    response = url_fetch_with_backoff(
        "https://www.googleapis.com/drive/v3/files",
        {"headers": {"Authorization": f"Bearer {token}"}},
    )
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from errorhandler.core.config import BackoffOptions
from errorhandler.core.constants import FETCH_TIMEOUT_SECONDS
from errorhandler.execution.backoff import BackoffExecutor
from errorhandler.host import HostServices
from errorhandler.reporting import ErrorReporter


def url_fetch_with_backoff(
    url: str,
    params: Mapping[str, Any] | None = None,
    *,
    client: httpx.Client | None = None,
    options: BackoffOptions | None = None,
    reporter: ErrorReporter | None = None,
    host: HostServices | None = None,
) -> httpx.Response:
    """Fetch ``url`` with retries.

    Args:
        url: Target URL.
        params: Request parameters passed to ``httpx.Client.request``
            (``headers``, ``json``, ``content``, ...). ``method`` selects the
            HTTP method and defaults to GET. The caller's mapping is not
            modified.
        client: Client to send with. A client is created, and closed, per
            call when omitted.
        options: Retry options. ``throw_on_failure`` is always on, since a
            transport that never produced a response has nothing to return;
            a caller value left at its default is replaced, an explicit
            ``False`` is rejected.
        reporter: Reporter for terminal failures.
        host: Sleep, clock and jitter source.

    Returns:
        The first non-500 response, or the last 500 response when retries
        ran out.

    Raises:
        ReportedError: When the request itself failed (connection refused,
            timeout, ...) on every attempt, or with a non-retryable error.
        ValueError: If ``options`` explicitly sets ``throw_on_failure=False``.
    """
    if (
        options is not None
        and "throw_on_failure" in options.model_fields_set
        and not options.throw_on_failure
    ):
        raise ValueError("url_fetch_with_backoff always raises on transport failure; "
                         "throw_on_failure=False is not supported")

    request_params = dict(params or {})
    method = str(request_params.pop("method", "GET")).upper()
    # Status codes are surfaced through the response, never raised.
    request_params.pop("mute_http_exceptions", None)

    base = options.model_dump() if options is not None else {}
    fetch_options = BackoffOptions.model_validate({**base, "throw_on_failure": True})
    executor = BackoffExecutor(fetch_options, reporter=reporter, host=host)

    if client is not None:
        return executor.execute(lambda: client.request(method, url, **request_params))  # type: ignore[return-value]

    with httpx.Client(timeout=httpx.Timeout(FETCH_TIMEOUT_SECONDS)) as owned:
        return executor.execute(lambda: owned.request(method, url, **request_params))  # type: ignore[return-value]
