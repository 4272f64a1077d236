"""Exception types produced and understood by errorhandler.

ReportedError is what callers receive after a failure has been logged.
HttpResponseError and RemoteScriptError are error shapes the reporter
knows how to mine for extra context.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ErrorContext


class ReportedError(Exception):
    """An error that has been normalized and logged.

    The message is the English reference text when the original message
    was recognized, otherwise the original message. ``context`` carries the
    structured record; ``cause`` is the raw error that was reported.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = context
        self.cause = cause


class HttpResponseError(Exception):
    """A transport response that signalled failure through its status code.

    Long HTML bodies are truncated to their first sentence when reported.
    """

    def __init__(self, message: str, response_code: int) -> None:
        super().__init__(message)
        self.response_code = response_code


class RemoteScriptError(Exception):
    """An error raised by a remote script host.

    Carries the host's own source location and stack text, in the
    ``at <file>[ (<addon>)]:<line>[ (<function>)]`` form.
    """

    def __init__(
        self,
        message: str,
        *,
        line_number: int | None = None,
        file_name: str | None = None,
        stack: str | None = None,
        response_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.line_number = line_number
        self.file_name = file_name
        self.stack = stack
        self.response_code = response_code
