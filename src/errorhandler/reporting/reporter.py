"""Structured error reporting.

Turns a raw error into a stable, machine-parsable record, emits it through
a LogSink and hands the caller a ReportedError carrying the same context.

Example usage:
    from errorhandler.reporting import ErrorReporter

    reporter = ErrorReporter(ReporterConfig(addon_name="Mail Merge"))
    try:
        send_campaign()
    except Exception as e:
        reported = reporter.report(e, {"campaign_id": campaign_id})
        if reported.context.known_error:
            ...
"""

from __future__ import annotations

import re
import traceback
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

from errorhandler.core.config import ReporterConfig
from errorhandler.core.constants import TRUNCATE_ERROR_MESSAGE_CHARS
from errorhandler.core.errors import (
    ErrorContext,
    ErrorNormalizer,
    HttpResponseError,
    ReportedError,
    ReportLocation,
    default_normalizer,
    format_stack,
)
from errorhandler.core.logging import get_logger
from errorhandler.host import DEFAULT_HOST, HostServices
from errorhandler.reporting.sinks import LogSink, Severity, StructlogSink

_logger = get_logger("reporter")

# Error kinds whose messages may be whole HTML pages.
_TRUNCATED_KINDS = frozenset({HttpResponseError.__name__})

_HTML_TAG = re.compile(r"<[^>]*>")
_WHITESPACE = re.compile(r"\s+")
_SENTENCE_END = re.compile(r"[.!?](?=\s|$)")


def _first_sentence(text: str) -> str:
    """Reduce a long (possibly HTML) body to its first sentence."""
    plain = _WHITESPACE.sub(" ", _HTML_TAG.sub(" ", text)).strip()
    match = _SENTENCE_END.search(plain)
    sentence = plain[: match.end()] if match else plain
    return sentence[:TRUNCATE_ERROR_MESSAGE_CHARS]


def _coerce_error(error: Any) -> BaseException:
    if isinstance(error, BaseException):
        return error
    return Exception(error if isinstance(error, str) else repr(error))


def _message_of(error: BaseException) -> str:
    """The error's own message, without the repr quoting some types add."""
    if len(error.args) == 1 and isinstance(error.args[0], str):
        return error.args[0]
    return str(error)


def _source_location(error: BaseException) -> tuple[int, str, str] | None:
    """Return (line, file, raw stack) for errors that carry a location.

    Remote script errors carry their own; Python exceptions use the
    innermost traceback frame, with the stack rendered innermost first.
    """
    line = getattr(error, "line_number", None)
    file_name = getattr(error, "file_name", None)
    stack = getattr(error, "stack", None)
    if line and file_name and stack:
        try:
            return int(line), str(file_name), str(stack)
        except (TypeError, ValueError):
            # Unparseable remote line: skip the location rather than fail the report.
            return None

    if error.__traceback__ is None:
        return None
    frames = traceback.extract_tb(error.__traceback__)
    if not frames:
        return None
    innermost = frames[-1]
    raw_stack = "".join(traceback.format_list(list(reversed(frames))))
    return innermost.lineno or 0, innermost.filename, raw_stack


class ErrorReporter:
    """Builds, emits and returns structured error records.

    The reporter never raises: host capability failures degrade the record
    (empty locale, empty script id) instead of propagating.
    """

    def __init__(
        self,
        config: ReporterConfig | None = None,
        *,
        host: HostServices | None = None,
        sink: LogSink | None = None,
        normalizer: ErrorNormalizer | None = None,
    ) -> None:
        self.config = config or ReporterConfig()
        self.host = host or DEFAULT_HOST
        self.sink = sink or StructlogSink()
        self.normalizer = normalizer or default_normalizer

    def report(
        self,
        error: Any,
        additional_params: Mapping[str, Any] | None = None,
        *,
        as_warning: bool = False,
        do_not_log_known_errors: bool = False,
    ) -> ReportedError:
        """Log ``error`` and return it as a ReportedError.

        Args:
            error: An exception, or a plain message.
            additional_params: Opaque caller data, copied into the record's
                ``custom_params``. ``addon_name`` also overrides the
                configured addon name for stack formatting.
            as_warning: Emit at warning instead of error severity.
            do_not_log_known_errors: Skip emission when the message was
                normalized. Unknown errors are always emitted.

        Returns:
            ReportedError whose message is the English reference text when
            known, else the original message.
        """
        error = _coerce_error(error)
        original_message = _message_of(error)

        normalization = self.normalizer.normalize(original_message)
        known_error = normalization.error is not None
        message = normalization.error.message if normalization.error else original_message

        context = ErrorContext(
            locale=self._resolve_locale(normalization.locale),
            original_message=original_message,
            known_error=known_error,
            variables={v.name: v.value for v in normalization.variables},
        )

        error_kind = type(error).__name__
        context.error_kind = error_kind
        if error_kind in _TRUNCATED_KINDS and len(message) > TRUNCATE_ERROR_MESSAGE_CHARS:
            log_message = f"{error_kind}: {_first_sentence(message)}"
        else:
            log_message = f"{error_kind}: {message}"

        params = dict(additional_params or {})
        location = _source_location(error)
        if location is not None:
            line, file_name, raw_stack = location
            addon_name = params.get("addon_name") or self.config.addon_name
            formatted = format_stack(raw_stack, addon_name)
            context.report_location = ReportLocation(
                line_number=line,
                file_path=file_name,
                direct_link=self._direct_link(file_name, line),
                function_name=formatted.first_function_name,
            )
            if formatted.frames:
                log_message += "\n    " + formatted.text

        response_code = getattr(error, "response_code", None)
        if isinstance(response_code, int):
            context.response_code = response_code

        if self.config.version and "version" not in params:
            params["version"] = self.config.version

        record: dict[str, Any] = {"message": log_message, "context": context.to_dict()}
        if params:
            record["custom_params"] = params

        if not (do_not_log_known_errors and known_error):
            severity: Severity = "warning" if as_warning else "error"
            self._emit(record, severity)

        return ReportedError(message, context, cause=error)

    def _resolve_locale(self, inferred: str | None) -> str:
        """Prefer the host's active-user locale, else the inferred one."""
        if self.host.active_locale is not None:
            try:
                locale = self.host.active_locale()
            except Exception as e:
                _logger.debug("reporter.active_locale_unavailable", error=str(e))
            else:
                if locale:
                    return locale
        return inferred or ""

    def _direct_link(self, file_name: str, line: int) -> str:
        script_id = ""
        if self.host.script_identifier is not None:
            try:
                script_id = self.host.script_identifier() or ""
            except Exception as e:
                _logger.debug("reporter.script_identifier_unavailable", error=str(e))
        return self.config.deep_link_template.format(
            script_id=script_id,
            file=quote(file_name),
            line=line,
        )

    def _emit(self, record: dict[str, Any], severity: Severity) -> None:
        try:
            self.sink.write(record, severity)
        except Exception:
            _logger.exception("reporter.sink_write_failed", message=record["message"])


default_reporter = ErrorReporter()


def log_error(
    error: Any,
    additional_params: Mapping[str, Any] | None = None,
    *,
    as_warning: bool = False,
    do_not_log_known_errors: bool = False,
) -> ReportedError:
    """Report ``error`` through the default reporter. See ErrorReporter.report."""
    return default_reporter.report(
        error,
        additional_params,
        as_warning=as_warning,
        do_not_log_known_errors=do_not_log_known_errors,
    )
