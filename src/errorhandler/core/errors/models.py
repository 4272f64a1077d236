"""Data models for error normalization and reporting.

This module provides:
- ExactTranslation: A localized message mapped verbatim to a NormalizedError
- PartialMatchRule: An ordered regex rule extracting variables from a message
- ExtractedVariable: One variable captured by a partial match
- Normalization: Result of normalizing a message
- ReportLocation: Where an error was raised, with a deep link
- ErrorContext: The stable, machine-parsable context of a reported error
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, NamedTuple

from .codes import NormalizedError


@dataclass(frozen=True)
class ExactTranslation:
    """A full localized message and the error it normalizes to."""

    message: str
    error: NormalizedError
    locale: str


@dataclass(frozen=True)
class PartialMatchRule:
    """A pattern matched against localized messages, in list order.

    The pattern has one capture group per entry of ``variables``; capture
    values are paired with the names positionally.
    """

    pattern: re.Pattern[str]
    variables: tuple[str, ...]
    error: NormalizedError
    locale: str

    def __post_init__(self) -> None:
        if self.pattern.groups != len(self.variables):
            raise ValueError(
                f"pattern {self.pattern.pattern!r} has {self.pattern.groups} groups "
                f"but {len(self.variables)} variable names"
            )


class ExtractedVariable(NamedTuple):
    """A named value captured from an error message."""

    name: str
    value: str


class Normalization(NamedTuple):
    """Outcome of normalizing one error message.

    ``error`` and ``locale`` are None when nothing matched; ``variables``
    is only populated by partial matches.
    """

    error: NormalizedError | None
    variables: tuple[ExtractedVariable, ...] = ()
    locale: str | None = None

    @property
    def matched(self) -> bool:
        return self.error is not None


@dataclass
class ReportLocation:
    """Source location of a reported error."""

    line_number: int
    file_path: str
    direct_link: str
    function_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "line_number": self.line_number,
            "file_path": self.file_path,
            "direct_link": self.direct_link,
            "function_name": self.function_name,
        }


@dataclass
class ErrorContext:
    """Structured context attached to every reported error.

    Log aggregation consumers rely on the shape produced by ``to_dict()``;
    keys are only ever added, never renamed.
    """

    locale: str
    original_message: str
    known_error: bool
    variables: dict[str, str] = field(default_factory=dict)
    error_kind: str | None = None
    report_location: ReportLocation | None = None
    response_code: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging.

        Optional fields are omitted when unset.
        """
        result: dict[str, Any] = {
            "locale": self.locale,
            "original_message": self.original_message,
            "known_error": self.known_error,
            "variables": dict(self.variables),
        }
        if self.error_kind is not None:
            result["error_kind"] = self.error_kind
        if self.report_location is not None:
            result["report_location"] = self.report_location.to_dict()
        if self.response_code is not None:
            result["response_code"] = self.response_code
        return result
