"""Destinations for structured error records.

Implementations:
- StructlogSink: routes records through the package's structlog logger
- NullSink: drops records (tests, or hosts that only want the return value)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Literal

from errorhandler.core.logging import get_logger

Severity = Literal["warning", "error"]


class LogSink(ABC):
    """Receives one structured record per reported error."""

    @abstractmethod
    def write(self, record: dict[str, Any], severity: Severity) -> None: ...


class NullSink(LogSink):
    """No-op sink."""

    def write(self, record: dict[str, Any], severity: Severity) -> None:
        pass


class StructlogSink(LogSink):
    """Structured logging sink.

    Emits each record as an ``error_reported`` event whose fields are the
    record's ``message``, ``context`` and ``custom_params``.
    """

    def __init__(self, component: str = "reporter") -> None:
        self._logger = get_logger(component)

    def write(self, record: dict[str, Any], severity: Severity) -> None:
        if severity == "warning":
            self._logger.warning("error_reported", **record)
        else:
            self._logger.error("error_reported", **record)
