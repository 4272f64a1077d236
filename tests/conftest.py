"""Pytest fixtures for errorhandler tests."""

import logging
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
import structlog

from errorhandler.host import HostServices
from errorhandler.reporting import ErrorReporter, LogSink
from errorhandler.reporting.sinks import Severity

START_TIME = datetime(2026, 10, 16, 10, 0, 0, tzinfo=UTC)


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset logging state before and after each test.

    This ensures test isolation for logging configuration.
    """
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    structlog.reset_defaults()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)


class RecordingSink(LogSink):
    """Sink that keeps every record it receives."""

    def __init__(self) -> None:
        self.entries: list[tuple[Severity, dict[str, Any]]] = []

    def write(self, record: dict[str, Any], severity: Severity) -> None:
        self.entries.append((severity, record))

    @property
    def records(self) -> list[dict[str, Any]]:
        return [record for _, record in self.entries]

    @property
    def severities(self) -> list[Severity]:
        return [severity for severity, _ in self.entries]


class FakeClock:
    """Clock whose time only moves when something sleeps."""

    def __init__(self, start: datetime = START_TIME) -> None:
        self.current = start
        self.sleeps: list[float] = []

    def now(self) -> datetime:
        return self.current

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.current += timedelta(seconds=seconds)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def host(clock: FakeClock) -> HostServices:
    """Host with a fake clock and no jitter."""
    return HostServices(sleep=clock.sleep, now=clock.now, random=lambda: 0.0)


@pytest.fixture
def reporter(sink: RecordingSink, host: HostServices) -> ErrorReporter:
    return ErrorReporter(host=host, sink=sink)
