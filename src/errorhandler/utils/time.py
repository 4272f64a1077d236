"""Time utilities for errorhandler.

Provides timezone-aware datetime helpers.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    Returns:
        datetime: Current UTC time with tzinfo=UTC
    """
    return datetime.now(UTC)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO8601 timestamp, assuming UTC when no offset is given.

    Accepts the trailing ``Z`` form used by most APIs
    (``2017-03-23T14:01:56.262Z``).

    Returns:
        The parsed timezone-aware datetime, or None if unparseable.
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
