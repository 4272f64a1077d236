"""Shared utilities for errorhandler."""

from errorhandler.utils.time import parse_timestamp, utc_now

__all__ = ["parse_timestamp", "utc_now"]
