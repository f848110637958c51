"""
Timestamp helpers for vault records.

All stored and emitted timestamps are UTC strings with millisecond
precision, e.g. ``2024-05-01T12:30:45.123Z``.
"""

from datetime import datetime, timezone
from typing import Optional


def format_timestamp(value: datetime) -> str:
    """
    Format a datetime as an ISO-8601 UTC string with millisecond precision.

    Naive datetimes are assumed to already be in UTC.

    Args:
        value: The datetime to format

    Returns:
        String of the form ``YYYY-MM-DDTHH:MM:SS.mmmZ``
    """
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utc_now(clock: Optional[datetime] = None) -> str:
    """Current time (or the given clock value) as a formatted timestamp."""
    return format_timestamp(clock or datetime.now(timezone.utc))
