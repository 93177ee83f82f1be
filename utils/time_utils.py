"""
utils/time_utils.py

Purpose: Time helpers

- UTC clock
- RFC 3339 formatting for search queries
- Future-date checks
"""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Returns the current time as an aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """
    Treats naive datetimes as UTC and converts aware ones to UTC.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_rfc3339(dt: datetime) -> str:
    """
    Formats a datetime as combined date and time with UTC offset,
    e.g. 2024-01-15T12:34:56+00:00. Fractional seconds are kept when
    present (2024-01-15T12:34:56.900000+00:00) so range bounds stay exact.
    """
    return ensure_utc(dt).isoformat()


def is_in_future(dt: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Checks whether a timestamp lies after `now` (read once, in UTC, if not given).
    """
    if dt is None:
        return False
    if now is None:
        now = utc_now()
    return ensure_utc(dt) > ensure_utc(now)
