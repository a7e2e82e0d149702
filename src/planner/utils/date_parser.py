"""Date parsing utilities."""

import re
from datetime import date, datetime, time, timedelta
from typing import Union

from dateutil import parser as date_parser

_YMD_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

DateLike = Union[date, datetime]


def parse_date(date_str: str, today: date | None = None) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024", ...) and the
    relative words "today", "yesterday" and "tomorrow".

    Args:
        date_str: Date string in various formats
        today: Reference day for relative words (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def is_ymd(value: str) -> bool:
    """Return True if value is a bare YYYY-MM-DD string."""
    return _YMD_RE.match(value) is not None


def parse_datetime(value) -> datetime:
    """Reconstruct a stored date/time value.

    ISO-8601 timestamps are parsed as-is. Bare YYYY-MM-DD strings are placed
    at local noon so that zone transitions never move them to a neighbouring
    day.

    Raises:
        ValueError: If the value is not a recognizable date/time
    """
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time(12, 0))
    if not isinstance(value, str):
        raise ValueError(f"Expected ISO date string, got {type(value).__name__}")
    if is_ymd(value):
        return datetime.combine(date.fromisoformat(value), time(12, 0))
    return date_parser.isoparse(value)


def local_date(value: DateLike) -> date:
    """Return the calendar day of value in the local time zone."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    return value


def to_iso_date(value: DateLike) -> str:
    """Format value as a local YYYY-MM-DD string."""
    return local_date(value).isoformat()


def last_n_days_iso(n: int, as_of: DateLike) -> list[str]:
    """Return the last n local calendar days ending on as_of, oldest first."""
    end = local_date(as_of)
    return [(end - timedelta(days=i)).isoformat() for i in range(n - 1, -1, -1)]
