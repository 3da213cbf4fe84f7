"""Date manipulation utilities"""

from datetime import date, datetime, timezone
from typing import Optional, Union

DateLike = Union[date, datetime, str]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_date(value: Optional[DateLike]) -> Optional[date]:
    """Coerce an ISO string, datetime or date to a date; None stays None.

    Raises ValueError for strings that are not ISO-8601.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if not text:
        return None
    if len(text) == 10:
        return date.fromisoformat(text)
    return to_datetime(text).date()


def to_datetime(value: Union[datetime, str]) -> datetime:
    """Parse an ISO timestamp; a trailing 'Z' is accepted as UTC"""
    if isinstance(value, datetime):
        return value
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def days_between(start: date, end: date) -> int:
    """Whole days from start to end (negative when end is earlier)"""
    return (end - start).days
