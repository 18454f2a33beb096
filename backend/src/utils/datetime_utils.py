"""
Datetime utilities for consistent time handling across the application.

All stored datetimes are naive and expressed in server local time, so that
calendar-month boundaries (e.g. "cases this month") match the clock the
server runs on. Timezone-aware inputs are converted to local time and then
made naive before they reach the database.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    """
    Get the current server-local datetime (naive, microseconds dropped).

    Returns:
        Current datetime without tzinfo
    """
    return datetime.now().replace(microsecond=0)


def to_local_naive(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Normalize a datetime to a naive server-local datetime.

    Args:
        dt: Naive or timezone-aware datetime

    Returns:
        Naive datetime in server local time, or None if input is None
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt
    return dt.astimezone().replace(tzinfo=None)


def parse_datetime_value(value: Union[str, date, datetime, None]) -> Optional[datetime]:
    """
    Parse a client-supplied date or datetime value.

    Accepts ISO datetimes (with or without offset, including a trailing ``Z``),
    plain ``YYYY-MM-DD`` dates, ``date``/``datetime`` objects, and empty values.

    Raises:
        ValueError: If the string cannot be parsed
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)

    text = str(value).strip()
    if not text or text in ("null", "undefined"):
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return to_local_naive(datetime.fromisoformat(text))
    except ValueError:
        pass
    try:
        return datetime.combine(date.fromisoformat(text[:10]), time.min)
    except ValueError:
        raise ValueError(f"Invalid date/datetime value: {value}")


def month_bounds(reference: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Return [start, end) of the calendar month containing ``reference``."""
    ref = reference or local_now()
    start = datetime(ref.year, ref.month, 1)
    if ref.month == 12:
        end = datetime(ref.year + 1, 1, 1)
    else:
        end = datetime(ref.year, ref.month + 1, 1)
    return start, end


def day_range(start: datetime, end: datetime) -> Tuple[datetime, datetime]:
    """
    Expand a date range so the end day is included in full.

    ``end`` is pushed to the start of the following day when it falls exactly
    on midnight (a date-only value), giving an exclusive upper bound.
    """
    if end.time() == time.min:
        end = end + timedelta(days=1)
    else:
        end = end + timedelta(microseconds=1)
    return start, end


def format_date(dt: Optional[datetime]) -> str:
    """Format a datetime as YYYY-MM-DD for reports; empty string for None."""
    if dt is None:
        return ""
    return dt.strftime("%Y-%m-%d")
