# twr_engine/utils/date_utils.py
"""
Date utility functions for the TWR engine.

Everything in the engine is end-of-day: timestamps are reduced to calendar
days, and series are aligned on a gap-free daily axis that includes weekends
and holidays.

Usage:
    from twr_engine.utils.date_utils import build_daily_axis, parse_day

    axis = build_daily_axis(date(2024, 1, 1), date(2024, 1, 31))
"""

import calendar
from datetime import date, datetime, timedelta


def build_daily_axis(start: date | None, end: date | None) -> list[date]:
    """
    Build the ordered, gap-free list of calendar days from start to end.

    Args:
        start: First day (inclusive)
        end: Last day (inclusive)

    Returns:
        Every calendar day in [start, end], or an empty list when either
        bound is missing or start > end

    Example:
        >>> build_daily_axis(date(2024, 1, 5), date(2024, 1, 8))
        [date(2024, 1, 5), date(2024, 1, 6), date(2024, 1, 7), date(2024, 1, 8)]
    """
    if start is None or end is None or start > end:
        return []

    span = (end - start).days
    return [start + timedelta(days=offset) for offset in range(span + 1)]


def parse_day(value: object) -> date | None:
    """
    Reduce a date-like value to a calendar day.

    Accepts date, datetime (time part dropped) and ISO strings such as
    "2024-03-01" or "2024-03-01T15:30:00Z". Anything else yields None.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()[:10]
        try:
            return date.fromisoformat(text)
        except ValueError:
            return None
    return None


def month_key(d: date) -> str:
    """Calendar month bucket, e.g. "2024-03"."""
    return f"{d.year:04d}-{d.month:02d}"


def shift_months(d: date, months: int) -> date:
    """
    Move a date by a number of months, clamping to the target month's end.

    >>> shift_months(date(2024, 3, 31), -1)
    date(2024, 2, 29)
    """
    month_index = d.year * 12 + (d.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def shift_years(d: date, years: int) -> date:
    """Move a date by whole years; 29 February becomes 28 February when needed."""
    return shift_months(d, years * 12)


def days_between(start: date, end: date) -> int:
    """Calendar days from start to end (negative if end is earlier)."""
    return (end - start).days
