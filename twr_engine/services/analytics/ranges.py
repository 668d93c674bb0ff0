# twr_engine/services/analytics/ranges.py
"""
Display range resolution.

A range key such as "6M" names a trailing window ending today. The window
never starts before the portfolio existed: the effective start is the later
of the raw range start and the first active day, so a three-month-old
portfolio viewed on "1Y" is measured over three months, not padded with
zeros.

First active day:
    earliest of
      - acquisition dates of held lots
      - dates of external ledger entries that count for returns
"""

from collections.abc import Iterable
from datetime import date

from twr_engine.services.analytics.types import RangeKey
from twr_engine.services.cashflows.types import CashflowEvent
from twr_engine.services.exceptions import InvalidRangeError
from twr_engine.services.valuation.types import Position
from twr_engine.utils.date_utils import shift_months, shift_years


def parse_range_key(value: str | RangeKey) -> RangeKey:
    """
    Parse a range key, case-insensitively.

    Raises:
        InvalidRangeError: If the key is unknown
    """
    if isinstance(value, RangeKey):
        return value
    try:
        return RangeKey(value.strip().upper())
    except ValueError:
        valid = ", ".join(k.value for k in RangeKey)
        raise InvalidRangeError(f"Invalid range: '{value}'. Valid options: {valid}")


def resolve_range_start(key: RangeKey, today: date) -> date | None:
    """
    Raw start of a range, before lifetime clamping.

    Returns:
        The start day, or None for MAX (whole lifetime)
    """
    if key == RangeKey.ONE_MONTH:
        return shift_months(today, -1)
    if key == RangeKey.THREE_MONTHS:
        return shift_months(today, -3)
    if key == RangeKey.SIX_MONTHS:
        return shift_months(today, -6)
    if key == RangeKey.YTD:
        return date(today.year, 1, 1)
    if key == RangeKey.ONE_YEAR:
        return shift_years(today, -1)
    if key == RangeKey.FIVE_YEARS:
        return shift_years(today, -5)
    return None


def first_active_date(
        positions: Iterable[Position],
        events: Iterable[CashflowEvent],
) -> date | None:
    """
    Earliest day the portfolio holds anything or receives external money.

    Excluded and reversal ledger entries are ignored, as are internal kinds
    (a dividend cannot start a portfolio).
    """
    candidates = [p.acquired_on for p in positions if p.acquired_on is not None]
    candidates.extend(
        e.date for e in events
        if e.kind.is_external and e.counts_for_return
    )
    return min(candidates) if candidates else None


def effective_range_start(
        key: RangeKey,
        today: date,
        lifetime_start: date | None,
) -> date | None:
    """
    Later of the raw range start and the lifetime start.

    Returns:
        The effective start, or None when neither is known

    Raises:
        InvalidRangeError: If the effective start lies after today
    """
    raw_start = resolve_range_start(key, today)

    if raw_start is None:
        start = lifetime_start
    elif lifetime_start is None:
        start = raw_start
    else:
        start = max(raw_start, lifetime_start)

    if start is not None and start > today:
        raise InvalidRangeError(
            f"Range start {start} is after end {today}",
            start=start,
            end=today,
        )

    return start
