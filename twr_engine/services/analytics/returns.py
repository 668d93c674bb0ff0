# twr_engine/services/analytics/returns.py
"""
Return calculation functions for the Analytics Service.

This module contains pure functions for:
- Daily cashflow-adjusted returns and Time-Weighted Return (TWR)
- Chaining daily returns over a whole axis or a sub-range
- CAGR with the under-one-year policy
- Cumulative return curve and last-day KPIs

All functions are stateless and never raise on degenerate input.

Formulas:
    Daily return (end-of-day flows, attributed to the day they land on):
        V  = max(V_t, 0)
        Vp = max(V_{t-1}, 0)
        r_t = 0                     if Vp < ε
        r_t = (V - CF_t - Vp) / Vp  otherwise

    TWR = ∏(1 + r_t) - 1

    CAGR:
        years = transitions / 365
        years < 1  ->  total return (not annualized)
        otherwise  ->  (1 + total)^(1 / years) - 1

The ε guard covers the first funding day: yesterday's value is 0 and
today's deposit makes V = CF. Negative valuations are clamped to 0.

Precision Note:
    Arithmetic is Decimal throughout. Non-integer powers use Decimal.__pow__
    with a float fallback on decimal.InvalidOperation.
"""

import decimal
import logging
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal

from twr_engine.services.analytics.types import DailyReturn, SeriesPoint, TWRResult
from twr_engine.services.constants import (
    CALENDAR_DAYS_PER_YEAR,
    ONE,
    RETURN_EPSILON,
    ZERO,
)
from twr_engine.services.valuation.types import ValuationPoint

logger = logging.getLogger(__name__)


# =============================================================================
# TIME-WEIGHTED RETURN (TWR)
# =============================================================================

def normalize_values(values: Iterable[ValuationPoint]) -> list[ValuationPoint]:
    """
    Sort by date and keep the last value for duplicated days.

    A valuation source that re-emits a day (late price correction) replaces
    the earlier figure rather than adding a zero-length transition.
    """
    by_day: dict[date, ValuationPoint] = {}
    for point in values:
        by_day[point.date] = point
    return [by_day[day] for day in sorted(by_day)]


def compute_daily_returns(
        values: Iterable[ValuationPoint],
        cashflows: Mapping[date, Decimal] | None = None,
        epsilon: Decimal = RETURN_EPSILON,
) -> list[DailyReturn]:
    """
    Calculate cashflow-adjusted daily returns.

    Args:
        values: Axis-aligned valuation (including cash if tracked)
        cashflows: Axis-snapped external flows; missing days read as 0
        epsilon: Previous-value threshold below which r = 0

    Returns:
        One DailyReturn per transition, attributed to the later day

    Example:
        >>> vals = [ValuationPoint(d1, Decimal("1000")), ValuationPoint(d2, Decimal("1550"))]
        >>> compute_daily_returns(vals, {d2: Decimal("500")})[0].r
        Decimal('0.05')
    """
    cashflows = cashflows or {}
    ordered = normalize_values(values)

    daily: list[DailyReturn] = []
    for prev, curr in zip(ordered, ordered[1:]):
        v_prev = max(prev.value, ZERO)
        v_curr = max(curr.value, ZERO)

        if v_prev < epsilon:
            r = ZERO
        else:
            cf = cashflows.get(curr.date, ZERO)
            r = (v_curr - cf - v_prev) / v_prev

        daily.append(DailyReturn(date=curr.date, r=r))

    return daily


def compute_twr(
        values: Iterable[ValuationPoint],
        cashflows: Mapping[date, Decimal] | None = None,
        epsilon: Decimal = RETURN_EPSILON,
) -> TWRResult:
    """
    Calculate Time-Weighted Return using the Daily Linking Method.

    An axis with one day or fewer yields TWRResult(0, []).

    Args:
        values: Axis-aligned valuation
        cashflows: Axis-snapped external flows
        epsilon: Bootstrap guard for the previous-day value

    Returns:
        TWRResult with the cumulative return and per-day returns
    """
    daily = compute_daily_returns(values, cashflows, epsilon=epsilon)
    if not daily:
        return TWRResult()

    return TWRResult(
        cumulative_return=chain_returns(d.r for d in daily),
        daily=daily,
    )


# =============================================================================
# CHAINING
# =============================================================================

def chain_returns(returns: Iterable[Decimal]) -> Decimal:
    """
    Compound a sequence of returns: ∏(1 + r) - 1.

    Returns 0 for an empty sequence.
    """
    growth = ONE
    for r in returns:
        growth *= ONE + r
    return growth - ONE


def chain_range(
        daily: Iterable[DailyReturn],
        start: date | None,
        end: date | None,
) -> Decimal:
    """
    Chain the transitions inside [start, end].

    A transition is inside when start < date <= end: the return dated ``start``
    belongs to the move INTO start and is excluded. This makes chaining
    associative: chain_range(a, c) == (1 + chain_range(a, b)) × (1 + chain_range(b, c)) - 1.

    None bounds are open.
    """
    return chain_returns(
        d.r for d in daily
        if (start is None or d.date > start) and (end is None or d.date <= end)
    )


def cumulative_curve(
        daily: Iterable[DailyReturn],
        scale: Decimal = ONE,
) -> list[SeriesPoint]:
    """
    Running chained return per day.

    Args:
        daily: Daily returns in date order
        scale: 1 for decimals, 100 for a percent series

    Returns:
        SeriesPoint(date, (∏(1 + r) - 1) × scale) per daily return
    """
    curve: list[SeriesPoint] = []
    growth = ONE
    for d in daily:
        growth *= ONE + d.r
        curve.append(SeriesPoint(date=d.date, value=(growth - ONE) * scale))
    return curve


# =============================================================================
# CAGR
# =============================================================================

def annualize_total_return(
        total_return: Decimal,
        transitions: int,
        days_per_year: int = CALENDAR_DAYS_PER_YEAR,
) -> Decimal:
    """
    Annualize a total return over a number of daily transitions.

    Spans shorter than one year return the total unannualized.

    Args:
        total_return: Chained return over the span
        transitions: Axis transitions (days) in the span
        days_per_year: Calendar day count

    Returns:
        Annualized return, or the total if the span is under one year
    """
    if transitions <= 0:
        return total_return

    years = Decimal(transitions) / Decimal(days_per_year)
    if years < ONE:
        return total_return

    base = ONE + total_return
    if base <= ZERO:
        return Decimal("-1")  # Total loss

    exponent = ONE / years
    try:
        return base ** exponent - ONE
    except decimal.InvalidOperation:
        return Decimal(str(float(base) ** float(exponent))) - ONE


def calculate_cagr(
        daily: Iterable[DailyReturn],
        transitions: int | None = None,
        days_per_year: int = CALENDAR_DAYS_PER_YEAR,
) -> Decimal:
    """
    CAGR from daily returns.

    Args:
        daily: Daily returns
        transitions: Span length in days; defaults to the number of returns
        days_per_year: Calendar day count

    Returns:
        CAGR under the under-one-year policy (see annualize_total_return)
    """
    daily = list(daily)
    if transitions is None:
        transitions = len(daily)
    total = chain_returns(d.r for d in daily)
    return annualize_total_return(total, transitions, days_per_year)


# =============================================================================
# LAST-DAY KPIs
# =============================================================================

def last_day_change(daily: list[DailyReturn]) -> Decimal:
    """Most recent daily return, 0 if there is none."""
    return daily[-1].r if daily else ZERO


def last_day_profit(
        values: list[ValuationPoint],
        cashflows: Mapping[date, Decimal] | None = None,
) -> Decimal:
    """
    Money made on the last axis day: V_t - V_{t-1} - CF_t.

    Returns 0 with fewer than two valuation points.
    """
    if len(values) < 2:
        return ZERO

    ordered = normalize_values(values)
    if len(ordered) < 2:
        return ZERO

    today, yesterday = ordered[-1], ordered[-2]
    cf = (cashflows or {}).get(today.date, ZERO)
    return today.value - yesterday.value - cf
