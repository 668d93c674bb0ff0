# twr_engine/services/analytics/risk.py
"""
Risk and statistics functions for the Analytics Service.

This module contains pure functions for:
- Volatility: Sample standard deviation of daily returns, annualized
- Sharpe Ratio: Excess daily return per unit of volatility, annualized
- Max Drawdown: Worst peak-to-trough decline of the valuation
- Win Rate: Share of positive days
- Monthly +/-: Calendar months with a positive / negative chained return

All functions are stateless, use Decimal, and return neutral values for
empty or single-point input instead of raising.

Formulas:
    Volatility (annualized) = stdev(r, n-1) × √252

    Sharpe = (mean(r) - rf_daily) / stdev(r, n-1) × √252

    Drawdown_t = V_t / max(V_0..V_t) - 1      (skipped while the peak is 0)
    Max Drawdown = min(Drawdown_t)            (always <= 0)
"""

import logging
import math
from collections.abc import Iterable
from decimal import Decimal, InvalidOperation

from twr_engine.services.analytics.returns import calculate_cagr, chain_returns
from twr_engine.services.analytics.types import DailyReturn, SeriesPoint, StatsSummary
from twr_engine.services.constants import (
    CALENDAR_DAYS_PER_YEAR,
    ONE,
    TRADING_DAYS_PER_YEAR,
    ZERO,
)
from twr_engine.services.valuation.types import ValuationPoint
from twr_engine.utils.date_utils import month_key

logger = logging.getLogger(__name__)


# =============================================================================
# DECIMAL HELPERS
# =============================================================================

def _decimal_mean(values: list[Decimal]) -> Decimal | None:
    """Arithmetic mean, or None for an empty list."""
    if not values:
        return None
    return sum(values, ZERO) / Decimal(len(values))


def _decimal_stdev(values: list[Decimal]) -> Decimal | None:
    """
    Sample standard deviation (n - 1) in pure Decimal arithmetic.

    Float conversion loses precision on daily returns around 1e-5, so the
    square root goes through Decimal.sqrt().

    Returns:
        Standard deviation, or None with fewer than two values
    """
    if len(values) < 2:
        return None

    mean_val = sum(values, ZERO) / Decimal(len(values))
    squared_diffs = sum(((x - mean_val) ** 2 for x in values), ZERO)
    variance = squared_diffs / Decimal(len(values) - 1)

    try:
        return variance.sqrt()
    except InvalidOperation:
        return Decimal(str(math.sqrt(float(variance))))


def _annualization_factor(periods_per_year: int) -> Decimal:
    return Decimal(periods_per_year).sqrt()


def _returns(daily: Iterable[DailyReturn]) -> list[Decimal]:
    return [d.r for d in daily]


# =============================================================================
# VOLATILITY & SHARPE
# =============================================================================

def calculate_volatility(
        daily: Iterable[DailyReturn],
        periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> Decimal:
    """
    Annualized volatility of daily returns.

    Args:
        daily: Daily returns
        periods_per_year: Annualization factor (252)

    Returns:
        Volatility as decimal (0.20 = 20%); 0 with one return or fewer
    """
    stdev = _decimal_stdev(_returns(daily))
    if stdev is None:
        return ZERO
    return stdev * _annualization_factor(periods_per_year)


def calculate_sharpe_ratio(
        daily: Iterable[DailyReturn],
        risk_free_daily: Decimal = ZERO,
        periods_per_year: int = TRADING_DAYS_PER_YEAR,
) -> Decimal | None:
    """
    Annualized Sharpe ratio from daily returns.

    Args:
        daily: Daily returns
        risk_free_daily: Risk-free rate per day
        periods_per_year: Annualization factor (252)

    Returns:
        Sharpe ratio, or None when there is no volatility to divide by
        (one return or fewer, or all returns identical)
    """
    returns = _returns(daily)
    stdev = _decimal_stdev(returns)
    if stdev is None or stdev == ZERO:
        return None

    mean_val = _decimal_mean(returns)
    return (mean_val - risk_free_daily) / stdev * _annualization_factor(periods_per_year)


# =============================================================================
# DRAWDOWN
# =============================================================================

def calculate_drawdown_series(values: Iterable[ValuationPoint]) -> list[SeriesPoint]:
    """
    Per-day drawdown from the running peak.

    Days before the portfolio first has a positive value have no peak and
    report 0.
    """
    series: list[SeriesPoint] = []
    peak = ZERO

    for point in values:
        value = max(point.value, ZERO)
        if value > peak:
            peak = value
        drawdown = value / peak - ONE if peak > ZERO else ZERO
        series.append(SeriesPoint(date=point.date, value=drawdown))

    return series


def calculate_max_drawdown(values: Iterable[ValuationPoint]) -> Decimal:
    """
    Worst peak-to-trough decline.

    Operates on raw values, so deposits lift the peak and withdrawals can
    register as drawdown. Used as a lifetime figure.

    Args:
        values: Valuation in date order

    Returns:
        Max drawdown in [-1, 0]; 0 for empty input

    Example:
        [100, 120, 90, 150] -> 90 / 120 - 1 = -0.25
    """
    worst = ZERO
    for point in calculate_drawdown_series(values):
        if point.value < worst:
            worst = point.value
    return worst


# =============================================================================
# WIN RATE & MONTHS
# =============================================================================

def calculate_win_rate(daily: Iterable[DailyReturn]) -> Decimal:
    """
    Share of daily returns strictly above zero.

    Flat days count in the denominator. Empty input returns 0.
    """
    returns = _returns(daily)
    if not returns:
        return ZERO
    wins = sum(1 for r in returns if r > ZERO)
    return Decimal(wins) / Decimal(len(returns))


def calculate_monthly_counts(daily: Iterable[DailyReturn]) -> tuple[int, int]:
    """
    Count calendar months with a positive and a negative chained return.

    Daily returns are bucketed by the month of their date and chained
    within the bucket. Flat months are not counted.

    Returns:
        (months_positive, months_negative)
    """
    buckets: dict[str, list[Decimal]] = {}
    for d in daily:
        buckets.setdefault(month_key(d.date), []).append(d.r)

    positive = negative = 0
    for returns in buckets.values():
        month_return = chain_returns(returns)
        if month_return > ZERO:
            positive += 1
        elif month_return < ZERO:
            negative += 1

    return positive, negative


# =============================================================================
# COMBINED STATS CALCULATOR
# =============================================================================

class StatsCalculator:
    """
    Calculator for all derived statistics.

    Provides one entry point that assembles a StatsSummary from the
    TWR engine output.
    """

    @staticmethod
    def calculate_all(
            daily: list[DailyReturn],
            values: list[ValuationPoint],
            risk_free_daily: Decimal = ZERO,
            transitions: int | None = None,
            lifetime_daily: list[DailyReturn] | None = None,
            lifetime_values: list[ValuationPoint] | None = None,
            trading_days_per_year: int = TRADING_DAYS_PER_YEAR,
            calendar_days_per_year: int = CALENDAR_DAYS_PER_YEAR,
    ) -> StatsSummary:
        """
        Calculate all statistics.

        Range statistics (period return, volatility, Sharpe, win rate, months)
        use ``daily``. CAGR and max drawdown use the lifetime series when given
        and fall back to the range otherwise.

        Args:
            daily: Daily returns over the display range
            values: Valuation over the display range
            risk_free_daily: Daily risk-free rate for Sharpe
            transitions: CAGR span in days; defaults to len(lifetime daily)
            lifetime_daily: Daily returns since the first active day
            lifetime_values: Valuation since the first active day
            trading_days_per_year: Annualization factor
            calendar_days_per_year: CAGR day count

        Returns:
            StatsSummary (neutral defaults for empty input)
        """
        cagr_daily = lifetime_daily if lifetime_daily is not None else daily
        drawdown_values = lifetime_values if lifetime_values is not None else values
        months_positive, months_negative = calculate_monthly_counts(daily)

        return StatsSummary(
            period_return=chain_returns(d.r for d in daily),
            cagr=calculate_cagr(cagr_daily, transitions, calendar_days_per_year),
            volatility_annualized=calculate_volatility(daily, trading_days_per_year),
            sharpe=calculate_sharpe_ratio(daily, risk_free_daily, trading_days_per_year),
            max_drawdown=calculate_max_drawdown(drawdown_values),
            win_rate=calculate_win_rate(daily),
            months_positive=months_positive,
            months_negative=months_negative,
        )
