# twr_engine/services/analytics/benchmark.py
"""
Benchmark normalization for the Analytics Service.

Benchmarks are compared to the portfolio on a percent scale, so their
prices are aligned on the display axis and rebased to the first visible
close.

Fill policy (benchmarks):
    - Only positive closes count as observations
    - Before the first observation: None (NOT zero, unlike instruments),
      so a benchmark that starts later than the axis shows a gap instead
      of a fake -100%
    - After it: carry the last observation

Formulas:
    percent_t = (close_t / reference - 1) × 100
        reference = first non-null aligned close

    Benchmark CAGR uses the portfolio policy: total = last / first - 1,
    annualized only when the span from the first to the last observation
    is at least one year.

    Risk-free curve: level_0 = 100, level_t = level_{t-1} × (1 + rf_daily)
"""

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from twr_engine.services.analytics.returns import annualize_total_return
from twr_engine.services.analytics.types import BenchmarkOverlay, SeriesPoint
from twr_engine.services.constants import (
    CALENDAR_DAYS_PER_YEAR,
    HUNDRED,
    ONE,
    RISK_FREE_CURVE_BASE,
    ZERO,
)
from twr_engine.services.valuation.types import PricePoint
from twr_engine.utils.date_utils import days_between

logger = logging.getLogger(__name__)


def _positive_observations(history: Iterable[PricePoint]) -> list[PricePoint]:
    return sorted(
        (p for p in history if p.close is not None and p.close > ZERO),
        key=lambda p: p.date,
    )


# =============================================================================
# ALIGNMENT
# =============================================================================

def forward_fill_benchmark(
        history: Iterable[PricePoint],
        axis: list[date],
) -> list[PricePoint]:
    """
    Align benchmark closes onto the axis with null fill.

    Observations dated before the axis start seed the carried close.

    Args:
        history: Raw benchmark closes
        axis: Ordered display days

    Returns:
        One PricePoint per axis day; close is None before the first observation
    """
    observed = _positive_observations(history)

    aligned: list[PricePoint] = []
    last_close: Decimal | None = None
    idx = 0

    for day in axis:
        while idx < len(observed) and observed[idx].date <= day:
            last_close = observed[idx].close
            idx += 1
        aligned.append(PricePoint(date=day, close=last_close))

    return aligned


def benchmark_percent_series(aligned: list[PricePoint]) -> list[SeriesPoint]:
    """
    Rebase an aligned benchmark to percent change from its first close.

    Returns:
        SeriesPoint per input point; value None where the close is None
    """
    reference = next((p.close for p in aligned if p.close is not None), None)

    series: list[SeriesPoint] = []
    for point in aligned:
        if point.close is None or reference is None:
            series.append(SeriesPoint(date=point.date, value=None))
        else:
            series.append(SeriesPoint(date=point.date, value=(point.close / reference - ONE) * HUNDRED))
    return series


# =============================================================================
# CAGR
# =============================================================================

def calculate_benchmark_cagr(
        history: Iterable[PricePoint],
        days_per_year: int = CALENDAR_DAYS_PER_YEAR,
) -> Decimal | None:
    """
    Benchmark CAGR from its first and last positive close.

    The span runs from the first to the last observation, so a benchmark
    quoted only over part of the axis is annualized over that part.

    Args:
        history: Benchmark closes (raw or aligned)
        days_per_year: Calendar day count

    Returns:
        CAGR (total return for spans under a year), or None without any
        positive close
    """
    observed = _positive_observations(history)
    if not observed:
        return None

    total = observed[-1].close / observed[0].close - ONE
    span = days_between(observed[0].date, observed[-1].date)
    return annualize_total_return(total, span, days_per_year)


# =============================================================================
# RISK-FREE CURVE
# =============================================================================

def risk_free_curve(
        axis: list[date],
        daily_rate: Decimal,
        base: Decimal = RISK_FREE_CURVE_BASE,
) -> list[PricePoint]:
    """
    Synthetic benchmark compounding the daily risk-free rate.

    The first axis day is ``base``; every following day grows by (1 + rate).
    """
    curve: list[PricePoint] = []
    level = base
    for i, day in enumerate(axis):
        if i > 0:
            level *= ONE + daily_rate
        curve.append(PricePoint(date=day, close=level))
    return curve


def build_overlay(
        key: str,
        history: Iterable[PricePoint],
        axis: list[date],
        days_per_year: int = CALENDAR_DAYS_PER_YEAR,
) -> BenchmarkOverlay:
    """
    Align, rebase and measure one benchmark over the display axis.

    CAGR is taken over the aligned series, from the first visible close to
    the axis end.
    """
    aligned = forward_fill_benchmark(history, axis)
    if all(p.close is None for p in aligned):
        logger.warning(f"Benchmark {key} has no prices on or before {axis[-1] if axis else 'the axis end'}")

    return BenchmarkOverlay(
        key=key,
        percent=benchmark_percent_series(aligned),
        cagr=calculate_benchmark_cagr(aligned, days_per_year),
    )
