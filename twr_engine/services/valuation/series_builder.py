# twr_engine/services/valuation/series_builder.py
"""
Valuation Series Builder.

Turns per-instrument price histories and quantities into one portfolio value
per axis day.

Fill policy (instruments):
    - Before the first observed close: 0 (the instrument did not exist yet)
    - After it: carry the last observed close across weekends and holidays
    - Before the acquisition date (when known): 0, even if prices exist

Benchmarks use a different policy (None before the first close); see
analytics/benchmark.py.

Design Principles:
- Exactly one output point per axis day, never None
- An instrument with no history or zero quantity contributes 0
- Lots of the same instrument are summed before valuation
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal

from twr_engine.services.constants import ZERO
from twr_engine.services.valuation.types import (
    InstrumentSeries,
    Position,
    PricePoint,
    ValuationPoint,
)

logger = logging.getLogger(__name__)


# =============================================================================
# PER-INSTRUMENT FILL
# =============================================================================

def forward_fill_instrument(
        history: Iterable[PricePoint],
        axis: list[date],
        acquired_on: date | None = None,
) -> list[Decimal]:
    """
    Align an instrument's closes onto the axis with zero fill.

    Closes dated before the axis start still seed the carried value, so an
    axis starting on a Sunday picks up Friday's close.

    Args:
        history: Observed closes (any order; None closes are ignored)
        axis: Gap-free ordered days
        acquired_on: Days before this date are forced to 0

    Returns:
        One close per axis day
    """
    observed = sorted(
        (p for p in history if p.close is not None),
        key=lambda p: p.date,
    )

    filled: list[Decimal] = []
    last_close: Decimal | None = None
    idx = 0

    for day in axis:
        while idx < len(observed) and observed[idx].date <= day:
            last_close = observed[idx].close
            idx += 1

        if last_close is None or (acquired_on is not None and day < acquired_on):
            filled.append(ZERO)
        else:
            filled.append(last_close)

    return filled


# =============================================================================
# POSITIONS
# =============================================================================

def aggregate_positions(positions: Iterable[Position]) -> dict[str, tuple[Decimal, date | None]]:
    """
    Sum lots per instrument.

    Returns:
        instrument_id -> (total quantity, earliest known acquisition date)
    """
    totals: dict[str, tuple[Decimal, date | None]] = {}

    for position in positions:
        quantity, acquired = totals.get(position.instrument_id, (ZERO, None))
        quantity += position.quantity

        if position.acquired_on is not None and (acquired is None or position.acquired_on < acquired):
            acquired = position.acquired_on

        totals[position.instrument_id] = (quantity, acquired)

    return totals


def series_from_positions(
        positions: Iterable[Position],
        histories: Mapping[str, list[PricePoint]],
) -> dict[str, InstrumentSeries]:
    """
    Build the builder input from holdings and price histories.

    Instruments held without a price history still appear (they value at 0).
    """
    series: dict[str, InstrumentSeries] = {}

    for instrument_id, (quantity, acquired_on) in aggregate_positions(positions).items():
        history = list(histories.get(instrument_id, []))
        if not history:
            logger.debug(f"No price history for {instrument_id}; it contributes 0")
        series[instrument_id] = InstrumentSeries(
            history=history,
            quantity=quantity,
            acquired_on=acquired_on,
        )

    return series


# =============================================================================
# PORTFOLIO SERIES
# =============================================================================

def build_valuation_series(
        instruments: Mapping[str, InstrumentSeries],
        axis: list[date],
) -> list[ValuationPoint]:
    """
    Build the portfolio valuation series.

    Formula:
        V_t = Σ_i quantity_i × close_i(t)

    Args:
        instruments: instrument_id -> InstrumentSeries
        axis: Gap-free ordered days

    Returns:
        One ValuationPoint per axis day

    Example:
        >>> axis = [date(2024, 1, 1), date(2024, 1, 2)]
        >>> series = {"A": InstrumentSeries([PricePoint(date(2024, 1, 2), Decimal("10"))], Decimal("3"))}
        >>> [p.value for p in build_valuation_series(series, axis)]
        [Decimal('0'), Decimal('30')]
    """
    totals = [ZERO] * len(axis)

    for instrument_id, instrument in instruments.items():
        if instrument.quantity <= ZERO or not instrument.history:
            continue

        closes = forward_fill_instrument(instrument.history, axis, instrument.acquired_on)
        for i, close in enumerate(closes):
            totals[i] += close * instrument.quantity

    return [ValuationPoint(date=day, value=total) for day, total in zip(axis, totals)]


def align_values_to_axis(
        points: Iterable[ValuationPoint],
        axis: list[date],
) -> list[ValuationPoint]:
    """
    Re-grid an existing valuation series onto a daily axis.

    Days before the first point are 0; gaps carry the last value. When the
    same day appears twice the later entry wins.
    """
    by_day: dict[date, Decimal] = {}
    for point in points:
        by_day[point.date] = point.value

    ordered_days = sorted(by_day)
    aligned: list[ValuationPoint] = []
    last_value = ZERO
    idx = 0

    for day in axis:
        while idx < len(ordered_days) and ordered_days[idx] <= day:
            last_value = by_day[ordered_days[idx]]
            idx += 1
        aligned.append(ValuationPoint(date=day, value=last_value))

    return aligned
