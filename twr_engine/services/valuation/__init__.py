# twr_engine/services/valuation/__init__.py
"""
Valuation Series Builder package.

Produces one portfolio value per axis day from instrument prices and
quantities, optionally including the reconstructed cash sub-balance.

Usage:
    from twr_engine.services.valuation import build_valuation_series

    axis = build_daily_axis(start, end)
    values = build_valuation_series({"AAPL": InstrumentSeries(history, qty)}, axis)

Architecture:
    valuation/
    ├── __init__.py          # This file - package exports
    ├── types.py             # PricePoint, Position, InstrumentSeries, ValuationPoint
    ├── series_builder.py    # Zero forward-fill, lot summing, value alignment
    └── cash_balance.py      # Backward cash-balance reconstruction
"""

from twr_engine.services.valuation.types import (
    CashBalanceSeries,
    InstrumentSeries,
    Position,
    PricePoint,
    ValuationPoint,
)
from twr_engine.services.valuation.series_builder import (
    aggregate_positions,
    align_values_to_axis,
    build_valuation_series,
    forward_fill_instrument,
    series_from_positions,
)
from twr_engine.services.valuation.cash_balance import (
    add_cash_to_valuation,
    reconstruct_cash_balance,
)

__all__ = [
    # Types
    "CashBalanceSeries",
    "InstrumentSeries",
    "Position",
    "PricePoint",
    "ValuationPoint",
    # Builder
    "aggregate_positions",
    "align_values_to_axis",
    "build_valuation_series",
    "forward_fill_instrument",
    "series_from_positions",
    # Cash
    "add_cash_to_valuation",
    "reconstruct_cash_balance",
]
