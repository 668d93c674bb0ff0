# twr_engine/schemas/analytics.py
"""
Pydantic schemas for the Analytics API.

Request and response formats for performance reports.

Design decisions:
- Numeric OUTPUT values are serialized as STRINGS to preserve Decimal precision
- Returns are decimals (0.155 = 15.5%); series named *percent* are × 100
- Ledger rows are accepted as loose mappings and validated row by row, so one
  bad row is skipped instead of rejecting the whole request
- Null is returned when a metric cannot be calculated (Sharpe without volatility,
  benchmark without prices)
"""

import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field


# =============================================================================
# REQUEST BUILDING BLOCKS
# =============================================================================

class PricePointInput(BaseModel):
    """One observed close."""

    date: dt.date
    close: Decimal | None = Field(None, description="Close; null when there was no trade")


class InstrumentInput(BaseModel):
    """Price history and held quantity of one instrument."""

    quantity: Decimal = Field(..., ge=0, description="Units held across all lots")
    acquired_on: dt.date | None = Field(None, description="Valued at 0 before this day")
    history: list[PricePointInput] = Field(default_factory=list)


# =============================================================================
# PERFORMANCE REQUEST
# =============================================================================

class PerformanceRequest(BaseModel):
    """
    Snapshot of one portfolio plus report options.

    Example:
        {
            "range": "1Y",
            "today": "2024-06-30",
            "instruments": {"VWCE": {"quantity": "10", "history": [...]}},
            "cashflows": [{"date": "2024-01-02", "amount": "1000", "type": "deposit"}],
            "benchmarks": {"MSCI_WORLD": [...]}
        }
    """

    range: str = Field("1Y", description="1M, 3M, 6M, YTD, 1Y, 5Y or MAX")
    today: dt.date | None = Field(None, description="Last axis day (default: today)")
    start_date: dt.date | None = Field(None, description="Explicit lifetime start")
    instruments: dict[str, InstrumentInput] = Field(default_factory=dict)
    cashflows: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Raw ledger rows; malformed rows are skipped",
    )
    cash_balance: Decimal | None = Field(
        None,
        description="Current cash balance; enables cash-balance reconstruction",
    )
    risk_free_daily_rate: Decimal | None = Field(
        None,
        description="Daily risk-free rate override",
    )
    include_risk_free_curve: bool = False
    benchmarks: dict[str, list[PricePointInput]] = Field(default_factory=dict)


# =============================================================================
# RESPONSES
# =============================================================================

class ValuePointResponse(BaseModel):
    """One valuation point."""

    date: dt.date
    value: str


class DailyReturnResponse(BaseModel):
    """Return of the transition into ``date``."""

    date: dt.date
    r: str


class SeriesPointResponse(BaseModel):
    """Chart point; null where there is no data."""

    date: dt.date
    value: str | None


class StatsResponse(BaseModel):
    """
    Derived statistics.

    cagr and max_drawdown are lifetime figures; the rest cover the range.
    """

    period_return: str = Field(..., description="Chained return over the range")
    cagr: str = Field(..., description="Lifetime CAGR (total return under one year)")
    volatility_annualized: str = Field(..., description="Sample stdev × √252")
    sharpe: str | None = Field(None, description="Annualized Sharpe; null without volatility")
    max_drawdown: str = Field(..., description="Lifetime max drawdown (<= 0)")
    win_rate: str = Field(..., description="Share of positive days")
    months_positive: int
    months_negative: int


class BenchmarkResponse(BaseModel):
    """Benchmark overlay on the display axis."""

    key: str
    cagr: str | None
    percent: list[SeriesPointResponse]


class PerformanceResponse(BaseModel):
    """Full performance report."""

    range: str
    start_date: dt.date | None
    end_date: dt.date | None
    lifetime_start: dt.date | None
    lifetime_return: str
    last_day_change: str
    last_day_profit: str
    stats: StatsResponse
    valuation: list[ValuePointResponse]
    daily_returns: list[DailyReturnResponse]
    cumulative_percent: list[SeriesPointResponse]
    benchmarks: list[BenchmarkResponse]
    downsampled: bool
    warnings: list[str]
