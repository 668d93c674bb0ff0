# twr_engine/services/analytics/types.py
"""
Data types for the Analytics Service.

All returns are expressed as decimals (0.15 = 15%) except series explicitly
named "percent", which are scaled by 100 for charting.

Architecture:
    - RangeKey: Display range selector (1M ... MAX)
    - DailyReturn / TWRResult: Output of the TWR engine
    - StatsSummary: Derived statistics for one range
    - RiskFreeRate: Rate used for Sharpe and the synthetic benchmark
    - SeriesPoint / BenchmarkOverlay: Chart series
    - PortfolioSnapshot: Everything the service needs for one portfolio
    - PerformanceReport: Combined result returned by AnalyticsService
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from twr_engine.services.cashflows.types import CashflowEvent
from twr_engine.services.valuation.types import InstrumentSeries, Position, ValuationPoint


class RangeKey(str, Enum):
    """
    Display range selector.

    Attributes:
        ONE_MONTH .. FIVE_YEARS: Trailing windows ending today
        YTD: From 1 January of the current year
        MAX: Whole portfolio lifetime
    """
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    SIX_MONTHS = "6M"
    YTD = "YTD"
    ONE_YEAR = "1Y"
    FIVE_YEARS = "5Y"
    MAX = "MAX"

    @property
    def is_long(self) -> bool:
        """Long ranges are downsampled for display."""
        return self in (RangeKey.FIVE_YEARS, RangeKey.MAX)


# =============================================================================
# TWR OUTPUT
# =============================================================================

@dataclass(frozen=True)
class DailyReturn:
    """
    Return of the transition from the previous axis day to ``date``.

    Attributes:
        date: Day the return is attributed to
        r: Cashflow-adjusted daily return
    """
    date: date
    r: Decimal


@dataclass
class TWRResult:
    """
    Time-weighted return over an axis.

    Attributes:
        cumulative_return: Π(1 + r) - 1 over all transitions
        daily: One entry per axis transition (len(axis) - 1 entries)
    """
    cumulative_return: Decimal = field(default_factory=lambda: Decimal("0"))
    daily: list[DailyReturn] = field(default_factory=list)

    @property
    def transitions(self) -> int:
        return len(self.daily)


# =============================================================================
# STATISTICS
# =============================================================================

@dataclass
class StatsSummary:
    """
    Derived statistics.

    Neutral defaults apply when there is too little data; no field is ever
    NaN. Sharpe is the only metric that can be None (zero volatility).

    Attributes:
        period_return: Chained return over the range
        cagr: Annualized return; unannualized total for spans under one year
        volatility_annualized: Sample stdev of daily returns × √252
        sharpe: (mean - rf) / stdev × √252, or None
        max_drawdown: Worst peak-to-trough decline (<= 0)
        win_rate: Share of days with r > 0, in [0, 1]
        months_positive: Calendar months with chained return > 0
        months_negative: Calendar months with chained return < 0
    """
    period_return: Decimal = field(default_factory=lambda: Decimal("0"))
    cagr: Decimal = field(default_factory=lambda: Decimal("0"))
    volatility_annualized: Decimal = field(default_factory=lambda: Decimal("0"))
    sharpe: Decimal | None = None
    max_drawdown: Decimal = field(default_factory=lambda: Decimal("0"))
    win_rate: Decimal = field(default_factory=lambda: Decimal("0"))
    months_positive: int = 0
    months_negative: int = 0


@dataclass(frozen=True)
class RiskFreeRate:
    """
    Risk-free rate as reported by the rate provider.

    Attributes:
        daily_rate: Rate per calendar day, used for Sharpe
        annual_rate: Informational annual rate
        as_of: Publication date, if known
    """
    daily_rate: Decimal
    annual_rate: Decimal | None = None
    as_of: date | None = None


# =============================================================================
# CHART SERIES
# =============================================================================

@dataclass(frozen=True)
class SeriesPoint:
    """One chart point; value is None where a benchmark has no data yet."""
    date: date
    value: Decimal | None


@dataclass
class BenchmarkOverlay:
    """
    Benchmark aligned on the display axis.

    Attributes:
        key: Benchmark identifier (or the risk-free key)
        percent: (close / reference - 1) × 100 per axis day
        cagr: Benchmark CAGR over the range, None without two observations
    """
    key: str
    percent: list[SeriesPoint] = field(default_factory=list)
    cagr: Decimal | None = None


# =============================================================================
# SERVICE INPUT / OUTPUT
# =============================================================================

@dataclass
class PortfolioSnapshot:
    """
    Immutable-per-pass input for one portfolio.

    Attributes:
        instruments: instrument_id -> prices and quantity
        cashflows: Ledger entries
        positions: Lots, used to find the first active date
        cash_balance: Current cash balance; enables cash reconstruction
        start_date: Explicit lifetime start (overrides first active date)
    """
    instruments: dict[str, InstrumentSeries] = field(default_factory=dict)
    cashflows: list[CashflowEvent] = field(default_factory=list)
    positions: list[Position] = field(default_factory=list)
    cash_balance: Decimal | None = None
    start_date: date | None = None


@dataclass
class PerformanceReport:
    """
    Everything the statistics page shows for one range.

    Attributes:
        range_key: Requested range
        start_date: Effective range start (after lifetime clamping)
        end_date: Last axis day
        lifetime_start: First active day of the portfolio
        valuation: Display valuation series (downsampled for long ranges)
        daily_returns: Daily returns over the range (never downsampled)
        cumulative_percent: Running chained return × 100 (display)
        stats: Range statistics; cagr and max_drawdown are lifetime figures
        lifetime_return: Chained return since lifetime start
        last_day_change: Most recent daily return
        last_day_profit: V_t - V_{t-1} - CF_t for the last axis day
        benchmarks: Benchmark overlays on the display axis
        downsampled: True if display series were thinned
        warnings: Data-quality notes
    """
    range_key: RangeKey
    start_date: date | None = None
    end_date: date | None = None
    lifetime_start: date | None = None
    valuation: list[ValuationPoint] = field(default_factory=list)
    daily_returns: list[DailyReturn] = field(default_factory=list)
    cumulative_percent: list[SeriesPoint] = field(default_factory=list)
    stats: StatsSummary = field(default_factory=StatsSummary)
    lifetime_return: Decimal = field(default_factory=lambda: Decimal("0"))
    last_day_change: Decimal = field(default_factory=lambda: Decimal("0"))
    last_day_profit: Decimal = field(default_factory=lambda: Decimal("0"))
    benchmarks: list[BenchmarkOverlay] = field(default_factory=list)
    downsampled: bool = False
    warnings: list[str] = field(default_factory=list)
