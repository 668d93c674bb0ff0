# twr_engine/services/analytics/__init__.py
"""
Analytics Service package.

Provides performance analytics for a portfolio:
- TWR engine: cashflow-adjusted daily returns, chaining, CAGR
- Statistics: volatility, Sharpe, max drawdown, win rate, monthly +/-
- Benchmarks: null-filled alignment, percent rebasing, risk-free curve
- Display: range resolution and downsampling

Usage:
    from twr_engine.services.analytics import AnalyticsService, PortfolioSnapshot

    service = AnalyticsService()
    report = service.analyze(snapshot, "1Y", today=date.today())

    print(f"Period return: {report.stats.period_return:.2%}")
    print(f"Sharpe: {report.stats.sharpe}")

Architecture:
    analytics/
    ├── __init__.py        # This file - package exports
    ├── types.py           # DailyReturn, TWRResult, StatsSummary, PerformanceReport
    ├── returns.py         # TWR, chaining, cumulative curve, CAGR, last-day KPIs
    ├── risk.py            # Volatility, Sharpe, drawdown, win rate, months
    ├── benchmark.py       # Benchmark alignment, percent series, risk-free curve
    ├── downsampling.py    # Display thinning for long ranges
    ├── ranges.py          # Range keys, first active day, effective start
    └── service.py         # AnalyticsService (orchestrator)
"""

from twr_engine.services.analytics.types import (
    BenchmarkOverlay,
    DailyReturn,
    PerformanceReport,
    PortfolioSnapshot,
    RangeKey,
    RiskFreeRate,
    SeriesPoint,
    StatsSummary,
    TWRResult,
)
from twr_engine.services.analytics.returns import (
    annualize_total_return,
    calculate_cagr,
    chain_range,
    chain_returns,
    compute_daily_returns,
    compute_twr,
    cumulative_curve,
    last_day_change,
    last_day_profit,
)
from twr_engine.services.analytics.risk import (
    StatsCalculator,
    calculate_drawdown_series,
    calculate_max_drawdown,
    calculate_monthly_counts,
    calculate_sharpe_ratio,
    calculate_volatility,
    calculate_win_rate,
)
from twr_engine.services.analytics.benchmark import (
    benchmark_percent_series,
    build_overlay,
    calculate_benchmark_cagr,
    forward_fill_benchmark,
    risk_free_curve,
)
from twr_engine.services.analytics.downsampling import downsample_by_days
from twr_engine.services.analytics.ranges import (
    effective_range_start,
    first_active_date,
    parse_range_key,
    resolve_range_start,
)
from twr_engine.services.analytics.service import (
    AnalyticsService,
    percent_rows,
    valuation_rows,
)

__all__ = [
    # Service
    "AnalyticsService",
    "percent_rows",
    "valuation_rows",
    # Types
    "BenchmarkOverlay",
    "DailyReturn",
    "PerformanceReport",
    "PortfolioSnapshot",
    "RangeKey",
    "RiskFreeRate",
    "SeriesPoint",
    "StatsSummary",
    "TWRResult",
    # Returns
    "annualize_total_return",
    "calculate_cagr",
    "chain_range",
    "chain_returns",
    "compute_daily_returns",
    "compute_twr",
    "cumulative_curve",
    "last_day_change",
    "last_day_profit",
    # Statistics
    "StatsCalculator",
    "calculate_drawdown_series",
    "calculate_max_drawdown",
    "calculate_monthly_counts",
    "calculate_sharpe_ratio",
    "calculate_volatility",
    "calculate_win_rate",
    # Benchmarks
    "benchmark_percent_series",
    "build_overlay",
    "calculate_benchmark_cagr",
    "forward_fill_benchmark",
    "risk_free_curve",
    # Display
    "downsample_by_days",
    "effective_range_start",
    "first_active_date",
    "parse_range_key",
    "resolve_range_start",
]
