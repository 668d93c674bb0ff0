# twr_engine/services/analytics/service.py
"""
Analytics Service orchestrator.

Main entry point for the engine. For one portfolio snapshot and one display
range it:
1. Builds the lifetime axis (first active day -> today) and the range axis
2. Builds the valuation series (plus reconstructed cash when a balance is known)
3. Snaps external cashflows onto each axis
4. Runs the TWR engine over the lifetime and over the range
5. Derives statistics (CAGR and max drawdown over the lifetime, the rest
   over the range)
6. Aligns benchmarks on the range axis
7. Downsamples display series for long ranges, LAST

The service holds no per-portfolio state. Providers are optional; without
them, callers pass snapshots directly to analyze().

Architecture:
    AnalyticsService
        ├── uses → valuation.series_builder (valuation series)
        ├── uses → valuation.cash_balance (cash reconstruction)
        ├── uses → cashflows.classifier (external flows per axis day)
        ├── uses → returns (TWR, chaining, CAGR)
        ├── uses → risk.StatsCalculator (volatility, Sharpe, drawdown, ...)
        ├── uses → benchmark (overlays, risk-free curve)
        └── uses → downsampling (display only)

Usage:
    from twr_engine.services.analytics import AnalyticsService, PortfolioSnapshot

    service = AnalyticsService()
    report = service.analyze(snapshot, "1Y", today=date(2024, 6, 30))
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import date, timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, TypeVar

from twr_engine.config import Settings, settings as default_settings
from twr_engine.services.analytics.benchmark import build_overlay, risk_free_curve
from twr_engine.services.analytics.downsampling import downsample_by_days
from twr_engine.services.analytics.ranges import (
    effective_range_start,
    first_active_date,
    parse_range_key,
)
from twr_engine.services.analytics.returns import (
    compute_twr,
    cumulative_curve,
    last_day_change,
    last_day_profit,
    normalize_values,
)
from twr_engine.services.analytics.risk import StatsCalculator
from twr_engine.services.analytics.types import (
    BenchmarkOverlay,
    PerformanceReport,
    PortfolioSnapshot,
    RangeKey,
    RiskFreeRate,
    SeriesPoint,
)
from twr_engine.services.cashflows.classifier import external_cashflows_for_axis
from twr_engine.services.cashflows.types import CashflowEvent
from twr_engine.services.constants import (
    HUNDRED,
    PRICE_SEED_LOOKBACK_DAYS,
    RISK_FREE_BENCHMARK_KEY,
    ZERO,
)
from twr_engine.services.exceptions import AxisTooLongError, ProviderUnavailableError
from twr_engine.services.protocols import (
    BenchmarkPriceProvider,
    CashflowLedgerProvider,
    HoldingsProvider,
    PriceHistoryProvider,
    RiskFreeRateProvider,
)
from twr_engine.services.valuation.cash_balance import (
    add_cash_to_valuation,
    reconstruct_cash_balance,
)
from twr_engine.services.valuation.series_builder import (
    align_values_to_axis,
    build_valuation_series,
    series_from_positions,
)
from twr_engine.services.valuation.types import PricePoint, ValuationPoint
from twr_engine.utils.date_utils import build_daily_axis, days_between

if TYPE_CHECKING:
    from twr_engine.services.aggregation.aggregator import MultiEntityAggregator

logger = logging.getLogger(__name__)

T = TypeVar("T")


class AnalyticsService:
    """
    Orchestrator for portfolio performance reports.

    Attributes:
        _holdings: Source of current lots (optional)
        _prices: Source of instrument closes (optional)
        _ledger: Source of cashflows and cash balance (optional)
        _benchmarks: Source of benchmark closes (optional)
        _risk_free: Source of the risk-free rate (optional)
        _settings: Calculation settings (defaults to the module settings)
    """

    def __init__(
            self,
            holdings: HoldingsProvider | None = None,
            prices: PriceHistoryProvider | None = None,
            ledger: CashflowLedgerProvider | None = None,
            benchmarks: BenchmarkPriceProvider | None = None,
            risk_free: RiskFreeRateProvider | None = None,
            settings: Settings | None = None,
    ):
        self._holdings = holdings
        self._prices = prices
        self._ledger = ledger
        self._benchmarks = benchmarks
        self._risk_free = risk_free
        self._settings = settings or default_settings

        logger.info("AnalyticsService initialized")

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def analyze(
            self,
            snapshot: PortfolioSnapshot,
            range_key: RangeKey | str,
            today: date,
            benchmarks: Mapping[str, list[PricePoint]] | None = None,
            risk_free: RiskFreeRate | None = None,
            include_risk_free_curve: bool = False,
    ) -> PerformanceReport:
        """
        Build a performance report from a portfolio snapshot.

        Args:
            snapshot: Instruments, ledger, lots and optional cash balance
            range_key: Display range ("1M", "3M", "6M", "YTD", "1Y", "5Y", "MAX")
            today: Last axis day
            benchmarks: benchmark key -> raw closes
            risk_free: Rate override; otherwise provider, then settings default
            include_risk_free_curve: Add the synthetic risk-free benchmark

        Returns:
            PerformanceReport

        Raises:
            InvalidRangeError: Unknown range key or start after today
            AxisTooLongError: Lifetime axis longer than settings.max_axis_days
        """
        range_key = parse_range_key(range_key)
        lifetime_start = self._lifetime_start(snapshot)

        if lifetime_start is None:
            return self._empty_report(range_key, "No holdings, prices or external cashflows to analyze")

        axis = self._build_axis(lifetime_start, today)
        valuation = build_valuation_series(snapshot.instruments, axis)

        warnings: list[str] = []
        if snapshot.cash_balance is not None:
            cash = reconstruct_cash_balance(snapshot.cashflows, axis, snapshot.cash_balance)
            valuation = add_cash_to_valuation(valuation, cash.points)
            warnings.extend(cash.warnings)

        report = self.analyze_valuation(
            valuation,
            snapshot.cashflows,
            range_key,
            today,
            lifetime_start=lifetime_start,
            benchmarks=benchmarks,
            risk_free=risk_free,
            include_risk_free_curve=include_risk_free_curve,
        )
        report.warnings = warnings + report.warnings
        return report

    def analyze_valuation(
            self,
            valuation: Iterable[ValuationPoint],
            cashflows: Iterable[CashflowEvent],
            range_key: RangeKey | str,
            today: date,
            lifetime_start: date | None = None,
            benchmarks: Mapping[str, list[PricePoint]] | None = None,
            risk_free: RiskFreeRate | None = None,
            include_risk_free_curve: bool = False,
    ) -> PerformanceReport:
        """
        Build a performance report from an already-built valuation series.

        The valuation may have gaps (it is re-gridded onto the daily axis with
        carry-forward). Used directly for aggregated portfolios.

        Args:
            valuation: Valuation points, any order
            cashflows: Ledger entries
            range_key: Display range
            today: Last axis day
            lifetime_start: First active day; defaults to the first positive value
            benchmarks: benchmark key -> raw closes
            risk_free: Rate override
            include_risk_free_curve: Add the synthetic risk-free benchmark

        Returns:
            PerformanceReport
        """
        range_key = parse_range_key(range_key)
        cashflows = list(cashflows)
        points = normalize_values(valuation)

        if lifetime_start is None:
            lifetime_start = next((p.date for p in points if p.value > ZERO), None)
        if lifetime_start is None:
            return self._empty_report(range_key, "No valuation data available")

        cfg = self._settings
        lifetime_axis = self._build_axis(lifetime_start, today)
        lifetime_values = align_values_to_axis(points, lifetime_axis)

        range_start = effective_range_start(range_key, today, lifetime_start)
        offset = days_between(lifetime_start, range_start)
        range_axis = lifetime_axis[offset:]
        range_values = lifetime_values[offset:]

        lifetime_cf = external_cashflows_for_axis(cashflows, lifetime_axis, since=lifetime_start)
        range_cf = external_cashflows_for_axis(cashflows, range_axis, since=range_start)

        lifetime_twr = compute_twr(lifetime_values, lifetime_cf, epsilon=cfg.return_epsilon)
        range_twr = compute_twr(range_values, range_cf, epsilon=cfg.return_epsilon)

        rate = risk_free or self.resolve_risk_free(today)

        stats = StatsCalculator.calculate_all(
            range_twr.daily,
            range_values,
            risk_free_daily=rate.daily_rate,
            transitions=lifetime_twr.transitions,
            lifetime_daily=lifetime_twr.daily,
            lifetime_values=lifetime_values,
            trading_days_per_year=cfg.trading_days_per_year,
            calendar_days_per_year=cfg.calendar_days_per_year,
        )

        cumulative = [SeriesPoint(date=range_axis[0], value=ZERO)]
        cumulative.extend(cumulative_curve(range_twr.daily, scale=HUNDRED))

        overlays = [
            build_overlay(key, history, range_axis, cfg.calendar_days_per_year)
            for key, history in (benchmarks or {}).items()
        ]
        if include_risk_free_curve:
            overlays.append(build_overlay(
                RISK_FREE_BENCHMARK_KEY,
                risk_free_curve(range_axis, rate.daily_rate),
                range_axis,
                cfg.calendar_days_per_year,
            ))

        report = PerformanceReport(
            range_key=range_key,
            start_date=range_start,
            end_date=today,
            lifetime_start=lifetime_start,
            valuation=range_values,
            daily_returns=range_twr.daily,
            cumulative_percent=cumulative,
            stats=stats,
            lifetime_return=lifetime_twr.cumulative_return,
            last_day_change=last_day_change(range_twr.daily),
            last_day_profit=last_day_profit(range_values, range_cf),
            benchmarks=overlays,
        )

        if range_key.is_long:
            self._downsample_report(report)

        logger.info(
            f"Built {range_key.value} report from {range_start} to {today}: "
            f"{range_twr.transitions} transitions, {len(overlays)} benchmarks"
        )
        return report

    def analyze_combined(
            self,
            aggregator: "MultiEntityAggregator",
            range_key: RangeKey | str,
            today: date,
            benchmarks: Mapping[str, list[PricePoint]] | None = None,
            risk_free: RiskFreeRate | None = None,
            include_risk_free_curve: bool = False,
    ) -> PerformanceReport:
        """
        Build a report over the aggregator's latest combined snapshot.

        Returns an empty report (with a warning) while no entity has reported.
        """
        combined = aggregator.combined()
        lifetime_start = first_active_date(combined.positions, combined.cashflows)

        report = self.analyze_valuation(
            combined.valuation,
            combined.cashflows,
            range_key,
            today,
            lifetime_start=lifetime_start,
            benchmarks=benchmarks,
            risk_free=risk_free,
            include_risk_free_curve=include_risk_free_curve,
        )
        if combined.pending_entities:
            report.warnings.append(
                f"Waiting for data from {len(combined.pending_entities)} entities: "
                f"{', '.join(combined.pending_entities)}"
            )
        return report

    def get_portfolio_report(
            self,
            portfolio_id: str,
            range_key: RangeKey | str,
            today: date,
            benchmark_keys: Iterable[str] = (),
            include_risk_free_curve: bool = False,
    ) -> PerformanceReport:
        """
        Load a snapshot through the providers and analyze it.

        Args:
            portfolio_id: Portfolio to analyze
            range_key: Display range
            today: Last axis day
            benchmark_keys: Benchmarks to overlay
            include_risk_free_curve: Add the synthetic risk-free benchmark
        """
        snapshot = self.load_snapshot(portfolio_id, today)
        lifetime_start = self._lifetime_start(snapshot) or today
        benchmarks = self.load_benchmarks(benchmark_keys, lifetime_start, today)

        return self.analyze(
            snapshot,
            range_key,
            today,
            benchmarks=benchmarks,
            include_risk_free_curve=include_risk_free_curve,
        )

    # =========================================================================
    # PROVIDER ACCESS
    # =========================================================================

    def load_snapshot(self, portfolio_id: str, today: date) -> PortfolioSnapshot:
        """
        Collect holdings, prices and ledger for one portfolio.

        Missing providers and ProviderUnavailableError both yield empty inputs.
        """
        positions = []
        if self._holdings is not None:
            positions = self._call_provider(
                "holdings", lambda: self._holdings.get_positions(portfolio_id), [],
            )

        cashflows: list[CashflowEvent] = []
        cash_balance: Decimal | None = None
        if self._ledger is not None:
            cashflows = self._call_provider(
                "ledger", lambda: self._ledger.get_cashflows(portfolio_id), [],
            )
            cash_balance = self._call_provider(
                "ledger", lambda: self._ledger.get_cash_balance(portfolio_id), None,
            )

        start = first_active_date(positions, cashflows) or today
        # Seed the carried close when the axis starts on a weekend or holiday
        fetch_start = start - timedelta(days=PRICE_SEED_LOOKBACK_DAYS)

        histories: dict[str, list[PricePoint]] = {}
        if self._prices is not None:
            for instrument_id in {p.instrument_id for p in positions}:
                histories[instrument_id] = self._call_provider(
                    "prices",
                    lambda iid=instrument_id: self._prices.get_history(iid, fetch_start, today),
                    [],
                )

        return PortfolioSnapshot(
            instruments=series_from_positions(positions, histories),
            cashflows=cashflows,
            positions=positions,
            cash_balance=cash_balance,
        )

    def load_benchmarks(
            self,
            keys: Iterable[str],
            start: date,
            end: date,
    ) -> dict[str, list[PricePoint]]:
        """Fetch raw closes for each benchmark key (empty on provider failure)."""
        result: dict[str, list[PricePoint]] = {}
        if self._benchmarks is None:
            return result

        fetch_start = start - timedelta(days=PRICE_SEED_LOOKBACK_DAYS)
        for key in keys:
            result[key] = self._call_provider(
                "benchmarks",
                lambda k=key: self._benchmarks.get_history(k, fetch_start, end),
                [],
            )
        return result

    def resolve_risk_free(self, today: date) -> RiskFreeRate:
        """Rate from the provider, falling back to the configured default."""
        if self._risk_free is not None:
            rate = self._call_provider("risk_free", lambda: self._risk_free.get_rate(today), None)
            if rate is not None:
                return rate
        return RiskFreeRate(daily_rate=self._settings.default_risk_free_daily_rate)

    # =========================================================================
    # PRIVATE HELPERS
    # =========================================================================

    @staticmethod
    def _call_provider(name: str, fetch: Callable[[], T], default: T) -> T:
        try:
            return fetch()
        except ProviderUnavailableError as e:
            logger.warning(f"Provider '{name}' unavailable, continuing without it: {e}")
            return default

    @staticmethod
    def _lifetime_start(snapshot: PortfolioSnapshot) -> date | None:
        """
        Explicit start, else first active day, else the first priced day of
        a held instrument.
        """
        if snapshot.start_date is not None:
            return snapshot.start_date

        start = first_active_date(snapshot.positions, snapshot.cashflows)
        if start is not None:
            return start

        priced_days = [
            p.date
            for series in snapshot.instruments.values()
            if series.quantity > ZERO
            for p in series.history
            if p.close is not None
        ]
        return min(priced_days) if priced_days else None

    def _build_axis(self, start: date, end: date) -> list[date]:
        days = days_between(start, end) + 1
        if days > self._settings.max_axis_days:
            raise AxisTooLongError(days, self._settings.max_axis_days)
        return build_daily_axis(start, end)

    def _downsample_report(self, report: PerformanceReport) -> None:
        every = self._settings.downsample_interval_days
        report.valuation = downsample_by_days(report.valuation, every)
        report.cumulative_percent = downsample_by_days(report.cumulative_percent, every)
        report.benchmarks = [
            BenchmarkOverlay(
                key=overlay.key,
                percent=downsample_by_days(overlay.percent, every),
                cagr=overlay.cagr,
            )
            for overlay in report.benchmarks
        ]
        report.downsampled = True

    @staticmethod
    def _empty_report(range_key: RangeKey, reason: str) -> PerformanceReport:
        logger.info(f"Empty {range_key.value} report: {reason}")
        return PerformanceReport(range_key=range_key, warnings=[reason])


# =============================================================================
# EXPORT HELPERS
# =============================================================================

def valuation_rows(report: PerformanceReport) -> list[tuple[date, Decimal]]:
    """Flat (date, value) rows of the display valuation, for CSV export."""
    return [(p.date, p.value) for p in report.valuation]


def percent_rows(points: Iterable[SeriesPoint]) -> list[tuple[date, Decimal | None]]:
    """Flat (date, percent) rows of a chart series, for CSV export."""
    return [(p.date, p.value) for p in points]
