# twr_engine/routers/analytics.py
"""
Performance report endpoints.

- POST /analytics/performance - Report for a portfolio snapshot sent in the body

The request carries everything the engine needs (prices, quantities, ledger,
benchmarks); nothing is persisted. The range, "today" and the risk-free
override are body fields as well.
"""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends

from twr_engine.dependencies import get_analytics_service
from twr_engine.schemas.analytics import (
    BenchmarkResponse,
    DailyReturnResponse,
    PerformanceRequest,
    PerformanceResponse,
    PricePointInput,
    SeriesPointResponse,
    StatsResponse,
    ValuePointResponse,
)
from twr_engine.services.analytics.service import AnalyticsService
from twr_engine.services.analytics.types import (
    PerformanceReport,
    PortfolioSnapshot,
    RiskFreeRate,
    SeriesPoint,
)
from twr_engine.services.cashflows.classifier import parse_cashflow_rows
from twr_engine.services.valuation.types import (
    InstrumentSeries,
    Position,
    PricePoint,
    ValuationPoint,
)

# =============================================================================
# ROUTER SETUP
# =============================================================================

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
)


# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def _decimal_to_str(value: Decimal | None) -> str | None:
    """Convert Decimal to string, preserving None."""
    if value is None:
        return None
    return str(value)


def _to_price_points(points: list[PricePointInput]) -> list[PricePoint]:
    return [PricePoint(date=p.date, close=p.close) for p in points]


def _series_response(points: list[SeriesPoint]) -> list[SeriesPointResponse]:
    return [SeriesPointResponse(date=p.date, value=_decimal_to_str(p.value)) for p in points]


def _valuation_response(points: list[ValuationPoint]) -> list[ValuePointResponse]:
    return [ValuePointResponse(date=p.date, value=str(p.value)) for p in points]


def build_snapshot(request: PerformanceRequest) -> PortfolioSnapshot:
    """Convert the request body into the service input."""
    instruments = {
        instrument_id: InstrumentSeries(
            history=_to_price_points(instrument.history),
            quantity=instrument.quantity,
            acquired_on=instrument.acquired_on,
        )
        for instrument_id, instrument in request.instruments.items()
    }
    positions = [
        Position(instrument_id=instrument_id, quantity=series.quantity, acquired_on=series.acquired_on)
        for instrument_id, series in instruments.items()
    ]
    return PortfolioSnapshot(
        instruments=instruments,
        cashflows=parse_cashflow_rows(request.cashflows),
        positions=positions,
        cash_balance=request.cash_balance,
        start_date=request.start_date,
    )


def build_performance_response(report: PerformanceReport) -> PerformanceResponse:
    """Convert a PerformanceReport into the string-serialized response."""
    stats = report.stats
    return PerformanceResponse(
        range=report.range_key.value,
        start_date=report.start_date,
        end_date=report.end_date,
        lifetime_start=report.lifetime_start,
        lifetime_return=str(report.lifetime_return),
        last_day_change=str(report.last_day_change),
        last_day_profit=str(report.last_day_profit),
        stats=StatsResponse(
            period_return=str(stats.period_return),
            cagr=str(stats.cagr),
            volatility_annualized=str(stats.volatility_annualized),
            sharpe=_decimal_to_str(stats.sharpe),
            max_drawdown=str(stats.max_drawdown),
            win_rate=str(stats.win_rate),
            months_positive=stats.months_positive,
            months_negative=stats.months_negative,
        ),
        valuation=_valuation_response(report.valuation),
        daily_returns=[DailyReturnResponse(date=d.date, r=str(d.r)) for d in report.daily_returns],
        cumulative_percent=_series_response(report.cumulative_percent),
        benchmarks=[
            BenchmarkResponse(
                key=overlay.key,
                cagr=_decimal_to_str(overlay.cagr),
                percent=_series_response(overlay.percent),
            )
            for overlay in report.benchmarks
        ],
        downsampled=report.downsampled,
        warnings=report.warnings,
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.post(
    "/performance",
    response_model=PerformanceResponse,
    summary="Performance report for a portfolio snapshot",
)
def get_performance(
        request: PerformanceRequest,
        service: AnalyticsService = Depends(get_analytics_service),
) -> PerformanceResponse:
    """
    Compute TWR, CAGR, volatility, Sharpe, drawdown, win rate and monthly
    +/- counts for the snapshot in the body.

    **Errors:**
    - 400: Unknown range key, range starting after `today`, axis too long
    - 422: Malformed body (malformed ledger rows are skipped, not rejected)
    """
    risk_free = None
    if request.risk_free_daily_rate is not None:
        risk_free = RiskFreeRate(daily_rate=request.risk_free_daily_rate)

    report = service.analyze(
        build_snapshot(request),
        request.range,
        request.today or date.today(),
        benchmarks={key: _to_price_points(points) for key, points in request.benchmarks.items()},
        risk_free=risk_free,
        include_risk_free_curve=request.include_risk_free_curve,
    )
    return build_performance_response(report)
