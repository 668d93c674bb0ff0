# tests/services/analytics/test_risk.py
"""
Unit tests for risk calculations.

Test Coverage:
- calculate_volatility: Sample stdev × √252
- calculate_sharpe_ratio: Excess return per unit of volatility, None on zero stdev
- calculate_drawdown_series / calculate_max_drawdown
- calculate_win_rate
- calculate_monthly_counts
- StatsCalculator.calculate_all: Range vs lifetime figures
"""

from datetime import date, timedelta
from decimal import Decimal

from conftest import values_from
from twr_engine.services.analytics.risk import (
    StatsCalculator,
    calculate_drawdown_series,
    calculate_max_drawdown,
    calculate_monthly_counts,
    calculate_sharpe_ratio,
    calculate_volatility,
    calculate_win_rate,
)
from twr_engine.services.analytics.types import DailyReturn

D0 = date(2024, 1, 1)

TOLERANCE = Decimal("1e-6")


def _daily(*returns: str, start: date = D0) -> list[DailyReturn]:
    return [DailyReturn(start + timedelta(days=i + 1), Decimal(r)) for i, r in enumerate(returns)]


# =============================================================================
# VOLATILITY
# =============================================================================

class TestVolatility:
    """Tests for calculate_volatility."""

    def test_two_returns(self):
        """stdev([0.01, -0.01]) = √0.0002; × √252 = √0.0504 ≈ 0.2244994"""
        result = calculate_volatility(_daily("0.01", "-0.01"))
        assert abs(result - Decimal("0.2244994432")) < TOLERANCE

    def test_single_return_is_zero(self):
        assert calculate_volatility(_daily("0.05")) == Decimal("0")

    def test_empty_is_zero(self):
        assert calculate_volatility([]) == Decimal("0")

    def test_constant_returns_have_no_volatility(self):
        assert calculate_volatility(_daily("0.01", "0.01", "0.01")) == Decimal("0")

    def test_custom_periods(self):
        """With 1 period per year the result is the raw sample stdev."""
        result = calculate_volatility(_daily("0.01", "-0.01"), periods_per_year=1)
        assert abs(result - Decimal("0.0141421356")) < TOLERANCE


# =============================================================================
# SHARPE
# =============================================================================

class TestSharpe:
    """Tests for calculate_sharpe_ratio."""

    def test_positive_sharpe(self):
        """mean 0.01, stdev √0.0002 -> 0.01 / 0.0141421 × √252 ≈ 11.2250"""
        result = calculate_sharpe_ratio(_daily("0.02", "0.00"))
        assert abs(result - Decimal("11.2249722")) < Decimal("1e-4")

    def test_risk_free_reduces_sharpe(self):
        without = calculate_sharpe_ratio(_daily("0.02", "0.00"))
        with_rf = calculate_sharpe_ratio(_daily("0.02", "0.00"), risk_free_daily=Decimal("0.005"))
        assert with_rf < without
        assert abs(with_rf - without / 2) < Decimal("1e-4")

    def test_zero_volatility_is_none(self):
        assert calculate_sharpe_ratio(_daily("0.01", "0.01")) is None

    def test_single_return_is_none(self):
        assert calculate_sharpe_ratio(_daily("0.01")) is None

    def test_empty_is_none(self):
        assert calculate_sharpe_ratio([]) is None


# =============================================================================
# DRAWDOWN
# =============================================================================

class TestDrawdown:
    """Tests for drawdown functions."""

    def test_max_drawdown_example(self):
        """[100, 120, 90, 150]: peak 120, trough 90 -> -0.25"""
        values = values_from(D0, [100, 120, 90, 150])
        assert calculate_max_drawdown(values) == Decimal("-0.25")

    def test_monotonic_growth_has_no_drawdown(self):
        values = values_from(D0, [100, 101, 102])
        assert calculate_max_drawdown(values) == Decimal("0")

    def test_empty(self):
        assert calculate_max_drawdown([]) == Decimal("0")

    def test_leading_zeros_are_skipped(self):
        values = values_from(D0, [0, 0, 100, 50])
        series = calculate_drawdown_series(values)
        assert [p.value for p in series] == [Decimal("0"), Decimal("0"), Decimal("0"), Decimal("-0.5")]

    def test_negative_value_bounded_at_total_loss(self):
        values = values_from(D0, [100, -20])
        assert calculate_max_drawdown(values) == Decimal("-1")

    def test_drawdown_never_positive(self):
        values = values_from(D0, [100, 80, 120, 60, 200])
        assert all(p.value <= 0 for p in calculate_drawdown_series(values))


# =============================================================================
# WIN RATE AND MONTHS
# =============================================================================

class TestWinRate:
    """Tests for calculate_win_rate."""

    def test_flat_days_count_in_denominator(self):
        assert calculate_win_rate(_daily("0.01", "0", "-0.01", "0.02")) == Decimal("0.5")

    def test_empty(self):
        assert calculate_win_rate([]) == Decimal("0")

    def test_all_wins(self):
        assert calculate_win_rate(_daily("0.01", "0.02")) == Decimal("1")


class TestMonthlyCounts:
    """Tests for calculate_monthly_counts."""

    def test_positive_negative_and_flat_months(self):
        daily = [
            DailyReturn(date(2024, 1, 10), Decimal("0.02")),
            DailyReturn(date(2024, 1, 20), Decimal("-0.01")),   # Jan: +0.98%
            DailyReturn(date(2024, 2, 5), Decimal("-0.03")),    # Feb: -3%
            DailyReturn(date(2024, 3, 1), Decimal("0")),        # Mar: flat
        ]
        assert calculate_monthly_counts(daily) == (1, 1)

    def test_months_are_chained_not_summed(self):
        """+50% then -34%: sum is positive, chain is 1.5 × 0.66 - 1 = -0.01."""
        daily = [
            DailyReturn(date(2024, 4, 1), Decimal("0.5")),
            DailyReturn(date(2024, 4, 2), Decimal("-0.34")),
        ]
        assert calculate_monthly_counts(daily) == (0, 1)

    def test_same_month_different_years(self):
        daily = [
            DailyReturn(date(2023, 5, 1), Decimal("0.01")),
            DailyReturn(date(2024, 5, 1), Decimal("0.01")),
        ]
        assert calculate_monthly_counts(daily) == (2, 0)

    def test_empty(self):
        assert calculate_monthly_counts([]) == (0, 0)


# =============================================================================
# STATS CALCULATOR
# =============================================================================

class TestStatsCalculator:
    """Tests for StatsCalculator.calculate_all."""

    def test_empty_input_gives_neutral_summary(self):
        stats = StatsCalculator.calculate_all([], [])
        assert stats.period_return == Decimal("0")
        assert stats.cagr == Decimal("0")
        assert stats.volatility_annualized == Decimal("0")
        assert stats.sharpe is None
        assert stats.max_drawdown == Decimal("0")
        assert stats.win_rate == Decimal("0")
        assert (stats.months_positive, stats.months_negative) == (0, 0)

    def test_range_figures(self):
        daily = _daily("0.1", "-0.05")
        values = values_from(D0, [100, 110, 104.5])
        stats = StatsCalculator.calculate_all(daily, values)

        assert stats.period_return == Decimal("0.045")
        assert stats.win_rate == Decimal("0.5")
        assert stats.max_drawdown == Decimal("-0.05")
        assert stats.sharpe is not None

    def test_lifetime_figures_override_range(self):
        """CAGR and max drawdown come from the lifetime series when given."""
        range_daily = _daily("0.01")
        range_values = values_from(D0, [100, 101])
        lifetime_daily = _daily("0.5", "-0.5", "0.01")
        lifetime_values = values_from(D0, [100, 150, 75, 75.75])

        stats = StatsCalculator.calculate_all(
            range_daily,
            range_values,
            lifetime_daily=lifetime_daily,
            lifetime_values=lifetime_values,
        )

        assert stats.period_return == Decimal("0.01")
        assert stats.cagr == Decimal("-0.24250")
        assert stats.max_drawdown == Decimal("-0.5")
