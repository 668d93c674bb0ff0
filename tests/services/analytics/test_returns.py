# tests/services/analytics/test_returns.py
"""
Unit tests for return calculations.

These tests verify the pure calculation logic. All tests use known values
that can be verified by hand.

Test Coverage:
- compute_daily_returns: Cashflow-adjusted daily returns, bootstrap guard
- compute_twr: Chained Time-Weighted Return
- chain_range: Sub-range chaining and associativity
- annualize_total_return / calculate_cagr: Under-one-year policy
- cumulative_curve, last_day_change, last_day_profit
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from conftest import values_from
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
    normalize_values,
)
from twr_engine.services.analytics.types import DailyReturn
from twr_engine.services.valuation.types import ValuationPoint

D0 = date(2024, 1, 1)
D1 = date(2024, 1, 2)
D2 = date(2024, 1, 3)
D3 = date(2024, 1, 4)


# =============================================================================
# DAILY RETURNS
# =============================================================================

class TestDailyReturns:
    """Tests for compute_daily_returns."""

    def test_worked_example_with_deposit_and_withdrawal(self):
        """
        V = [1000, 1050, 1550, 1381], CF = {D2: +500, D3: -200}

        r1 = (1050 - 0 - 1000) / 1000     = 0.05
        r2 = (1550 - 500 - 1050) / 1050   = 0
        r3 = (1381 + 200 - 1550) / 1550   = 0.02
        """
        values = values_from(D0, [1000, 1050, 1550, 1381])
        cashflows = {D2: Decimal("500"), D3: Decimal("-200")}

        daily = compute_daily_returns(values, cashflows)

        assert [d.date for d in daily] == [D1, D2, D3]
        assert [d.r for d in daily] == [Decimal("0.05"), Decimal("0"), Decimal("0.02")]

    def test_one_return_per_transition(self):
        values = values_from(D0, [1, 2, 3, 4, 5])
        assert len(compute_daily_returns(values)) == 4

    def test_single_point_has_no_returns(self):
        assert compute_daily_returns(values_from(D0, [1000])) == []

    def test_empty_input(self):
        assert compute_daily_returns([]) == []

    def test_bootstrap_day_is_zero(self):
        """First funding: yesterday 0, today deposit 1000 -> r = 0, not a division by zero."""
        values = values_from(D0, [0, 1000, 1010])
        daily = compute_daily_returns(values, {D1: Decimal("1000")})

        assert daily[0].r == Decimal("0")
        assert daily[1].r == Decimal("0.01")

    def test_value_below_epsilon_is_treated_as_empty(self):
        values = [
            ValuationPoint(D0, Decimal("1e-12")),
            ValuationPoint(D1, Decimal("500")),
        ]
        assert compute_daily_returns(values)[0].r == Decimal("0")

    def test_negative_values_are_clamped(self):
        """A negative valuation never produces a return beyond -100%."""
        values = values_from(D0, [1000, -50])
        assert compute_daily_returns(values)[0].r == Decimal("-1")

    def test_cashflow_neutrality(self):
        """A deposit that only adds cash leaves the daily return at zero."""
        values = values_from(D0, [1000, 1000, 1500])
        daily = compute_daily_returns(values, {D2: Decimal("500")})
        assert all(d.r == Decimal("0") for d in daily)

    def test_unsorted_input_is_ordered(self):
        values = list(reversed(values_from(D0, [100, 110, 121])))
        daily = compute_daily_returns(values)
        assert [d.date for d in daily] == [D1, D2]
        assert daily[1].r == Decimal("0.1")


class TestNormalizeValues:
    """Tests for normalize_values."""

    def test_duplicate_day_keeps_last(self):
        values = [
            ValuationPoint(D0, Decimal("100")),
            ValuationPoint(D1, Decimal("110")),
            ValuationPoint(D1, Decimal("120")),
        ]
        result = normalize_values(values)
        assert [p.value for p in result] == [Decimal("100"), Decimal("120")]


# =============================================================================
# TWR
# =============================================================================

class TestTWR:
    """Tests for compute_twr."""

    def test_worked_example_total(self):
        """(1.05 × 1.00 × 1.02) - 1 = 0.071"""
        values = values_from(D0, [1000, 1050, 1550, 1381])
        result = compute_twr(values, {D2: Decimal("500"), D3: Decimal("-200")})

        assert result.cumulative_return == Decimal("0.071")
        assert result.transitions == 3

    def test_empty_axis(self):
        result = compute_twr([])
        assert result.cumulative_return == Decimal("0")
        assert result.daily == []

    def test_single_day(self):
        result = compute_twr(values_from(D0, [1000]))
        assert result.cumulative_return == Decimal("0")
        assert result.transitions == 0

    def test_simple_growth_no_cashflow(self):
        result = compute_twr(values_from(D0, [1000, 1100]))
        assert result.cumulative_return == Decimal("0.1")

    def test_twr_ignores_deposit_size(self):
        """Same market moves, different deposit: same TWR."""
        small = compute_twr(values_from(D0, [1000, 1100, 1210]), {})
        large = compute_twr(values_from(D0, [1000, 1100, 11210]), {D2: Decimal("10000")})
        assert abs(small.cumulative_return - large.cumulative_return) < Decimal("1e-20")


# =============================================================================
# CHAINING
# =============================================================================

class TestChaining:
    """Tests for chain_returns and chain_range."""

    @pytest.fixture
    def daily(self) -> list[DailyReturn]:
        returns = ["0.01", "-0.02", "0.03", "0.005", "-0.01", "0.02"]
        return [DailyReturn(D0 + timedelta(days=i + 1), Decimal(r)) for i, r in enumerate(returns)]

    def test_chain_empty_is_zero(self):
        assert chain_returns([]) == Decimal("0")

    def test_chain_two_returns(self):
        assert chain_returns([Decimal("0.1"), Decimal("0.1")]) == Decimal("0.21")

    def test_chain_range_excludes_start(self, daily):
        # Transitions into Jan 3 and Jan 4 only
        result = chain_range(daily, date(2024, 1, 2), date(2024, 1, 4))
        assert result == (Decimal("0.98") * Decimal("1.03")) - 1

    def test_chain_range_open_bounds_is_full_chain(self, daily):
        assert chain_range(daily, None, None) == chain_returns(d.r for d in daily)

    def test_chain_range_associativity(self, daily):
        a, b, c = date(2024, 1, 1), date(2024, 1, 4), date(2024, 1, 7)
        whole = chain_range(daily, a, c)
        left = chain_range(daily, a, b)
        right = chain_range(daily, b, c)
        assert abs(whole - ((1 + left) * (1 + right) - 1)) < Decimal("1e-20")


# =============================================================================
# CAGR
# =============================================================================

class TestCAGR:
    """Tests for annualize_total_return and calculate_cagr."""

    def test_under_one_year_returns_total(self):
        """Six months at +10% stays +10%, not annualized to ~21%."""
        assert annualize_total_return(Decimal("0.10"), 182) == Decimal("0.10")

    def test_exactly_one_year(self):
        result = annualize_total_return(Decimal("0.10"), 365)
        assert abs(result - Decimal("0.10")) < Decimal("1e-20")

    def test_two_years(self):
        """21% over two years is 10% a year."""
        result = annualize_total_return(Decimal("0.21"), 730)
        assert abs(result - Decimal("0.10")) < Decimal("1e-20")

    def test_zero_transitions(self):
        assert annualize_total_return(Decimal("0.05"), 0) == Decimal("0.05")

    def test_total_loss(self):
        assert annualize_total_return(Decimal("-1"), 800) == Decimal("-1")

    def test_calculate_cagr_from_daily_sub_year(self):
        daily = [DailyReturn(D1, Decimal("0.1")), DailyReturn(D2, Decimal("0.1"))]
        assert calculate_cagr(daily) == Decimal("0.21")

    def test_calculate_cagr_with_explicit_transitions(self):
        daily = [DailyReturn(D1, Decimal("0.21"))]
        result = calculate_cagr(daily, transitions=730)
        assert abs(result - Decimal("0.10")) < Decimal("1e-20")

    def test_calculate_cagr_empty(self):
        assert calculate_cagr([]) == Decimal("0")


# =============================================================================
# CURVE AND LAST-DAY KPIs
# =============================================================================

class TestCumulativeCurve:
    """Tests for cumulative_curve."""

    def test_running_chain(self):
        daily = [DailyReturn(D1, Decimal("0.1")), DailyReturn(D2, Decimal("0.1"))]
        curve = cumulative_curve(daily)
        assert [p.value for p in curve] == [Decimal("0.1"), Decimal("0.21")]

    def test_percent_scale(self):
        daily = [DailyReturn(D1, Decimal("0.05"))]
        assert cumulative_curve(daily, scale=Decimal("100"))[0].value == Decimal("5")

    def test_last_point_equals_twr(self):
        values = values_from(D0, [1000, 1050, 1550, 1381])
        result = compute_twr(values, {D2: Decimal("500"), D3: Decimal("-200")})
        assert cumulative_curve(result.daily)[-1].value == result.cumulative_return


class TestLastDay:
    """Tests for last_day_change and last_day_profit."""

    def test_last_day_change(self):
        daily = [DailyReturn(D1, Decimal("0.1")), DailyReturn(D2, Decimal("-0.02"))]
        assert last_day_change(daily) == Decimal("-0.02")

    def test_last_day_change_empty(self):
        assert last_day_change([]) == Decimal("0")

    def test_last_day_profit_nets_cashflow(self):
        values = values_from(D0, [1000, 1550])
        assert last_day_profit(values, {D1: Decimal("500")}) == Decimal("50")

    def test_last_day_profit_single_point(self):
        assert last_day_profit(values_from(D0, [1000])) == Decimal("0")
