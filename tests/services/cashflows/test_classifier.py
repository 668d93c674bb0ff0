# tests/services/cashflows/test_classifier.py
"""
Unit tests for the Cashflow Classifier & Axis Snapper.

Test Coverage:
- CashflowKind: Partitions and sign normalization
- parse_cashflow_rows: Aliases, skipping malformed rows
- classify_cashflows: Exclusion wins over every other flag
- sum_external_by_day / sum_internal_by_day / sum_counted_by_day
- snap_to_axis: Forward-only snapping, dropping beyond the axis end
- external_cashflows_for_axis: Full pipeline with the ``since`` cut-off
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from conftest import event
from twr_engine.services.cashflows.classifier import (
    cashflow_on,
    classify_cashflows,
    external_cashflows_for_axis,
    parse_cashflow_rows,
    snap_to_axis,
    sum_counted_by_day,
    sum_external_by_day,
    sum_internal_by_day,
)
from twr_engine.services.cashflows.types import (
    EXTERNAL_KINDS,
    INTERNAL_KINDS,
    CashflowKind,
)
from twr_engine.utils.date_utils import build_daily_axis

FRIDAY = date(2024, 1, 5)
SATURDAY = date(2024, 1, 6)
SUNDAY = date(2024, 1, 7)
MONDAY = date(2024, 1, 8)

# Trading-day axis: Thu, Fri, Mon, Tue
TRADING_AXIS = [date(2024, 1, 4), FRIDAY, MONDAY, date(2024, 1, 9)]


# =============================================================================
# KINDS
# =============================================================================

class TestCashflowKind:
    """Tests for CashflowKind partitions and signs."""

    def test_partitions_cover_every_kind_once(self):
        assert EXTERNAL_KINDS | INTERNAL_KINDS == set(CashflowKind)
        assert not EXTERNAL_KINDS & INTERNAL_KINDS

    @pytest.mark.parametrize("kind,external", [
        ("deposit", True),
        ("withdraw", True),
        ("correction", True),
        ("manual", True),
        ("dividend", False),
        ("fee", False),
        ("buy", False),
        ("sell", False),
    ])
    def test_is_external(self, kind, external):
        assert CashflowKind(kind).is_external is external

    @pytest.mark.parametrize("kind,amount,expected", [
        ("deposit", "-500", "500"),
        ("withdraw", "200", "-200"),
        ("withdraw", "-200", "-200"),
        ("fee", "3", "-3"),
        ("buy", "100", "-100"),
        ("sell", "-100", "100"),
        ("dividend", "7", "7"),
        ("correction", "-5", "-5"),
        ("manual", "5", "5"),
    ])
    def test_signed(self, kind, amount, expected):
        assert CashflowKind(kind).signed(Decimal(amount)) == Decimal(expected)

    def test_sign_override_is_logged(self, caplog):
        with caplog.at_level("WARNING"):
            assert CashflowKind.WITHDRAW.signed(Decimal("200")) == Decimal("-200")

        assert "Sign of withdraw amount 200 overridden" in caplog.text

    def test_matching_sign_is_not_logged(self, caplog):
        with caplog.at_level("WARNING"):
            CashflowKind.WITHDRAW.signed(Decimal("-200"))
            CashflowKind.DEPOSIT.signed(Decimal("500"))
            CashflowKind.MANUAL.signed(Decimal("-5"))

        assert "overridden" not in caplog.text

    def test_counts_for_return(self):
        assert event(FRIDAY, "1").counts_for_return
        assert not event(FRIDAY, "1", exclude_from_return=True).counts_for_return
        assert not event(FRIDAY, "1", is_reversal=True).counts_for_return


# =============================================================================
# PARSING
# =============================================================================

class TestParseCashflowRows:
    """Tests for parse_cashflow_rows."""

    def test_canonical_row(self):
        events = parse_cashflow_rows([
            {"date": "2024-01-05", "amount": "500", "kind": "deposit"},
        ])
        assert len(events) == 1
        assert events[0].date == FRIDAY
        assert events[0].amount == Decimal("500")
        assert events[0].kind is CashflowKind.DEPOSIT

    def test_aliases(self):
        events = parse_cashflow_rows([{
            "date": "2024-01-05T18:30:00Z",
            "amount": 12.5,
            "type": "Dividend",
            "excludeFromTWR": True,
            "storno": True,
            "linkedTxnId": "txn-9",
        }])
        parsed = events[0]
        assert parsed.date == FRIDAY
        assert parsed.kind is CashflowKind.DIVIDEND
        assert parsed.exclude_from_return is True
        assert parsed.is_reversal is True
        assert parsed.linked_position_id == "txn-9"

    def test_malformed_rows_are_skipped(self, caplog):
        rows = [
            {"date": "2024-01-05", "amount": "100", "kind": "deposit"},
            {"date": "not a date", "amount": "100", "kind": "deposit"},
            {"date": "2024-01-05", "amount": "NaN", "kind": "deposit"},
            {"date": "2024-01-05", "amount": "100", "kind": "transfer"},
            {"date": "2024-01-05", "kind": "deposit"},
            {"date": "2024-01-06", "amount": "-50", "kind": "withdraw"},
        ]

        with caplog.at_level("WARNING"):
            events = parse_cashflow_rows(rows)

        assert [e.date for e in events] == [FRIDAY, SATURDAY]
        assert caplog.text.count("Skipping malformed cashflow row") == 4

    def test_empty(self):
        assert parse_cashflow_rows([]) == []


# =============================================================================
# CLASSIFICATION
# =============================================================================

class TestClassifyCashflows:
    """Tests for classify_cashflows and the per-day sums."""

    def test_split_and_drop(self):
        events = [
            event(FRIDAY, "1000"),
            event(FRIDAY, "10", kind="dividend"),
            event(FRIDAY, "500", exclude_from_return=True),
            event(FRIDAY, "10", kind="dividend", is_reversal=True),
        ]
        result = classify_cashflows(events)

        assert len(result.external) == 1
        assert len(result.internal) == 1
        assert result.dropped == 2

    def test_exclusion_wins(self):
        """An excluded deposit never reaches the external map."""
        events = [event(FRIDAY, "1000", exclude_from_return=True)]
        assert sum_external_by_day(events) == {}

    def test_sum_external_nets_same_day(self):
        events = [
            event(FRIDAY, "1000"),
            event(FRIDAY, "300", kind="withdraw"),
            event(MONDAY, "-20", kind="correction"),
            event(MONDAY, "50", kind="dividend"),
        ]
        assert sum_external_by_day(events) == {FRIDAY: Decimal("700"), MONDAY: Decimal("-20")}

    def test_sum_internal(self):
        events = [
            event(FRIDAY, "1000"),
            event(FRIDAY, "50", kind="dividend"),
            event(FRIDAY, "5", kind="fee"),
        ]
        assert sum_internal_by_day(events) == {FRIDAY: Decimal("45")}

    def test_sum_counted_includes_both_classes(self):
        events = [
            event(FRIDAY, "1000"),
            event(FRIDAY, "50", kind="dividend"),
            event(FRIDAY, "300", kind="buy"),
            event(MONDAY, "200", kind="deposit", exclude_from_return=True),
        ]
        assert sum_counted_by_day(events) == {FRIDAY: Decimal("750")}

    def test_zero_amount_skipped(self):
        assert sum_external_by_day([event(FRIDAY, "0")]) == {}


# =============================================================================
# SNAPPING
# =============================================================================

class TestSnapToAxis:
    """Tests for snap_to_axis."""

    def test_saturday_moves_to_monday_not_friday(self):
        snapped = snap_to_axis({SATURDAY: Decimal("500")}, TRADING_AXIS)
        assert snapped == {MONDAY: Decimal("500")}

    def test_weekend_flows_are_summed_on_monday(self):
        snapped = snap_to_axis(
            {SATURDAY: Decimal("500"), SUNDAY: Decimal("100"), MONDAY: Decimal("1")},
            TRADING_AXIS,
        )
        assert snapped == {MONDAY: Decimal("601")}

    def test_axis_day_stays(self):
        assert snap_to_axis({FRIDAY: Decimal("5")}, TRADING_AXIS) == {FRIDAY: Decimal("5")}

    def test_before_axis_moves_to_first_day(self):
        snapped = snap_to_axis({date(2024, 1, 1): Decimal("5")}, TRADING_AXIS)
        assert snapped == {TRADING_AXIS[0]: Decimal("5")}

    def test_after_axis_is_dropped(self):
        assert snap_to_axis({date(2024, 1, 10): Decimal("5")}, TRADING_AXIS) == {}

    def test_empty_axis(self):
        assert snap_to_axis({FRIDAY: Decimal("5")}, []) == {}

    def test_keys_are_axis_days(self):
        cash_map = {FRIDAY + timedelta(days=i): Decimal("1") for i in range(-10, 10)}
        snapped = snap_to_axis(cash_map, TRADING_AXIS)
        assert set(snapped) <= set(TRADING_AXIS)

    def test_cashflow_on(self):
        snapped = {MONDAY: Decimal("5")}
        assert cashflow_on(snapped, MONDAY) == Decimal("5")
        assert cashflow_on(snapped, FRIDAY) == Decimal("0")


class TestExternalCashflowsForAxis:
    """Tests for external_cashflows_for_axis."""

    def test_full_pipeline(self):
        events = [
            event(SATURDAY, "500"),
            event(SATURDAY, "10", kind="dividend"),
            event(FRIDAY, "200", kind="withdraw"),
        ]
        assert external_cashflows_for_axis(events, TRADING_AXIS) == {
            FRIDAY: Decimal("-200"),
            MONDAY: Decimal("500"),
        }

    def test_since_drops_earlier_flows(self):
        axis = build_daily_axis(MONDAY, date(2024, 1, 10))
        events = [event(FRIDAY, "1000"), event(date(2024, 1, 9), "50")]

        assert external_cashflows_for_axis(events, axis) == {
            MONDAY: Decimal("1000"),
            date(2024, 1, 9): Decimal("50"),
        }
        assert external_cashflows_for_axis(events, axis, since=MONDAY) == {
            date(2024, 1, 9): Decimal("50"),
        }
