# tests/conftest.py
"""
Pytest configuration and fixtures.

This module provides shared fixtures for all tests:
- Date and Decimal helpers for building axes and series by hand
- Sample snapshots, ledgers and price histories
- In-memory provider fakes for AnalyticsService
"""

import os

# Must be set before any twr_engine import builds Settings
os.environ["ENVIRONMENT"] = "test"
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from datetime import date, timedelta
from decimal import Decimal

import pytest

from twr_engine.services.analytics.types import PortfolioSnapshot, RiskFreeRate
from twr_engine.services.cashflows.types import CashflowEvent, CashflowKind
from twr_engine.services.exceptions import ProviderUnavailableError
from twr_engine.services.valuation.types import (
    InstrumentSeries,
    Position,
    PricePoint,
    ValuationPoint,
)


# =============================================================================
# BUILDERS
# =============================================================================

def values_from(start: date, amounts: list) -> list[ValuationPoint]:
    """One ValuationPoint per consecutive day starting at ``start``."""
    return [
        ValuationPoint(date=start + timedelta(days=i), value=Decimal(str(a)))
        for i, a in enumerate(amounts)
    ]


def prices_from(start: date, closes: list) -> list[PricePoint]:
    """One PricePoint per consecutive day; None closes are kept as gaps."""
    return [
        PricePoint(date=start + timedelta(days=i), close=None if c is None else Decimal(str(c)))
        for i, c in enumerate(closes)
    ]


def event(day: date, amount, kind: str = "deposit", **flags) -> CashflowEvent:
    """Shorthand CashflowEvent factory."""
    return CashflowEvent(date=day, amount=Decimal(str(amount)), kind=CashflowKind(kind), **flags)


# =============================================================================
# SAMPLE DATA
# =============================================================================

@pytest.fixture
def jan_1() -> date:
    return date(2024, 1, 1)


@pytest.fixture
def sample_snapshot() -> PortfolioSnapshot:
    """
    One instrument bought on 2024-01-01, funded by a single deposit.

    10 units at 100, 105, 110, 99 -> values 1000, 1050, 1100, 990.
    """
    start = date(2024, 1, 1)
    return PortfolioSnapshot(
        instruments={
            "ACME": InstrumentSeries(
                history=prices_from(start, [100, 105, 110, 99]),
                quantity=Decimal("10"),
                acquired_on=start,
            ),
        },
        cashflows=[event(start, "1000")],
        positions=[Position(instrument_id="ACME", quantity=Decimal("10"), acquired_on=start)],
    )


# =============================================================================
# PROVIDER FAKES
# =============================================================================

class FakeHoldings:
    def __init__(self, positions: dict[str, list[Position]], fail: bool = False):
        self._positions = positions
        self._fail = fail

    def get_positions(self, portfolio_id: str) -> list[Position]:
        if self._fail:
            raise ProviderUnavailableError("holdings", "connection refused")
        return list(self._positions.get(portfolio_id, []))


class FakePrices:
    def __init__(self, histories: dict[str, list[PricePoint]], fail: bool = False):
        self._histories = histories
        self._fail = fail
        self.requests: list[tuple[str, date, date]] = []

    def get_history(self, instrument_id: str, start: date, end: date) -> list[PricePoint]:
        self.requests.append((instrument_id, start, end))
        if self._fail:
            raise ProviderUnavailableError("prices", "timeout")
        return [p for p in self._histories.get(instrument_id, []) if start <= p.date <= end]


class FakeLedger:
    def __init__(self, events: list[CashflowEvent], balance: Decimal | None = None):
        self._events = events
        self._balance = balance

    def get_cashflows(self, portfolio_id: str) -> list[CashflowEvent]:
        return list(self._events)

    def get_cash_balance(self, portfolio_id: str) -> Decimal | None:
        return self._balance


class FakeRiskFree:
    def __init__(self, rate: RiskFreeRate | None = None, fail: bool = False):
        self._rate = rate
        self._fail = fail

    def get_rate(self, as_of: date) -> RiskFreeRate | None:
        if self._fail:
            raise ProviderUnavailableError("risk_free", "feed down")
        return self._rate
