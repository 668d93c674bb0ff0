# twr_engine/services/protocols.py
"""
Protocol interfaces for external data providers.

Persistence, price feeds and rate sources live outside the engine. These
protocols describe what AnalyticsService needs from them; any object with
matching methods works (typing.Protocol is structural), including the
plain fakes used in tests.

A provider that cannot answer should raise ProviderUnavailableError; the
service logs it and continues with an empty input.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Protocol, TYPE_CHECKING

if TYPE_CHECKING:
    from twr_engine.services.analytics.types import RiskFreeRate
    from twr_engine.services.cashflows.types import CashflowEvent
    from twr_engine.services.valuation.types import Position, PricePoint


class HoldingsProvider(Protocol):
    """Current lots of a portfolio."""

    def get_positions(self, portfolio_id: str) -> list[Position]:
        ...


class PriceHistoryProvider(Protocol):
    """Daily closes of an instrument (any order, gaps allowed)."""

    def get_history(self, instrument_id: str, start: date, end: date) -> list[PricePoint]:
        ...


class CashflowLedgerProvider(Protocol):
    """Ledger entries and the current cash balance of a portfolio."""

    def get_cashflows(self, portfolio_id: str) -> list[CashflowEvent]:
        ...

    def get_cash_balance(self, portfolio_id: str) -> Decimal | None:
        ...


class BenchmarkPriceProvider(Protocol):
    """Daily closes of a benchmark index or ETF."""

    def get_history(self, benchmark_key: str, start: date, end: date) -> list[PricePoint]:
        ...


class RiskFreeRateProvider(Protocol):
    """Current risk-free rate."""

    def get_rate(self, as_of: date) -> RiskFreeRate | None:
        ...
