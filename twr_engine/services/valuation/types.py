# twr_engine/services/valuation/types.py
"""
Data types for the Valuation Series Builder.

Internal data classes (not Pydantic) used between the builder and the
analytics layer. Money and prices are Decimal throughout.

Architecture:
    - PricePoint: One day's close for an instrument or benchmark
    - Position: A holding lot (several lots per instrument are summed)
    - InstrumentSeries: Builder input for one instrument
    - ValuationPoint: One day's total portfolio value
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class PricePoint:
    """
    Observed close for one day.

    Attributes:
        date: Trading day
        close: Closing price, or None when there was no trade that day
    """
    date: date
    close: Decimal | None


@dataclass(frozen=True)
class Position:
    """
    A holding lot as reported by the holdings source.

    Attributes:
        instrument_id: Identifier shared with the price history source
        quantity: Units held (>= 0)
        unit_cost: Purchase price per unit (informational)
        acquired_on: Purchase date; the lot is worth 0 before it
    """
    instrument_id: str
    quantity: Decimal
    unit_cost: Decimal | None = None
    acquired_on: date | None = None


@dataclass
class InstrumentSeries:
    """
    Builder input for one instrument.

    Attributes:
        history: Observed closes, any order, gaps allowed
        quantity: Total units held across all lots
        acquired_on: Earliest purchase date; days before it are valued at 0
    """
    history: list[PricePoint] = field(default_factory=list)
    quantity: Decimal = field(default_factory=lambda: Decimal("0"))
    acquired_on: date | None = None


@dataclass(frozen=True)
class ValuationPoint:
    """
    Total portfolio value at end of day.

    Attributes:
        date: Axis day
        value: Sum of quantity x forward-filled close (plus cash if tracked)
    """
    date: date
    value: Decimal


@dataclass
class CashBalanceSeries:
    """
    Reconstructed daily cash sub-balance.

    Attributes:
        initial_balance: Balance before the first axis day
        points: Balance at end of each axis day
        warnings: Data-quality notes (e.g. negative reconstructed balance)
    """
    initial_balance: Decimal
    points: list[ValuationPoint] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
