# twr_engine/services/aggregation/types.py
"""
Data types for the Multi-Entity Aggregator.

    - EntitySnapshot: Latest valuation and ledger of one portfolio
    - CombinedSnapshot: Immutable sum over all portfolios, as handed to readers
"""

from dataclasses import dataclass, field

from twr_engine.services.cashflows.types import CashflowEvent
from twr_engine.services.valuation.types import Position, ValuationPoint


@dataclass
class EntitySnapshot:
    """
    Latest state of one entity (portfolio).

    Attributes:
        valuation: Daily valuation series (cash included if tracked)
        cashflows: Ledger entries
        positions: Lots, used for the combined first active day
    """
    valuation: list[ValuationPoint] = field(default_factory=list)
    cashflows: list[CashflowEvent] = field(default_factory=list)
    positions: list[Position] = field(default_factory=list)


@dataclass(frozen=True)
class CombinedSnapshot:
    """
    Result of one aggregation pass.

    Readers only ever see fully computed instances; a new one replaces the
    old one on every update.

    Attributes:
        version: Increases by one on every update or removal
        valuation: Per-day sum across entities over the union of their days
        cashflows: Concatenated ledgers
        positions: Concatenated lots
        entity_keys: Entities that contributed
        pending_entities: Registered entities without a first snapshot yet
    """
    version: int = 0
    valuation: tuple[ValuationPoint, ...] = ()
    cashflows: tuple[CashflowEvent, ...] = ()
    positions: tuple[Position, ...] = ()
    entity_keys: tuple[str, ...] = ()
    pending_entities: tuple[str, ...] = ()
