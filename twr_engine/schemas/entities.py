# twr_engine/schemas/entities.py
"""
Pydantic schemas for the multi-entity (all portfolios) endpoints.
"""

import datetime as dt
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from twr_engine.schemas.analytics import ValuePointResponse


class ValuePointInput(BaseModel):
    """One day's total value of an entity."""

    date: dt.date
    value: Decimal


class PositionInput(BaseModel):
    """A holding lot."""

    instrument_id: str = Field(..., min_length=1)
    quantity: Decimal = Field(..., ge=0)
    unit_cost: Decimal | None = None
    acquired_on: dt.date | None = None


class EntitySnapshotRequest(BaseModel):
    """Latest valuation and ledger of one entity."""

    valuation: list[ValuePointInput] = Field(default_factory=list)
    cashflows: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Raw ledger rows; malformed rows are skipped",
    )
    positions: list[PositionInput] = Field(default_factory=list)


class CombinedResponse(BaseModel):
    """Combined view over all entities."""

    version: int
    entity_keys: list[str]
    pending_entities: list[str]
    cashflow_count: int
    valuation: list[ValuePointResponse]
