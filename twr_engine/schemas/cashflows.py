# twr_engine/schemas/cashflows.py
"""
Pydantic schema for raw ledger rows.

Ledger rows arrive from imports and external stores with inconsistent field
names and types. CashflowRowSchema validates ONE row; the classifier
validates rows one at a time so a bad row is skipped without rejecting the
rest of the ledger.

Accepted aliases:
    kind:                 "kind" or "type"
    exclude_from_return:  "exclude_from_return", "excludeFromReturn", "excludeFromTWR"
    is_reversal:          "is_reversal", "isReversal", "storno"
    linked_position_id:   "linked_position_id", "linkedPositionId", "linkedTxnId"
"""

import datetime as dt
from decimal import Decimal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from twr_engine.services.cashflows.types import CashflowEvent, CashflowKind
from twr_engine.utils.date_utils import parse_day


class CashflowRowSchema(BaseModel):
    """One ledger row as accepted from outside the engine."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    date: dt.date = Field(..., description="Day of the movement (ISO date or datetime)")
    amount: Decimal = Field(..., description="Signed amount in base currency")
    kind: CashflowKind = Field(
        ...,
        validation_alias=AliasChoices("kind", "type"),
        description="Ledger kind (deposit, withdraw, dividend, fee, buy, sell, correction, manual)",
    )
    exclude_from_return: bool = Field(
        default=False,
        validation_alias=AliasChoices("exclude_from_return", "excludeFromReturn", "excludeFromTWR"),
    )
    is_reversal: bool = Field(
        default=False,
        validation_alias=AliasChoices("is_reversal", "isReversal", "storno"),
    )
    linked_position_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("linked_position_id", "linkedPositionId", "linkedTxnId"),
    )

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v: object) -> dt.date:
        parsed = parse_day(v)
        if parsed is None:
            raise ValueError(f"unparseable date: {v!r}")
        return parsed

    @field_validator("kind", mode="before")
    @classmethod
    def normalize_kind(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("amount")
    @classmethod
    def require_finite(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("amount must be a finite number")
        return v

    def to_event(self) -> CashflowEvent:
        """Convert to the internal dataclass."""
        return CashflowEvent(
            date=self.date,
            amount=self.amount,
            kind=self.kind,
            exclude_from_return=self.exclude_from_return,
            is_reversal=self.is_reversal,
            linked_position_id=self.linked_position_id,
        )
