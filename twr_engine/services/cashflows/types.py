# twr_engine/services/cashflows/types.py
"""
Data types for the Cashflow Classifier.

A ledger entry is a CashflowEvent. Its kind belongs to exactly one of two
fixed partitions:

    EXTERNAL (deposit, withdraw, correction, manual)
        Money crossing the investor boundary. Netted out of TWR.
    INTERNAL (dividend, fee, buy, sell)
        Moves between cash and assets inside the portfolio. Already reflected
        in the valuation; only used for the cash-balance reconstruction.

Amounts are signed in base currency. Kinds with a fixed direction (deposit,
withdraw, dividend, fee, buy, sell) have their sign normalized by
CashflowKind.signed(); correction and manual keep the sign they were given.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

logger = logging.getLogger(__name__)


class CashflowKind(str, Enum):
    """Closed set of ledger entry kinds."""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    DIVIDEND = "dividend"
    FEE = "fee"
    BUY = "buy"
    SELL = "sell"
    CORRECTION = "correction"
    MANUAL = "manual"

    @property
    def is_external(self) -> bool:
        """True if the kind crosses the investor boundary."""
        return self in EXTERNAL_KINDS

    def signed(self, amount: Decimal) -> Decimal:
        """
        Apply the kind's fixed direction to an amount.

        >>> CashflowKind.WITHDRAW.signed(Decimal("200"))
        Decimal('-200')
        >>> CashflowKind.CORRECTION.signed(Decimal("-5"))
        Decimal('-5')
        """
        direction = _DIRECTIONS.get(self)
        if direction is None:
            return amount
        if amount * direction < 0:
            logger.warning(f"Sign of {self.value} amount {amount} overridden to match its direction")
        return abs(amount) * direction


EXTERNAL_KINDS: frozenset[CashflowKind] = frozenset({
    CashflowKind.DEPOSIT,
    CashflowKind.WITHDRAW,
    CashflowKind.CORRECTION,
    CashflowKind.MANUAL,
})

INTERNAL_KINDS: frozenset[CashflowKind] = frozenset({
    CashflowKind.DIVIDEND,
    CashflowKind.FEE,
    CashflowKind.BUY,
    CashflowKind.SELL,
})

_DIRECTIONS: dict[CashflowKind, int] = {
    CashflowKind.DEPOSIT: 1,
    CashflowKind.WITHDRAW: -1,
    CashflowKind.DIVIDEND: 1,
    CashflowKind.FEE: -1,
    CashflowKind.BUY: -1,
    CashflowKind.SELL: 1,
}


@dataclass(frozen=True)
class CashflowEvent:
    """
    One ledger entry.

    Attributes:
        date: Calendar day of the movement (end-of-day semantics)
        amount: Signed amount in base currency
        kind: Ledger kind
        exclude_from_return: Entry must never affect TWR (wins over every other flag)
        is_reversal: Technical reversal/correction entry, also never affects TWR
        linked_position_id: Holding the entry was generated for, if any
    """
    date: date
    amount: Decimal
    kind: CashflowKind
    exclude_from_return: bool = False
    is_reversal: bool = False
    linked_position_id: str | None = None

    @property
    def counts_for_return(self) -> bool:
        """False for excluded or reversal entries."""
        return not (self.exclude_from_return or self.is_reversal)

    @property
    def signed_amount(self) -> Decimal:
        return self.kind.signed(self.amount)


@dataclass
class ClassifiedCashflows:
    """
    Ledger split into the two partitions, excluded and reversal entries removed.

    Attributes:
        external: deposit / withdraw / correction / manual
        internal: dividend / fee / buy / sell
        dropped: Number of entries removed by the exclusion flags
    """
    external: list[CashflowEvent] = field(default_factory=list)
    internal: list[CashflowEvent] = field(default_factory=list)
    dropped: int = 0
