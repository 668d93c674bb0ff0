# twr_engine/services/cashflows/__init__.py
"""
Cashflow Classifier & Axis Snapper package.

Usage:
    from twr_engine.services.cashflows import CashflowEvent, CashflowKind
    from twr_engine.services.cashflows.classifier import (
        parse_cashflow_rows,
        external_cashflows_for_axis,
    )

    events = parse_cashflow_rows(raw_rows)
    cf = external_cashflows_for_axis(events, axis)

Architecture:
    cashflows/
    ├── __init__.py      # Type exports only (the row schema imports these)
    ├── types.py         # CashflowKind partitions, CashflowEvent
    └── classifier.py    # Parsing, classification, per-day sums, axis snapping
"""

from twr_engine.services.cashflows.types import (
    EXTERNAL_KINDS,
    INTERNAL_KINDS,
    CashflowEvent,
    CashflowKind,
    ClassifiedCashflows,
)

__all__ = [
    "EXTERNAL_KINDS",
    "INTERNAL_KINDS",
    "CashflowEvent",
    "CashflowKind",
    "ClassifiedCashflows",
]
