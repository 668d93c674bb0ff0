# twr_engine/services/cashflows/classifier.py
"""
Cashflow Classifier & Axis Snapper.

Pipeline for the TWR input:

    raw rows ──parse_cashflow_rows──► CashflowEvent[]
             ──classify_cashflows───► external / internal (excluded + reversals dropped)
             ──sum_external_by_day──► {day: amount}
             ──snap_to_axis─────────► {axis day: amount}

Snapping rule (all flows are end-of-day):
    - A flow on an axis day stays there
    - A flow on a day missing from the axis (weekend, holiday, before the
      axis start) moves FORWARD to the first axis day >= its date
    - A flow after the last axis day is dropped

Moving a Saturday deposit to Monday instead of Friday keeps it out of the
Friday return, where it would show up as a gain.
"""

import logging
from bisect import bisect_left
from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from twr_engine.schemas.cashflows import CashflowRowSchema
from twr_engine.services.cashflows.types import CashflowEvent, ClassifiedCashflows
from twr_engine.services.constants import ZERO

logger = logging.getLogger(__name__)


# =============================================================================
# PARSING
# =============================================================================

def parse_cashflow_rows(rows: Iterable[Mapping[str, Any]]) -> list[CashflowEvent]:
    """
    Validate raw ledger rows one by one.

    Rows with a non-finite amount, an unparseable date or an unknown kind are
    logged and skipped; the remaining rows are returned in input order.

    Args:
        rows: Mappings such as {"date": "2024-01-05", "amount": "500", "type": "deposit"}

    Returns:
        Parsed events
    """
    events: list[CashflowEvent] = []
    skipped = 0

    for index, row in enumerate(rows):
        try:
            events.append(CashflowRowSchema.model_validate(row).to_event())
        except PydanticValidationError as e:
            skipped += 1
            fields = sorted({".".join(str(loc) for loc in err["loc"]) for err in e.errors()})
            logger.warning(
                f"Skipping malformed cashflow row {index}: invalid {', '.join(fields)}",
                extra={"row_index": index},
            )

    if skipped:
        logger.info(f"Parsed {len(events)} cashflow rows, skipped {skipped}")

    return events


# =============================================================================
# CLASSIFICATION
# =============================================================================

def classify_cashflows(events: Iterable[CashflowEvent]) -> ClassifiedCashflows:
    """
    Drop excluded/reversal entries and split the rest by kind.

    Exclusion wins over every other flag: an excluded deposit never reaches
    the external list.
    """
    result = ClassifiedCashflows()

    for event in events:
        if not event.counts_for_return:
            result.dropped += 1
            continue
        if event.kind.is_external:
            result.external.append(event)
        else:
            result.internal.append(event)

    return result


def _sum_by_day(events: Iterable[CashflowEvent]) -> dict[date, Decimal]:
    totals: dict[date, Decimal] = {}
    for event in events:
        amount = event.signed_amount
        if amount == ZERO:
            continue
        totals[event.date] = totals.get(event.date, ZERO) + amount
    return totals


def sum_external_by_day(events: Iterable[CashflowEvent]) -> dict[date, Decimal]:
    """
    Net external amounts per calendar day.

    Internal, excluded and reversal entries are ignored. Days whose flows
    net to exactly zero keep a zero entry; zero-amount events are skipped.
    """
    return _sum_by_day(classify_cashflows(events).external)


def sum_internal_by_day(events: Iterable[CashflowEvent]) -> dict[date, Decimal]:
    """Net internal amounts per calendar day (dividends, fees, buys, sells)."""
    return _sum_by_day(classify_cashflows(events).internal)


def sum_counted_by_day(events: Iterable[CashflowEvent]) -> dict[date, Decimal]:
    """Net external plus internal amounts per calendar day (every counted entry)."""
    classified = classify_cashflows(events)
    return _sum_by_day([*classified.external, *classified.internal])


# =============================================================================
# AXIS SNAPPING
# =============================================================================

def snap_to_axis(
        cash_map: Mapping[date, Decimal],
        axis: list[date],
) -> dict[date, Decimal]:
    """
    Move each flow to the first axis day on or after its date.

    Args:
        cash_map: day -> amount, any days
        axis: Ordered axis days

    Returns:
        axis day -> amount; keys are a subset of the axis, missing days are zero
    """
    snapped: dict[date, Decimal] = {}
    if not axis:
        return snapped

    for day, amount in cash_map.items():
        if amount == ZERO:
            continue

        idx = bisect_left(axis, day)
        if idx >= len(axis):
            logger.debug(f"Dropping cashflow {amount} on {day}: after axis end {axis[-1]}")
            continue

        target = axis[idx]
        if target != day:
            logger.debug(f"Snapping cashflow {amount} from {day} to {target}")
        snapped[target] = snapped.get(target, ZERO) + amount

    return snapped


def cashflow_on(cash_map: Mapping[date, Decimal], day: date) -> Decimal:
    """Flow on a day, zero if none."""
    return cash_map.get(day, ZERO)


def external_cashflows_for_axis(
        events: Iterable[CashflowEvent],
        axis: list[date],
        since: date | None = None,
) -> dict[date, Decimal]:
    """
    Full TWR cashflow pipeline: classify, sum per day and snap.

    Args:
        events: Ledger entries
        axis: Ordered axis days
        since: Ignore flows dated before this day (range TWR); when None,
            flows before the axis start snap onto the first axis day

    Returns:
        axis day -> net external amount
    """
    daily = sum_external_by_day(events)
    if since is not None:
        daily = {day: amount for day, amount in daily.items() if day >= since}
    return snap_to_axis(daily, axis)
