# twr_engine/services/valuation/cash_balance.py
"""
Cash-balance reconstruction.

Only the CURRENT cash balance is known. The daily history is rebuilt
backward from every counted ledger entry, external (deposits, withdrawals)
and internal (dividends, fees, buys, sells):

    initial = end_balance - Σ counted amounts within the axis
    cash[t] = cash[t-1] + flow[t]

Flows are snapped onto the axis the same way as the TWR cashflows, so a
deposit held as cash raises the valuation on the same day it is netted out
of the return. Flows dated before the axis start are already part of the
initial balance.

Known limitation: if the ledger is missing history (e.g. trades imported
without their cash legs), the gap is absorbed silently into the initial
balance. A negative initial balance is the visible symptom, so it is logged
and reported as a warning.
"""

import logging
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from twr_engine.services.cashflows.classifier import snap_to_axis, sum_counted_by_day
from twr_engine.services.cashflows.types import CashflowEvent
from twr_engine.services.constants import ZERO
from twr_engine.services.valuation.types import CashBalanceSeries, ValuationPoint

logger = logging.getLogger(__name__)


def reconstruct_cash_balance(
        events: Iterable[CashflowEvent],
        axis: list[date],
        end_balance: Decimal,
) -> CashBalanceSeries:
    """
    Rebuild the daily cash balance that ends at ``end_balance``.

    Args:
        events: Ledger entries (excluded and reversal entries are ignored)
        axis: Ordered axis days
        end_balance: Cash balance at the end of the last axis day

    Returns:
        CashBalanceSeries with one point per axis day

    Example:
        Axis Jan 1..3, dividend +10 on Jan 2, deposit 50 on Jan 3, end balance 160
        -> initial 100, points [100, 110, 160]
    """
    if not axis:
        return CashBalanceSeries(initial_balance=end_balance)

    in_range = {
        day: amount
        for day, amount in sum_counted_by_day(events).items()
        if day >= axis[0]
    }
    flows = snap_to_axis(in_range, axis)

    initial = end_balance - sum(flows.values(), ZERO)
    result = CashBalanceSeries(initial_balance=initial)

    if initial < ZERO:
        message = (
            f"Reconstructed opening cash balance is negative ({initial}); "
            f"the ledger is probably missing history before {axis[0]}"
        )
        logger.warning(message)
        result.warnings.append(message)

    balance = initial
    for day in axis:
        balance += flows.get(day, ZERO)
        result.points.append(ValuationPoint(date=day, value=balance))

    return result


def add_cash_to_valuation(
        valuation: list[ValuationPoint],
        cash: list[ValuationPoint],
) -> list[ValuationPoint]:
    """
    Add the cash series to the instrument valuation, day by day.

    Days present only in ``valuation`` keep their value.
    """
    cash_by_day = {point.date: point.value for point in cash}
    return [
        ValuationPoint(date=point.date, value=point.value + cash_by_day.get(point.date, ZERO))
        for point in valuation
    ]
