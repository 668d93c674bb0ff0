# twr_engine/services/aggregation/aggregator.py
"""
Multi-Entity Aggregator.

Combines several portfolios into one "all portfolios" view. Each portfolio
reports independently and at its own pace; every report replaces that
portfolio's slot and triggers a full re-sum.

    slots: {entity_key -> EntitySnapshot}
    update(key, snapshot):  replace slot + re-sum   (one critical section)
    combined():             latest CombinedSnapshot  (never a partial sum)

Combination rules:
    - Valuation: per-day sum over the union of days; on a day an entity does
      not report, its last known value is carried forward (0 before its
      first point)
    - Cashflows and lots: concatenated
    - An entity that never reported contributes nothing

The unnamed root portfolio lives under ROOT_ENTITY_KEY; passing None as the
key selects it.

Thread Safety:
    One threading.Lock guards the slots and the published snapshot, so two
    concurrent updates cannot interleave their re-sums. Readers get an
    immutable CombinedSnapshot and never block on the calculation layer.
"""

import logging
import threading
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from twr_engine.services.aggregation.types import CombinedSnapshot, EntitySnapshot
from twr_engine.services.constants import ROOT_ENTITY_KEY, ZERO
from twr_engine.services.exceptions import EntityNotFoundError
from twr_engine.services.valuation.types import ValuationPoint

logger = logging.getLogger(__name__)


def _resolve_key(entity_key: str | None) -> str:
    return ROOT_ENTITY_KEY if entity_key is None or entity_key == "" else entity_key


def _carried_values(points: Iterable[ValuationPoint], days: list[date]) -> list[Decimal]:
    """
    One entity's value on each of ``days``, carrying its last known value.

    Days before the entity's first point are 0.
    """
    ordered = sorted(points, key=lambda p: p.date)
    values = []
    cursor = 0
    last = ZERO
    for day in days:
        while cursor < len(ordered) and ordered[cursor].date <= day:
            last = ordered[cursor].value
            cursor += 1
        values.append(last)
    return values


def combine_snapshots(
        slots: dict[str, EntitySnapshot],
        version: int,
        pending: Iterable[str] = (),
) -> CombinedSnapshot:
    """
    Sum entity snapshots into one CombinedSnapshot.

    Pure function; the aggregator calls it under its lock.

    Example:
        A reports 1000 on Jan 1..3, B reports 500 on Jan 2 only
        -> 1000, 1500, 1500
    """
    days = sorted({point.date for snapshot in slots.values() for point in snapshot.valuation})
    totals = [ZERO] * len(days)
    cashflows = []
    positions = []

    for key in sorted(slots):
        snapshot = slots[key]
        for i, value in enumerate(_carried_values(snapshot.valuation, days)):
            totals[i] += value
        cashflows.extend(snapshot.cashflows)
        positions.extend(snapshot.positions)

    return CombinedSnapshot(
        version=version,
        valuation=tuple(ValuationPoint(date=day, value=total) for day, total in zip(days, totals)),
        cashflows=tuple(sorted(cashflows, key=lambda e: e.date)),
        positions=tuple(positions),
        entity_keys=tuple(sorted(slots)),
        pending_entities=tuple(sorted(pending)),
    )


class MultiEntityAggregator:
    """
    Thread-safe keyed map of entity snapshots with an atomically published sum.

    Attributes:
        _slots: entity_key -> latest EntitySnapshot
        _expected: Keys registered up front (reported as pending until updated)
        _combined: Last published CombinedSnapshot
        _lock: Guards all of the above
    """

    def __init__(self) -> None:
        self._slots: dict[str, EntitySnapshot] = {}
        self._expected: set[str] = set()
        self._combined = CombinedSnapshot()
        self._lock = threading.Lock()

    def register(self, entity_keys: Iterable[str | None]) -> CombinedSnapshot:
        """
        Declare the entities the combined view should wait for.

        Registered keys without a snapshot appear in ``pending_entities``.
        """
        with self._lock:
            self._expected.update(_resolve_key(k) for k in entity_keys)
            return self._publish()

    def update(self, entity_key: str | None, snapshot: EntitySnapshot) -> CombinedSnapshot:
        """
        Replace one entity's slot and re-sum.

        Args:
            entity_key: Entity identifier; None or "" selects the root slot
            snapshot: New state of the entity (copied)

        Returns:
            The newly published CombinedSnapshot
        """
        key = _resolve_key(entity_key)
        copied = EntitySnapshot(
            valuation=list(snapshot.valuation),
            cashflows=list(snapshot.cashflows),
            positions=list(snapshot.positions),
        )

        with self._lock:
            self._slots[key] = copied
            combined = self._publish()

        logger.info(
            f"Entity '{key}' updated: {len(copied.valuation)} valuation points, "
            f"{len(copied.cashflows)} cashflows (version {combined.version})"
        )
        return combined

    def remove(self, entity_key: str | None) -> CombinedSnapshot:
        """
        Drop an entity (deleted upstream) and re-sum.

        Raises:
            EntityNotFoundError: If the entity has no slot and is not registered
        """
        key = _resolve_key(entity_key)

        with self._lock:
            if key not in self._slots and key not in self._expected:
                raise EntityNotFoundError(key)
            self._slots.pop(key, None)
            self._expected.discard(key)
            combined = self._publish()

        logger.info(f"Entity '{key}' removed (version {combined.version})")
        return combined

    def combined(self) -> CombinedSnapshot:
        """Latest fully computed combined snapshot."""
        with self._lock:
            return self._combined

    def get(self, entity_key: str | None) -> EntitySnapshot:
        """
        Current snapshot of one entity.

        Raises:
            EntityNotFoundError: If the entity never reported
        """
        key = _resolve_key(entity_key)
        with self._lock:
            if key not in self._slots:
                raise EntityNotFoundError(key)
            return self._slots[key]

    def clear(self) -> None:
        """Drop every slot and registration."""
        with self._lock:
            self._slots.clear()
            self._expected.clear()
            self._publish()

    def _publish(self) -> CombinedSnapshot:
        # Caller holds self._lock
        pending = self._expected - self._slots.keys()
        self._combined = combine_snapshots(self._slots, self._combined.version + 1, pending)
        return self._combined
