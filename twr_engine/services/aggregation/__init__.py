# twr_engine/services/aggregation/__init__.py
"""
Multi-Entity Aggregator package.

Usage:
    from twr_engine.services.aggregation import MultiEntityAggregator, EntitySnapshot

    aggregator = MultiEntityAggregator()
    aggregator.update("ike", EntitySnapshot(valuation=values, cashflows=flows))
    combined = aggregator.combined()
"""

from twr_engine.services.aggregation.types import CombinedSnapshot, EntitySnapshot
from twr_engine.services.aggregation.aggregator import (
    MultiEntityAggregator,
    combine_snapshots,
)

__all__ = [
    "CombinedSnapshot",
    "EntitySnapshot",
    "MultiEntityAggregator",
    "combine_snapshots",
]
