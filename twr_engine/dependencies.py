# twr_engine/dependencies.py
"""
Dependency injection for FastAPI routers.

Process-wide singletons, created lazily on first use:
- AnalyticsService: stateless orchestrator (no providers wired; the HTTP
  layer passes snapshots in the request body)
- MultiEntityAggregator: the one piece of shared mutable state, so every
  request must see the same instance

Tests replace these with app.dependency_overrides.

Usage in routers:
    from twr_engine.dependencies import get_aggregator

    @router.get("/combined")
    def combined(aggregator: MultiEntityAggregator = Depends(get_aggregator)):
        ...
"""

import logging
from functools import lru_cache

from twr_engine.services.aggregation.aggregator import MultiEntityAggregator
from twr_engine.services.analytics.service import AnalyticsService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_analytics_service() -> AnalyticsService:
    """Get the singleton AnalyticsService instance."""
    logger.debug("Initializing singleton AnalyticsService")
    return AnalyticsService()


@lru_cache(maxsize=1)
def get_aggregator() -> MultiEntityAggregator:
    """
    Get the singleton MultiEntityAggregator instance.

    All entity updates must land in the same aggregator for the combined
    view to be consistent.
    """
    logger.debug("Initializing singleton MultiEntityAggregator")
    return MultiEntityAggregator()
