# twr_engine/routers/__init__.py
"""
API routers for the TWR engine.

Each router handles a specific resource:
- analytics: Performance report for a snapshot
- entities: Multi-entity aggregation
"""

from twr_engine.routers.analytics import router as analytics_router
from twr_engine.routers.entities import router as entities_router

__all__ = [
    "analytics_router",
    "entities_router",
]
