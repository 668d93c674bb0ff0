# twr_engine/routers/entities.py
"""
Multi-entity (all portfolios) endpoints.

- PUT    /entities/{entity_key}/snapshot  - Replace one entity's snapshot
- DELETE /entities/{entity_key}           - Remove an entity
- GET    /entities/combined               - Current combined view
- GET    /entities/combined/performance   - Report over the combined view

The root (unnamed) portfolio is addressed with the key "__root__".
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status

from twr_engine.dependencies import get_aggregator, get_analytics_service
from twr_engine.routers.analytics import build_performance_response
from twr_engine.schemas.analytics import PerformanceResponse, ValuePointResponse
from twr_engine.schemas.entities import CombinedResponse, EntitySnapshotRequest
from twr_engine.services.aggregation.aggregator import MultiEntityAggregator
from twr_engine.services.aggregation.types import CombinedSnapshot, EntitySnapshot
from twr_engine.services.analytics.service import AnalyticsService
from twr_engine.services.cashflows.classifier import parse_cashflow_rows
from twr_engine.services.valuation.types import Position, ValuationPoint

router = APIRouter(
    prefix="/entities",
    tags=["Entities"],
)


def _combined_response(combined: CombinedSnapshot) -> CombinedResponse:
    return CombinedResponse(
        version=combined.version,
        entity_keys=list(combined.entity_keys),
        pending_entities=list(combined.pending_entities),
        cashflow_count=len(combined.cashflows),
        valuation=[ValuePointResponse(date=p.date, value=str(p.value)) for p in combined.valuation],
    )


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("/combined", response_model=CombinedResponse)
def get_combined(
        aggregator: MultiEntityAggregator = Depends(get_aggregator),
) -> CombinedResponse:
    """Latest combined valuation over all entities."""
    return _combined_response(aggregator.combined())


@router.get("/combined/performance", response_model=PerformanceResponse)
def get_combined_performance(
        range_key: str = Query("1Y", alias="range", description="1M, 3M, 6M, YTD, 1Y, 5Y or MAX"),
        today: date | None = Query(None, description="Last axis day (default: today)"),
        aggregator: MultiEntityAggregator = Depends(get_aggregator),
        service: AnalyticsService = Depends(get_analytics_service),
) -> PerformanceResponse:
    """Performance report over all entities combined."""
    report = service.analyze_combined(aggregator, range_key, today or date.today())
    return build_performance_response(report)


@router.put("/{entity_key}/snapshot", response_model=CombinedResponse)
def put_entity_snapshot(
        entity_key: str,
        request: EntitySnapshotRequest,
        aggregator: MultiEntityAggregator = Depends(get_aggregator),
) -> CombinedResponse:
    """Replace one entity's snapshot and return the new combined view."""
    snapshot = EntitySnapshot(
        valuation=[ValuationPoint(date=p.date, value=p.value) for p in request.valuation],
        cashflows=parse_cashflow_rows(request.cashflows),
        positions=[
            Position(
                instrument_id=p.instrument_id,
                quantity=p.quantity,
                unit_cost=p.unit_cost,
                acquired_on=p.acquired_on,
            )
            for p in request.positions
        ],
    )
    return _combined_response(aggregator.update(entity_key, snapshot))


@router.delete(
    "/{entity_key}",
    response_model=CombinedResponse,
    status_code=status.HTTP_200_OK,
)
def delete_entity(
        entity_key: str,
        aggregator: MultiEntityAggregator = Depends(get_aggregator),
) -> CombinedResponse:
    """
    Remove an entity that was deleted upstream.

    **Errors:**
    - 404: Entity never reported
    """
    return _combined_response(aggregator.remove(entity_key))
