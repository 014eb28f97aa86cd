"""Router for collection point endpoints.

Handles point CRUD, status and simulation toggles, and a point's
transactions.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from collection_simulator.api.dependencies import (
    get_point_service,
    get_simulation_service,
    get_transaction_service,
)
from collection_simulator.api.models import (
    Pagination,
    PointCreateRequest,
    PointDeleteResponse,
    PointDetailResponse,
    PointListResponse,
    PointResponse,
    PointStatusResponse,
    PointUpdateRequest,
    SimulationToggleResponse,
    TransactionListResponse,
    TransactionResponse,
    TransactionStatsResponse,
)
from collection_simulator.api.services import (
    PointIdUnavailableError,
    PointService,
    SimulationService,
    SimulationStateError,
    TransactionService,
)
from collection_simulator.persistence import (
    CollectionPointNotFoundError,
    CollectionPointRecord,
    DuplicateCollectionPointError,
    PointCategory,
    PointStatus,
    TransactionOutcome,
)

router = APIRouter(prefix="/api/qr", tags=["collection-points"])


def _point_response(point: CollectionPointRecord, service: PointService) -> PointResponse:
    return PointResponse.model_validate(
        {**point.model_dump(), "running": service.is_running(point.point_id)}
    )


@router.get("", response_model=PointListResponse)
async def list_points(
    status: PointStatus | None = Query(None),
    category: PointCategory | None = Query(None),
    search: str | None = Query(None, description="Matches id, reference name or VPA"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: PointService = Depends(get_point_service),
) -> PointListResponse:
    """List collection points, newest first."""
    try:
        points, total = await service.list_points(status, category, search, page, limit)
        return PointListResponse(
            points=[_point_response(p, service) for p in points],
            pagination=Pagination.build(page, limit, len(points), total),
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.post("", response_model=PointResponse, status_code=201)
async def create_point(
    request: PointCreateRequest,
    service: PointService = Depends(get_point_service),
) -> PointResponse:
    """Create a collection point.

    Uses the client's ``point_id`` when given, otherwise generates one.
    New points are Active with simulation disabled.
    """
    try:
        point = await service.create_point(request.model_dump(exclude_none=True))
        return _point_response(point, service)
    except DuplicateCollectionPointError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except PointIdUnavailableError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.get("/{point_id}", response_model=PointDetailResponse)
async def get_point(
    point_id: str,
    service: PointService = Depends(get_point_service),
) -> PointDetailResponse:
    """Get a collection point with its transaction stats."""
    try:
        point, stats = await service.get_point_with_stats(point_id)
        return PointDetailResponse(
            point=_point_response(point, service),
            stats=TransactionStatsResponse(**stats),
        )
    except CollectionPointNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.put("/{point_id}", response_model=PointResponse)
async def update_point(
    point_id: str,
    request: PointUpdateRequest,
    service: PointService = Depends(get_point_service),
) -> PointResponse:
    """Edit a collection point's descriptive fields."""
    try:
        point = await service.update_point(point_id, request.model_dump(exclude_unset=True))
        return _point_response(point, service)
    except CollectionPointNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.delete("/{point_id}", response_model=PointDeleteResponse)
async def delete_point(
    point_id: str,
    service: PointService = Depends(get_point_service),
) -> PointDeleteResponse:
    """Stop the point's simulation, then delete it with its transactions."""
    try:
        removed = await service.delete_point(point_id)
        return PointDeleteResponse(point_id=point_id, deleted_transactions=removed)
    except CollectionPointNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.patch("/{point_id}/status", response_model=PointStatusResponse)
async def toggle_point_status(
    point_id: str,
    service: PointService = Depends(get_point_service),
) -> PointStatusResponse:
    """Flip Active/Inactive; going Inactive stops the simulation."""
    try:
        point = await service.toggle_status(point_id)
        return PointStatusResponse(
            point=_point_response(point, service),
            message=f"Collection point status changed to {point.status.value}",
        )
    except CollectionPointNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.post("/{point_id}/simulation", response_model=SimulationToggleResponse)
async def toggle_point_simulation(
    point_id: str,
    service: SimulationService = Depends(get_simulation_service),
) -> SimulationToggleResponse:
    try:
        result = await service.toggle(point_id)
        return SimulationToggleResponse(
            point_id=point_id, active=result.active, message=result.message
        )
    except CollectionPointNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except SimulationStateError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.get("/{point_id}/transactions", response_model=TransactionListResponse)
async def list_point_transactions(
    point_id: str,
    outcome: TransactionOutcome | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionListResponse:
    try:
        transactions, total = await service.list_point_transactions(
            point_id, outcome, page, limit
        )
        return TransactionListResponse(
            transactions=[TransactionResponse.model_validate(t) for t in transactions],
            pagination=Pagination.build(page, limit, len(transactions), total),
        )
    except CollectionPointNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e
