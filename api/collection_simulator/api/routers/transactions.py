"""Router for transaction endpoints."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from collection_simulator.api.dependencies import get_transaction_service
from collection_simulator.api.models import (
    Pagination,
    TransactionCreateRequest,
    TransactionDeleteResponse,
    TransactionListResponse,
    TransactionResponse,
    TransactionSimulateRequest,
    TransactionSimulateResponse,
    TransactionStatsResponse,
    TransactionUpdateRequest,
)
from collection_simulator.api.services import TransactionRejectedError, TransactionService
from collection_simulator.persistence import (
    CollectionPointNotFoundError,
    TransactionNotFoundError,
    TransactionOutcome,
)

router = APIRouter(prefix="/api/transactions", tags=["transactions"])


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    point_id: str | None = Query(None, description="Only this collection point"),
    outcome: TransactionOutcome | None = Query(None, description="Filter by outcome"),
    start: datetime | None = Query(None, description="Earliest occurred_at (UTC)"),
    end: datetime | None = Query(None, description="Latest occurred_at (UTC)"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionListResponse:
    """List transactions across all points, newest first."""
    try:
        transactions, total = await service.list_transactions(
            point_id, outcome, start, end, page, limit
        )
        return TransactionListResponse(
            transactions=[TransactionResponse.model_validate(t) for t in transactions],
            pagination=Pagination.build(page, limit, len(transactions), total),
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.get("/stats", response_model=TransactionStatsResponse)
async def get_transaction_stats(
    point_id: str | None = Query(None, description="Only this collection point"),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionStatsResponse:
    """Totals, success rate and per-outcome breakdown."""
    try:
        return TransactionStatsResponse(**await service.stats(point_id))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.post("", response_model=TransactionResponse, status_code=201)
async def create_transaction(
    request: TransactionCreateRequest,
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    """Record a transaction against an Active collection point."""
    try:
        transaction = await service.create_transaction(request.model_dump())
        return TransactionResponse.model_validate(transaction)
    except CollectionPointNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except TransactionRejectedError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.post("/simulate", response_model=TransactionSimulateResponse, status_code=201)
async def simulate_transactions(
    request: TransactionSimulateRequest,
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionSimulateResponse:
    """Generate ``count`` transactions for a point right away."""
    try:
        created = await service.simulate(request.point_id, request.count)
        return TransactionSimulateResponse(
            point_id=request.point_id,
            transactions=[TransactionResponse.model_validate(t) for t in created],
            message=f"{len(created)} transaction(s) simulated for {request.point_id}",
        )
    except CollectionPointNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except TransactionRejectedError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.get("/{payment_id}", response_model=TransactionResponse)
async def get_transaction(
    payment_id: str,
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    try:
        return TransactionResponse.model_validate(await service.get_transaction(payment_id))
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.put("/{payment_id}", response_model=TransactionResponse)
async def update_transaction(
    payment_id: str,
    request: TransactionUpdateRequest,
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionResponse:
    """Change a transaction's outcome."""
    try:
        updated = await service.update_outcome(payment_id, request.outcome)
        return TransactionResponse.model_validate(updated)
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.delete("/{payment_id}", response_model=TransactionDeleteResponse)
async def delete_transaction(
    payment_id: str,
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionDeleteResponse:
    try:
        await service.delete_transaction(payment_id)
        return TransactionDeleteResponse(
            payment_id=payment_id, message=f"Transaction {payment_id} deleted"
        )
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e
