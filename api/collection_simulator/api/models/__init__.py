"""Pydantic models for API request/response schemas."""

from .points import (
    POINT_ID_PATTERN,
    PointCreateRequest,
    PointDeleteResponse,
    PointDetailResponse,
    PointListResponse,
    PointResponse,
    PointStatusResponse,
    PointUpdateRequest,
)
from .simulation import (
    SimulationActionResponse,
    SimulationPointState,
    SimulationStatusResponse,
    SimulationToggleResponse,
    StopAllResponse,
)
from .transactions import (
    OutcomeBreakdown,
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

__all__ = [
    # Points
    "POINT_ID_PATTERN",
    "PointCreateRequest",
    "PointDeleteResponse",
    "PointDetailResponse",
    "PointListResponse",
    "PointResponse",
    "PointStatusResponse",
    "PointUpdateRequest",
    # Simulation
    "SimulationActionResponse",
    "SimulationPointState",
    "SimulationStatusResponse",
    "SimulationToggleResponse",
    "StopAllResponse",
    # Transactions
    "OutcomeBreakdown",
    "Pagination",
    "TransactionCreateRequest",
    "TransactionDeleteResponse",
    "TransactionListResponse",
    "TransactionResponse",
    "TransactionSimulateRequest",
    "TransactionSimulateResponse",
    "TransactionStatsResponse",
    "TransactionUpdateRequest",
]
