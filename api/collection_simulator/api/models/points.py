"""Pydantic models for collection point endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from collection_simulator.persistence.models import (
    MAX_AMOUNT_LIMIT,
    VPA_PATTERN,
    PointCategory,
    PointStatus,
)

from .transactions import Pagination, TransactionStatsResponse

POINT_ID_PATTERN = r"^[A-Z0-9]{5}$"


class PointCreateRequest(BaseModel):
    """Request model for creating a collection point.

    ``point_id`` is optional; a free id is generated when it is omitted.
    """

    model_config = ConfigDict(extra="forbid")

    point_id: str | None = Field(
        None,
        pattern=POINT_ID_PATTERN,
        description="Five uppercase letters or digits",
    )
    vpa: str = Field(..., pattern=VPA_PATTERN, description="UPI virtual payment address")
    reference_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=255)
    category: PointCategory = Field(PointCategory.CUSTOM)
    notes: str | None = Field(None, max_length=500)
    max_amount: int | None = Field(None, ge=0, le=MAX_AMOUNT_LIMIT)


class PointUpdateRequest(BaseModel):
    """Request model for editing a collection point. Omitted fields are kept."""

    model_config = ConfigDict(extra="forbid")

    vpa: str | None = Field(None, pattern=VPA_PATTERN)
    reference_name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=255)
    category: PointCategory | None = None
    notes: str | None = Field(None, max_length=500)
    max_amount: int | None = Field(None, ge=0, le=MAX_AMOUNT_LIMIT)


class PointResponse(BaseModel):
    """A collection point plus whether its simulation task is running."""

    model_config = ConfigDict(from_attributes=True)

    point_id: str
    vpa: str
    reference_name: str
    description: str | None
    category: PointCategory
    notes: str | None
    max_amount: int | None
    status: PointStatus
    simulation_enabled: bool
    running: bool = False
    created_at: datetime
    updated_at: datetime


class PointListResponse(BaseModel):
    """Response model for listing collection points."""

    points: list[PointResponse]
    pagination: Pagination


class PointDetailResponse(BaseModel):
    """Response model for a single point with its transaction stats."""

    point: PointResponse
    stats: TransactionStatsResponse


class PointStatusResponse(BaseModel):
    point: PointResponse
    message: str


class PointDeleteResponse(BaseModel):
    point_id: str
    deleted_transactions: int
    message: str = "Collection point deleted"
