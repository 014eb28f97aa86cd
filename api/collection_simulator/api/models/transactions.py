"""Pydantic models for transaction endpoints."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from collection_simulator.persistence.models import (
    MAX_AMOUNT_LIMIT,
    PHONE_PATTERN,
    PaymentApp,
    TransactionOutcome,
)


class Pagination(BaseModel):
    """Page metadata shared by list responses."""

    page: int
    pages: int
    count: int
    total: int

    @classmethod
    def build(cls, page: int, limit: int, count: int, total: int) -> "Pagination":
        return cls(page=page, pages=-(-total // limit), count=count, total=total)


class TransactionResponse(BaseModel):
    """A single simulated transaction."""

    model_config = ConfigDict(from_attributes=True)

    payment_id: str
    point_id: str
    amount: int
    outcome: TransactionOutcome
    reference: str
    occurred_at: datetime
    payer_name: str
    payer_phone: str
    payment_app: PaymentApp


class TransactionListResponse(BaseModel):
    """Response model for listing transactions."""

    transactions: list[TransactionResponse]
    pagination: Pagination


class OutcomeBreakdown(BaseModel):
    outcome: TransactionOutcome
    count: int
    total_amount: int


class TransactionStatsResponse(BaseModel):
    """Totals and per-outcome breakdown."""

    total_transactions: int
    total_amount: int
    success_rate: float
    outcome_breakdown: list[OutcomeBreakdown]


class TransactionCreateRequest(BaseModel):
    """Request model for recording a transaction by hand."""

    model_config = ConfigDict(extra="forbid")

    point_id: str = Field(..., min_length=1)
    amount: int = Field(..., gt=0, le=MAX_AMOUNT_LIMIT, description="Amount in rupees")
    outcome: TransactionOutcome = Field(TransactionOutcome.PENDING)
    payer_name: str = Field(..., min_length=2, max_length=100)
    payer_phone: str = Field(..., pattern=PHONE_PATTERN, description="Indian mobile number")
    payment_app: PaymentApp


class TransactionUpdateRequest(BaseModel):
    """Only the outcome of a transaction can change."""

    model_config = ConfigDict(extra="forbid")

    outcome: TransactionOutcome


class TransactionSimulateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    point_id: str = Field(..., min_length=1)
    count: int = Field(1, ge=1, le=100)


class TransactionSimulateResponse(BaseModel):
    point_id: str
    transactions: list[TransactionResponse]
    message: str


class TransactionDeleteResponse(BaseModel):
    payment_id: str
    message: str
