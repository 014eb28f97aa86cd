"""
Pydantic Models for Persistence Layer

These models are the single source of truth for database schema.
All DDL generation is derived from these models.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

VPA_PATTERN = r"^[a-zA-Z0-9.\-_]{2,256}@[a-zA-Z][a-zA-Z0-9.\-_]{2,64}$"
PHONE_PATTERN = r"^[6-9]\d{9}$"
REFERENCE_PATTERN = r"^[A-Za-z0-9]{12}$"

MAX_AMOUNT_LIMIT = 100_000


def utc_now() -> datetime:
    """Current time as naive UTC (DuckDB TIMESTAMP has no zone)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ============================================================================
# Enums
# ============================================================================


class PointStatus(str, Enum):
    """Collection point status."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"


class PointCategory(str, Enum):
    """Collection point business category."""

    RETAIL = "Retail"
    RENTAL = "Rental"
    EDUCATION = "Education"
    CUSTOM = "Custom"


class TransactionOutcome(str, Enum):
    """Transaction outcome enumeration."""

    SUCCESS = "Success"
    FAILED = "Failed"
    PENDING = "Pending"


class PaymentApp(str, Enum):
    """UPI application the payer used."""

    GPAY = "GPay"
    PHONEPE = "PhonePe"
    PAYTM = "Paytm"
    BHIM = "BHIM"
    AMAZONPAY = "AmazonPay"
    WHATSAPP = "WhatsApp"
    OTHER = "Other"


# ============================================================================
# Collection Point Record
# ============================================================================


class CollectionPointRecord(BaseModel):
    """Collection point ("QR code") record for persistence.

    Invariant: an Inactive point never has simulation enabled. The
    validator below enforces it for every record built through this model,
    which covers all store write paths.
    """

    # No secondary indexes: rows here are updated in place, and DuckDB turns
    # updates of indexed columns into delete+insert.
    model_config = ConfigDict(  # type: ignore[typeddict-unknown-key]
        table_name="collection_points",
        primary_key=["point_id"],
    )

    # Identity
    point_id: str = Field(..., min_length=1, description="Unique collection point id")
    vpa: str = Field(..., pattern=VPA_PATTERN, description="UPI virtual payment address")

    # Descriptive
    reference_name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=255)
    category: PointCategory = Field(PointCategory.CUSTOM)
    notes: str | None = Field(None, max_length=500)

    # Limits
    max_amount: int | None = Field(
        None, ge=0, le=MAX_AMOUNT_LIMIT, description="Ceiling for generated amounts"
    )

    # State
    status: PointStatus = Field(PointStatus.ACTIVE)
    simulation_enabled: bool = Field(False, description="Operator's declared intent")

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("simulation_enabled")
    @classmethod
    def inactive_points_never_simulate(cls, v: bool, info) -> bool:
        if info.data.get("status") == PointStatus.INACTIVE:
            return False
        return v

    @property
    def is_eligible(self) -> bool:
        """Whether a simulation may run for this point."""
        return self.status == PointStatus.ACTIVE and self.simulation_enabled


# ============================================================================
# Transaction Record
# ============================================================================


class TransactionRecord(BaseModel):
    """Synthetic payment transaction against a collection point."""

    model_config = ConfigDict(  # type: ignore[typeddict-unknown-key]
        table_name="transactions",
        primary_key=["payment_id"],
        unique=[["reference"]],
        indexes=[
            ("idx_tx_point_time", ["point_id", "occurred_at"]),
            ("idx_tx_outcome_time", ["outcome", "occurred_at"]),
        ],
    )

    payment_id: str = Field(..., description="Unique transaction identifier")
    point_id: str = Field(..., description="Foreign key to collection_points")

    amount: int = Field(..., gt=0, le=MAX_AMOUNT_LIMIT, description="Amount in rupees")
    outcome: TransactionOutcome = Field(..., description="Settlement outcome")
    reference: str = Field(..., pattern=REFERENCE_PATTERN, description="12-char UTR")
    occurred_at: datetime = Field(default_factory=utc_now)

    # Payer
    payer_name: str = Field(..., min_length=1, max_length=100)
    payer_phone: str = Field(..., pattern=PHONE_PATTERN)
    payment_app: PaymentApp = Field(...)


ALL_MODELS: list[type[BaseModel]] = [CollectionPointRecord, TransactionRecord]
