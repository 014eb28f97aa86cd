"""Pydantic schemas for configuration validation."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from collection_simulator.persistence.models import TransactionOutcome

DEFAULT_OUTCOME_WEIGHTS: dict[TransactionOutcome, float] = {
    TransactionOutcome.SUCCESS: 0.80,
    TransactionOutcome.FAILED: 0.15,
    TransactionOutcome.PENDING: 0.05,
}


# ============================================================================
# Scheduler
# ============================================================================

class SchedulerSettings(BaseModel):
    """Simulation scheduler and transaction generation parameters."""
    interval_seconds: float = Field(5.0, description="Seconds between ticks", gt=0)
    min_transactions_per_tick: int = Field(1, ge=1)
    max_transactions_per_tick: int = Field(3, ge=1)
    min_amount: int = Field(10, description="Smallest generated amount", gt=0)
    default_max_amount: int = Field(
        1000, description="Ceiling used when a point has no max_amount", gt=0
    )
    outcome_weights: dict[TransactionOutcome, float] = Field(
        default_factory=lambda: dict(DEFAULT_OUTCOME_WEIGHTS),
        description="Relative weight of each transaction outcome",
    )
    clear_flag_on_self_stop: bool = Field(
        True,
        description="Clear the stored simulation flag when a tick finds its point ineligible",
    )
    shutdown_timeout_seconds: float = Field(
        5.0, description="How long shutdown waits for in-flight ticks", ge=0
    )

    @field_validator("outcome_weights")
    @classmethod
    def weights_must_be_usable(
        cls, v: dict[TransactionOutcome, float]
    ) -> dict[TransactionOutcome, float]:
        """Validate weights are non-negative and not all zero."""
        if any(w < 0 for w in v.values()):
            raise ValueError("outcome weights must be non-negative")
        if not v or sum(v.values()) <= 0:
            raise ValueError("at least one outcome weight must be positive")
        return v

    @model_validator(mode="after")
    def validate_ranges(self) -> SchedulerSettings:
        """Validate per-tick bounds and amount bounds are ordered."""
        if self.min_transactions_per_tick > self.max_transactions_per_tick:
            raise ValueError(
                "min_transactions_per_tick must not exceed max_transactions_per_tick"
            )
        if self.default_max_amount < self.min_amount:
            raise ValueError("default_max_amount must be at least min_amount")
        return self


# ============================================================================
# Database / Server
# ============================================================================

class DatabaseSettings(BaseModel):
    """DuckDB location."""
    path: str = Field("collections.db", description="DuckDB file, or :memory:")


class ServerSettings(BaseModel):
    """HTTP server settings."""
    host: str = Field("127.0.0.1")
    port: int = Field(8000, ge=1, le=65535)
    log_level: str = Field("INFO")

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {v}")
        return level


# ============================================================================
# Top-level
# ============================================================================

class AppConfig(BaseModel):
    """Complete application configuration."""
    scheduler: SchedulerSettings = Field(default_factory=SchedulerSettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    @classmethod
    def from_dict(cls, config_dict: dict[str, Any]) -> AppConfig:
        """Build a validated config from a plain dictionary (e.g. parsed YAML)."""
        return cls.model_validate(config_dict)
