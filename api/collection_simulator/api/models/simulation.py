"""Pydantic models for simulation control endpoints."""

from pydantic import BaseModel

from collection_simulator.persistence.models import PointStatus


class SimulationToggleResponse(BaseModel):
    """Response model for toggling a point's simulation."""

    point_id: str
    active: bool
    message: str


class SimulationActionResponse(BaseModel):
    """Response model for explicit start and stop."""

    point_id: str
    running: bool
    message: str


class SimulationPointState(BaseModel):
    """Stored flag next to the in-memory state for one point."""

    point_id: str
    reference_name: str
    status: PointStatus
    simulation_enabled: bool
    running: bool


class SimulationStatusResponse(BaseModel):
    """Response model for scheduler status."""

    active_count: int
    running_ids: list[str]
    initialized: bool
    points: list[SimulationPointState]


class StopAllResponse(BaseModel):
    stopped: int
    cleared: int
    message: str = "All simulations stopped"
