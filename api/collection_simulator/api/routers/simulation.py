"""Router for simulation control endpoints.

Handles per-point toggle, start and stop, scheduler status and stop-all.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from collection_simulator.api.dependencies import get_simulation_service
from collection_simulator.api.models import (
    SimulationActionResponse,
    SimulationPointState,
    SimulationStatusResponse,
    SimulationToggleResponse,
    StopAllResponse,
)
from collection_simulator.api.services import SimulationService, SimulationStateError
from collection_simulator.persistence import CollectionPointNotFoundError

router = APIRouter(prefix="/api/simulation", tags=["simulation"])


@router.get("/status", response_model=SimulationStatusResponse)
async def get_simulation_status(
    service: SimulationService = Depends(get_simulation_service),
) -> SimulationStatusResponse:
    """Running simulations, plus stored flag vs. running state for every point."""
    try:
        status, points = await service.status()
        return SimulationStatusResponse(
            active_count=status.active_count,
            running_ids=status.running_ids,
            initialized=status.initialized,
            points=[SimulationPointState(**row) for row in points],
        )
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.post("/stop-all", response_model=StopAllResponse)
async def stop_all_simulations(
    service: SimulationService = Depends(get_simulation_service),
) -> StopAllResponse:
    """Clear every stored simulation flag and stop every running task."""
    try:
        stopped, cleared = await service.stop_all()
        return StopAllResponse(stopped=stopped, cleared=cleared)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.post("/{point_id}/toggle", response_model=SimulationToggleResponse)
async def toggle_simulation(
    point_id: str,
    service: SimulationService = Depends(get_simulation_service),
) -> SimulationToggleResponse:
    """Start the point's simulation if it is off, stop it if it is on."""
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


@router.post("/{point_id}/start", response_model=SimulationActionResponse)
async def start_simulation(
    point_id: str,
    service: SimulationService = Depends(get_simulation_service),
) -> SimulationActionResponse:
    try:
        await service.start(point_id)
        return SimulationActionResponse(
            point_id=point_id,
            running=service.scheduler.is_running(point_id),
            message=f"Simulation started for {point_id}",
        )
    except CollectionPointNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except SimulationStateError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e


@router.post("/{point_id}/stop", response_model=SimulationActionResponse)
async def stop_simulation(
    point_id: str,
    service: SimulationService = Depends(get_simulation_service),
) -> SimulationActionResponse:
    try:
        await service.stop(point_id)
        return SimulationActionResponse(
            point_id=point_id,
            running=service.scheduler.is_running(point_id),
            message=f"Simulation stopped for {point_id}",
        )
    except CollectionPointNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except SimulationStateError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Internal error: {e}") from e
