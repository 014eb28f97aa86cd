"""Service layer for simulation control.

Each operation persists ``simulation_enabled`` first and then updates the
scheduler, so a crash between the two steps is repaired by recovery on the
next start.
"""

from __future__ import annotations

import asyncio
from typing import Any

from collection_simulator.persistence import (
    CollectionPointRecord,
    DuckDBCollectionPointStore,
    PointStatus,
)
from collection_simulator.simulation import (
    SchedulerStatus,
    SimulationScheduler,
    ToggleResult,
)


class SimulationStateError(Exception):
    """Raised when a simulation request conflicts with the point's state."""

    def __init__(self, point_id: str, message: str) -> None:
        self.point_id = point_id
        super().__init__(message)


class SimulationService:
    """Start, stop and inspect per-point simulations."""

    def __init__(
        self, store: DuckDBCollectionPointStore, scheduler: SimulationScheduler
    ) -> None:
        self._store = store
        self._scheduler = scheduler

    @property
    def scheduler(self) -> SimulationScheduler:
        return self._scheduler

    async def toggle(self, point_id: str) -> ToggleResult:
        """Flip the point's simulation.

        Raises:
            CollectionPointNotFoundError: If the point does not exist
            SimulationStateError: If the point is Inactive
        """
        point = await asyncio.to_thread(self._store.get_point, point_id)
        if point.status != PointStatus.ACTIVE:
            raise SimulationStateError(
                point_id, "Cannot start simulation on inactive collection point"
            )
        return await self._scheduler.toggle(point_id)

    async def start(self, point_id: str) -> CollectionPointRecord:
        """Enable and start the point's simulation.

        Raises:
            CollectionPointNotFoundError: If the point does not exist
            SimulationStateError: If the point is Inactive or already running
        """
        point = await asyncio.to_thread(self._store.get_point, point_id)
        if point.status != PointStatus.ACTIVE:
            raise SimulationStateError(
                point_id, "Cannot start simulation on inactive collection point"
            )
        if point.simulation_enabled or self._scheduler.is_running(point_id):
            raise SimulationStateError(
                point_id, f"Simulation is already running for {point_id}"
            )

        updated = await asyncio.to_thread(self._store.set_simulation_enabled, point_id, True)
        self._scheduler.start(point_id)
        return updated

    async def stop(self, point_id: str) -> CollectionPointRecord:
        """Disable and stop the point's simulation.

        Raises:
            CollectionPointNotFoundError: If the point does not exist
            SimulationStateError: If no simulation is running for the point
        """
        point = await asyncio.to_thread(self._store.get_point, point_id)
        if not point.simulation_enabled and not self._scheduler.is_running(point_id):
            raise SimulationStateError(
                point_id, f"Simulation is not running for {point_id}"
            )

        updated = await asyncio.to_thread(self._store.set_simulation_enabled, point_id, False)
        self._scheduler.stop(point_id)
        return updated

    async def stop_all(self) -> tuple[int, int]:
        """Clear every stored flag, then stop every task.

        Returns:
            Tuple of (tasks stopped, flags cleared)
        """
        cleared = await asyncio.to_thread(self._store.disable_all_simulations)
        stopped = self._scheduler.stop_all()
        return stopped, cleared

    async def status(self) -> tuple[SchedulerStatus, list[dict[str, Any]]]:
        """Scheduler status plus a stored-vs-running row per point."""
        status = self._scheduler.status()
        points = await asyncio.to_thread(self._store.list_all_points)
        rows = [
            {
                "point_id": p.point_id,
                "reference_name": p.reference_name,
                "status": p.status,
                "simulation_enabled": p.simulation_enabled,
                "running": p.point_id in status.running_ids,
            }
            for p in points
        ]
        return status, rows
