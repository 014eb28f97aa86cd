"""Service layer for collection point management.

Point CRUD goes straight to the store, except where a change has to be
reflected in the scheduler: deleting a point or making it Inactive stops its
simulation first.
"""

from __future__ import annotations

import asyncio
import random
import re
import string
from typing import Any

from collection_simulator.api.models.points import POINT_ID_PATTERN
from collection_simulator.persistence import (
    CollectionPointRecord,
    DuckDBCollectionPointStore,
    PointCategory,
    PointStatus,
)
from collection_simulator.simulation import SimulationScheduler

POINT_ID_LENGTH = 5
POINT_ID_ALPHABET = string.ascii_uppercase + string.digits
MAX_ID_ATTEMPTS = 10


class PointIdUnavailableError(Exception):
    """Raised when no free point id was found within the attempt limit."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(
            f"Unable to generate a unique collection point id after {attempts} attempts"
        )


class PointService:
    """Service for managing collection points.

    Store calls run in worker threads so requests never block ticks.
    """

    def __init__(
        self,
        store: DuckDBCollectionPointStore,
        scheduler: SimulationScheduler,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._rng = rng or random.Random()

    def is_running(self, point_id: str) -> bool:
        return self._scheduler.is_running(point_id)

    async def list_points(
        self,
        status: PointStatus | None = None,
        category: PointCategory | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[CollectionPointRecord], int]:
        return await asyncio.to_thread(
            self._store.list_points, status, category, search, page, limit
        )

    async def get_point(self, point_id: str) -> CollectionPointRecord:
        """Raises CollectionPointNotFoundError if missing."""
        return await asyncio.to_thread(self._store.get_point, point_id)

    async def get_point_with_stats(
        self, point_id: str
    ) -> tuple[CollectionPointRecord, dict[str, Any]]:
        point = await self.get_point(point_id)
        stats = await asyncio.to_thread(self._store.transaction_stats, point_id)
        return point, stats

    async def create_point(self, data: dict[str, Any]) -> CollectionPointRecord:
        """Create a point, Active with simulation disabled.

        Args:
            data: Point fields; ``point_id`` is optional

        Raises:
            ValueError: If a supplied ``point_id`` is malformed
            DuplicateCollectionPointError: If a supplied ``point_id`` is taken
            PointIdUnavailableError: If id generation ran out of attempts
        """
        fields = dict(data)
        point_id = fields.pop("point_id", None)
        if point_id is None:
            point_id = await asyncio.to_thread(self._allocate_point_id)
        elif not re.fullmatch(POINT_ID_PATTERN, point_id):
            raise ValueError(
                "Point id must be exactly 5 uppercase letters (A-Z) or digits (0-9)"
            )

        fields.pop("status", None)
        fields.pop("simulation_enabled", None)
        record = CollectionPointRecord(point_id=point_id, **fields)
        return await asyncio.to_thread(self._store.create_point, record)

    async def update_point(
        self, point_id: str, changes: dict[str, Any]
    ) -> CollectionPointRecord:
        if not changes:
            return await self.get_point(point_id)
        return await asyncio.to_thread(
            lambda: self._store.update_point(point_id, **changes)
        )

    async def delete_point(self, point_id: str) -> int:
        """Stop the point's simulation, then delete it and its transactions.

        Returns:
            Number of transactions deleted
        """
        await self.get_point(point_id)
        self._scheduler.forget(point_id)
        return await asyncio.to_thread(self._store.delete_point, point_id)

    async def toggle_status(self, point_id: str) -> CollectionPointRecord:
        """Flip Active/Inactive. Going Inactive also stops the simulation."""
        updated = await asyncio.to_thread(self._store.toggle_status, point_id)
        if updated.status == PointStatus.INACTIVE and self._scheduler.is_running(point_id):
            self._scheduler.stop(point_id)
        return updated

    def _allocate_point_id(self) -> str:
        for _ in range(MAX_ID_ATTEMPTS):
            candidate = "".join(self._rng.choices(POINT_ID_ALPHABET, k=POINT_ID_LENGTH))
            if not self._store.exists(candidate):
                return candidate
        raise PointIdUnavailableError(MAX_ID_ATTEMPTS)
