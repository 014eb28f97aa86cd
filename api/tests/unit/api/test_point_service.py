"""Tests for PointService and SimulationService."""

import random
import re

import pytest
import pytest_asyncio

from collection_simulator.api.services import (
    MAX_ID_ATTEMPTS,
    PointIdUnavailableError,
    PointService,
    SimulationService,
    SimulationStateError,
)
from collection_simulator.persistence import (
    CollectionPointNotFoundError,
    DuplicateCollectionPointError,
    PointStatus,
)
from collection_simulator.simulation import SimulationScheduler

VALID_POINT = {"vpa": "shop@upi", "reference_name": "Shop Counter"}


class AlwaysTakenStore:
    """Pretends every id is already in use."""

    def __init__(self):
        self.checked = []

    def exists(self, point_id):
        self.checked.append(point_id)
        return True


@pytest_asyncio.fixture
async def scheduler(store, fast_settings):
    scheduler = SimulationScheduler(store, fast_settings)
    yield scheduler
    await scheduler.shutdown(timeout=1.0)


@pytest.fixture
def points(store, scheduler) -> PointService:
    return PointService(store, scheduler, rng=random.Random(5))


@pytest.fixture
def simulations(store, scheduler) -> SimulationService:
    return SimulationService(store, scheduler)


class TestCreatePoint:
    """Point creation and id allocation."""

    @pytest.mark.asyncio
    async def test_generated_id_is_five_uppercase_alphanumerics(self, points):
        point = await points.create_point(VALID_POINT)

        assert re.fullmatch(r"[A-Z0-9]{5}", point.point_id)
        assert point.status == PointStatus.ACTIVE
        assert point.simulation_enabled is False

    @pytest.mark.asyncio
    async def test_client_id_is_used(self, points):
        point = await points.create_point({**VALID_POINT, "point_id": "AB12C"})
        assert point.point_id == "AB12C"

    @pytest.mark.asyncio
    async def test_malformed_client_id_rejected(self, points):
        with pytest.raises(ValueError, match="5 uppercase"):
            await points.create_point({**VALID_POINT, "point_id": "ab12c"})

    @pytest.mark.asyncio
    async def test_taken_client_id_rejected(self, points):
        await points.create_point({**VALID_POINT, "point_id": "AB12C"})
        with pytest.raises(DuplicateCollectionPointError):
            await points.create_point({**VALID_POINT, "point_id": "AB12C"})

    @pytest.mark.asyncio
    async def test_create_ignores_state_fields(self, points):
        point = await points.create_point(
            {**VALID_POINT, "simulation_enabled": True, "status": PointStatus.INACTIVE}
        )
        assert point.status == PointStatus.ACTIVE
        assert point.simulation_enabled is False

    @pytest.mark.asyncio
    async def test_id_generation_gives_up_after_ten_attempts(self, scheduler):
        taken = AlwaysTakenStore()
        service = PointService(taken, scheduler)

        with pytest.raises(PointIdUnavailableError):
            await service.create_point(VALID_POINT)
        assert len(taken.checked) == MAX_ID_ATTEMPTS == 10


class TestPointStateChanges:
    """Changes that must be reflected in the scheduler."""

    @pytest.mark.asyncio
    async def test_delete_stops_running_simulation(self, points, scheduler, store, make_point):
        store.create_point(make_point("Q1AB2"))
        await scheduler.toggle("Q1AB2")
        assert scheduler.is_running("Q1AB2")

        await points.delete_point("Q1AB2")

        assert not scheduler.is_running("Q1AB2")
        assert "Q1AB2" not in scheduler._toggle_locks
        assert store.find_by_id("Q1AB2") is None

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, points):
        with pytest.raises(CollectionPointNotFoundError):
            await points.delete_point("NOPE1")

    @pytest.mark.asyncio
    async def test_going_inactive_stops_simulation(self, points, scheduler, store, make_point):
        store.create_point(make_point("Q1AB2", simulation_enabled=True))
        scheduler.start("Q1AB2")

        point = await points.toggle_status("Q1AB2")

        assert point.status == PointStatus.INACTIVE
        assert point.simulation_enabled is False
        assert not scheduler.is_running("Q1AB2")

    @pytest.mark.asyncio
    async def test_empty_update_returns_point_unchanged(self, points, store, make_point):
        created = store.create_point(make_point("Q1AB2"))
        assert await points.update_point("Q1AB2", {}) == created


class TestSimulationService:
    """Start/stop preconditions."""

    @pytest.mark.asyncio
    async def test_start_persists_flag_and_runs(self, simulations, scheduler, store, make_point):
        store.create_point(make_point("Q1AB2"))

        point = await simulations.start("Q1AB2")

        assert point.simulation_enabled is True
        assert scheduler.is_running("Q1AB2")

    @pytest.mark.asyncio
    async def test_start_twice_is_a_conflict(self, simulations, store, make_point):
        store.create_point(make_point("Q1AB2"))
        await simulations.start("Q1AB2")

        with pytest.raises(SimulationStateError, match="already running"):
            await simulations.start("Q1AB2")

    @pytest.mark.asyncio
    async def test_start_inactive_is_a_conflict(self, simulations, store, make_point):
        store.create_point(make_point("Q1AB2", status=PointStatus.INACTIVE))
        with pytest.raises(SimulationStateError, match="inactive"):
            await simulations.start("Q1AB2")

    @pytest.mark.asyncio
    async def test_stop_not_running_is_a_conflict(self, simulations, store, make_point):
        store.create_point(make_point("Q1AB2"))
        with pytest.raises(SimulationStateError, match="not running"):
            await simulations.stop("Q1AB2")

    @pytest.mark.asyncio
    async def test_stop_all_clears_flags_and_tasks(self, simulations, scheduler, store, make_point):
        for point_id in ("AAAA1", "BBBB2"):
            store.create_point(make_point(point_id))
            await simulations.start(point_id)

        stopped, cleared = await simulations.stop_all()

        assert (stopped, cleared) == (2, 2)
        assert scheduler.status().active_count == 0
        assert store.find_eligible_for_simulation() == []

    @pytest.mark.asyncio
    async def test_status_reports_stored_and_running_state(
        self, simulations, scheduler, store, make_point
    ):
        store.create_point(make_point("AAAA1", simulation_enabled=True))
        store.create_point(make_point("BBBB2"))
        scheduler.start("AAAA1")

        status, rows = await simulations.status()

        assert status.running_ids == ["AAAA1"]
        by_id = {row["point_id"]: row for row in rows}
        assert by_id["AAAA1"]["running"] is True
        assert by_id["BBBB2"] == {
            "point_id": "BBBB2",
            "reference_name": "Counter BBBB2",
            "status": PointStatus.ACTIVE,
            "simulation_enabled": False,
            "running": False,
        }
