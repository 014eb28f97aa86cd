"""
Pytest configuration and shared fixtures.

Databases are DuckDB ``:memory:`` unless a test needs a file on disk
(``db_path``), so every test starts from an empty schema.
"""

from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from collection_simulator.config import SchedulerSettings
from collection_simulator.persistence import (
    CollectionPointRecord,
    DatabaseManager,
    DuckDBCollectionPointStore,
)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """File-backed database path inside the test's tmp dir."""
    return tmp_path / "collections.db"


@pytest.fixture
def db_manager() -> Generator[DatabaseManager, None, None]:
    """In-memory database with the schema applied."""
    manager = DatabaseManager(":memory:")
    manager.setup()
    yield manager
    manager.close()


@pytest.fixture
def store(db_manager: DatabaseManager) -> DuckDBCollectionPointStore:
    return DuckDBCollectionPointStore(db_manager)


@pytest.fixture
def make_point() -> Callable[..., CollectionPointRecord]:
    """Factory for collection point records with sensible defaults.

    Usage:
        def test_something(store, make_point):
            store.create_point(make_point("Q1AB2", simulation_enabled=True))
    """

    def _make(point_id: str = "Q1AB2", **overrides) -> CollectionPointRecord:
        fields = {
            "point_id": point_id,
            "vpa": f"{point_id.lower()}@upi",
            "reference_name": f"Counter {point_id}",
            "max_amount": 500,
        }
        fields.update(overrides)
        return CollectionPointRecord(**fields)

    return _make


@pytest.fixture
def fast_settings() -> SchedulerSettings:
    """Scheduler settings with a short interval for timing tests."""
    return SchedulerSettings(interval_seconds=0.05, shutdown_timeout_seconds=1.0)
