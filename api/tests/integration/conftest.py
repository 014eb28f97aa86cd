"""Fixtures for HTTP API tests.

The app runs its real lifespan against an in-memory database. The tick
interval is long enough that no tick fires during a test.
"""

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient

from collection_simulator.api.dependencies import container
from collection_simulator.persistence import (
    CollectionPointRecord,
    DuckDBCollectionPointStore,
    TransactionOutcome,
    TransactionRecord,
)
from collection_simulator.simulation import TransactionGenerator


@pytest.fixture
def client(monkeypatch) -> Generator[TestClient, None, None]:
    """Test client with the application lifespan running."""
    monkeypatch.setenv("COLLECT_SIM_DB_PATH", ":memory:")
    monkeypatch.setenv("COLLECT_SIM_INTERVAL_SECONDS", "60")
    monkeypatch.delenv("COLLECT_SIM_CONFIG", raising=False)
    monkeypatch.delenv("COLLECT_SIM_LOG_LEVEL", raising=False)

    from collection_simulator.api.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def api_store(client) -> DuckDBCollectionPointStore:
    """The store behind the running app, for arranging data directly."""
    return container.store


@pytest.fixture
def add_transactions(api_store) -> Callable[..., list[TransactionRecord]]:
    """Persist generated transactions for a point with chosen outcomes."""
    generator = TransactionGenerator()

    def _add(
        point: CollectionPointRecord, outcomes: list[TransactionOutcome]
    ) -> list[TransactionRecord]:
        created = []
        for outcome in outcomes:
            record = generator.generate(point).model_copy(update={"outcome": outcome})
            created.append(api_store.create_transaction(record))
        return created

    return _add
