"""FastAPI application for the collection point simulator."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from collection_simulator import __version__
from collection_simulator.api.dependencies import container
from collection_simulator.api.routers import (
    points_router,
    simulation_router,
    transactions_router,
)
from collection_simulator.config import load_config_from_env
from collection_simulator.persistence import DatabaseManager, DuckDBCollectionPointStore
from collection_simulator.simulation import SimulationScheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the database, resume simulations, and tear down in reverse."""
    config = load_config_from_env()

    db_manager = DatabaseManager(config.database.path)
    db_manager.setup()
    store = DuckDBCollectionPointStore(db_manager)
    scheduler = SimulationScheduler(store, config.scheduler)

    app.state.config = config
    app.state.db_manager = db_manager
    app.state.scheduler = scheduler
    container.configure(db_manager, store, scheduler)

    await scheduler.initialize()

    try:
        yield
    finally:
        # Ticks must finish before the database goes away
        await scheduler.shutdown()
        container.clear_all()
        db_manager.close()
        logger.info("Collection simulator shut down")


app = FastAPI(
    title="Collection Simulator API",
    description="REST API for simulating UPI payments against QR collection points",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(points_router)
app.include_router(simulation_router)
app.include_router(transactions_router)


# ============================================================================
# Health Check
# ============================================================================


@app.get("/health")
def health_check() -> dict[str, str | int | bool]:
    """Health check endpoint."""
    if not container.configured:
        return {"status": "starting", "active_simulations": 0, "initialized": False}
    status = container.scheduler.status()
    return {
        "status": "healthy",
        "active_simulations": status.active_count,
        "initialized": status.initialized,
    }


# ============================================================================
# Root
# ============================================================================


@app.get("/")
def root() -> dict[str, str]:
    """API root with basic info."""
    return {
        "name": "Collection Simulator API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }
