"""FastAPI dependencies for service injection.

The application lifespan configures the container with the database and
scheduler; endpoints receive services through ``Depends`` providers, which
tests can override with ``app.dependency_overrides``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from collection_simulator.api.services import (
    PointService,
    SimulationService,
    TransactionService,
)
from collection_simulator.simulation import TransactionGenerator

if TYPE_CHECKING:
    from collection_simulator.persistence import (
        DatabaseManager,
        DuckDBCollectionPointStore,
    )
    from collection_simulator.simulation import SimulationScheduler


class ServiceContainer:
    """Container for all API services.

    This provides a central location for service instances,
    enabling dependency injection and testability.
    """

    def __init__(self) -> None:
        self._db_manager: DatabaseManager | None = None
        self._store: DuckDBCollectionPointStore | None = None
        self._scheduler: SimulationScheduler | None = None
        self._point_service: PointService | None = None
        self._simulation_service: SimulationService | None = None
        self._transaction_service: TransactionService | None = None

    def configure(
        self,
        db_manager: DatabaseManager,
        store: DuckDBCollectionPointStore,
        scheduler: SimulationScheduler,
    ) -> None:
        """Wire in the shared resources and drop any services built earlier."""
        self.clear_all()
        self._db_manager = db_manager
        self._store = store
        self._scheduler = scheduler

    @property
    def configured(self) -> bool:
        return self._scheduler is not None

    @property
    def db_manager(self) -> DatabaseManager | None:
        return self._db_manager

    @property
    def store(self) -> DuckDBCollectionPointStore:
        if self._store is None:
            raise RuntimeError("Services are not configured (is the app lifespan running?)")
        return self._store

    @property
    def scheduler(self) -> SimulationScheduler:
        if self._scheduler is None:
            raise RuntimeError("Services are not configured (is the app lifespan running?)")
        return self._scheduler

    @property
    def point_service(self) -> PointService:
        """Get the point service, creating if needed."""
        if self._point_service is None:
            self._point_service = PointService(self.store, self.scheduler)
        return self._point_service

    @property
    def simulation_service(self) -> SimulationService:
        """Get the simulation service, creating if needed."""
        if self._simulation_service is None:
            self._simulation_service = SimulationService(self.store, self.scheduler)
        return self._simulation_service

    @property
    def transaction_service(self) -> TransactionService:
        """Get the transaction service, creating if needed."""
        if self._transaction_service is None:
            self._transaction_service = TransactionService(
                self.store, TransactionGenerator(self.scheduler.settings)
            )
        return self._transaction_service

    def clear_all(self) -> None:
        """Forget every resource and service (shutdown and test cleanup)."""
        self._db_manager = None
        self._store = None
        self._scheduler = None
        self._point_service = None
        self._simulation_service = None
        self._transaction_service = None


# Global service container instance
container = ServiceContainer()


def get_point_service() -> PointService:
    """Dependency that provides the PointService.

    Usage in endpoints:
        @router.get("/api/qr/{point_id}")
        async def get_point(service: PointService = Depends(get_point_service)):
            ...
    """
    return container.point_service


def get_simulation_service() -> SimulationService:
    """Dependency that provides the SimulationService."""
    return container.simulation_service


def get_transaction_service() -> TransactionService:
    """Dependency that provides the TransactionService."""
    return container.transaction_service
