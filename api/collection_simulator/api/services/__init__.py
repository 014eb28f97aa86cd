"""API services for the collection point simulator."""

from .point_service import (
    MAX_ID_ATTEMPTS,
    PointIdUnavailableError,
    PointService,
)
from .simulation_service import (
    SimulationService,
    SimulationStateError,
)
from .transaction_service import TransactionRejectedError, TransactionService

__all__ = [
    "MAX_ID_ATTEMPTS",
    "PointIdUnavailableError",
    "PointService",
    "SimulationService",
    "SimulationStateError",
    "TransactionRejectedError",
    "TransactionService",
]
