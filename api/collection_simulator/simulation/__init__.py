"""Transaction generation and the per-point simulation scheduler."""

from .generator import PayerInfo, TransactionGenerator
from .scheduler import SchedulerStatus, SimulationScheduler, ToggleResult

__all__ = [
    "PayerInfo",
    "SchedulerStatus",
    "SimulationScheduler",
    "ToggleResult",
    "TransactionGenerator",
]
