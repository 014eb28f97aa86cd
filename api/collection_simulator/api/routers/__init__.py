"""FastAPI routers for API endpoints."""

from .points import router as points_router
from .simulation import router as simulation_router
from .transactions import router as transactions_router

__all__ = [
    "points_router",
    "simulation_router",
    "transactions_router",
]
