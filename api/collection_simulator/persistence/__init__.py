"""
Persistence layer for the collection point simulator.

Provides DuckDB-based storage for collection points and their transactions.
"""

from .connection import DatabaseManager
from .models import (
    CollectionPointRecord,
    PaymentApp,
    PointCategory,
    PointStatus,
    TransactionOutcome,
    TransactionRecord,
)
from .store import (
    CollectionPointNotFoundError,
    CollectionPointStore,
    DuckDBCollectionPointStore,
    DuplicateCollectionPointError,
    TransactionNotFoundError,
)

__all__ = [
    "CollectionPointNotFoundError",
    "CollectionPointRecord",
    "CollectionPointStore",
    "DatabaseManager",
    "DuckDBCollectionPointStore",
    "DuplicateCollectionPointError",
    "PaymentApp",
    "PointCategory",
    "PointStatus",
    "TransactionNotFoundError",
    "TransactionOutcome",
    "TransactionRecord",
]
