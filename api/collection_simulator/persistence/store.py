"""Collection point store.

``CollectionPointStore`` is the narrow interface the simulation scheduler
depends on. ``DuckDBCollectionPointStore`` implements it on top of a
``DatabaseManager`` and adds the CRUD and listing operations the HTTP layer
needs.

Every public method opens its own cursor, so the scheduler may call the
store from worker threads (``asyncio.to_thread``).
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import duckdb
from pydantic import BaseModel

from .models import (
    CollectionPointRecord,
    PointCategory,
    PointStatus,
    TransactionOutcome,
    TransactionRecord,
    utc_now,
)
from .queries import (
    count_transactions,
    get_outcome_breakdown,
    get_transactions,
    summarize_breakdown,
)

if TYPE_CHECKING:
    from .connection import DatabaseManager

# Fields an operator may edit through update_point
EDITABLE_FIELDS = frozenset(
    {"vpa", "reference_name", "description", "max_amount", "category", "notes"}
)


class CollectionPointNotFoundError(Exception):
    """Raised when a collection point cannot be found."""

    def __init__(self, point_id: str) -> None:
        self.point_id = point_id
        super().__init__(f"Collection point not found: {point_id}")


class DuplicateCollectionPointError(Exception):
    """Raised when creating a collection point whose id is taken."""

    def __init__(self, point_id: str) -> None:
        self.point_id = point_id
        super().__init__(f"Collection point already exists: {point_id}")


class TransactionNotFoundError(Exception):
    """Raised when a transaction cannot be found by payment id."""

    def __init__(self, payment_id: str) -> None:
        self.payment_id = payment_id
        super().__init__(f"Transaction not found: {payment_id}")


@runtime_checkable
class CollectionPointStore(Protocol):
    """Store operations the simulation scheduler relies on."""

    def find_by_id(self, point_id: str) -> CollectionPointRecord | None:
        """Return the point, or None if it does not exist."""
        ...

    def find_eligible_for_simulation(self) -> list[CollectionPointRecord]:
        """Return points with status Active and simulation enabled."""
        ...

    def set_simulation_enabled(
        self, point_id: str, enabled: bool
    ) -> CollectionPointRecord | None:
        """Persist the enabled flag and return the updated point (None if missing)."""
        ...

    def create_transaction(self, record: TransactionRecord) -> TransactionRecord:
        """Persist a single transaction."""
        ...


def _to_row(record: BaseModel) -> list[Any]:
    return [v.value if isinstance(v, Enum) else v for v in record.model_dump().values()]


def _fetch_models(cur: duckdb.DuckDBPyConnection, model: type[BaseModel]) -> list[Any]:
    columns = [d[0] for d in cur.description]
    return [model.model_validate(dict(zip(columns, row))) for row in cur.fetchall()]


_POINT_COLUMNS = list(CollectionPointRecord.model_fields)
_TX_COLUMNS = list(TransactionRecord.model_fields)
_POINT_UPDATE_SQL = (
    "UPDATE collection_points SET "
    + ", ".join(f"{col} = ?" for col in _POINT_COLUMNS if col != "point_id")
    + " WHERE point_id = ?"
)


class DuckDBCollectionPointStore:
    """DuckDB-backed ``CollectionPointStore``."""

    def __init__(self, db_manager: DatabaseManager) -> None:
        self._db = db_manager

    @property
    def db_manager(self) -> DatabaseManager:
        return self._db

    # ------------------------------------------------------------------
    # Scheduler interface
    # ------------------------------------------------------------------

    def find_by_id(self, point_id: str) -> CollectionPointRecord | None:
        with self._db.cursor() as cur:
            return self._get(cur, point_id)

    def find_eligible_for_simulation(self) -> list[CollectionPointRecord]:
        with self._db.cursor() as cur:
            cur.execute(
                "SELECT * FROM collection_points "
                "WHERE status = ? AND simulation_enabled "
                "ORDER BY created_at, point_id",
                [PointStatus.ACTIVE.value],
            )
            return _fetch_models(cur, CollectionPointRecord)

    def set_simulation_enabled(
        self, point_id: str, enabled: bool
    ) -> CollectionPointRecord | None:
        with self._db.cursor() as cur:
            point = self._get(cur, point_id)
            if point is None:
                return None
            return self._save(cur, point, simulation_enabled=enabled)

    def create_transaction(self, record: TransactionRecord) -> TransactionRecord:
        with self._db.cursor() as cur:
            cur.execute(
                f"INSERT INTO transactions ({', '.join(_TX_COLUMNS)}) "
                f"VALUES ({', '.join('?' for _ in _TX_COLUMNS)})",
                _to_row(record),
            )
        return record

    def get_transaction(self, payment_id: str) -> TransactionRecord | None:
        with self._db.cursor() as cur:
            cur.execute("SELECT * FROM transactions WHERE payment_id = ?", [payment_id])
            found = _fetch_models(cur, TransactionRecord)
        return found[0] if found else None

    def update_transaction_outcome(
        self, payment_id: str, outcome: TransactionOutcome
    ) -> TransactionRecord:
        """Change a transaction's outcome.

        Raises:
            TransactionNotFoundError: If no transaction has ``payment_id``
        """
        outcome = TransactionOutcome(outcome)
        with self._db.cursor() as cur:
            cur.execute("SELECT * FROM transactions WHERE payment_id = ?", [payment_id])
            found = _fetch_models(cur, TransactionRecord)
            if not found:
                raise TransactionNotFoundError(payment_id)
            cur.execute(
                "UPDATE transactions SET outcome = ? WHERE payment_id = ?",
                [outcome.value, payment_id],
            )
        return found[0].model_copy(update={"outcome": outcome})

    def delete_transaction(self, payment_id: str) -> None:
        """Delete one transaction.

        Raises:
            TransactionNotFoundError: If no transaction has ``payment_id``
        """
        with self._db.cursor() as cur:
            row = cur.execute(
                "SELECT 1 FROM transactions WHERE payment_id = ?", [payment_id]
            ).fetchone()
            if row is None:
                raise TransactionNotFoundError(payment_id)
            cur.execute("DELETE FROM transactions WHERE payment_id = ?", [payment_id])

    # ------------------------------------------------------------------
    # Collection point CRUD
    # ------------------------------------------------------------------

    def get_point(self, point_id: str) -> CollectionPointRecord:
        """Like ``find_by_id`` but raises when missing.

        Raises:
            CollectionPointNotFoundError: If the point does not exist
        """
        point = self.find_by_id(point_id)
        if point is None:
            raise CollectionPointNotFoundError(point_id)
        return point

    def exists(self, point_id: str) -> bool:
        with self._db.cursor() as cur:
            row = cur.execute(
                "SELECT 1 FROM collection_points WHERE point_id = ?", [point_id]
            ).fetchone()
        return row is not None

    def create_point(self, record: CollectionPointRecord) -> CollectionPointRecord:
        """Insert a new collection point.

        Raises:
            DuplicateCollectionPointError: If the id is already in use
        """
        with self._db.cursor() as cur:
            if self._get(cur, record.point_id) is not None:
                raise DuplicateCollectionPointError(record.point_id)
            try:
                cur.execute(
                    f"INSERT INTO collection_points ({', '.join(_POINT_COLUMNS)}) "
                    f"VALUES ({', '.join('?' for _ in _POINT_COLUMNS)})",
                    _to_row(record),
                )
            except duckdb.ConstraintException as e:
                raise DuplicateCollectionPointError(record.point_id) from e
        return record

    def update_point(self, point_id: str, **changes: Any) -> CollectionPointRecord:
        """Apply operator edits to a point.

        Raises:
            CollectionPointNotFoundError: If the point does not exist
            ValueError: If a non-editable field is passed
        """
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Fields not editable: {sorted(unknown)}")
        with self._db.cursor() as cur:
            point = self._require(cur, point_id)
            return self._save(cur, point, **changes)

    def set_status(self, point_id: str, status: PointStatus) -> CollectionPointRecord:
        """Set status; going Inactive also clears ``simulation_enabled``."""
        with self._db.cursor() as cur:
            point = self._require(cur, point_id)
            return self._save(cur, point, status=status)

    def toggle_status(self, point_id: str) -> CollectionPointRecord:
        with self._db.cursor() as cur:
            point = self._require(cur, point_id)
            new_status = (
                PointStatus.INACTIVE
                if point.status == PointStatus.ACTIVE
                else PointStatus.ACTIVE
            )
            return self._save(cur, point, status=new_status)

    def delete_point(self, point_id: str) -> int:
        """Delete a point and its transactions.

        Returns:
            Number of transactions deleted with the point

        Raises:
            CollectionPointNotFoundError: If the point does not exist
        """
        with self._db.cursor() as cur:
            self._require(cur, point_id)
            removed = count_transactions(cur, point_id=point_id)
            cur.begin()
            try:
                cur.execute("DELETE FROM transactions WHERE point_id = ?", [point_id])
                cur.execute("DELETE FROM collection_points WHERE point_id = ?", [point_id])
                cur.commit()
            except duckdb.Error:
                cur.rollback()
                raise
        return removed

    def list_points(
        self,
        status: PointStatus | None = None,
        category: PointCategory | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[CollectionPointRecord], int]:
        """Filtered, paginated listing, newest first.

        ``search`` matches point id, reference name or VPA, case-insensitive.

        Returns:
            Tuple of (page of points, total matching points)
        """
        clauses: list[str] = []
        params: list[Any] = []
        if status is not None:
            clauses.append("status = ?")
            params.append(PointStatus(status).value)
        if category is not None:
            clauses.append("category = ?")
            params.append(PointCategory(category).value)
        if search:
            clauses.append("(point_id ILIKE ? OR reference_name ILIKE ? OR vpa ILIKE ?)")
            params.extend([f"%{search}%"] * 3)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with self._db.cursor() as cur:
            total = cur.execute(
                f"SELECT COUNT(*) FROM collection_points {where}", params
            ).fetchone()[0]
            cur.execute(
                f"SELECT * FROM collection_points {where} "
                "ORDER BY created_at DESC, point_id LIMIT ? OFFSET ?",
                [*params, limit, (page - 1) * limit],
            )
            return _fetch_models(cur, CollectionPointRecord), int(total)

    def list_all_points(self) -> list[CollectionPointRecord]:
        with self._db.cursor() as cur:
            cur.execute("SELECT * FROM collection_points ORDER BY point_id")
            return _fetch_models(cur, CollectionPointRecord)

    def disable_all_simulations(self) -> int:
        """Bulk-clear ``simulation_enabled``.

        Returns:
            Number of points that had it set
        """
        with self._db.cursor() as cur:
            affected = cur.execute(
                "SELECT COUNT(*) FROM collection_points WHERE simulation_enabled"
            ).fetchone()[0]
            cur.execute(
                "UPDATE collection_points SET simulation_enabled = false, updated_at = ? "
                "WHERE simulation_enabled",
                [utc_now()],
            )
        return int(affected)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def list_transactions(
        self,
        point_id: str | None = None,
        outcome: TransactionOutcome | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[TransactionRecord], int]:
        """Filtered, paginated transactions, newest first.

        Returns:
            Tuple of (page of transactions, total matching transactions)
        """
        outcome_value = TransactionOutcome(outcome).value if outcome else None
        with self._db.cursor() as cur:
            total = count_transactions(cur, point_id, outcome_value, start, end)
            df = get_transactions(
                cur,
                point_id,
                outcome_value,
                start,
                end,
                limit=limit,
                offset=(page - 1) * limit,
            )
        return [TransactionRecord.model_validate(row) for row in df.to_dicts()], total

    def transaction_stats(self, point_id: str | None = None) -> dict[str, Any]:
        """Totals and per-outcome breakdown, optionally for one point."""
        with self._db.cursor() as cur:
            return summarize_breakdown(get_outcome_breakdown(cur, point_id))

    def count_transactions(self, point_id: str | None = None) -> int:
        with self._db.cursor() as cur:
            return count_transactions(cur, point_id=point_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get(
        self, cur: duckdb.DuckDBPyConnection, point_id: str
    ) -> CollectionPointRecord | None:
        cur.execute("SELECT * FROM collection_points WHERE point_id = ?", [point_id])
        points = _fetch_models(cur, CollectionPointRecord)
        return points[0] if points else None

    def _require(
        self, cur: duckdb.DuckDBPyConnection, point_id: str
    ) -> CollectionPointRecord:
        point = self._get(cur, point_id)
        if point is None:
            raise CollectionPointNotFoundError(point_id)
        return point

    def _save(
        self,
        cur: duckdb.DuckDBPyConnection,
        point: CollectionPointRecord,
        **changes: Any,
    ) -> CollectionPointRecord:
        # Revalidate so the Inactive => not simulating invariant holds
        updated = CollectionPointRecord.model_validate(
            {**point.model_dump(), **changes, "updated_at": utc_now()}
        )
        row = dict(zip(_POINT_COLUMNS, _to_row(updated)))
        point_id = row.pop("point_id")
        cur.execute(_POINT_UPDATE_SQL, [*row.values(), point_id])
        return updated
