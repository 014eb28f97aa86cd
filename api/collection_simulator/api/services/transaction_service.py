"""Service layer for transactions.

Listing and stats, plus manual create, outcome edits, deletes and one-shot
simulated batches for a point.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any

from collection_simulator.persistence import (
    CollectionPointRecord,
    DuckDBCollectionPointStore,
    PointStatus,
    TransactionNotFoundError,
    TransactionOutcome,
    TransactionRecord,
)
from collection_simulator.persistence.models import utc_now
from collection_simulator.simulation import TransactionGenerator


class TransactionRejectedError(Exception):
    """Raised when a point cannot accept the requested transaction."""

    def __init__(self, point_id: str, message: str) -> None:
        self.point_id = point_id
        super().__init__(message)


class TransactionService:
    """Access to simulated and manually recorded transactions."""

    def __init__(
        self,
        store: DuckDBCollectionPointStore,
        generator: TransactionGenerator | None = None,
    ) -> None:
        self._store = store
        self._generator = generator or TransactionGenerator()

    async def list_transactions(
        self,
        point_id: str | None = None,
        outcome: TransactionOutcome | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[TransactionRecord], int]:
        """Filtered page of transactions, newest first.

        Raises:
            ValueError: If ``start`` is after ``end``
        """
        if start is not None and end is not None and start > end:
            raise ValueError("start must not be after end")
        return await asyncio.to_thread(
            self._store.list_transactions, point_id, outcome, start, end, page, limit
        )

    async def list_point_transactions(
        self,
        point_id: str,
        outcome: TransactionOutcome | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> tuple[list[TransactionRecord], int]:
        """Like ``list_transactions`` but 404s on an unknown point."""
        await asyncio.to_thread(self._store.get_point, point_id)
        return await self.list_transactions(point_id, outcome, page=page, limit=limit)

    async def stats(self, point_id: str | None = None) -> dict[str, Any]:
        return await asyncio.to_thread(self._store.transaction_stats, point_id)

    async def get_transaction(self, payment_id: str) -> TransactionRecord:
        """Look up a transaction by payment id.

        Raises:
            TransactionNotFoundError: If it does not exist
        """
        transaction = await asyncio.to_thread(self._store.get_transaction, payment_id)
        if transaction is None:
            raise TransactionNotFoundError(payment_id)
        return transaction

    async def create_transaction(self, data: dict[str, Any]) -> TransactionRecord:
        """Record a transaction entered by an operator.

        ``data`` carries ``point_id``, ``amount``, optional ``outcome``
        (Pending when omitted) and the payer fields. Payment id, reference
        and timestamp are generated.

        Raises:
            CollectionPointNotFoundError: If the point does not exist
            TransactionRejectedError: If the point is Inactive or the amount
                is over its ``max_amount``
        """
        point = await self._accepting_point(data["point_id"])
        amount = data["amount"]
        if point.max_amount and amount > point.max_amount:
            raise TransactionRejectedError(
                point.point_id,
                f"Amount {amount} exceeds the maximum of {point.max_amount} "
                f"for collection point {point.point_id}",
            )

        record = TransactionRecord(
            payment_id=self._generator.generate_payment_id(),
            point_id=point.point_id,
            amount=amount,
            outcome=data.get("outcome") or TransactionOutcome.PENDING,
            reference=self._generator.generate_reference(),
            occurred_at=utc_now(),
            payer_name=data["payer_name"],
            payer_phone=data["payer_phone"],
            payment_app=data["payment_app"],
        )
        return await asyncio.to_thread(self._store.create_transaction, record)

    async def update_outcome(
        self, payment_id: str, outcome: TransactionOutcome
    ) -> TransactionRecord:
        return await asyncio.to_thread(
            self._store.update_transaction_outcome, payment_id, outcome
        )

    async def delete_transaction(self, payment_id: str) -> None:
        await asyncio.to_thread(self._store.delete_transaction, payment_id)

    async def simulate(self, point_id: str, count: int = 1) -> list[TransactionRecord]:
        """Generate and persist ``count`` transactions for an Active point now.

        Runs whether or not the point's periodic simulation is enabled.

        Raises:
            CollectionPointNotFoundError: If the point does not exist
            TransactionRejectedError: If the point is Inactive
        """
        point = await self._accepting_point(point_id)
        created = []
        for _ in range(count):
            record = self._generator.generate(point)
            created.append(await asyncio.to_thread(self._store.create_transaction, record))
        return created

    async def _accepting_point(self, point_id: str) -> CollectionPointRecord:
        point = await asyncio.to_thread(self._store.get_point, point_id)
        if point.status != PointStatus.ACTIVE:
            raise TransactionRejectedError(
                point_id, f"Collection point {point_id} is not active"
            )
        return point
