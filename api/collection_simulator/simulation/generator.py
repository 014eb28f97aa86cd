"""Synthetic transaction generation.

Everything random goes through one ``random.Random`` so a seeded generator
reproduces the same batches.
"""

from __future__ import annotations

import random
import string
import time
from dataclasses import dataclass

from collection_simulator.config import SchedulerSettings
from collection_simulator.persistence.models import (
    CollectionPointRecord,
    PaymentApp,
    TransactionOutcome,
    TransactionRecord,
    utc_now,
)

REFERENCE_LENGTH = 12
REFERENCE_ALPHABET = string.ascii_uppercase + string.digits

PAYER_NAMES = (
    "Rahul Kumar", "Priya Sharma", "Amit Singh", "Neha Gupta",
    "Ravi Patel", "Sunita Devi", "Vikash Kumar", "Pooja Singh",
    "Suresh Yadav", "Anjali Mishra", "Deepak Joshi", "Kavita Nair",
)

PAYER_APPS = (
    PaymentApp.GPAY,
    PaymentApp.PHONEPE,
    PaymentApp.PAYTM,
    PaymentApp.BHIM,
    PaymentApp.AMAZONPAY,
    PaymentApp.WHATSAPP,
)


@dataclass(frozen=True)
class PayerInfo:
    """Synthetic payer details."""

    name: str
    phone: str
    payment_app: PaymentApp


class TransactionGenerator:
    """Builds transaction records for a collection point."""

    def __init__(
        self,
        settings: SchedulerSettings | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.settings = settings or SchedulerSettings()
        self._rng = rng or random.Random()
        self._outcomes = list(self.settings.outcome_weights)
        self._weights = [self.settings.outcome_weights[o] for o in self._outcomes]

    def generate_reference(self) -> str:
        """12-character uppercase alphanumeric settlement reference (UTR)."""
        return "".join(self._rng.choices(REFERENCE_ALPHABET, k=REFERENCE_LENGTH))

    def generate_payment_id(self) -> str:
        suffix = "".join(self._rng.choices(REFERENCE_ALPHABET, k=4))
        return f"PAY{time.time_ns() // 1_000_000}{suffix}"

    def generate_phone(self) -> str:
        """Indian mobile number: leading 7, 8 or 9 plus nine digits."""
        first = self._rng.choice("789")
        return first + f"{self._rng.randrange(1_000_000_000):09d}"

    def generate_payer(self) -> PayerInfo:
        return PayerInfo(
            name=self._rng.choice(PAYER_NAMES),
            phone=self.generate_phone(),
            payment_app=self._rng.choice(PAYER_APPS),
        )

    def draw_transaction_count(self) -> int:
        return self._rng.randint(
            self.settings.min_transactions_per_tick,
            self.settings.max_transactions_per_tick,
        )

    def draw_amount(self, max_amount: int | None) -> int:
        """Whole-rupee amount in ``[min_amount, ceiling]``.

        A missing or zero ``max_amount`` falls back to the default ceiling.
        A ceiling below the minimum lowers the floor to 1, so the amount
        never exceeds the point's limit.
        """
        ceiling = max_amount or self.settings.default_max_amount
        floor = self.settings.min_amount if ceiling >= self.settings.min_amount else 1
        return self._rng.randint(floor, ceiling)

    def draw_outcome(self) -> TransactionOutcome:
        return self._rng.choices(self._outcomes, weights=self._weights, k=1)[0]

    def generate(self, point: CollectionPointRecord) -> TransactionRecord:
        """One transaction for ``point``, stamped with the current time."""
        payer = self.generate_payer()
        return TransactionRecord(
            payment_id=self.generate_payment_id(),
            point_id=point.point_id,
            amount=self.draw_amount(point.max_amount),
            outcome=self.draw_outcome(),
            reference=self.generate_reference(),
            occurred_at=utc_now(),
            payer_name=payer.name,
            payer_phone=payer.phone,
            payment_app=payer.payment_app,
        )

    def generate_batch(self, point: CollectionPointRecord) -> list[TransactionRecord]:
        """A tick's worth of transactions (1-3 by default)."""
        return [self.generate(point) for _ in range(self.draw_transaction_count())]
