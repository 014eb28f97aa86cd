"""Tests for TransactionGenerator."""

import random
import re
from collections import Counter

import pytest

from collection_simulator.config import SchedulerSettings
from collection_simulator.persistence import (
    PaymentApp,
    PointStatus,
    TransactionOutcome,
    TransactionRecord,
)
from collection_simulator.persistence.models import PHONE_PATTERN
from collection_simulator.simulation import TransactionGenerator
from collection_simulator.simulation.generator import PAYER_APPS, PAYER_NAMES


@pytest.fixture
def generator() -> TransactionGenerator:
    return TransactionGenerator(rng=random.Random(42))


class TestAmounts:
    """Amounts stay within [min_amount, ceiling]."""

    @pytest.mark.parametrize("max_amount", [None, 0])
    def test_missing_ceiling_uses_default(self, generator, max_amount):
        amounts = [generator.draw_amount(max_amount) for _ in range(500)]
        assert min(amounts) >= 10
        assert max(amounts) <= 1000

    def test_point_ceiling_is_respected(self, generator):
        amounts = [generator.draw_amount(50) for _ in range(500)]
        assert all(10 <= a <= 50 for a in amounts)

    @pytest.mark.parametrize("max_amount", [1, 5, 9])
    def test_ceiling_below_minimum_is_never_exceeded(self, generator, max_amount):
        amounts = [generator.draw_amount(max_amount) for _ in range(200)]
        assert all(1 <= a <= max_amount for a in amounts)

    def test_amounts_are_whole_numbers(self, generator):
        assert all(isinstance(generator.draw_amount(300), int) for _ in range(50))


class TestCountsAndOutcomes:
    """Per-tick counts and the outcome distribution."""

    def test_batch_size_between_one_and_three(self, generator, make_point):
        point = make_point(simulation_enabled=True)
        sizes = {len(generator.generate_batch(point)) for _ in range(300)}
        assert sizes == {1, 2, 3}

    def test_custom_batch_bounds(self, make_point):
        settings = SchedulerSettings(min_transactions_per_tick=4, max_transactions_per_tick=4)
        generator = TransactionGenerator(settings, rng=random.Random(1))
        assert len(generator.generate_batch(make_point())) == 4

    def test_outcome_distribution_is_roughly_80_15_5(self, generator):
        n = 10_000
        counts = Counter(generator.draw_outcome() for _ in range(n))

        assert counts[TransactionOutcome.SUCCESS] / n == pytest.approx(0.80, abs=0.03)
        assert counts[TransactionOutcome.FAILED] / n == pytest.approx(0.15, abs=0.03)
        assert counts[TransactionOutcome.PENDING] / n == pytest.approx(0.05, abs=0.02)

    def test_zero_weight_outcome_never_drawn(self):
        settings = SchedulerSettings(
            outcome_weights={
                TransactionOutcome.SUCCESS: 1.0,
                TransactionOutcome.FAILED: 0.0,
                TransactionOutcome.PENDING: 0.0,
            }
        )
        generator = TransactionGenerator(settings, rng=random.Random(3))
        assert {generator.draw_outcome() for _ in range(200)} == {TransactionOutcome.SUCCESS}


class TestGeneratedFields:
    """Identifiers and payer details."""

    def test_reference_is_12_uppercase_alphanumerics(self, generator):
        for _ in range(100):
            assert re.fullmatch(r"[A-Z0-9]{12}", generator.generate_reference())

    def test_payment_id_prefix(self, generator):
        assert re.fullmatch(r"PAY\d+[A-Z0-9]{4}", generator.generate_payment_id())

    def test_phone_is_valid_indian_mobile(self, generator):
        for _ in range(100):
            phone = generator.generate_phone()
            assert re.fullmatch(PHONE_PATTERN, phone)
            assert phone[0] in "789"

    def test_payer_comes_from_known_lists(self, generator):
        payer = generator.generate_payer()
        assert payer.name in PAYER_NAMES
        assert payer.payment_app in PAYER_APPS
        assert payer.payment_app != PaymentApp.OTHER

    def test_generate_builds_valid_record_for_point(self, generator, make_point):
        point = make_point("Z9Y8X", max_amount=200, status=PointStatus.ACTIVE)
        record = generator.generate(point)

        assert isinstance(record, TransactionRecord)
        assert record.point_id == "Z9Y8X"
        assert 10 <= record.amount <= 200

    def test_seeded_generators_agree_on_everything_but_time(self, make_point):
        point = make_point()
        a = TransactionGenerator(rng=random.Random(7)).generate(point)
        b = TransactionGenerator(rng=random.Random(7)).generate(point)

        assert (a.amount, a.outcome, a.reference, a.payer_phone) == (
            b.amount,
            b.outcome,
            b.reference,
            b.payer_phone,
        )
