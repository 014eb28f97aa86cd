"""Seed command: demo collection points and backfilled transactions."""

from __future__ import annotations

import random
from datetime import timedelta
from typing import Annotated, Any, Optional

import typer

from collection_simulator.cli.commands.common import ConfigOption, DbPathOption, resolve_config
from collection_simulator.cli.output import log_error, log_info, log_success, output_json
from collection_simulator.persistence import (
    CollectionPointRecord,
    DatabaseManager,
    DuckDBCollectionPointStore,
    PointCategory,
    PointStatus,
)
from collection_simulator.persistence.models import utc_now
from collection_simulator.simulation import TransactionGenerator

BACKFILL_DAYS = 30

DEMO_POINTS: list[dict[str, Any]] = [
    {
        "point_id": "STR01",
        "vpa": "merchant@upi",
        "reference_name": "Main Store Counter",
        "description": "Primary payment counter for the main store",
        "max_amount": 5000,
        "category": PointCategory.RETAIL,
        "notes": "High volume counter",
    },
    {
        "point_id": "CAF01",
        "vpa": "cafe@paytm",
        "reference_name": "Coffee Shop",
        "description": "Coffee shop payment QR",
        "max_amount": 1000,
        "category": PointCategory.RETAIL,
        "notes": "Small transactions only",
        "simulation_enabled": True,
    },
    {
        "point_id": "RNT01",
        "vpa": "landlord@phonepe",
        "reference_name": "Apartment Rent",
        "description": "Monthly rent collection",
        "max_amount": 50000,
        "category": PointCategory.RENTAL,
    },
    {
        "point_id": "SCH01",
        "vpa": "fees@school.edu",
        "reference_name": "School Fees",
        "description": "Student fee collection",
        "max_amount": 25000,
        "category": PointCategory.EDUCATION,
    },
    {
        "point_id": "SVC01",
        "vpa": "service@gpay",
        "reference_name": "Service Payment",
        "description": "General service payments",
        "max_amount": 10000,
        "category": PointCategory.CUSTOM,
        "status": PointStatus.INACTIVE,
    },
]


def seed(
    config: ConfigOption = None,
    db_path: DbPathOption = None,
    reset: Annotated[
        bool, typer.Option("--reset", help="Drop existing data before seeding")
    ] = False,
    backfill: Annotated[
        bool,
        typer.Option("--backfill/--no-backfill", help="Add past transactions per point"),
    ] = True,
    min_per_point: Annotated[int, typer.Option("--min-per-point", min=0)] = 5,
    max_per_point: Annotated[int, typer.Option("--max-per-point", min=0)] = 15,
    seed_value: Annotated[
        Optional[int], typer.Option("--seed", help="RNG seed for reproducible data")
    ] = None,
) -> None:
    """Create the demo collection points, optionally with transaction history.

    Points that already exist are left untouched.
    """
    if min_per_point > max_per_point:
        log_error("--min-per-point must not exceed --max-per-point")
        raise typer.Exit(code=1)

    app_config = resolve_config(config, db_path)
    rng = random.Random(seed_value)
    generator = TransactionGenerator(app_config.scheduler, rng=rng)

    try:
        with DatabaseManager(app_config.database.path) as manager:
            if reset:
                log_info("Dropping existing data")
                manager.initialize_schema(force_recreate=True)
            manager.setup()
            store = DuckDBCollectionPointStore(manager)

            created = []
            for data in DEMO_POINTS:
                if store.exists(data["point_id"]):
                    log_info(f"Skipping existing point {data['point_id']}")
                    continue
                created.append(store.create_point(CollectionPointRecord(**data)))

            transactions = 0
            if backfill:
                now = utc_now()
                for point in created:
                    for _ in range(rng.randint(min_per_point, max_per_point)):
                        record = generator.generate(point)
                        age = timedelta(minutes=rng.randrange(BACKFILL_DAYS * 24 * 60))
                        store.create_transaction(
                            record.model_copy(update={"occurred_at": now - age})
                        )
                        transactions += 1
    except Exception as e:
        log_error(f"Error seeding database: {e}")
        raise typer.Exit(code=1)

    log_success(f"Created {len(created)} points and {transactions} transactions")
    output_json({"points_created": len(created), "transactions_created": transactions})
