"""Inspection commands: stored point status and one-off ticks."""

from __future__ import annotations

import asyncio
from typing import Annotated

import typer
from rich.table import Table

from collection_simulator.cli.commands.common import ConfigOption, DbPathOption, resolve_config
from collection_simulator.cli.output import (
    console,
    log_error,
    log_success,
    log_warning,
    output_json,
)
from collection_simulator.persistence import DatabaseManager, DuckDBCollectionPointStore
from collection_simulator.simulation import SimulationScheduler


def status(
    config: ConfigOption = None,
    db_path: DbPathOption = None,
    as_json: Annotated[
        bool, typer.Option("--json", help="Write rows to stdout as JSON")
    ] = False,
) -> None:
    """Show every collection point with its stored simulation flag.

    This reads the database only; tasks running inside a server process are
    not visible here (use GET /api/simulation/status for that).
    """
    app_config = resolve_config(config, db_path)
    try:
        with DatabaseManager(app_config.database.path) as manager:
            manager.setup()
            store = DuckDBCollectionPointStore(manager)
            rows = [
                {
                    "point_id": p.point_id,
                    "reference_name": p.reference_name,
                    "status": p.status.value,
                    "simulation_enabled": p.simulation_enabled,
                    "transactions": store.count_transactions(p.point_id),
                }
                for p in store.list_all_points()
            ]
    except Exception as e:
        log_error(f"Error reading database: {e}")
        raise typer.Exit(code=1)

    if as_json:
        output_json(rows)
        return

    table = Table(title="Collection points")
    table.add_column("ID", style="cyan")
    table.add_column("Reference")
    table.add_column("Status")
    table.add_column("Simulation")
    table.add_column("Transactions", justify="right")
    for row in rows:
        table.add_row(
            row["point_id"],
            row["reference_name"],
            row["status"],
            "[green]on[/green]" if row["simulation_enabled"] else "off",
            str(row["transactions"]),
        )
    console.print(table)


def tick(
    point_id: Annotated[str, typer.Argument(help="Collection point to generate for")],
    config: ConfigOption = None,
    db_path: DbPathOption = None,
) -> None:
    """Run one generation step for an eligible point and print the transactions."""
    app_config = resolve_config(config, db_path)
    try:
        with DatabaseManager(app_config.database.path) as manager:
            manager.setup()
            scheduler = SimulationScheduler(
                DuckDBCollectionPointStore(manager), app_config.scheduler
            )
            generated = asyncio.run(scheduler.tick(point_id))
    except Exception as e:
        log_error(f"Error running tick: {e}")
        raise typer.Exit(code=1)

    if generated is None:
        log_warning(f"Nothing generated: {point_id} is missing, Inactive or not simulating")
        raise typer.Exit(code=1)

    log_success(f"Generated {len(generated)} transaction(s) for {point_id}")
    output_json([t.model_dump(mode="json") for t in generated])
