"""
Database Management CLI Commands

Commands for managing the DuckDB persistence layer:
- init: Initialize database schema
- validate: Validate schema against the record models
- list: List tables with row counts
"""

from __future__ import annotations

from typing import Annotated

import duckdb
import typer
from rich.table import Table

from collection_simulator.cli.commands.common import ConfigOption, DbPathOption, resolve_config
from collection_simulator.cli.output import console, log_error, log_info, log_success
from collection_simulator.persistence import DatabaseManager
from collection_simulator.persistence.models import ALL_MODELS

# Create sub-app for database commands
db_app = typer.Typer(help="Database management commands")


@db_app.command("init")
def db_init(
    config: ConfigOption = None,
    db_path: DbPathOption = None,
    force: Annotated[
        bool, typer.Option("--force", help="Drop existing tables first")
    ] = False,
) -> None:
    """Initialize database schema from the record models."""
    path = resolve_config(config, db_path).database.path
    try:
        log_info(f"Initializing database at {path}...")
        with DatabaseManager(path) as manager:
            manager.initialize_schema(force_recreate=force)
        log_success(f"Database initialized at {path}")
    except Exception as e:
        log_error(f"Error initializing database: {e}")
        raise typer.Exit(code=1)


@db_app.command("validate")
def db_validate(
    config: ConfigOption = None,
    db_path: DbPathOption = None,
) -> None:
    """Validate the database schema against the record models."""
    path = resolve_config(config, db_path).database.path
    try:
        with DatabaseManager(path) as manager:
            if not manager.is_initialized():
                log_error(f"Database at {path} has no schema; run `collect-sim db init`")
                raise typer.Exit(code=1)
            if not manager.validate_schema():
                log_error("Schema validation failed (see log for mismatches)")
                raise typer.Exit(code=1)
        log_success("Schema matches the record models")
    except typer.Exit:
        raise
    except Exception as e:
        log_error(f"Error validating schema: {e}")
        raise typer.Exit(code=1)


@db_app.command("list")
def db_list(
    config: ConfigOption = None,
    db_path: DbPathOption = None,
) -> None:
    """List managed tables with their row counts."""
    path = resolve_config(config, db_path).database.path
    try:
        with DatabaseManager(path) as manager:
            table = Table(title=f"Tables in {path}")
            table.add_column("Table", style="cyan")
            table.add_column("Rows", justify="right")
            for model in ALL_MODELS:
                name = model.model_config["table_name"]
                try:
                    count = manager.conn.execute(f"SELECT COUNT(*) FROM {name}").fetchone()[0]
                    table.add_row(name, str(count))
                except duckdb.CatalogException:
                    table.add_row(name, "[red]missing[/red]")
            console.print(table)
    except Exception as e:
        log_error(f"Error listing tables: {e}")
        raise typer.Exit(code=1)
