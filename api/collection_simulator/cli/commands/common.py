"""Option types and config resolution shared by commands."""

from typing import Annotated, Optional

import typer

from collection_simulator.config import AppConfig, load_config, load_config_from_env

ConfigOption = Annotated[
    Optional[str],
    typer.Option("--config", "-c", help="YAML configuration file"),
]
DbPathOption = Annotated[
    Optional[str],
    typer.Option("--db-path", "-d", help="DuckDB file (overrides the configuration)"),
]


def resolve_config(config_path: Optional[str], db_path: Optional[str] = None) -> AppConfig:
    """Load configuration from ``--config`` or the environment, then apply ``--db-path``."""
    config = load_config(config_path) if config_path else load_config_from_env()
    if db_path:
        config = config.model_copy(
            update={"database": config.database.model_copy(update={"path": db_path})}
        )
    return config
