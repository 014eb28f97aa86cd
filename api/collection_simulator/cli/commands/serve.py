"""Serve command: run the HTTP API under uvicorn."""

from __future__ import annotations

import os
from typing import Annotated, Optional

import typer
import uvicorn

from collection_simulator.cli.commands.common import ConfigOption, DbPathOption, resolve_config
from collection_simulator.cli.output import configure_logging, log_info
from collection_simulator.config.loader import (
    ENV_CONFIG_PATH,
    ENV_DB_PATH,
    ENV_INTERVAL,
    ENV_LOG_LEVEL,
)


def serve(
    config: ConfigOption = None,
    db_path: DbPathOption = None,
    host: Annotated[Optional[str], typer.Option("--host", help="Bind address")] = None,
    port: Annotated[Optional[int], typer.Option("--port", "-p", help="Bind port")] = None,
    interval: Annotated[
        Optional[float],
        typer.Option("--interval", help="Seconds between ticks", min=0.001),
    ] = None,
    log_level: Annotated[
        Optional[str], typer.Option("--log-level", help="DEBUG, INFO, WARNING, ...")
    ] = None,
    reload: Annotated[bool, typer.Option("--reload", help="Reload on code changes")] = False,
) -> None:
    """Run the API server; running simulations resume on startup."""
    # The app resolves its own configuration from the environment
    if config:
        os.environ[ENV_CONFIG_PATH] = config
    if db_path:
        os.environ[ENV_DB_PATH] = db_path
    if interval is not None:
        os.environ[ENV_INTERVAL] = str(interval)
    if log_level:
        os.environ[ENV_LOG_LEVEL] = log_level

    app_config = resolve_config(None)
    configure_logging(app_config.server.log_level)

    bind_host = host or app_config.server.host
    bind_port = port or app_config.server.port
    log_info(f"Serving on http://{bind_host}:{bind_port} (db: {app_config.database.path})")

    uvicorn.run(
        "collection_simulator.api.main:app",
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_config=None,
        log_level=app_config.server.log_level.lower(),
    )
