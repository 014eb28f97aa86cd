"""
DuckDB Connection Manager

Owns the DuckDB connection for the collection point database: schema
initialization from the record models, schema validation, and per-call
cursors for work dispatched to worker threads.
"""

import logging
from pathlib import Path

import duckdb

from .models import ALL_MODELS
from .schema_generator import generate_full_schema_ddl, validate_table_schema

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Manages DuckDB connection and schema.

    Usage:
        manager = DatabaseManager("collections.db")
        manager.setup()

        with DatabaseManager(":memory:") as manager:
            manager.setup()
            with manager.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM transactions")

    A DuckDB connection object is not safe to share between threads;
    ``cursor()`` hands out a duplicate connection onto the same database,
    which is. The store opens one per call.
    """

    def __init__(self, db_path: str | Path = "collections.db") -> None:
        """Initialize database manager.

        Args:
            db_path: Path to DuckDB database file, or ``":memory:"``
        """
        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = duckdb.connect(str(self.db_path))
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def cursor(self) -> duckdb.DuckDBPyConnection:
        """Open a thread-safe cursor onto the database.

        The returned object is a context manager; leaving it closes the
        cursor.
        """
        if self._closed:
            raise RuntimeError(f"Database {self.db_path} is closed")
        return self.conn.cursor()

    def initialize_schema(self, force_recreate: bool = False) -> None:
        """Create tables and indexes from the record models.

        Safe to run repeatedly (``IF NOT EXISTS``).

        Args:
            force_recreate: Drop the managed tables first
        """
        logger.info("Initializing database schema at %s", self.db_path)
        if force_recreate:
            self._drop_all_tables()

        # DuckDB has no executescript
        for statement in (s.strip() for s in generate_full_schema_ddl().split(";")):
            if statement:
                self.conn.execute(statement)

    def is_initialized(self) -> bool:
        """Check whether the core tables exist."""
        try:
            self.conn.execute("SELECT 1 FROM collection_points LIMIT 1")
            return True
        except duckdb.Error:
            return False

    def validate_schema(self) -> bool:
        """Validate every managed table against its model.

        Returns:
            True if all tables match, False if any mismatch was found
        """
        all_valid = True
        for model in ALL_MODELS:
            table_name = model.model_config.get("table_name", "unknown")
            is_valid, errors = validate_table_schema(self.conn, model)
            if is_valid:
                logger.debug("Schema ok: %s", table_name)
                continue
            all_valid = False
            for error in errors:
                logger.error("Schema mismatch in %s: %s", table_name, error)
        return all_valid

    def setup(self) -> None:
        """Initialize and validate the schema.

        Raises:
            RuntimeError: If schema validation fails
        """
        self.initialize_schema()
        if not self.validate_schema():
            raise RuntimeError(
                "Database schema validation failed. "
                "The database is out of sync with the record models; "
                "delete it and reinitialize."
            )
        logger.info("Database setup complete")

    def _drop_all_tables(self) -> None:
        # transactions first, it references collection_points
        for model in reversed(ALL_MODELS):
            self.conn.execute(f"DROP TABLE IF EXISTS {model.model_config['table_name']}")

    def close(self) -> None:
        """Close the database connection. Idempotent."""
        if not self._closed:
            self.conn.close()
            self._closed = True

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
