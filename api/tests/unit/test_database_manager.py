"""Tests for DatabaseManager and DDL generation."""

import duckdb
import pytest
from pydantic import BaseModel

from collection_simulator.persistence import (
    CollectionPointRecord,
    DatabaseManager,
    TransactionRecord,
)
from collection_simulator.persistence.schema_generator import (
    generate_create_indexes_ddl,
    generate_create_table_ddl,
    python_type_to_sql_type,
    validate_table_schema,
)


class TestDdlGeneration:
    """DDL is derived from the record models."""

    def test_type_mapping(self):
        assert python_type_to_sql_type(int) == "BIGINT"
        assert python_type_to_sql_type(int | None) == "BIGINT"
        assert python_type_to_sql_type(bool) == "BOOLEAN"

    def test_point_table_has_primary_key_and_nullable_columns(self):
        ddl = generate_create_table_ddl(CollectionPointRecord)

        assert "CREATE TABLE IF NOT EXISTS collection_points" in ddl
        assert "PRIMARY KEY (point_id)" in ddl
        assert "max_amount BIGINT," in ddl
        assert "vpa VARCHAR NOT NULL" in ddl
        assert "status VARCHAR NOT NULL" in ddl

    def test_transaction_table_has_unique_reference(self):
        ddl = generate_create_table_ddl(TransactionRecord)
        assert "UNIQUE (reference)" in ddl

    def test_transaction_indexes(self):
        statements = generate_create_indexes_ddl(TransactionRecord)
        assert any("idx_tx_point_time" in s for s in statements)
        assert generate_create_indexes_ddl(CollectionPointRecord) == []

    def test_model_without_table_name_rejected(self):
        class NotATable(BaseModel):
            x: int

        with pytest.raises(ValueError, match="table_name"):
            generate_create_table_ddl(NotATable)


class TestDatabaseManager:
    """Connection, schema setup and lifecycle."""

    def test_setup_creates_tables(self, db_manager):
        tables = {
            row[0]
            for row in db_manager.conn.execute(
                "SELECT table_name FROM information_schema.tables WHERE table_schema = 'main'"
            ).fetchall()
        }
        assert {"collection_points", "transactions"} <= tables
        assert db_manager.is_initialized()
        assert db_manager.validate_schema()

    def test_fresh_database_is_not_initialized(self):
        with DatabaseManager(":memory:") as manager:
            assert not manager.is_initialized()

    def test_file_database_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "collections.db"
        with DatabaseManager(path) as manager:
            manager.setup()
        assert path.exists()

    def test_setup_is_idempotent(self, db_path):
        with DatabaseManager(db_path) as manager:
            manager.setup()
            manager.setup()
            assert manager.validate_schema()

    def test_force_recreate_drops_rows(self, db_manager, store, make_point):
        store.create_point(make_point("Q1AB2"))

        db_manager.initialize_schema(force_recreate=True)

        assert store.find_by_id("Q1AB2") is None

    def test_validate_reports_missing_column(self):
        with DatabaseManager(":memory:") as manager:
            manager.conn.execute("CREATE TABLE collection_points (point_id VARCHAR)")

            is_valid, errors = validate_table_schema(manager.conn, CollectionPointRecord)

            assert not is_valid
            assert any("vpa" in e for e in errors)

    def test_setup_fails_on_mismatched_schema(self):
        with DatabaseManager(":memory:") as manager:
            manager.conn.execute("CREATE TABLE collection_points (point_id VARCHAR)")
            with pytest.raises(RuntimeError, match="validation failed"):
                manager.setup()

    def test_cursor_after_close_raises(self):
        manager = DatabaseManager(":memory:")
        manager.close()
        manager.close()

        assert manager.closed
        with pytest.raises(RuntimeError, match="closed"):
            manager.cursor()

    def test_cursor_sees_primary_connection_data(self, db_manager, store, make_point):
        store.create_point(make_point("Q1AB2"))
        with db_manager.cursor() as cur:
            assert isinstance(cur, duckdb.DuckDBPyConnection)
            count = cur.execute("SELECT COUNT(*) FROM collection_points").fetchone()[0]
        assert count == 1
