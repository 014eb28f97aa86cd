"""
DDL Generation from Pydantic Models

Builds CREATE TABLE / CREATE INDEX statements from the record models so the
DuckDB schema cannot drift from the model definitions.
"""

import inspect
from datetime import datetime
from enum import Enum
from typing import Any, get_args, get_origin

from pydantic import BaseModel

PYTHON_TO_SQL_TYPE_MAP = {
    str: "VARCHAR",
    int: "BIGINT",
    float: "DOUBLE",
    bool: "BOOLEAN",
    datetime: "TIMESTAMP",
}


def _unwrap_optional(py_type: Any) -> Any:
    """Return X for ``X | None``; other annotations pass through."""
    if get_origin(py_type) is None:
        return py_type
    non_null = [arg for arg in get_args(py_type) if arg is not type(None)]
    return non_null[0] if non_null else py_type


def python_type_to_sql_type(py_type: Any) -> str:
    """Convert a Python type annotation to a DuckDB column type.

    Examples:
        >>> python_type_to_sql_type(int)
        'BIGINT'
        >>> python_type_to_sql_type(int | None)
        'BIGINT'
    """
    py_type = _unwrap_optional(py_type)
    if inspect.isclass(py_type) and issubclass(py_type, Enum):
        return "VARCHAR"
    return PYTHON_TO_SQL_TYPE_MAP.get(py_type, "VARCHAR")


def _is_nullable(py_type: Any) -> bool:
    return get_origin(py_type) is not None and type(None) in get_args(py_type)


def _table_config(model: type[BaseModel]) -> dict[str, Any]:
    config = getattr(model, "model_config", None)
    if not config or "table_name" not in config:
        raise ValueError(f"Model {model.__name__} missing model_config['table_name']")
    return config  # type: ignore[return-value]


def generate_create_table_ddl(model: type[BaseModel]) -> str:
    """Generate a CREATE TABLE statement for a record model.

    Raises:
        ValueError: If the model has no ``table_name`` in its config
    """
    config = _table_config(model)
    table_name = config["table_name"]

    columns = []
    for field_name, field_info in model.model_fields.items():
        sql_type = python_type_to_sql_type(field_info.annotation)
        null_constraint = "" if _is_nullable(field_info.annotation) else " NOT NULL"
        columns.append(f"    {field_name} {sql_type}{null_constraint}")

    primary_key = config.get("primary_key", [])
    if primary_key:
        columns.append(f"    PRIMARY KEY ({', '.join(primary_key)})")

    for unique_cols in config.get("unique", []):
        columns.append(f"    UNIQUE ({', '.join(unique_cols)})")

    return f"CREATE TABLE IF NOT EXISTS {table_name} (\n" + ",\n".join(columns) + "\n);"


def generate_create_indexes_ddl(model: type[BaseModel]) -> list[str]:
    """Generate CREATE INDEX statements from ``model_config['indexes']``."""
    config = _table_config(model)
    table_name = config["table_name"]
    return [
        f"CREATE INDEX IF NOT EXISTS {index_name} ON {table_name} ({', '.join(cols)});"
        for index_name, cols in config.get("indexes", [])
    ]


def generate_full_schema_ddl() -> str:
    """Generate the DDL for every persisted model, indexes included."""
    from .models import ALL_MODELS

    ddl_parts: list[str] = []
    for model in ALL_MODELS:
        ddl_parts.append(generate_create_table_ddl(model))
        ddl_parts.extend(generate_create_indexes_ddl(model))
    return "\n\n".join(ddl_parts)


def validate_table_schema(conn: Any, model: type[BaseModel]) -> tuple[bool, list[str]]:
    """Compare a live table's columns against the model fields.

    Returns:
        Tuple of (is_valid, error messages)
    """
    try:
        table_name = _table_config(model)["table_name"]
    except ValueError as e:
        return False, [str(e)]

    try:
        rows = conn.execute(f"DESCRIBE {table_name}").fetchall()
    except Exception as e:
        return False, [f"Table {table_name} does not exist: {e}"]

    db_fields = {row[0] for row in rows}
    model_fields = set(model.model_fields)

    errors = [
        f"Column '{col}' missing from table {table_name}"
        for col in sorted(model_fields - db_fields)
    ]
    extra = db_fields - model_fields
    if extra:
        errors.append(f"Unexpected columns in {table_name}: {sorted(extra)}")

    return not errors, errors
