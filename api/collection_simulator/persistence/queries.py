"""
Analytical Query Interface

Transaction listing and aggregate queries for the dashboard.
Functions return Polars DataFrames; callers convert at the edge.
"""

from datetime import datetime
from typing import Any

import duckdb
import polars as pl


def _transaction_filters(
    point_id: str | None = None,
    outcome: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> tuple[str, list[Any]]:
    """Build a WHERE clause (possibly empty) and its parameters."""
    clauses: list[str] = []
    params: list[Any] = []
    if point_id is not None:
        clauses.append("point_id = ?")
        params.append(point_id)
    if outcome is not None:
        clauses.append("outcome = ?")
        params.append(outcome)
    if start is not None:
        clauses.append("occurred_at >= ?")
        params.append(start)
    if end is not None:
        clauses.append("occurred_at <= ?")
        params.append(end)
    where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
    return where, params


def get_transactions(
    conn: duckdb.DuckDBPyConnection,
    point_id: str | None = None,
    outcome: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = 10,
    offset: int = 0,
) -> pl.DataFrame:
    """Get a page of transactions, newest first.

    Examples:
        >>> df = get_transactions(conn, point_id="Q1AB2", limit=5)
        >>> df["outcome"].to_list()
        ['Success', 'Success', 'Failed', 'Success', 'Pending']
    """
    where, params = _transaction_filters(point_id, outcome, start, end)
    query = f"""
        SELECT *
        FROM transactions
        {where}
        ORDER BY occurred_at DESC, payment_id
        LIMIT ? OFFSET ?
    """
    return conn.execute(query, [*params, limit, offset]).pl()


def count_transactions(
    conn: duckdb.DuckDBPyConnection,
    point_id: str | None = None,
    outcome: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
) -> int:
    """Count transactions matching the same filters as ``get_transactions``."""
    where, params = _transaction_filters(point_id, outcome, start, end)
    row = conn.execute(f"SELECT COUNT(*) FROM transactions {where}", params).fetchone()
    return int(row[0]) if row else 0


def get_outcome_breakdown(
    conn: duckdb.DuckDBPyConnection, point_id: str | None = None
) -> pl.DataFrame:
    """Transaction count and volume per outcome.

    Returns:
        Polars DataFrame with columns outcome, count, total_amount
    """
    where, params = _transaction_filters(point_id)
    query = f"""
        SELECT
            outcome,
            COUNT(*) AS count,
            CAST(SUM(amount) AS BIGINT) AS total_amount
        FROM transactions
        {where}
        GROUP BY outcome
        ORDER BY outcome
    """
    return conn.execute(query, params).pl()


def summarize_breakdown(breakdown: pl.DataFrame) -> dict[str, Any]:
    """Collapse an outcome breakdown into dashboard totals.

    ``success_rate`` is a percentage rounded to two places, 0.0 when there
    are no transactions.
    """
    if breakdown.is_empty():
        return {
            "total_transactions": 0,
            "total_amount": 0,
            "success_rate": 0.0,
            "outcome_breakdown": [],
        }

    total = int(breakdown["count"].sum())
    successes = breakdown.filter(pl.col("outcome") == "Success")["count"].sum()
    return {
        "total_transactions": total,
        "total_amount": int(breakdown["total_amount"].sum()),
        "success_rate": round(int(successes) / total * 100, 2),
        "outcome_breakdown": breakdown.to_dicts(),
    }
