"""Materialize a normalized table in DuckDB."""

from __future__ import annotations

import duckdb
import pandas as pd

from sheetsql.sources.models import NormalizedTable
from sheetsql.storage.sql import quote_identifier

_STAGING_VIEW = "sheetsql_staging"


def write_table(
    conn: duckdb.DuckDBPyConnection,
    table: NormalizedTable,
    chunk_rows: int = 50_000,
) -> None:
    """Create (or replace) the table with all-VARCHAR columns and load its rows.

    Runs on the caller's connection and inside the caller's transaction.
    Rows are staged through a pandas frame in chunks so a large sheet is not
    copied into a single frame at once.

    Args:
        conn: DuckDB write connection
        table: Normalized table to write
        chunk_rows: Rows per insert batch
    """
    target = quote_identifier(table.name)
    column_defs = ", ".join(f"{quote_identifier(c)} VARCHAR" for c in table.columns)
    conn.execute(f"CREATE OR REPLACE TABLE {target} ({column_defs})")

    # Positional staging names keep arbitrary header text out of pandas
    staging_columns = [f"c{i}" for i in range(len(table.columns))]

    for start in range(0, table.row_count, chunk_rows):
        frame = pd.DataFrame(
            table.rows[start : start + chunk_rows],
            columns=staging_columns,
            dtype=object,
        )
        conn.register(_STAGING_VIEW, frame)
        try:
            conn.execute(f"INSERT INTO {target} SELECT * FROM {_STAGING_VIEW}")
        finally:
            conn.unregister(_STAGING_VIEW)
