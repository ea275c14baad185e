"""Catalog manager - the "_catalog" table describing every ingested table.

The catalog lives in DuckDB next to the tables it describes, so a table write
and its catalog upsert can share one transaction: readers (each on their own
cursor snapshot) never see a catalog row without its table or the reverse.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import duckdb

from sheetsql.catalog.models import CatalogEntry, format_columns
from sheetsql.core.logging import get_logger
from sheetsql.storage.sql import quote_identifier

if TYPE_CHECKING:
    from sheetsql.core.connections import ConnectionManager

logger = get_logger(__name__)

CATALOG_TABLE = "_catalog"

_CATALOG = quote_identifier(CATALOG_TABLE)


def create_catalog_table(conn: duckdb.DuckDBPyConnection) -> None:
    """Create the catalog table if it does not exist yet."""
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {_CATALOG} (
            table_name VARCHAR PRIMARY KEY,
            "columns" VARCHAR NOT NULL,
            "rows" BIGINT NOT NULL
        )
    """)


class CatalogManager:
    """Reads and writes catalog entries through a ConnectionManager.

    upsert() is the only path that mutates the catalog. Pass the open write
    connection of the surrounding transaction so the entry commits together
    with the table it describes.
    """

    def __init__(self, manager: ConnectionManager):
        self._manager = manager

    def ensure(self) -> None:
        """Create the catalog table if missing."""
        with self._manager.duckdb_write() as conn:
            create_catalog_table(conn)

    def upsert(
        self,
        table_name: str,
        columns: list[str],
        row_count: int,
        *,
        conn: duckdb.DuckDBPyConnection | None = None,
    ) -> CatalogEntry:
        """Insert or replace the catalog row for a table.

        Args:
            table_name: Name of the materialized table
            columns: Ordered column names
            row_count: Number of rows written
            conn: Write connection of an open transaction. When omitted the
                upsert takes the write lock and commits on its own.

        Returns:
            The stored CatalogEntry
        """
        entry = CatalogEntry(
            table_name=table_name,
            columns=format_columns(columns),
            rows=row_count,
        )

        if conn is not None:
            self._write(conn, entry)
        else:
            with self._manager.duckdb_write() as write_conn:
                self._write(write_conn, entry)

        logger.debug("catalog_upserted", table=table_name, rows=row_count)
        return entry

    def _write(self, conn: duckdb.DuckDBPyConnection, entry: CatalogEntry) -> None:
        conn.execute(
            f'INSERT OR REPLACE INTO {_CATALOG} (table_name, "columns", "rows") VALUES (?, ?, ?)',
            [entry.table_name, entry.columns, entry.rows],
        )

    def get(self, table_name: str) -> CatalogEntry | None:
        """Get one catalog entry, or None when the table is not cataloged."""
        with self._manager.duckdb_cursor() as cursor:
            row = cursor.execute(
                f'SELECT table_name, "columns", "rows" FROM {_CATALOG} WHERE table_name = ?',
                [table_name],
            ).fetchone()

        if row is None:
            return None
        return CatalogEntry(table_name=row[0], columns=row[1], rows=row[2])

    def list(self) -> list[CatalogEntry]:
        """All catalog entries ordered by table name."""
        with self._manager.duckdb_cursor() as cursor:
            rows = cursor.execute(
                f'SELECT table_name, "columns", "rows" FROM {_CATALOG} ORDER BY table_name'
            ).fetchall()

        return [CatalogEntry(table_name=r[0], columns=r[1], rows=r[2]) for r in rows]
