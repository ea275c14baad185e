"""Tests for ConnectionManager and concurrent store access."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from sheetsql.catalog.manager import CatalogManager
from sheetsql.core.connections import (
    ConnectionConfig,
    ConnectionManager,
    close_default_manager,
    get_connection_manager,
)
from sheetsql.query.guard import QueryGuard
from sheetsql.sources.archive import ArchiveIngestor


class TestConnectionManager:
    """Tests for manager lifecycle."""

    def test_requires_initialize(self, data_dir: Path):
        manager = ConnectionManager(ConnectionConfig.for_directory(data_dir))

        with pytest.raises(RuntimeError, match="not initialized"):
            with manager.duckdb_cursor():
                pass

    def test_initialize_is_idempotent(self, manager: ConnectionManager):
        manager.initialize()

        with manager.duckdb_cursor() as cursor:
            assert cursor.execute("SELECT 1").fetchone() == (1,)

    def test_files_in_data_directory(self, manager: ConnectionManager, data_dir: Path):
        assert (data_dir / "data.duckdb").exists()
        assert (data_dir / "metadata.db").exists()

    def test_data_survives_reopen(self, data_dir: Path, sales_archive: bytes):
        first = ConnectionManager(ConnectionConfig.for_directory(data_dir))
        first.initialize()
        ArchiveIngestor(first).ingest(sales_archive)
        first.close()

        second = ConnectionManager(ConnectionConfig.for_directory(data_dir))
        second.initialize()
        try:
            assert len(CatalogManager(second).list()) == 3
        finally:
            second.close()

    def test_default_manager_is_shared(self, data_dir: Path):
        close_default_manager()
        try:
            manager = get_connection_manager(data_dir=data_dir)
            assert get_connection_manager() is manager
        finally:
            close_default_manager()


class TestConcurrentAccess:
    """Readers use per-call cursors; writers serialize on the write lock."""

    def test_parallel_reads(self, manager: ConnectionManager):
        with manager.duckdb_write() as conn:
            conn.execute("""
                CREATE TABLE test_data AS
                SELECT i AS id, 'value_' || i AS name
                FROM generate_series(1, 1000) AS t(i)
            """)

        def read_with_cursor(worker_id: int) -> tuple[int, int]:
            with manager.duckdb_cursor() as cursor:
                result = cursor.execute(
                    f"SELECT COUNT(*) FROM test_data WHERE id > {worker_id * 100}"
                ).fetchone()
            return worker_id, result[0]

        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(read_with_cursor, range(10)))

        assert len(results) == 10
        for worker_id, count in results:
            assert count == max(0, 1000 - worker_id * 100)

    def test_queries_during_ingestion(self, manager: ConnectionManager, make_csv, make_zip):
        members = {
            f"part{i}.csv": make_csv([["n"]] + [[str(j)] for j in range(500)]) for i in range(8)
        }
        payload = make_zip(members)
        guard = QueryGuard(manager)

        def ingest() -> int:
            return len(ArchiveIngestor(manager).ingest(payload).tables)

        def check_catalog(_: int) -> bool:
            # Every cataloged table must exist with exactly the cataloged row count
            for entry in CatalogManager(manager).list():
                result = guard.execute(f'SELECT COUNT(*) AS n FROM "{entry.table_name}"')
                if result.rows[0]["n"] != entry.rows:
                    return False
            return True

        with ThreadPoolExecutor(max_workers=4) as pool:
            ingest_future = pool.submit(ingest)
            checks = list(pool.map(check_catalog, range(20)))

        assert ingest_future.result() == 8
        assert all(checks)

        with manager.duckdb_cursor() as cursor:
            tables = cursor.execute(
                "SELECT table_name FROM information_schema.tables "
                "WHERE table_name <> '_catalog' ORDER BY 1"
            ).fetchall()
        assert [t[0] for t in tables] == [e.table_name for e in CatalogManager(manager).list()]
