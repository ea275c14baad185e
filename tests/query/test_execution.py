"""Tests for bounded query execution."""

import math
import time
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

import pytest

from sheetsql.query.errors import QueryExecutionError, QueryTimeout
from sheetsql.query.execution import Watchdog, execute_bounded, to_json_value
from sheetsql.query.guard import QueryGuard
from sheetsql.sources.archive import ArchiveIngestor

SLOW_SQL = "SELECT SUM(a.range + b.range) FROM range(1000000) a CROSS JOIN range(1000000) b"


@pytest.fixture
def guard(memory_manager) -> QueryGuard:
    return QueryGuard(memory_manager, max_rows=50_000, timeout_seconds=10.0)


class TestRowLimit:
    """rowCount is capped: it always equals the number of rows returned."""

    def test_under_limit(self, guard):
        result = guard.execute("SELECT * FROM range(10)")

        assert result.row_count == 10
        assert len(result.rows) == 10
        assert not result.truncated

    def test_exactly_at_limit(self, guard):
        result = guard.execute("SELECT * FROM range(50000)")

        assert result.row_count == 50_000
        assert not result.truncated

    def test_over_limit(self, guard):
        result = guard.execute("SELECT * FROM range(60000)")

        assert result.truncated
        assert result.row_count == 50_000
        assert len(result.rows) == 50_000
        assert result.rows[-1] == {"range": 49_999}


class TestDuplicateColumns:
    """Repeated result column names get suffixes so no value is dropped."""

    def test_same_alias(self, guard):
        result = guard.execute("SELECT 1 AS a, 2 AS a, 3 AS a")

        assert [f.name for f in result.fields] == ["a", "a_2", "a_3"]
        assert result.rows == [{"a": 1, "a_2": 2, "a_3": 3}]

    def test_join_with_shared_header(self, guard, memory_manager):
        with memory_manager.duckdb_write() as conn:
            conn.execute('CREATE TABLE orders ("Name" VARCHAR, "Qty" VARCHAR)')
            conn.execute("INSERT INTO orders VALUES ('Widget', '3')")
            conn.execute('CREATE TABLE products ("Name" VARCHAR, "Price" VARCHAR)')
            conn.execute("INSERT INTO products VALUES ('Widget', '9.50')")

        result = guard.execute('SELECT * FROM orders o JOIN products p ON o."Name" = p."Name"')

        assert [f.name for f in result.fields] == ["Name", "Qty", "Name_2", "Price"]
        assert result.rows == [
            {"Name": "Widget", "Qty": "3", "Name_2": "Widget", "Price": "9.50"}
        ]


class TestTimeout:
    """Statements past the deadline are interrupted."""

    def test_slow_query_times_out(self, memory_manager):
        guard = QueryGuard(memory_manager, timeout_seconds=0.5)

        start = time.time()
        with pytest.raises(QueryTimeout) as exc_info:
            guard.execute(SLOW_SQL)

        assert exc_info.value.status_code == 408
        assert time.time() - start < 10

    def test_store_usable_after_timeout(self, memory_manager):
        guard = QueryGuard(memory_manager, timeout_seconds=0.5)
        with pytest.raises(QueryTimeout):
            guard.execute(SLOW_SQL)

        assert guard.execute("SELECT 42 AS answer").rows == [{"answer": 42}]

    def test_watchdog_does_not_fire_early(self, memory_manager):
        with memory_manager.duckdb_cursor() as cursor:
            with Watchdog(cursor, timeout=5.0) as watchdog:
                cursor.execute("SELECT 1").fetchall()

        assert not watchdog.fired


class TestResults:
    """Field types and JSON-safe values."""

    def test_round_trip_keeps_text(self, memory_manager, guard, make_xlsx):
        payload = make_xlsx({"Items": [["Name", "Qty"], ["Widget", "3"], ["Gadget", "7"]]})
        ArchiveIngestor(memory_manager).ingest(payload, "inventory.xlsx")

        result = guard.execute('SELECT * FROM "inventory" ORDER BY "Name"')

        assert result.rows == [{"Name": "Gadget", "Qty": "7"}, {"Name": "Widget", "Qty": "3"}]
        fields = [(f.name, f.type) for f in result.fields]
        assert fields == [("Name", "VARCHAR"), ("Qty", "VARCHAR")]

    def test_computed_integers_stay_integers(self, memory_manager, guard, make_csv, make_zip):
        payload = make_zip({"items.csv": make_csv([["Name"], ["a"], ["b"], ["c"]])})
        ArchiveIngestor(memory_manager).ingest(payload)

        result = guard.execute("SELECT COUNT(*) AS n FROM items")

        assert result.rows == [{"n": 3}]
        assert result.fields[0].type == "BIGINT"

    def test_catalog_is_queryable(self, memory_manager, guard, sales_archive):
        ArchiveIngestor(memory_manager).ingest(sales_archive)

        result = guard.execute('SELECT table_name, "rows" FROM "_catalog" ORDER BY table_name')

        assert result.rows == [
            {"table_name": "regions", "rows": 3},
            {"table_name": "sales_orders", "rows": 3},
            {"table_name": "sales_returns", "rows": 1},
        ]

    def test_engine_error_is_surfaced(self, guard):
        with pytest.raises(QueryExecutionError) as exc_info:
            guard.execute("SELECT * FROM missing_table")

        assert "missing_table" in exc_info.value.message
        assert exc_info.value.status_code == 400

    def test_execute_bounded_directly(self, memory_manager):
        with memory_manager.duckdb_cursor() as cursor:
            result = execute_bounded(
                cursor,
                "SELECT 1.5::DECIMAL(4, 2) AS d, DATE '2024-01-31' AS day",
                max_rows=10,
                timeout_seconds=5.0,
            )

        assert result.rows == [{"d": 1.5, "day": "2024-01-31"}]
        assert [f.type for f in result.fields] == ["DECIMAL(4,2)", "DATE"]


class TestToJsonValue:
    """Tests for to_json_value()."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, None),
            ("text", "text"),
            (7, 7),
            (True, True),
            (2.5, 2.5),
            (float("nan"), None),
            (float("inf"), None),
            (Decimal("12.25"), 12.25),
            (date(2024, 1, 31), "2024-01-31"),
            (datetime(2024, 1, 31, 9, 0), "2024-01-31T09:00:00"),
            (b"\x01\xff", "01ff"),
            (UUID("12345678-1234-5678-1234-567812345678"), "12345678-1234-5678-1234-567812345678"),
            ([1, Decimal("0.5")], [1, 0.5]),
            ({"k": float("nan")}, {"k": None}),
        ],
    )
    def test_conversion(self, value, expected):
        converted = to_json_value(value)
        if isinstance(expected, float):
            assert math.isclose(converted, expected)
        else:
            assert converted == expected
