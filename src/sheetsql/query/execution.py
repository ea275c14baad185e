"""Bounded execution of validated statements on a DuckDB cursor.

Two bounds apply to every statement:
- rows: at most max_rows are returned; one extra row is fetched to detect
  truncation without counting the full result
- time: a watchdog thread interrupts the cursor once the deadline passes
"""

from __future__ import annotations

import math
import threading
import time
from datetime import date, datetime, timedelta
from datetime import time as dt_time
from decimal import Decimal
from typing import Any
from uuid import UUID

import duckdb

from sheetsql.core.logging import get_logger
from sheetsql.query.errors import QueryExecutionError, QueryTimeout
from sheetsql.query.models import FieldDescriptor, QueryResult
from sheetsql.sources.naming import dedupe

logger = get_logger(__name__)

# How often the watchdog repeats the interrupt after the deadline. An interrupt
# that lands before DuckDB starts executing is a no-op, so it is re-sent.
INTERRUPT_INTERVAL = 0.05


class Watchdog(threading.Thread):
    """Interrupts a DuckDB connection once a deadline passes.

    Usage:
        with Watchdog(cursor, timeout=10.0) as watchdog:
            rows = cursor.sql(sql).fetchall()
        if watchdog.fired:
            ...
    """

    def __init__(self, conn: duckdb.DuckDBPyConnection, timeout: float):
        super().__init__(name="sheetsql-query-watchdog", daemon=True)
        self._conn = conn
        self._timeout = timeout
        self._done = threading.Event()
        self.fired = False

    def run(self) -> None:
        if self._done.wait(self._timeout):
            return

        self.fired = True
        while not self._done.is_set():
            try:
                self._conn.interrupt()
            except duckdb.Error as e:
                logger.debug("query_interrupt_failed", error=str(e))
            self._done.wait(INTERRUPT_INTERVAL)

    def stop(self) -> None:
        self._done.set()
        self.join()

    def __enter__(self) -> Watchdog:
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        self.stop()


def unique_names(columns: list[str]) -> list[str]:
    """Suffix repeated result column names (a, a -> a, a_2) so row keys stay distinct."""
    taken: set[str] = set()
    names = []
    for column in columns:
        name = dedupe(column, taken, casefold=False)
        taken.add(name)
        names.append(name)
    return names


def to_json_value(value: Any) -> Any:
    """Convert a DuckDB result value to something json.dumps accepts.

    Text stays text and integers stay integers. Decimals become floats,
    temporal values ISO strings, NaN and infinities null.
    """
    if value is None or isinstance(value, (str, bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, Decimal):
        return to_json_value(float(value))
    if isinstance(value, (datetime, date, dt_time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): to_json_value(v) for k, v in value.items()}
    return str(value)


def execute_bounded(
    cursor: duckdb.DuckDBPyConnection,
    sql: str,
    *,
    max_rows: int,
    timeout_seconds: float,
) -> QueryResult:
    """Run a validated statement with a row limit and a wall-clock limit.

    Args:
        cursor: Read cursor owned by the caller
        sql: Statement that already passed validation
        max_rows: Maximum number of rows to return
        timeout_seconds: Wall-clock limit

    Returns:
        QueryResult; truncated is set when the result had more than max_rows

    Raises:
        QueryTimeout: The deadline passed; partial results are discarded
        QueryExecutionError: DuckDB failed the statement
    """
    start_time = time.time()

    with Watchdog(cursor, timeout_seconds) as watchdog:
        try:
            relation = cursor.sql(sql)
            names = unique_names(relation.columns)
            types = [str(t) for t in relation.types]
            fetched = relation.fetchmany(max_rows + 1)
        except Exception as e:
            # An interrupted statement fails with whatever error DuckDB raises for it
            if watchdog.fired:
                raise QueryTimeout(
                    f"Query exceeded the {timeout_seconds:g} second time limit"
                ) from e
            if isinstance(e, duckdb.Error):
                raise QueryExecutionError(str(e), details=type(e).__name__) from e
            raise

    if watchdog.fired:
        raise QueryTimeout(f"Query exceeded the {timeout_seconds:g} second time limit")

    truncated = len(fetched) > max_rows
    if truncated:
        fetched = fetched[:max_rows]

    rows = [
        {name: to_json_value(value) for name, value in zip(names, row, strict=False)}
        for row in fetched
    ]

    logger.info(
        "query_executed",
        rows=len(rows),
        truncated=truncated,
        duration_seconds=round(time.time() - start_time, 3),
    )
    return QueryResult(
        fields=[FieldDescriptor(name=n, type=t) for n, t in zip(names, types, strict=True)],
        rows=rows,
        row_count=len(rows),
        truncated=truncated,
    )
