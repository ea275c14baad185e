"""Query guard - only single read-only SELECT statements reach DuckDB.

Validation fails closed and runs in this order:
1. empty or comment-only input
2. lexical scan for write/DDL/admin keywords and file-access table functions
3. sqlglot parse (duckdb dialect); exactly one statement
4. root node must be a SELECT (WITH allowed) or a UNION/INTERSECT/EXCEPT of them
5. no file-reading function and no path-like table reference anywhere in the tree

The lexical scan works on the raw text, string literals included, so a literal
such as 'load' is rejected too.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import sqlglot
from sqlglot import exp
from sqlglot.errors import ParseError, TokenError
from sqlglot.tokens import TokenType

from sheetsql.core.config import get_settings
from sheetsql.core.logging import get_logger
from sheetsql.query.errors import ValidationRejected
from sheetsql.query.execution import execute_bounded
from sheetsql.query.models import QueryResult

if TYPE_CHECKING:
    from sheetsql.core.connections import ConnectionManager

logger = get_logger(__name__)

FORBIDDEN_KEYWORDS: tuple[str, ...] = (
    "INSERT",
    "UPDATE",
    "DELETE",
    "DROP",
    "ALTER",
    "CREATE",
    "ATTACH",
    "DETACH",
    "COPY",
    "PRAGMA",
    "TRUNCATE",
    "MERGE",
    "GRANT",
    "REVOKE",
    "INSTALL",
    "LOAD",
    "EXPORT",
    "IMPORT",
    "VACUUM",
    "CHECKPOINT",
    "CALL",
    "SET",
    "RESET",
)

FILE_ACCESS_FUNCTIONS: tuple[str, ...] = (
    "read_csv",
    "read_csv_auto",
    "read_parquet",
    "parquet_scan",
    "read_json",
    "read_json_auto",
    "read_json_objects",
    "read_ndjson",
    "read_text",
    "read_blob",
    "read_xlsx",
    "glob",
    "sniff_csv",
    "parquet_metadata",
    "parquet_schema",
    "iceberg_scan",
    "delta_scan",
    "sqlite_scan",
    "postgres_scan",
    "mysql_scan",
    "query_table",
)

_KEYWORD_PATTERN = re.compile(
    r"\b(" + "|".join(FORBIDDEN_KEYWORDS) + r")\b",
    re.IGNORECASE,
)
_FUNCTION_PATTERN = re.compile(
    r"\b(" + "|".join(FILE_ACCESS_FUNCTIONS) + r")\s*\(",
    re.IGNORECASE,
)
# DuckDB replacement scans: FROM 'data.csv' reads a file
_FILE_SCAN_PATTERN = re.compile(r"\b(?:FROM|JOIN)\s+'", re.IGNORECASE)

_ALLOWED_ROOTS = (exp.Select, exp.Union, exp.Intersect, exp.Except)
_FORBIDDEN_NODES = (exp.Insert, exp.Update, exp.Delete, exp.Create, exp.Drop, exp.Command)

# Compared without underscores: sqlglot's typed nodes (exp.ReadCSV -> "readcsv")
# and anonymous calls (read_csv -> "readcsv") land on the same key.
_FILE_ACCESS_KEYS = frozenset(name.replace("_", "") for name in FILE_ACCESS_FUNCTIONS)

# Table names DuckDB would resolve as a file path instead of a table
_PATH_LIKE_NAME = re.compile(r"[/\\.*?~]")


def validate_sql(sql: str) -> str:
    """Validate a statement and return it ready for execution.

    Args:
        sql: Raw statement text

    Returns:
        The statement, trimmed, with a single trailing semicolon removed

    Raises:
        ValidationRejected: The statement is not a single read-only SELECT
    """
    if sql is None or not sql.strip():
        raise ValidationRejected("SQL statement is empty")

    try:
        tokens = sqlglot.tokenize(sql, read="duckdb")
    except TokenError as e:
        raise ValidationRejected("SQL statement could not be tokenized", details=str(e)) from e
    if not any(token.token_type != TokenType.SEMICOLON for token in tokens):
        raise ValidationRejected("SQL statement is empty")

    match = _KEYWORD_PATTERN.search(sql)
    if match:
        raise ValidationRejected(
            f"Keyword {match.group(1).upper()} is not allowed; only SELECT queries are accepted"
        )

    match = _FUNCTION_PATTERN.search(sql)
    if match:
        raise ValidationRejected(
            f"Function {match.group(1).lower()}() reads files and is not allowed"
        )

    if _FILE_SCAN_PATTERN.search(sql):
        raise ValidationRejected("Reading files by path is not allowed")

    try:
        statements = [s for s in sqlglot.parse(sql, read="duckdb") if s is not None]
    except ParseError as e:
        raise ValidationRejected("SQL statement could not be parsed", details=str(e)) from e

    if not statements:
        raise ValidationRejected("SQL statement is empty")
    if len(statements) > 1:
        raise ValidationRejected(f"Only one statement is allowed, got {len(statements)}")

    root = statements[0]
    while isinstance(root, (exp.Subquery, exp.Paren)):
        root = root.this

    if not isinstance(root, _ALLOWED_ROOTS):
        raise ValidationRejected(f"Only SELECT queries are allowed, got {root.key.upper()}")

    forbidden = root.find(*_FORBIDDEN_NODES)
    if forbidden is not None:
        raise ValidationRejected(
            f"Statement contains a {forbidden.key.upper()} clause; only SELECT queries are allowed"
        )

    _check_file_access(root)

    cleaned = sql.strip()
    if cleaned.endswith(";"):
        cleaned = cleaned[:-1].rstrip()
    return cleaned


def _function_name(node: exp.Func) -> str:
    if isinstance(node, exp.Anonymous):
        return str(node.name)
    return node.key


def _check_file_access(root: exp.Expression) -> None:
    """Reject file-reading functions and path-like table references in the parsed tree.

    Catches what the lexical scan cannot see: comments between a function
    name and its parenthesis, and paths written as quoted identifiers.
    """
    for func in root.find_all(exp.Func):
        name = _function_name(func)
        if name.lower().replace("_", "") in _FILE_ACCESS_KEYS:
            raise ValidationRejected(f"Function {name.lower()}() reads files and is not allowed")

    for table in root.find_all(exp.Table):
        if isinstance(table.this, exp.Literal) or _PATH_LIKE_NAME.search(table.name):
            raise ValidationRejected("Reading files by path is not allowed")


class QueryGuard:
    """Validates and runs read-only queries against the DuckDB store."""

    def __init__(
        self,
        manager: ConnectionManager,
        *,
        max_rows: int | None = None,
        timeout_seconds: float | None = None,
    ):
        settings = get_settings()
        self._manager = manager
        self.max_rows = settings.query_max_rows if max_rows is None else max_rows
        self.timeout_seconds = (
            settings.query_timeout_seconds if timeout_seconds is None else timeout_seconds
        )

    def validate(self, sql: str) -> str:
        """See validate_sql()."""
        return validate_sql(sql)

    def execute(self, sql: str) -> QueryResult:
        """Validate and run a statement on a fresh read cursor.

        Raises:
            ValidationRejected: Never executed
            QueryTimeout: Interrupted at the deadline
            QueryExecutionError: DuckDB error, message passed through
        """
        try:
            statement = self.validate(sql)
        except ValidationRejected as e:
            logger.info("query_rejected", reason=e.message)
            raise

        with self._manager.duckdb_cursor() as cursor:
            return execute_bounded(
                cursor,
                statement,
                max_rows=self.max_rows,
                timeout_seconds=self.timeout_seconds,
            )
