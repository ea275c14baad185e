"""Guarded read-only SQL over the ingested tables."""

from sheetsql.query.errors import (
    QueryError,
    QueryExecutionError,
    QueryTimeout,
    ValidationRejected,
)
from sheetsql.query.execution import Watchdog, execute_bounded, to_json_value, unique_names
from sheetsql.query.guard import QueryGuard, validate_sql
from sheetsql.query.models import FieldDescriptor, QueryResult

__all__ = [
    "FieldDescriptor",
    "QueryError",
    "QueryExecutionError",
    "QueryGuard",
    "QueryResult",
    "QueryTimeout",
    "ValidationRejected",
    "Watchdog",
    "execute_bounded",
    "to_json_value",
    "unique_names",
    "validate_sql",
]
