"""Query result models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class FieldDescriptor(BaseModel):
    """A result column and the type DuckDB reports for it."""

    name: str
    type: str


class QueryResult(BaseModel):
    """Rows of a guarded query.

    row_count equals len(rows): when the row limit cuts the result, the count
    is the capped number and truncated is set.
    """

    model_config = ConfigDict(populate_by_name=True)

    fields: list[FieldDescriptor]
    rows: list[dict[str, Any]]
    row_count: int = Field(alias="rowCount")
    truncated: bool = False
