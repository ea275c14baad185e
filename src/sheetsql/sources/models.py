"""Ingestion data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, Field

from sheetsql.catalog.models import CatalogEntry
from sheetsql.sources.cells import Cell


@dataclass
class SheetData:
    """Header and data rows pulled from one sheet.

    overflow is set when the sheet had more data rows than the row budget
    allowed; rows then holds only the rows that fit.
    """

    name: str
    header: list[Cell] | None
    rows: list[list[Cell]] = field(default_factory=list)
    overflow: bool = False


@dataclass
class NormalizedTable:
    """A sheet ready to be written: sanitized columns and text rows."""

    name: str
    columns: list[str]
    rows: list[list[str]]

    @property
    def row_count(self) -> int:
        return len(self.rows)


class IngestionSummary(BaseModel):
    """Outcome of one ingestion run."""

    tables: list[CatalogEntry]
    truncated: bool = False
    total_rows: int = 0
    warnings: list[str] = Field(default_factory=list)
    duration_seconds: float = 0.0
