"""Catalog entry model."""

from __future__ import annotations

from pydantic import BaseModel, Field

COLUMN_SEPARATOR = ", "


def format_columns(columns: list[str]) -> str:
    """Render an ordered column list as the catalog's display string."""
    return COLUMN_SEPARATOR.join(columns)


class CatalogEntry(BaseModel):
    """One ingested table as recorded in the "_catalog" table."""

    table_name: str
    columns: str = Field(description="Ordered column names, comma separated")
    rows: int = Field(ge=0)

    @property
    def column_names(self) -> list[str]:
        """Column names in table order.

        Ingested column names never contain the separator, so splitting is exact.
        """
        if not self.columns:
            return []
        return self.columns.split(COLUMN_SEPARATOR)
