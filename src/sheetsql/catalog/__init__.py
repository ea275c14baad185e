"""Catalog of ingested tables."""

from sheetsql.catalog.manager import CATALOG_TABLE, CatalogManager, create_catalog_table
from sheetsql.catalog.models import CatalogEntry, format_columns

__all__ = [
    "CATALOG_TABLE",
    "CatalogEntry",
    "CatalogManager",
    "create_catalog_table",
    "format_columns",
]
