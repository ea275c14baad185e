"""SheetSQL - spreadsheet archive ingestion and guarded read-only SQL over DuckDB."""

__version__ = "0.1.0"
