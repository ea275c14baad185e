"""Spreadsheet sources: archive ingestion, workbook readers, normalization."""

from sheetsql.sources.archive import ArchiveIngestor, IngestionRun, extract_sheet
from sheetsql.sources.errors import (
    ArchiveTooLarge,
    IngestionError,
    InvalidArchive,
    RowCapExceeded,
    StorageWriteFailure,
    UnsupportedMember,
)
from sheetsql.sources.history import record_upload
from sheetsql.sources.models import IngestionSummary, NormalizedTable, SheetData
from sheetsql.sources.normalizer import normalize, normalize_columns

__all__ = [
    "ArchiveIngestor",
    "ArchiveTooLarge",
    "IngestionError",
    "IngestionRun",
    "IngestionSummary",
    "InvalidArchive",
    "NormalizedTable",
    "RowCapExceeded",
    "SheetData",
    "StorageWriteFailure",
    "UnsupportedMember",
    "extract_sheet",
    "normalize",
    "normalize_columns",
    "record_upload",
]
