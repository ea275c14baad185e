"""Map archive members to workbook readers by extension."""

from __future__ import annotations

from pathlib import PurePosixPath

from sheetsql.sources.base import WorkbookReader
from sheetsql.sources.csv import CSVReader
from sheetsql.sources.errors import UnsupportedMember
from sheetsql.sources.excel import ExcelReader

READERS: tuple[type[WorkbookReader], ...] = (ExcelReader, CSVReader)

SUPPORTED_EXTENSIONS: frozenset[str] = frozenset(
    ext for reader in READERS for ext in reader.extensions
)


def is_supported(member_name: str) -> bool:
    """Whether the member's extension has a reader."""
    return PurePosixPath(member_name).suffix.lower() in SUPPORTED_EXTENSIONS


def open_workbook(member_name: str, data: bytes) -> WorkbookReader:
    """Open a member with the reader for its extension.

    Raises:
        UnsupportedMember: Unknown extension, or the payload does not match it
    """
    suffix = PurePosixPath(member_name).suffix.lower()
    for reader_cls in READERS:
        if suffix in reader_cls.extensions:
            return reader_cls(member_name, data)

    supported = ", ".join(sorted(SUPPORTED_EXTENSIONS))
    raise UnsupportedMember(f"{member_name}: unsupported file type (supported: {supported})")
