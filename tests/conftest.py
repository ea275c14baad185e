"""Shared pytest fixtures for all tests."""

import csv
import io
import zipfile
from collections.abc import Callable, Generator, Sequence
from pathlib import Path
from typing import Any

import pytest
from openpyxl import Workbook

from sheetsql.core.connections import ConnectionConfig, ConnectionManager
from sheetsql.sources.archive import ArchiveIngestor

Rows = Sequence[Sequence[Any]]


def build_xlsx(sheets: dict[str, Rows]) -> bytes:
    """Build an .xlsx workbook in memory, one worksheet per entry."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    for title, rows in sheets.items():
        worksheet = workbook.create_sheet(title)
        for row in rows:
            worksheet.append(list(row))

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def build_csv(rows: Rows, delimiter: str = ",") -> bytes:
    """Build a UTF-8 CSV file in memory."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8")


def build_zip(members: dict[str, bytes]) -> bytes:
    """Build a zip archive in memory; members keep insertion order."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, payload in members.items():
            archive.writestr(name, payload)
    return buffer.getvalue()


@pytest.fixture
def make_xlsx() -> Callable[[dict[str, Rows]], bytes]:
    return build_xlsx


@pytest.fixture
def make_csv() -> Callable[..., bytes]:
    return build_csv


@pytest.fixture
def make_zip() -> Callable[[dict[str, bytes]], bytes]:
    return build_zip


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory for tests."""
    path = tmp_path / "sheetsql_data"
    path.mkdir()
    return path


@pytest.fixture
def manager(data_dir: Path) -> Generator[ConnectionManager]:
    """Initialized ConnectionManager on a fresh data directory."""
    manager = ConnectionManager(ConnectionConfig.for_directory(data_dir))
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def memory_manager() -> Generator[ConnectionManager]:
    """Initialized ConnectionManager on in-memory databases."""
    manager = ConnectionManager(ConnectionConfig.in_memory())
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def ingestor(manager: ConnectionManager) -> ArchiveIngestor:
    return ArchiveIngestor(manager)


@pytest.fixture
def sales_archive() -> bytes:
    """Archive with a two-sheet workbook and a CSV file (7 data rows)."""
    workbook = build_xlsx(
        {
            "Orders": [
                ["Order ID", "Customer", "Amount"],
                [1, "Acme", 120.5],
                [2, "Globex", 80],
                [3, "Initech", 42.25],
            ],
            "Returns": [
                ["Order ID", "Reason"],
                [2, "Damaged"],
            ],
        }
    )
    regions = build_csv([["Region", "Manager"], ["North", "Ann"], ["South", "Bo"], ["East", "Cy"]])
    return build_zip({"sales.xlsx": workbook, "regions.csv": regions})
