"""Archive ingestor - zip of spreadsheets in, cataloged DuckDB tables out.

Flow per upload:
    open zip -> list workbook members (archive order)
        -> per member: open reader (xlsx/xlsm/csv)
            -> per sheet: header + rows within the row budget
                -> normalize -> table write + catalog upsert (one transaction)

Member problems (unsupported type, unreadable workbook, empty sheet) are
collected as warnings and never stop the run. The run fails only when the
upload is not an archive, yields no tables, or a storage write fails.
"""

from __future__ import annotations

import time
import zipfile
import zlib
from collections.abc import Callable
from dataclasses import dataclass, field
from io import BytesIO
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from sheetsql.catalog.manager import CatalogManager
from sheetsql.catalog.models import CatalogEntry
from sheetsql.core.config import Settings, get_settings
from sheetsql.core.logging import get_logger
from sheetsql.core.models import Result
from sheetsql.sources.base import SheetSource, WorkbookReader
from sheetsql.sources.cells import Cell, classify
from sheetsql.sources.errors import (
    ArchiveTooLarge,
    InvalidArchive,
    RowCapExceeded,
    StorageWriteFailure,
    UnsupportedMember,
)
from sheetsql.sources.models import IngestionSummary, NormalizedTable, SheetData
from sheetsql.sources.naming import dedupe, table_name_for
from sheetsql.sources.normalizer import normalize
from sheetsql.sources.registry import is_supported, open_workbook
from sheetsql.sources.writer import write_table

if TYPE_CHECKING:
    from sheetsql.core.connections import ConnectionManager

logger = get_logger(__name__)

_WORKBOOK_MARKER = "xl/workbook.xml"

# Corrupt data, encrypted members, unsupported compression methods
_EXTRACT_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, RuntimeError, NotImplementedError)


@dataclass
class IngestionRun:
    """Transient state of one ingestion run."""

    row_cap: int
    rows_ingested: int = 0
    truncated: bool = False
    entries: list[CatalogEntry] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    _table_names: set[str] = field(default_factory=set, repr=False)

    @property
    def remaining(self) -> int:
        """Rows still allowed before the cap."""
        return max(self.row_cap - self.rows_ingested, 0)

    def claim_table_name(self, name: str) -> str:
        """Reserve a table name, suffixing it when an earlier sheet of this run took it."""
        claimed = dedupe(name, self._table_names)
        self._table_names.add(claimed.lower())
        return claimed

    def record(self, entry: CatalogEntry) -> None:
        self.entries.append(entry)
        self.rows_ingested += entry.rows

    def summary(self, duration_seconds: float = 0.0) -> IngestionSummary:
        return IngestionSummary(
            tables=list(self.entries),
            truncated=self.truncated,
            total_rows=self.rows_ingested,
            warnings=list(self.warnings),
            duration_seconds=duration_seconds,
        )


@dataclass
class _Member:
    name: str
    read: Callable[[], bytes]


def extract_sheet(source: SheetSource, limit: int) -> SheetData:
    """Pull the header and up to limit data rows from a sheet.

    The header is the first non-empty row, with trailing empty cells dropped.
    Empty rows are skipped everywhere. Stops reading as soon as one row past
    the limit is seen, setting overflow.

    Args:
        source: Sheet to read
        limit: Maximum number of data rows to keep

    Returns:
        SheetData (header is None when the sheet has no non-empty row)
    """
    header: list[Cell] | None = None
    rows: list[list[Cell]] = []

    for raw in source.rows:
        cells = [classify(value) for value in raw]
        if all(cell.is_empty for cell in cells):
            continue

        if header is None:
            while cells and cells[-1].is_empty:
                cells.pop()
            header = cells
            continue

        if len(rows) >= limit:
            return SheetData(name=source.name, header=header, rows=rows, overflow=True)
        rows.append(cells)

    return SheetData(name=source.name, header=header, rows=rows)


class ArchiveIngestor:
    """Ingests uploaded archives into DuckDB tables and the catalog."""

    def __init__(
        self,
        manager: ConnectionManager,
        catalog: CatalogManager | None = None,
        *,
        settings: Settings | None = None,
        max_rows: int | None = None,
        max_upload_bytes: int | None = None,
        max_member_bytes: int | None = None,
        max_members: int | None = None,
        chunk_rows: int | None = None,
    ):
        """Create an ingestor.

        Limits default to the application settings.

        Args:
            manager: Connection manager owning the DuckDB store
            catalog: Catalog manager (created from manager if omitted)
            settings: Settings to read default limits from
            max_rows: Cumulative row cap across all sheets of a run
            max_upload_bytes: Largest accepted upload
            max_member_bytes: Largest uncompressed member that will be read
            max_members: Maximum number of workbook members per run
            chunk_rows: Rows per insert batch
        """
        settings = settings or get_settings()
        self._manager = manager
        self._catalog = catalog or CatalogManager(manager)
        self.max_rows = settings.ingest_max_rows if max_rows is None else max_rows
        self.max_upload_bytes = (
            settings.ingest_max_upload_bytes if max_upload_bytes is None else max_upload_bytes
        )
        self.max_member_bytes = (
            settings.ingest_max_member_bytes if max_member_bytes is None else max_member_bytes
        )
        self.max_members = settings.ingest_max_members if max_members is None else max_members
        self.chunk_rows = settings.ingest_chunk_rows if chunk_rows is None else chunk_rows

    def ingest(self, data: bytes, filename: str = "upload.zip") -> IngestionSummary:
        """Ingest every spreadsheet in an archive.

        Args:
            data: Raw upload bytes
            filename: Upload file name (names the table of a bare workbook upload)

        Returns:
            IngestionSummary with the catalog entries written by this run

        Raises:
            ArchiveTooLarge: Upload exceeds max_upload_bytes
            InvalidArchive: Not a zip, no supported members, or no tables produced
            StorageWriteFailure: A table write failed (earlier tables stay)
        """
        if len(data) > self.max_upload_bytes:
            raise ArchiveTooLarge(
                f"Upload is {len(data):,} bytes; the limit is {self.max_upload_bytes:,} bytes"
            )

        start_time = time.time()
        run = IngestionRun(row_cap=self.max_rows)
        logger.info("ingest_started", filename=filename, bytes=len(data), row_cap=self.max_rows)

        with self._open_archive(data) as archive:
            members = self._discover_members(archive, data, filename, run)
            if not members:
                raise InvalidArchive(
                    "No supported spreadsheet files found in archive",
                    details="; ".join(run.warnings) or None,
                )

            for member in members:
                try:
                    outcome = self._ingest_member(member, run)
                except RowCapExceeded as e:
                    run.truncated = True
                    run.warnings.append(e.message)
                    logger.warning("row_cap_reached", row_cap=self.max_rows, filename=filename)
                    break

                run.warnings.extend(outcome.warnings)
                if not outcome.success:
                    run.warnings.append(outcome.error or f"{member.name}: skipped")

        if not run.entries:
            raise InvalidArchive(
                "No tables were produced from the archive",
                details="; ".join(run.warnings) or None,
            )

        duration = time.time() - start_time
        logger.info(
            "ingest_completed",
            filename=filename,
            tables=len(run.entries),
            rows=run.rows_ingested,
            truncated=run.truncated,
            warnings=len(run.warnings),
            duration_seconds=round(duration, 3),
        )
        return run.summary(duration_seconds=duration)

    def _open_archive(self, data: bytes) -> zipfile.ZipFile:
        try:
            return zipfile.ZipFile(BytesIO(data))
        except (zipfile.BadZipFile, zlib.error, EOFError, ValueError) as e:
            raise InvalidArchive(f"Upload is not a valid zip archive: {e}") from e

    def _discover_members(
        self,
        archive: zipfile.ZipFile,
        data: bytes,
        filename: str,
        run: IngestionRun,
    ) -> list[_Member]:
        """List the workbook members to process, in archive order."""
        names = archive.namelist()

        # An .xlsx uploaded on its own is itself a zip container
        if _WORKBOOK_MARKER in names:
            path = PurePosixPath(filename)
            suffix = path.suffix.lower() if path.suffix.lower() in (".xlsx", ".xlsm") else ".xlsx"
            return [_Member(name=f"{path.stem}{suffix}", read=lambda: data)]

        members: list[_Member] = []
        for info in archive.infolist():
            if info.is_dir() or _is_ignored(info.filename):
                continue
            if not is_supported(info.filename):
                run.warnings.append(f"{info.filename}: unsupported file type, skipped")
                continue
            if len(members) >= self.max_members:
                run.warnings.append(
                    f"{info.filename}: more than {self.max_members} workbooks in archive, skipped"
                )
                continue
            members.append(_Member(name=info.filename, read=self._member_reader(archive, info)))

        return members

    def _member_reader(
        self, archive: zipfile.ZipFile, info: zipfile.ZipInfo
    ) -> Callable[[], bytes]:
        def read() -> bytes:
            if info.file_size > self.max_member_bytes:
                raise UnsupportedMember(
                    f"{info.filename}: {info.file_size:,} bytes uncompressed exceeds "
                    f"the {self.max_member_bytes:,} byte limit"
                )
            try:
                with archive.open(info) as fh:
                    # Header sizes can lie; never read past the limit
                    payload = fh.read(self.max_member_bytes + 1)
            except _EXTRACT_ERRORS as e:
                raise UnsupportedMember(f"{info.filename}: cannot be extracted ({e})") from e
            if len(payload) > self.max_member_bytes:
                raise UnsupportedMember(
                    f"{info.filename}: exceeds the {self.max_member_bytes:,} byte limit"
                )
            return payload

        return read

    def _ingest_member(self, member: _Member, run: IngestionRun) -> Result[int]:
        """Ingest all sheets of one workbook member.

        Returns:
            Result with the number of tables written, or the reason the member
            was skipped. Sheet-level notes travel in the result's warnings.

        Raises:
            RowCapExceeded: The run's row budget ran out in this member
            StorageWriteFailure: A table write failed
        """
        try:
            reader = open_workbook(member.name, member.read())
        except UnsupportedMember as e:
            logger.info("member_skipped", member=member.name, reason=e.message)
            return Result.fail(e.message)

        written = 0
        warnings: list[str] = []
        with reader:
            try:
                for sheet in reader.sheets():
                    entry = self._ingest_sheet(reader, sheet, run)
                    if entry is None:
                        warnings.append(f"{member.name}: sheet '{sheet.name}' is empty, skipped")
                    else:
                        written += 1
            except RowCapExceeded:
                run.warnings.extend(warnings)
                raise
            except StorageWriteFailure:
                raise
            except Exception as e:
                logger.warning("member_read_failed", member=member.name, error=str(e))
                return Result.fail(f"{member.name}: failed to read workbook ({e})", warnings)

        return Result.ok(written, warnings=warnings)

    def _ingest_sheet(
        self, reader: WorkbookReader, sheet: SheetSource, run: IngestionRun
    ) -> CatalogEntry | None:
        """Read, normalize and materialize one sheet.

        Returns:
            The catalog entry, or None for a sheet without any non-empty row
        """
        sheet_data = extract_sheet(sheet, limit=run.remaining)
        if sheet_data.header is None:
            return None

        if sheet_data.overflow and not sheet_data.rows:
            raise RowCapExceeded(
                f"Row cap of {self.max_rows:,} rows reached before sheet '{sheet.name}' "
                f"of {reader.member_name}; remaining sheets were skipped"
            )

        base_name = table_name_for(reader.stem, None if reader.single_sheet else sheet.name)
        table = normalize(run.claim_table_name(base_name), sheet_data.header, sheet_data.rows)
        entry = self._materialize(table)
        run.record(entry)

        logger.info(
            "sheet_ingested",
            member=reader.member_name,
            sheet=sheet.name,
            table=entry.table_name,
            rows=entry.rows,
            columns=len(table.columns),
        )

        if sheet_data.overflow:
            raise RowCapExceeded(
                f"Row cap of {self.max_rows:,} rows reached; table '{entry.table_name}' holds "
                f"the first {entry.rows:,} rows of sheet '{sheet.name}' and remaining sheets "
                f"were skipped"
            )
        return entry

    def _materialize(self, table: NormalizedTable) -> CatalogEntry:
        """Write the table and its catalog row in one transaction."""
        with self._manager.duckdb_write() as conn:
            conn.begin()
            try:
                write_table(conn, table, chunk_rows=self.chunk_rows)
                entry = self._catalog.upsert(
                    table.name, table.columns, table.row_count, conn=conn
                )
                conn.commit()
            except Exception as e:
                conn.rollback()
                logger.error("table_write_failed", table=table.name, error=str(e))
                raise StorageWriteFailure(
                    f"Failed to write table '{table.name}'", details=str(e)
                ) from e
        return entry


def _is_ignored(member_name: str) -> bool:
    """Archive noise: macOS resource forks, dot-files and Office lock files."""
    path = PurePosixPath(member_name)
    if path.parts and path.parts[0] == "__MACOSX":
        return True
    return path.name.startswith((".", "~$"))
