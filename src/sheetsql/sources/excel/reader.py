"""Excel workbook reader (.xlsx / .xlsm) backed by openpyxl."""

from __future__ import annotations

from collections.abc import Iterator
from io import BytesIO
from zipfile import BadZipFile

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from openpyxl.workbook.workbook import Workbook

from sheetsql.core.logging import get_logger
from sheetsql.sources.base import SheetSource, WorkbookReader
from sheetsql.sources.errors import UnsupportedMember

logger = get_logger(__name__)

ZIP_SIGNATURE = b"PK\x03\x04"


class ExcelReader(WorkbookReader):
    """Reads Office Open XML workbooks.

    Opens in read-only mode and takes cached values (data_only), so formulas
    come back as their last computed result rather than formula text.
    """

    extensions = (".xlsx", ".xlsm")

    def __init__(self, member_name: str, data: bytes):
        super().__init__(member_name, data)
        if not data.startswith(ZIP_SIGNATURE):
            raise UnsupportedMember(f"{member_name}: not an Excel workbook (bad signature)")

        try:
            self._workbook: Workbook = load_workbook(
                BytesIO(data), read_only=True, data_only=True
            )
        except (BadZipFile, InvalidFileException, KeyError, OSError, ValueError) as e:
            raise UnsupportedMember(f"{member_name}: unreadable workbook ({e})") from e

    @property
    def single_sheet(self) -> bool:
        return len(self._worksheets()) == 1

    def _worksheets(self) -> list:
        # Chartsheets have no cells
        return [ws for ws in self._workbook.worksheets if hasattr(ws, "iter_rows")]

    def sheets(self) -> Iterator[SheetSource]:
        for worksheet in self._worksheets():
            # Some writers store a wrong used range; read-only mode trusts it
            # unless the dimensions are reset.
            if hasattr(worksheet, "reset_dimensions"):
                worksheet.reset_dimensions()

            yield SheetSource(
                name=worksheet.title,
                rows=worksheet.iter_rows(values_only=True),
            )

    def close(self) -> None:
        self._workbook.close()
