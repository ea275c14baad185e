"""CSV reader - a single-sheet, untyped workbook."""

from __future__ import annotations

import csv
import io
from collections.abc import Iterator

from sheetsql.sources.base import SheetSource, WorkbookReader
from sheetsql.sources.errors import UnsupportedMember

_SNIFF_BYTES = 64 * 1024
_DELIMITERS = ",;\t|"


class CSVReader(WorkbookReader):
    """Reads delimited text files.

    All values are text; the delimiter is sniffed from the first 64 KB and
    falls back to comma.
    """

    extensions = (".csv",)

    def __init__(self, member_name: str, data: bytes):
        super().__init__(member_name, data)
        if b"\x00" in data[:_SNIFF_BYTES]:
            raise UnsupportedMember(f"{member_name}: binary content in a .csv file")
        self._text = _decode(data)

    @property
    def single_sheet(self) -> bool:
        return True

    def sheets(self) -> Iterator[SheetSource]:
        sample = self._text[:_SNIFF_BYTES]
        try:
            dialect: type[csv.Dialect] | csv.Dialect = csv.Sniffer().sniff(
                sample, delimiters=_DELIMITERS
            )
        except csv.Error:
            dialect = csv.excel

        reader = csv.reader(io.StringIO(self._text, newline=""), dialect)
        yield SheetSource(name=self.stem, rows=reader)


def _decode(data: bytes) -> str:
    """Decode as UTF-8 (with or without BOM), falling back to Latin-1."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")
