"""Tests for workbook readers and the reader registry."""

import pytest

from sheetsql.sources.csv import CSVReader
from sheetsql.sources.errors import UnsupportedMember
from sheetsql.sources.excel import ExcelReader
from sheetsql.sources.registry import is_supported, open_workbook


class TestRegistry:
    """Tests for extension based reader selection."""

    @pytest.mark.parametrize("name", ["a.xlsx", "dir/b.XLSM", "c.csv"])
    def test_supported(self, name):
        assert is_supported(name)

    @pytest.mark.parametrize("name", ["a.xls", "b.txt", "c.xlsx.bak", "README"])
    def test_unsupported(self, name):
        assert not is_supported(name)

    def test_open_unknown_extension(self):
        with pytest.raises(UnsupportedMember, match="unsupported file type"):
            open_workbook("notes.txt", b"hello")

    def test_open_dispatches_by_extension(self, make_xlsx, make_csv):
        with open_workbook("book.xlsx", make_xlsx({"S": [["a"]]})) as reader:
            assert isinstance(reader, ExcelReader)
        with open_workbook("data.csv", make_csv([["a"]])) as reader:
            assert isinstance(reader, CSVReader)


class TestExcelReader:
    """Tests for ExcelReader."""

    def test_sheets_in_workbook_order(self, make_xlsx):
        payload = make_xlsx({"First": [["x"], [1]], "Second": [["y"], [2]]})

        with ExcelReader("book.xlsx", payload) as reader:
            assert not reader.single_sheet
            sheets = [(s.name, [list(r) for r in s.rows]) for s in reader.sheets()]

        assert sheets == [("First", [["x"], [1]]), ("Second", [["y"], [2]])]

    def test_single_sheet(self, make_xlsx):
        with ExcelReader("dir/Book.xlsx", make_xlsx({"Only": [["x"]]})) as reader:
            assert reader.single_sheet
            assert reader.stem == "Book"

    def test_rejects_non_zip_payload(self):
        with pytest.raises(UnsupportedMember, match="bad signature"):
            ExcelReader("fake.xlsx", b"not a workbook")

    def test_rejects_zip_that_is_not_a_workbook(self, make_zip):
        with pytest.raises(UnsupportedMember, match="unreadable workbook"):
            ExcelReader("fake.xlsx", make_zip({"hello.txt": b"hi"}))


class TestCSVReader:
    """Tests for CSVReader."""

    def test_single_sheet_named_after_stem(self, make_csv):
        with CSVReader("exports/regions.csv", make_csv([["Region"], ["North"]])) as reader:
            assert reader.single_sheet
            sheets = list(reader.sheets())

        assert [s.name for s in sheets] == ["regions"]

    def test_sniffs_semicolon(self, make_csv):
        payload = make_csv([["Name", "Qty"], ["Widget", "3"], ["Gadget", "7"]], delimiter=";")

        with CSVReader("items.csv", payload) as reader:
            rows = [list(r) for r in next(reader.sheets()).rows]

        assert rows == [["Name", "Qty"], ["Widget", "3"], ["Gadget", "7"]]

    def test_utf8_bom_and_latin1(self):
        with CSVReader("bom.csv", "\ufeffName\nZoë\n".encode()) as reader:
            assert [list(r) for r in next(reader.sheets()).rows] == [["Name"], ["Zoë"]]

        with CSVReader("latin.csv", "Name\nZoë\n".encode("latin-1")) as reader:
            assert [list(r) for r in next(reader.sheets()).rows] == [["Name"], ["Zoë"]]

    def test_rejects_binary(self):
        with pytest.raises(UnsupportedMember, match="binary"):
            CSVReader("blob.csv", b"a,b\x00\x01")
