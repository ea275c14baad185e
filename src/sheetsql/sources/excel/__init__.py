"""Excel workbook source."""

from sheetsql.sources.excel.reader import ExcelReader

__all__ = ["ExcelReader"]
