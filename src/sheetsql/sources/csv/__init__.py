"""CSV source."""

from sheetsql.sources.csv.reader import CSVReader

__all__ = ["CSVReader"]
