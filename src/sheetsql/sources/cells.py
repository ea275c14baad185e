"""Spreadsheet cell values.

Readers hand over whatever their parser produced (str, int, float, bool,
datetime, None, ...). classify() turns each raw value into a Cell of a closed
set of kinds right at that boundary; to_text() is the single coercion from a
Cell to the text that gets stored. Nothing relies on implicit str().
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any


class CellKind(str, Enum):
    """Kinds of values a spreadsheet cell can hold."""

    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    EMPTY = "empty"


@dataclass(frozen=True)
class Cell:
    """A classified cell value."""

    kind: CellKind
    value: Any = None

    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY


EMPTY = Cell(CellKind.EMPTY)


def classify(value: Any) -> Cell:
    """Classify a raw parser value.

    Whitespace-only strings count as empty. bool is checked before int
    because bool is an int subclass.
    """
    if value is None:
        return EMPTY
    if isinstance(value, Cell):
        return value
    if isinstance(value, str):
        if not value.strip():
            return EMPTY
        return Cell(CellKind.TEXT, value)
    if isinstance(value, bool):
        return Cell(CellKind.BOOLEAN, value)
    if isinstance(value, int | float | Decimal):
        if isinstance(value, float) and math.isnan(value):
            return EMPTY
        return Cell(CellKind.NUMBER, value)
    if isinstance(value, datetime | date | time):
        return Cell(CellKind.DATE, value)
    return Cell(CellKind.TEXT, str(value))


def to_text(cell: Cell) -> str:
    """Render a cell as stored text."""
    if cell.kind is CellKind.EMPTY:
        return ""
    if cell.kind is CellKind.BOOLEAN:
        return "true" if cell.value else "false"
    if cell.kind is CellKind.NUMBER:
        return _format_number(cell.value)
    if cell.kind is CellKind.DATE:
        return _format_temporal(cell.value)
    return str(cell.value)


def _format_number(value: int | float | Decimal) -> str:
    if isinstance(value, int):
        return str(value)
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return str(value.quantize(Decimal(1)))
        return format(value.normalize(), "f")
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    # Spreadsheets store every number as a double; 3.0 is the integer 3
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


def _format_temporal(value: datetime | date | time) -> str:
    if isinstance(value, datetime):
        # Date-only cells come back from openpyxl as midnight datetimes
        if value.time() == time(0) and value.tzinfo is None:
            return value.date().isoformat()
        return value.isoformat()
    return value.isoformat()
