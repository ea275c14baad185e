"""Schema normalizer - turn a sheet's cell grid into an all-text table.

Every column is stored as VARCHAR. No type inference happens here: numbers,
booleans and dates are rendered as text once, by cells.to_text().
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Any

from sheetsql.sources.cells import classify, to_text
from sheetsql.sources.models import NormalizedTable
from sheetsql.sources.naming import dedupe, sanitize_identifier


def normalize_columns(header: Sequence[Any]) -> list[str]:
    """Build unique, identifier-safe column names from header cells.

    Rules:
    - whitespace is trimmed and characters outside [A-Za-z0-9_] collapse to "_"
    - an empty result becomes column_<n> (1-based position)
    - a name already used (case-insensitively) becomes <name>_<k>

    Examples:
        ["A", "A"] -> ["A", "A_2"]
        ["Unit Price", "", "unit price"] -> ["Unit_Price", "column_2", "unit_price_2"]
    """
    columns: list[str] = []
    taken: set[str] = set()

    for position, raw in enumerate(header, start=1):
        name = sanitize_identifier(to_text(classify(raw))) or f"column_{position}"
        name = dedupe(name, taken)
        taken.add(name.lower())
        columns.append(name)

    return columns


def normalize_row(row: Sequence[Any], width: int) -> list[str]:
    """Coerce one data row to text, padded or truncated to width."""
    values = [to_text(classify(value)) for value in row[:width]]
    if len(values) < width:
        values.extend([""] * (width - len(values)))
    return values


def normalize(
    table_name: str,
    header: Sequence[Any],
    rows: Iterable[Sequence[Any]],
) -> NormalizedTable:
    """Normalize a header row and its data rows.

    Deterministic: the same input always yields the same columns and rows.
    Rows longer than the header lose their extra cells.

    Args:
        table_name: Target table name (already sanitized by the caller)
        header: Header cells, raw values or Cells
        rows: Data rows, raw values or Cells

    Returns:
        NormalizedTable with text rows in source order
    """
    columns = normalize_columns(header)
    width = len(columns)
    return NormalizedTable(
        name=table_name,
        columns=columns,
        rows=[normalize_row(row, width) for row in rows],
    )
