"""Identifier sanitization for ingested table and column names."""

from __future__ import annotations

import re

_NON_IDENTIFIER = re.compile(r"[^A-Za-z0-9_]+")
_REPEATED_UNDERSCORE = re.compile(r"_{2,}")


def sanitize_identifier(raw: str) -> str:
    """Collapse characters outside [A-Za-z0-9_] to underscores.

    Returns an empty string when nothing usable is left.
    """
    cleaned = _NON_IDENTIFIER.sub("_", raw.strip())
    cleaned = _REPEATED_UNDERSCORE.sub("_", cleaned)
    return cleaned.strip("_")


def table_name_for(file_stem: str, sheet_name: str | None) -> str:
    """Derive a table name from a workbook file stem and sheet name.

    The result is lower-case, starts with a letter and never begins with an
    underscore, so it cannot collide with internal tables such as "_catalog".
    """
    parts = [file_stem] if sheet_name is None else [file_stem, sheet_name]
    name = "_".join(p for p in (sanitize_identifier(part) for part in parts) if p).lower()
    if not name:
        return "sheet"
    if not name[0].isalpha():
        name = f"t_{name}"
    return name


def dedupe(name: str, taken: set[str], *, casefold: bool = True) -> str:
    """Return name, or name_<k> with the smallest k >= 2 not in taken.

    Args:
        name: Candidate identifier
        taken: Identifiers already in use (compared case-insensitively when
            casefold is set; the caller keeps the set in that same form)
        casefold: Compare case-insensitively, as DuckDB does

    Returns:
        A name not in taken. The caller is responsible for adding it.
    """

    def key(candidate: str) -> str:
        return candidate.lower() if casefold else candidate

    if key(name) not in taken:
        return name

    k = 2
    while key(f"{name}_{k}") in taken:
        k += 1
    return f"{name}_{k}"
