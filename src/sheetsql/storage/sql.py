"""SQL text helpers for DuckDB statements built from ingested names."""


def quote_identifier(name: str) -> str:
    """Quote an identifier for DuckDB, escaping embedded double quotes."""
    return '"' + name.replace('"', '""') + '"'
