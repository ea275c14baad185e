"""CLI command implementations."""

from sheetsql.cli.commands import catalog, ingest, query, reset, serve

__all__ = [
    "catalog",
    "ingest",
    "query",
    "reset",
    "serve",
]
