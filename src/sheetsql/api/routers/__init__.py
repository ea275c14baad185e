"""API routers."""

from sheetsql.api.routers import catalog, ingest, query, uploads

__all__ = [
    "ingest",
    "query",
    "catalog",
    "uploads",
]
