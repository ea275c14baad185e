"""Metadata storage (SQLAlchemy) and DuckDB SQL helpers."""

from sheetsql.storage.base import Base
from sheetsql.storage.models import Upload
from sheetsql.storage.sql import quote_identifier

__all__ = ["Base", "Upload", "quote_identifier"]
