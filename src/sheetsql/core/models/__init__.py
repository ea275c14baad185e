"""Core models shared across modules."""

from sheetsql.core.models.base import Result

__all__ = ["Result"]
