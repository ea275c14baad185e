"""Pydantic schemas for API request/response models."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sheetsql.catalog.models import CatalogEntry
from sheetsql.query.models import FieldDescriptor

# --- Ingestion schemas ---


class IngestResponse(BaseModel):
    """Outcome of POST /ingest."""

    ok: bool = True
    upload_id: str | None = None
    tables: list[CatalogEntry] = Field(default_factory=list)
    truncated: bool = False
    total_rows: int = 0
    warnings: list[str] = Field(default_factory=list)


# --- Query schemas ---


class QueryRequest(BaseModel):
    """Schema for SQL query execution."""

    sql: str = Field(description="Single read-only SELECT statement")


class QueryResponse(BaseModel):
    """Schema for query result."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = True
    fields: list[FieldDescriptor]
    rows: list[dict[str, Any]]
    row_count: int = Field(alias="rowCount")
    truncated: bool = Field(description="True if result was limited")


# --- Catalog schemas ---


class CatalogListResponse(BaseModel):
    """Schema for the list of cataloged tables."""

    tables: list[CatalogEntry]
    total: int


# --- Upload history schemas ---


class UploadResponse(BaseModel):
    """Schema for one recorded ingestion run."""

    model_config = ConfigDict(from_attributes=True)

    upload_id: str
    filename: str
    status: str
    truncated: bool
    total_rows: int
    table_count: int
    tables: list[str] | None = None
    warnings: list[str] | None = None
    error: str | None = None
    created_at: datetime


class UploadListResponse(BaseModel):
    """Schema for list of uploads."""

    uploads: list[UploadResponse]
    total: int


# --- Error schema ---


class ErrorResponse(BaseModel):
    """Body of a failed ingest request."""

    ok: bool = False
    error: str
    details: str | None = None
    tables: list[CatalogEntry] = Field(default_factory=list)


class QueryErrorResponse(BaseModel):
    """Body of a failed query: the query response shape with an empty result."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = False
    error: str
    details: str | None = None
    fields: list[FieldDescriptor] = Field(default_factory=list)
    rows: list[dict[str, Any]] = Field(default_factory=list)
    row_count: int = Field(default=0, alias="rowCount")
    truncated: bool = False
