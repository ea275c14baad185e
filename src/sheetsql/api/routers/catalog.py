"""Catalog browsing endpoints."""

from fastapi import APIRouter, HTTPException

from sheetsql.api.deps import ManagerDep
from sheetsql.api.schemas import CatalogListResponse
from sheetsql.catalog.manager import CatalogManager
from sheetsql.catalog.models import CatalogEntry

router = APIRouter()


@router.get("/catalog", response_model=CatalogListResponse)
def list_catalog(manager: ManagerDep) -> CatalogListResponse:
    """List all ingested tables ordered by name."""
    entries = CatalogManager(manager).list()
    return CatalogListResponse(tables=entries, total=len(entries))


@router.get("/catalog/{table_name}", response_model=CatalogEntry)
def get_catalog_entry(table_name: str, manager: ManagerDep) -> CatalogEntry:
    """Get the catalog entry of one table."""
    entry = CatalogManager(manager).get(table_name)
    if entry is None:
        raise HTTPException(status_code=404, detail=f"Table {table_name} not found")
    return entry
