"""Pytest fixtures for API tests."""

from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from sheetsql.api.main import create_app
from sheetsql.core.config import Settings
from sheetsql.core.connections import close_default_manager


@pytest.fixture
def api_settings(data_dir: Path) -> Settings:
    """Settings with small limits so cap behavior is cheap to exercise."""
    return Settings(
        data_dir=data_dir,
        query_max_rows=1_000,
        query_timeout_seconds=0.5,
        ingest_max_rows=10_000,
        ingest_max_upload_bytes=1024 * 1024,
    )


@pytest.fixture
def test_client(api_settings: Settings) -> Generator[TestClient]:
    """FastAPI test client with an isolated data directory.

    Creates a fresh app instance with its own DuckDB and SQLite databases
    for each test function.
    """
    close_default_manager()
    app = create_app(settings=api_settings)

    with TestClient(app) as client:
        yield client

    # Cleanup
    close_default_manager()


@pytest.fixture
def ingested(test_client: TestClient, sales_archive: bytes) -> dict:
    """Upload the sales archive and return the response body."""
    response = test_client.post(
        "/api/ingest",
        files={"archive": ("sales.zip", sales_archive, "application/zip")},
    )
    assert response.status_code == 200
    return response.json()
