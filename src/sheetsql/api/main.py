"""FastAPI application factory."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sheetsql import __version__
from sheetsql.api import routers
from sheetsql.api.errors import register_exception_handlers
from sheetsql.core.config import Settings, get_settings
from sheetsql.core.connections import close_default_manager, get_connection_manager
from sheetsql.core.logging import configure_logging, get_logger

logger = get_logger(__name__)

API_PREFIXES = ("/api", "/api/v1")

ROUTERS = {
    "ingest": routers.ingest.router,
    "query": routers.query.router,
    "catalog": routers.catalog.router,
    "uploads": routers.uploads.router,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler.

    Opens the shared ConnectionManager on startup and closes it on shutdown.
    FastAPI requires async lifespan, but our connections are sync.
    """
    settings: Settings = app.state.settings
    manager = get_connection_manager(data_dir=settings.data_dir)
    logger.info("api_started", data_dir=str(manager.config.duckdb_path.parent))

    yield

    close_default_manager()
    logger.info("api_stopped")


def create_app(
    data_dir: Path | None = None,
    settings: Settings | None = None,
    title: str = "SheetSQL API",
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        data_dir: Directory holding data.duckdb and metadata.db.
                  Overrides settings.data_dir (SHEETSQL_DATA_DIR).
        settings: Application settings (default: from the environment)
        title: API title

    Returns:
        Configured FastAPI application
    """
    settings = settings or get_settings()
    if data_dir is not None:
        settings = settings.model_copy(update={"data_dir": Path(data_dir)})

    configure_logging(log_level=settings.log_level, log_format=settings.log_format)

    app = FastAPI(
        title=title,
        version=__version__,
        description="Upload spreadsheet archives and query them with read-only SQL",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # /api is what the web client calls; /api/v1 stays as an undocumented alias
    for prefix in API_PREFIXES:
        documented = prefix == API_PREFIXES[0]
        for name, router in ROUTERS.items():
            app.include_router(router, prefix=prefix, tags=[name], include_in_schema=documented)

    @app.get("/health")  # type: ignore[untyped-decorator]
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy"}

    return app
