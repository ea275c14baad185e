"""FastAPI dependency injection.

Provides the shared ConnectionManager, settings and database sessions for
route handlers. Uses the default manager from core/connections.py.
"""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Query, Request
from sqlalchemy.orm import Session

from sheetsql.core.config import Settings, get_settings
from sheetsql.core.connections import ConnectionManager, get_connection_manager


def get_app_settings(request: Request) -> Settings:
    """Settings the app was created with (falls back to the environment)."""
    settings = getattr(request.app.state, "settings", None)
    return settings if settings is not None else get_settings()


def get_manager(request: Request) -> ConnectionManager:
    """Get the shared ConnectionManager, initialized by the app lifespan."""
    settings = get_app_settings(request)
    return get_connection_manager(data_dir=settings.data_dir)


ManagerDep = Annotated[ConnectionManager, Depends(get_manager)]


def get_session(manager: ManagerDep) -> Generator[Session]:
    """Get a sync SQLAlchemy session.

    FastAPI runs sync endpoints in a thread pool, so this is efficient.
    """
    with manager.session_scope() as session:
        yield session


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
SessionDep = Annotated[Session, Depends(get_session)]


# Common query parameters
def pagination_params(
    skip: int = Query(0, ge=0, description="Number of records to skip"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum records to return"),
) -> tuple[int, int]:
    """Common pagination parameters."""
    return skip, limit


PaginationDep = Annotated[tuple[int, int], Depends(pagination_params)]
