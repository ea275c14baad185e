"""Exception handlers mapping domain errors to JSON error bodies."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from sheetsql.api.schemas import ErrorResponse, QueryErrorResponse
from sheetsql.core.logging import get_logger
from sheetsql.query.errors import QueryError
from sheetsql.sources.errors import IngestionError

logger = get_logger(__name__)


async def ingestion_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, IngestionError)
    logger.warning("ingest_failed", path=request.url.path, error=exc.message)
    body = ErrorResponse(error=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def query_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, QueryError)
    logger.info("query_failed", path=request.url.path, error=exc.message, status=exc.status_code)
    body = QueryErrorResponse(error=exc.message, details=exc.details)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump(by_alias=True))


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain error handlers on an app."""
    app.add_exception_handler(IngestionError, ingestion_error_handler)
    app.add_exception_handler(QueryError, query_error_handler)
