"""Guarded SQL query endpoint."""

from fastapi import APIRouter

from sheetsql.api.deps import ManagerDep, SettingsDep
from sheetsql.api.schemas import QueryErrorResponse, QueryRequest, QueryResponse
from sheetsql.query.guard import QueryGuard

router = APIRouter()


@router.post(
    "/sql",
    response_model=QueryResponse,
    responses={400: {"model": QueryErrorResponse}, 408: {"model": QueryErrorResponse}},
)
def execute_sql(
    request: QueryRequest,
    manager: ManagerDep,
    settings: SettingsDep,
) -> QueryResponse:
    """Execute a single read-only SELECT against the ingested tables.

    Results are limited to query_max_rows rows; rowCount is the number of
    rows returned and truncated tells whether more existed.
    """
    guard = QueryGuard(
        manager,
        max_rows=settings.query_max_rows,
        timeout_seconds=settings.query_timeout_seconds,
    )
    result = guard.execute(request.sql)

    return QueryResponse(
        fields=result.fields,
        rows=result.rows,
        row_count=result.row_count,
        truncated=result.truncated,
    )
