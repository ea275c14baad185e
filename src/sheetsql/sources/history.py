"""Upload history - one Upload row per ingestion run, successful or not."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sheetsql.core.logging import get_logger
from sheetsql.sources.models import IngestionSummary
from sheetsql.storage.models import Upload

if TYPE_CHECKING:
    from sheetsql.core.connections import ConnectionManager

logger = get_logger(__name__)

STATUS_SUCCEEDED = "succeeded"
STATUS_FAILED = "failed"


def record_upload(
    manager: ConnectionManager,
    upload_id: str,
    filename: str,
    summary: IngestionSummary | None = None,
    error: str | None = None,
) -> Upload:
    """Persist the outcome of an ingestion run.

    Args:
        manager: Connection manager
        upload_id: Identifier of the run
        filename: Name of the uploaded file
        summary: Summary of a successful run
        error: Error message of a failed run

    Returns:
        The stored Upload row
    """
    upload = Upload(
        upload_id=upload_id,
        filename=filename,
        status=STATUS_FAILED if summary is None else STATUS_SUCCEEDED,
        error=error,
    )
    if summary is not None:
        upload.truncated = summary.truncated
        upload.total_rows = summary.total_rows
        upload.table_count = len(summary.tables)
        upload.tables = [entry.table_name for entry in summary.tables]
        upload.warnings = list(summary.warnings)
    else:
        upload.truncated = False
        upload.total_rows = 0
        upload.table_count = 0
        upload.tables = []
        upload.warnings = []

    with manager.session_scope() as session:
        session.add(upload)

    logger.debug("upload_recorded", upload_id=upload_id, status=upload.status)
    return upload
