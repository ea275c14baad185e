"""Archive upload endpoint."""

from uuid import uuid4

from fastapi import APIRouter, File, UploadFile

from sheetsql.api.deps import ManagerDep, SettingsDep
from sheetsql.api.schemas import ErrorResponse, IngestResponse
from sheetsql.core.logging import get_logger, log_context
from sheetsql.sources.archive import ArchiveIngestor
from sheetsql.sources.errors import IngestionError, InvalidArchive
from sheetsql.sources.history import record_upload

logger = get_logger(__name__)

router = APIRouter()


@router.post(
    "/ingest",
    response_model=IngestResponse,
    responses={400: {"model": ErrorResponse}, 413: {"model": ErrorResponse}},
)
def ingest_archive(
    manager: ManagerDep,
    settings: SettingsDep,
    archive: UploadFile | None = File(default=None, description="Zip archive of spreadsheets"),
    zip_file: UploadFile | None = File(default=None, alias="zip"),
    file: UploadFile | None = File(default=None),
) -> IngestResponse:
    """Ingest every spreadsheet in an uploaded zip archive.

    Each sheet becomes a table (all columns VARCHAR) and a catalog entry.
    Unsupported or unreadable members are reported in warnings; the request
    succeeds as long as at least one table was produced.
    """
    upload = archive or zip_file or file
    if upload is None:
        raise InvalidArchive("No archive uploaded; send it as the 'archive' form field")

    filename = upload.filename or "upload.zip"
    # One byte past the limit is enough to reject an oversized upload
    data = upload.file.read(settings.ingest_max_upload_bytes + 1)

    upload_id = str(uuid4())
    with log_context(upload_id=upload_id):
        ingestor = ArchiveIngestor(manager, settings=settings)
        try:
            summary = ingestor.ingest(data, filename)
        except IngestionError as e:
            record_upload(manager, upload_id, filename, error=e.message)
            raise

        record_upload(manager, upload_id, filename, summary=summary)

    return IngestResponse(
        upload_id=upload_id,
        tables=summary.tables,
        truncated=summary.truncated,
        total_rows=summary.total_rows,
        warnings=summary.warnings,
    )
