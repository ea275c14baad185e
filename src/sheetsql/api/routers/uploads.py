"""Upload history endpoints."""

from fastapi import APIRouter, HTTPException
from sqlalchemy import func, select

from sheetsql.api.deps import PaginationDep, SessionDep
from sheetsql.api.schemas import UploadListResponse, UploadResponse
from sheetsql.storage import Upload

router = APIRouter()


@router.get("/uploads", response_model=UploadListResponse)
def list_uploads(
    session: SessionDep,
    pagination: PaginationDep,
) -> UploadListResponse:
    """List ingestion runs, newest first."""
    skip, limit = pagination

    total = session.execute(select(func.count()).select_from(Upload)).scalar() or 0

    stmt = select(Upload).order_by(Upload.created_at.desc()).offset(skip).limit(limit)
    uploads = session.execute(stmt).scalars().all()

    return UploadListResponse(
        uploads=[UploadResponse.model_validate(u) for u in uploads],
        total=total,
    )


@router.get("/uploads/{upload_id}", response_model=UploadResponse)
def get_upload(
    upload_id: str,
    session: SessionDep,
) -> UploadResponse:
    """Get a single ingestion run by ID."""
    upload = session.get(Upload, upload_id)
    if upload is None:
        raise HTTPException(status_code=404, detail=f"Upload {upload_id} not found")
    return UploadResponse.model_validate(upload)
