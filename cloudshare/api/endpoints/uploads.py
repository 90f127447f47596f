"""Upload API: spool the multipart body, then hand it to the orchestrator."""

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from cloudshare.api.dependencies import get_services
from cloudshare.api.ingest import ingest_uploads
from cloudshare.core.container import ServiceContainer
from cloudshare.core.limiter import limit_upload
from cloudshare.schemas.responses import UploadResponse

router = APIRouter()


@router.post("/upload", response_model=UploadResponse)
@limit_upload
async def upload_files(
    request: Request,
    files: list[UploadFile] | None = File(None),
    expiry: str | None = Form(None),
    services: ServiceContainer = Depends(get_services),
) -> UploadResponse:
    """Upload one or more files as a bundle with an optional expiry in minutes.

    All files land or none do. 400 when no files were sent; 500 when any
    backend upload or the commit failed.
    """
    ingested = await ingest_uploads(files or [], services.settings.upload_temp_dir)
    bundle = await services.orchestrator.create_bundle(ingested, expiry)
    return UploadResponse(message="Upload successful", bundle=bundle)
