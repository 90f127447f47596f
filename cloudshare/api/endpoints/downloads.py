"""File download API: proxy stream, redirect, or local file."""

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse, RedirectResponse, Response, StreamingResponse

from cloudshare.api.dependencies import get_download_dispatcher
from cloudshare.application.use_cases.downloads import DownloadDispatcher
from cloudshare.shared.utils.headers import content_disposition

router = APIRouter()


@router.get(
    "/download/{file_id}",
    responses={
        302: {"description": "Redirect to a backend URL that forces an attachment"},
        404: {"description": "File not found, expired, or unavailable"},
        500: {"description": "Backend unreachable or stream interrupted"},
    },
)
async def download_file(
    file_id: str,
    dispatcher: DownloadDispatcher = Depends(get_download_dispatcher),
) -> Response:
    """Send the file under its original name."""
    result = await dispatcher.dispatch(file_id)
    if result.redirect_url is not None:
        return RedirectResponse(result.redirect_url, status_code=302)

    headers = {"Content-Disposition": content_disposition(result.filename)}
    if result.content_length is not None:
        headers["Content-Length"] = str(result.content_length)
    if result.path is not None:
        return FileResponse(result.path, media_type=result.media_type, headers=headers)
    return StreamingResponse(
        result.chunks, media_type=result.media_type, headers=headers
    )
