"""Download routes for thumbnails and spreadsheet exports."""

import logging
from urllib.parse import quote

from api.dependencies import get_export_sink, get_thumbnail_service
from api.schemas import ExportRequest
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response
from services.thumbnail_service import ThumbnailServiceError
from starlette.background import BackgroundTask
from starlette.responses import StreamingResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Downloads"])


def _attachment_header(filename: str) -> str:
    """Content-Disposition value that survives non-ASCII keywords."""
    encoded = quote(filename)
    return f"attachment; filename=\"{encoded}\"; filename*=UTF-8''{encoded}"


@router.get(
    "/api/download-thumbnail",
    summary="Download thumbnail",
    description="Proxy a thumbnail image so the browser saves it as a file.",
)
async def download_thumbnail(
    url: str | None = Query(None),
    filename: str | None = Query(None),
):
    """Stream a remote thumbnail back as an attachment."""
    if not url:
        raise HTTPException(status_code=400, detail="Thumbnail URL is required")

    try:
        upstream = await get_thumbnail_service().open_stream(url)
    except ThumbnailServiceError as e:
        logger.error(f"Thumbnail download failed: {e}")
        raise HTTPException(status_code=500, detail="Thumbnail download failed") from e

    return StreamingResponse(
        upstream.aiter_bytes(),
        media_type="image/jpeg",
        headers={"Content-Disposition": _attachment_header(filename or "thumbnail.jpg")},
        background=BackgroundTask(upstream.aclose),
    )


def _export(body: ExportRequest, extension: str) -> Response:
    if not isinstance(body.searchResults, list):
        raise HTTPException(status_code=400, detail="No search results to export")

    try:
        export = get_export_sink(extension).export(body.searchResults, body.searchParams)
    except Exception as e:
        logger.error(f"{extension} export failed: {e}")
        raise HTTPException(status_code=500, detail=f"{extension} export failed") from e

    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": _attachment_header(export.filename)},
    )


@router.post(
    "/api/download-excel",
    summary="Download results as Excel",
    description="Render the posted search results to an .xlsx workbook.",
)
async def download_excel(body: ExportRequest) -> Response:
    """Export search results to xlsx."""
    return _export(body, "xlsx")


@router.post(
    "/api/download-csv",
    summary="Download results as CSV",
    description="Render the posted search results to a UTF-8 .csv file.",
)
async def download_csv(body: ExportRequest) -> Response:
    """Export search results to csv."""
    return _export(body, "csv")
