"""Video search route for the tubescout API."""

import asyncio
import uuid

from api.dependencies import get_credential_pool, get_video_search_service
from api.schemas import ErrorResponse, SearchResponse
from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from models.video import SearchRequest
from services.errors import ErrorKind, PoolExhaustedError, VideoSearchError
from utils.config import load_config
from utils.logging import clear_request_context, get_logger, set_request_context

logger = get_logger(__name__)

router = APIRouter(tags=["Search"])


def _parse_views(value: str | None, default: int | None = None) -> int | None:
    """Parse a view-count bound; blank disables it, garbage is ignored."""
    if value is None:
        return default
    value = value.strip().replace(",", "")
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        logger.warning("Ignoring invalid view count bound", value=value)
        return None


def build_search_request(
    country: str,
    keyword: str,
    min_views: str | None,
    max_views: str | None,
    upload_period: str | None,
    start_date: str | None,
    end_date: str | None,
    video_length: str | None,
    max_results: str | None,
    default_min_views: int,
) -> SearchRequest:
    """Parse raw query parameters into a SearchRequest."""
    return SearchRequest(
        country=(country or "worldwide").strip().lower(),
        keyword=(keyword or "").strip(),
        min_views=_parse_views(min_views, default=default_min_views),
        max_views=_parse_views(max_views),
        upload_period=upload_period or None,
        start_date=start_date or None,
        end_date=end_date or None,
        duration_buckets=SearchRequest.parse_buckets(video_length),
        max_results=SearchRequest.normalize_result_count(max_results),
    )


def error_response(error: Exception) -> JSONResponse:
    """Map a search failure onto its HTTP response."""
    if isinstance(error, PoolExhaustedError):
        details = (
            f"{error.available} more API key(s) are still available."
            if error.available > 0
            else "All API keys are over quota. Quotas reset daily."
        )
        body = ErrorResponse(
            error=f"YouTube API daily quota exceeded ({error.exhausted}/{error.total} keys used)",
            errorType=ErrorKind.QUOTA_EXCEEDED.value,
            details=details,
            keyStats=error.to_dict(),
        )
        return JSONResponse(status_code=429, content=body.model_dump(exclude_none=True))

    if isinstance(error, VideoSearchError) and error.kind == ErrorKind.INVALID_CREDENTIAL:
        body = ErrorResponse(
            error="The YouTube API key is not valid. Contact the administrator.",
            errorType=ErrorKind.INVALID_CREDENTIAL.value,
        )
        return JSONResponse(status_code=401, content=body.model_dump(exclude_none=True))

    body = ErrorResponse(error=str(error), errorType=ErrorKind.PROVIDER.value)
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))


@router.get(
    "/api/search",
    response_model=SearchResponse,
    summary="Search YouTube videos",
    description="Search by country, keyword, view range, upload window and length bucket. "
    "Results are sorted by view count, highest first.",
    responses={
        401: {"model": ErrorResponse, "description": "Invalid API key"},
        429: {"model": ErrorResponse, "description": "All API keys over quota"},
        500: {"model": ErrorResponse, "description": "Provider or server error"},
    },
)
async def search_videos(
    country: str = "worldwide",
    keyword: str = "",
    max_views: str | None = Query(None, alias="maxViews"),
    min_views: str | None = Query(None, alias="minViews"),
    upload_period: str | None = Query(None, alias="uploadPeriod"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    video_length: str | None = Query(None, alias="videoLength"),
    max_results: str | None = Query(None, alias="maxResults"),
):
    """Run one search through the credential pool."""
    config = load_config()

    request = build_search_request(
        country=country,
        keyword=keyword,
        min_views=min_views,
        max_views=max_views,
        upload_period=upload_period,
        start_date=start_date,
        end_date=end_date,
        video_length=video_length,
        max_results=max_results,
        default_min_views=config["default_min_views"],
    )
    set_request_context(uuid.uuid4().hex[:12], country=request.country)
    logger.info(
        "Search requested",
        keyword=request.keyword or None,
        max_results=request.max_results,
        buckets=sorted(request.duration_buckets) or "any",
    )

    try:
        service = get_video_search_service()
        result = await asyncio.to_thread(service.search, request)
    except Exception as e:
        logger.exception("Search failed", error=str(e))
        return error_response(e)
    finally:
        try:
            get_credential_pool().log_usage_stats()
        finally:
            clear_request_context()

    return {"success": True, "data": result.to_dicts(), "total": result.total}
