"""Pydantic request/response models for the tubescout API."""

from typing import Any

from pydantic import BaseModel, Field

# =============================================================================
# Response Models
# =============================================================================


class RootResponse(BaseModel):
    """Root endpoint response."""

    message: str
    version: str

    model_config = {"json_schema_extra": {"examples": [{"message": "TubeScout API", "version": "1.0.0"}]}}


class HealthResponse(BaseModel):
    """Health check response."""

    status: str

    model_config = {"json_schema_extra": {"examples": [{"status": "healthy"}]}}


class VideoRecordResponse(BaseModel):
    """One search result row."""

    youtube_channel_name: str
    thumbnail_url: str
    status: str
    youtube_channel_id: str
    primary_category: str
    status_date: str
    daily_view_count: int
    subscriber_count: int
    vod_url: str
    video_id: str
    title: str
    description: str
    duration: str
    duration_seconds: int
    video_length_category: str


class SearchResponse(BaseModel):
    """Successful search response."""

    success: bool = True
    data: list[VideoRecordResponse]
    total: int


class KeyStats(BaseModel):
    """Credential pool availability counts."""

    total: int = Field(ge=0)
    available: int = Field(ge=0)
    exhausted: int = Field(ge=0)


class ErrorResponse(BaseModel):
    """Failed search response."""

    success: bool = False
    error: str
    errorType: str
    details: str | None = None
    keyStats: KeyStats | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "success": False,
                    "error": "YouTube API daily quota exceeded (3/3 keys used)",
                    "errorType": "quota_exceeded",
                    "details": "All API keys are over quota. Quotas reset daily.",
                    "keyStats": {"total": 3, "available": 0, "exhausted": 3},
                }
            ]
        }
    }


class CredentialStatusResponse(BaseModel):
    """Masked status of one API key."""

    name: str
    masked_key: str
    ordinal: int
    usage_count: int
    status: str
    last_used_at: str | None = None
    is_current: bool = False


class KeyStatusResponse(BaseModel):
    """Credential pool status."""

    keys: list[CredentialStatusResponse]
    summary: KeyStats


# =============================================================================
# Request Models
# =============================================================================


class ExportRequest(BaseModel):
    """Body of the spreadsheet export endpoints.

    ``searchResults`` is validated by the route so malformed bodies get a 400
    with a readable message instead of a 422.
    """

    searchResults: Any = None
    searchParams: dict[str, Any] | None = None
