"""Core routes for the tubescout API (root, health check, key status)."""

from api.dependencies import get_credential_pool
from api.schemas import HealthResponse, KeyStatusResponse, RootResponse
from fastapi import APIRouter

router = APIRouter(tags=["Core"])


@router.get(
    "/",
    response_model=RootResponse,
    summary="API root",
    description="Returns API name and version.",
)
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "TubeScout API", "version": "1.0.0"}


@router.get(
    "/api/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns server health status.",
)
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get(
    "/api/keys/status",
    response_model=KeyStatusResponse,
    summary="API key status",
    description="Masked usage and quota status of every configured YouTube API key.",
)
async def key_status() -> dict:
    """Credential pool status."""
    pool = get_credential_pool()
    return {
        "keys": [snap.to_dict() for snap in pool.snapshot()],
        "summary": pool.counts(),
    }
