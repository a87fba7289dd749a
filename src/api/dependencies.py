"""Service singletons and dependency injection for the tubescout API."""

import random

from services.credential_pool import CredentialPool
from services.export_service import CsvExportSink, ExcelExportSink, TabularExportSink
from services.failover import FailoverController
from services.query_builder import QueryBuilder
from services.thumbnail_service import ThumbnailService
from services.video_search_service import SearchSettings, VideoSearchService
from services.video_sources import YouTubeSearchProvider
from utils.config import load_config

# Service singletons
_credential_pool: CredentialPool | None = None
_failover: FailoverController | None = None
_search_service: VideoSearchService | None = None
_thumbnail_service: ThumbnailService | None = None

_export_sinks: dict[str, TabularExportSink] = {
    "xlsx": ExcelExportSink(),
    "csv": CsvExportSink(),
}


def get_credential_pool() -> CredentialPool:
    """Get or create the shared credential pool.

    Raises:
        ConfigurationError: If no API keys are configured
    """
    global _credential_pool
    if _credential_pool is None:
        _credential_pool = CredentialPool.from_config(load_config())
    return _credential_pool


def get_failover_controller() -> FailoverController:
    """Get or create the failover controller bound to the shared pool."""
    global _failover
    if _failover is None:
        _failover = FailoverController(get_credential_pool())
    return _failover


def get_video_search_service() -> VideoSearchService:
    """Get or create the video search service instance."""
    global _search_service
    if _search_service is None:
        config = load_config()
        seed = config.get("filler_seed")
        _search_service = VideoSearchService(
            provider=YouTubeSearchProvider(),
            failover=get_failover_controller(),
            settings=SearchSettings.from_config(config),
            query_builder=QueryBuilder(random.Random(seed) if seed is not None else None),
        )
    return _search_service


def get_thumbnail_service() -> ThumbnailService:
    """Get or create the thumbnail proxy instance."""
    global _thumbnail_service
    if _thumbnail_service is None:
        _thumbnail_service = ThumbnailService()
    return _thumbnail_service


def get_export_sink(extension: str) -> TabularExportSink:
    """Get the export sink for a file extension ("xlsx" or "csv")."""
    return _export_sinks[extension]


async def shutdown_services() -> None:
    """Release network clients held by the singletons."""
    global _thumbnail_service
    if _thumbnail_service is not None:
        await _thumbnail_service.close()
        _thumbnail_service = None
