"""Shared pytest fixtures for tubescout tests."""

import sys
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from models.video import SearchHit, SearchPage, VideoDetail  # noqa: E402
from services.credential_pool import CredentialPool  # noqa: E402
from services.errors import QuotaExceededError  # noqa: E402
from services.failover import FailoverController  # noqa: E402
from services.video_search_service import SearchSettings  # noqa: E402
from services.video_sources.base import VideoSearchProvider  # noqa: E402


def make_detail(video_id: str, views: int, duration: str = "PT5M", channel_id: str = "UC1", **kwargs) -> VideoDetail:
    """Build a VideoDetail with sensible defaults."""
    return VideoDetail(
        video_id=video_id,
        title=kwargs.get("title", f"Video {video_id}"),
        description=kwargs.get("description", ""),
        channel_id=channel_id,
        channel_name=kwargs.get("channel_name", "Channel"),
        published_at=kwargs.get("published_at", "2024-03-01T12:00:00Z"),
        view_count=views,
        duration=duration,
        thumbnail_url=kwargs.get("thumbnail_url", f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"),
        category_id=kwargs.get("category_id", "24"),
    )


class FakeProvider(VideoSearchProvider):
    """In-memory provider serving scripted pages.

    ``pages`` is a list of (details, next_page_token). ``quota_fail`` holds
    ordinals of keys that answer every call with a quota error; keys listed in
    ``quota_fail_after`` start failing after that many successful calls.
    """

    def __init__(
        self,
        pages: List[tuple],
        subscribers: Optional[Dict[str, int]] = None,
        quota_fail: Optional[set] = None,
        quota_fail_after: Optional[Dict[int, int]] = None,
    ):
        self.pages = pages
        self.subscribers = subscribers or {}
        self.quota_fail = set(quota_fail or ())
        self.quota_fail_after = dict(quota_fail_after or {})
        self.details_by_id = {d.video_id: d for details, _ in pages for d in details}
        self.calls: List[tuple] = []
        self._successes: Dict[int, int] = {}

    def _check_quota(self, credential) -> None:
        if credential.ordinal in self.quota_fail:
            raise QuotaExceededError("The request cannot be completed because you have exceeded your quota.")
        limit = self.quota_fail_after.get(credential.ordinal)
        if limit is not None and self._successes.get(credential.ordinal, 0) >= limit:
            raise QuotaExceededError("quotaExceeded")
        self._successes[credential.ordinal] = self._successes.get(credential.ordinal, 0) + 1

    def search_videos(self, credential, query, order="viewCount", region_code=None,
                      relevance_language=None, published_after=None, published_before=None,
                      max_results=50, page_token=None) -> SearchPage:
        self.calls.append(("search", credential.name, page_token, region_code))
        self._check_quota(credential)
        index = int(page_token) if page_token else 0
        if index >= len(self.pages):
            return SearchPage(hits=[], region_code=region_code)
        details, next_token = self.pages[index]
        hits = [SearchHit(video_id=d.video_id, title=d.title) for d in details]
        return SearchPage(hits=hits, next_page_token=next_token, region_code=region_code)

    def get_video_details(self, credential, video_ids) -> List[VideoDetail]:
        self.calls.append(("details", credential.name, len(video_ids)))
        self._check_quota(credential)
        return [self.details_by_id[v] for v in video_ids if v in self.details_by_id]

    def get_subscriber_count(self, credential, channel_id) -> int:
        self.calls.append(("channel", credential.name, channel_id))
        self._check_quota(credential)
        return self.subscribers.get(channel_id, 0)

    def get_source_name(self) -> str:
        return "fake"


@pytest.fixture
def pool() -> CredentialPool:
    """Three-key credential pool."""
    return CredentialPool(["key-aaaa1111", "key-bbbb2222", "key-cccc3333"])


@pytest.fixture
def failover(pool) -> FailoverController:
    return FailoverController(pool)


@pytest.fixture
def fast_settings() -> SearchSettings:
    """Search settings without page delay or subscriber lookups."""
    return SearchSettings(page_delay_seconds=0, enrich_subscribers=False)


@pytest.fixture
def sample_config() -> Dict:
    """Sample configuration for testing."""
    return {
        "max_api_keys": 10,
        "youtube_api_keys": ["key-aaaa1111", "key-bbbb2222"],
        "port": 3000,
        "cors_origins": ["*"],
        "page_delay_seconds": 0.0,
        "enrich_subscribers": True,
        "deduplicate_results": True,
        "duration_buckets": "fine",
        "default_min_views": 100000,
        "filler_seed": 7,
        "log_level": "INFO",
        "log_json": False,
    }


@pytest.fixture
def sample_results() -> List[dict]:
    """Rows as served by /api/search."""
    return [
        {
            "youtube_channel_name": "Cooking Daily",
            "thumbnail_url": "https://i.ytimg.com/vi/abc123/mqdefault.jpg",
            "status": "active",
            "youtube_channel_id": "UCcook",
            "primary_category": "Howto & Style",
            "status_date": "2024-05-02T08:00:00Z",
            "daily_view_count": 1234567,
            "subscriber_count": 253000,
            "vod_url": "https://www.youtube.com/watch?v=abc123",
            "video_id": "abc123",
            "title": "Perfect Kimchi",
            "description": "How to make kimchi",
            "duration": "PT12M5S",
            "duration_seconds": 725,
            "video_length_category": "mid2",
        },
        {
            "youtube_channel_name": "Tiny Clips",
            "thumbnail_url": "",
            "status": "active",
            "youtube_channel_id": "UCtiny",
            "primary_category": "Entertainment",
            "status_date": "2024-05-01T08:00:00Z",
            "daily_view_count": 150000,
            "subscriber_count": 5400,
            "vod_url": "https://www.youtube.com/watch?v=def456",
            "video_id": "def456",
            "title": "Cat jumps",
            "description": "",
            "duration": "PT45S",
            "duration_seconds": 45,
            "video_length_category": "short1",
        },
    ]
