"""Video-related data models."""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

ALLOWED_RESULT_COUNTS = (10, 20, 30, 40, 50, 60, 100, 150, 200)
DEFAULT_RESULT_COUNT = 60


@dataclass(frozen=True)
class SearchRequest:
    """A parsed inbound search. Built once per call, never mutated."""

    country: str = "worldwide"
    keyword: str = ""
    min_views: Optional[int] = None
    max_views: Optional[int] = None
    upload_period: Optional[str] = None  # "1day", "1week", ..., "10years"
    start_date: Optional[str] = None  # YYYY-MM-DD, wins over upload_period
    end_date: Optional[str] = None  # YYYY-MM-DD
    duration_buckets: FrozenSet[str] = field(default_factory=frozenset)  # empty = no filter
    max_results: int = DEFAULT_RESULT_COUNT

    @staticmethod
    def normalize_result_count(value) -> int:
        """Clamp a requested result count to the allow-list (default 60)."""
        try:
            count = int(value)
        except (TypeError, ValueError):
            return DEFAULT_RESULT_COUNT
        return count if count in ALLOWED_RESULT_COUNTS else DEFAULT_RESULT_COUNT

    @staticmethod
    def parse_buckets(value: Optional[str]) -> FrozenSet[str]:
        """Parse a comma separated list of duration bucket tags."""
        if not value or not value.strip():
            return frozenset()
        return frozenset(tag.strip() for tag in value.split(",") if tag.strip())

    @property
    def has_keyword(self) -> bool:
        return bool(self.keyword and self.keyword.strip())


@dataclass(frozen=True)
class SearchQuery:
    """Provider-level search parameters derived from a SearchRequest."""

    q: str
    order: str = "viewCount"  # "viewCount" or "relevance"
    region_code: Optional[str] = None
    relevance_language: Optional[str] = None
    published_after: Optional[str] = None  # RFC 3339
    published_before: Optional[str] = None
    page_size: int = 50


@dataclass(frozen=True)
class SearchHit:
    """One item of a search page."""

    video_id: str
    title: str = ""
    channel_id: str = ""
    channel_name: str = ""
    published_at: str = ""


@dataclass(frozen=True)
class SearchPage:
    """One page of search hits.

    ``region_code`` is the region the provider actually answered for; it is
    None when the search ran worldwide.
    """

    hits: List[SearchHit]
    next_page_token: Optional[str] = None
    region_code: Optional[str] = None

    @property
    def video_ids(self) -> List[str]:
        return [hit.video_id for hit in self.hits]


@dataclass(frozen=True)
class VideoDetail:
    """Statistics, duration and snippet from a video detail lookup."""

    video_id: str
    title: str
    description: str
    channel_id: str
    channel_name: str
    published_at: str
    view_count: int
    duration: str  # ISO 8601 duration format (e.g., "PT5M30S")
    thumbnail_url: str = ""
    category_id: str = ""


@dataclass(frozen=True)
class VideoRecord:
    """An output row: a search hit merged with its detail lookup."""

    video_id: str
    title: str
    description: str
    channel_id: str
    channel_name: str
    thumbnail_url: str
    published_at: str
    view_count: int
    duration: str
    duration_seconds: int
    duration_category: str
    subscriber_count: int = 0
    category: str = "Other"
    status: str = "active"

    @property
    def url(self) -> str:
        return WATCH_URL.format(video_id=self.video_id)

    def to_dict(self) -> dict:
        """Convert to the dictionary shape served by /api/search."""
        return {
            "youtube_channel_name": self.channel_name,
            "thumbnail_url": self.thumbnail_url,
            "status": self.status,
            "youtube_channel_id": self.channel_id,
            "primary_category": self.category,
            "status_date": self.published_at,
            "daily_view_count": self.view_count,
            "subscriber_count": self.subscriber_count,
            "vod_url": self.url,
            "video_id": self.video_id,
            "title": self.title,
            "description": self.description,
            "duration": self.duration,
            "duration_seconds": self.duration_seconds,
            "video_length_category": self.duration_category,
        }
