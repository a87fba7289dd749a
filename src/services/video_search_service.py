"""Video search orchestration over the credential pool.

Collects search results page by page through the failover controller:

    COLLECTING -> PAGE_FETCHED -> FILTERING -> COLLECTING ... -> DONE

Each page costs one search call plus one batched detail call, and optionally
one channel call per emitted record for subscriber counts. Collection stops
when the requested count is reached, a page comes back empty or there is no
next page. Results are sorted by view count, highest first.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Set

from models.video import SearchPage, SearchQuery, SearchRequest, VideoDetail, VideoRecord
from services.errors import PoolExhaustedError, VideoSearchError
from services.failover import FailoverController
from services.query_builder import QueryBuilder
from services.video_sources.base import VideoSearchProvider
from utils.duration import BUCKET_TABLES, BucketTable, duration_bucket, matches_buckets, parse_duration

logger = logging.getLogger(__name__)

YOUTUBE_CATEGORIES = {
    "1": "Film & Animation",
    "2": "Autos & Vehicles",
    "10": "Music",
    "15": "Pets & Animals",
    "17": "Sports",
    "19": "Travel & Events",
    "20": "Gaming",
    "22": "People & Blogs",
    "23": "Comedy",
    "24": "Entertainment",
    "25": "News & Politics",
    "26": "Howto & Style",
    "27": "Education",
    "28": "Science & Technology",
}


def get_category_name(category_id: str) -> str:
    """Map a YouTube category id to its name."""
    return YOUTUBE_CATEGORIES.get(str(category_id), "Other")


@dataclass
class SearchSettings:
    """Feature switches for the search orchestrator."""

    page_delay_seconds: float = 0.5
    enrich_subscribers: bool = True
    deduplicate: bool = True
    bucket_table: str = "fine"

    @classmethod
    def from_config(cls, config: Optional[dict] = None) -> "SearchSettings":
        """Create SearchSettings from application config or environment variables."""
        config = config or {}
        return cls(
            page_delay_seconds=float(
                config.get("page_delay_seconds", os.getenv("PAGE_DELAY_SECONDS", "0.5"))
            ),
            enrich_subscribers=config.get(
                "enrich_subscribers",
                os.getenv("ENRICH_SUBSCRIBERS", "true").lower() == "true",
            ),
            deduplicate=config.get(
                "deduplicate_results",
                os.getenv("DEDUPLICATE_RESULTS", "true").lower() == "true",
            ),
            bucket_table=config.get("duration_buckets", os.getenv("DURATION_BUCKETS", "fine")),
        )

    @property
    def buckets(self) -> BucketTable:
        return BUCKET_TABLES.get(self.bucket_table, BUCKET_TABLES["fine"])


@dataclass
class SearchResult:
    """Outcome of one search request."""

    records: List[VideoRecord] = field(default_factory=list)
    pages_fetched: int = 0
    videos_scanned: int = 0
    duplicates_skipped: int = 0
    region_fallback: bool = False

    @property
    def total(self) -> int:
        return len(self.records)

    def to_dicts(self) -> List[dict]:
        return [record.to_dict() for record in self.records]


class VideoSearchService:
    """Runs paged, filtered, de-duplicated searches through the failover controller."""

    def __init__(
        self,
        provider: VideoSearchProvider,
        failover: FailoverController,
        settings: Optional[SearchSettings] = None,
        query_builder: Optional[QueryBuilder] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the video search service.

        Args:
            provider: Video platform adapter
            failover: Controller that owns credential selection and rotation
            settings: Feature switches (defaults: enrichment and de-duplication on)
            query_builder: Builds provider queries (seed its RNG for reproducible filler terms)
            sleep: Delay function used between pages
        """
        self.provider = provider
        self.failover = failover
        self.settings = settings or SearchSettings()
        self.query_builder = query_builder or QueryBuilder()
        self._sleep = sleep

    def search(self, request: SearchRequest) -> SearchResult:
        """Collect up to ``request.max_results`` records, sorted by views descending."""
        query = self.query_builder.build(request)
        result = SearchResult()
        seen_ids: Set[str] = set()
        page_token: Optional[str] = None

        logger.info(
            f"Searching q={query.q!r} region={query.region_code or 'worldwide'} "
            f"lang={query.relevance_language} order={query.order} target={request.max_results}"
        )

        while len(result.records) < request.max_results:
            page = self._fetch_page(query, page_token)
            result.pages_fetched += 1

            if query.region_code and page.region_code is None:
                logger.warning(
                    f"Region {query.region_code} rejected for '{request.country}', "
                    f"continuing as a worldwide search"
                )
                query = _without_region(query)
                result.region_fallback = True

            if not page.hits:
                break

            details = self.failover.execute_with_failover(
                self.provider.get_video_details, page.video_ids
            )
            result.videos_scanned += len(details)

            for detail in details:
                if self.settings.deduplicate and detail.video_id in seen_ids:
                    logger.debug(f"Skipping duplicate video {detail.video_id}")
                    result.duplicates_skipped += 1
                    continue

                record = self._filter_and_build(detail, request)
                if record is None:
                    continue

                result.records.append(record)
                seen_ids.add(detail.video_id)

                if len(result.records) >= request.max_results:
                    break

            page_token = page.next_page_token
            if not page_token or len(result.records) >= request.max_results:
                break

            if self.settings.page_delay_seconds > 0:
                self._sleep(self.settings.page_delay_seconds)

        # Stable sort: ties keep discovery order
        result.records.sort(key=lambda r: r.view_count, reverse=True)

        logger.info(
            f"Search complete: {result.total} results from {result.pages_fetched} page(s), "
            f"{result.duplicates_skipped} duplicate(s) skipped"
        )
        return result

    def _fetch_page(self, query: SearchQuery, page_token: Optional[str]) -> SearchPage:
        return self.failover.execute_with_failover(
            self.provider.search_videos,
            query.q,
            order=query.order,
            region_code=query.region_code,
            relevance_language=query.relevance_language,
            published_after=query.published_after,
            published_before=query.published_before,
            max_results=query.page_size,
            page_token=page_token,
        )

    def _filter_and_build(self, detail: VideoDetail, request: SearchRequest) -> Optional[VideoRecord]:
        """Apply view and duration filters; build the record if it passes."""
        if request.min_views is not None and detail.view_count < request.min_views:
            return None
        if request.max_views is not None and detail.view_count > request.max_views:
            return None

        seconds = parse_duration(detail.duration)
        bucket = duration_bucket(seconds, self.settings.buckets)
        if not matches_buckets(bucket, request.duration_buckets):
            return None

        subscriber_count = 0
        if self.settings.enrich_subscribers and detail.channel_id:
            subscriber_count = self._subscriber_count(detail.channel_id)

        return VideoRecord(
            video_id=detail.video_id,
            title=detail.title,
            description=detail.description,
            channel_id=detail.channel_id,
            channel_name=detail.channel_name,
            thumbnail_url=detail.thumbnail_url,
            published_at=detail.published_at,
            view_count=detail.view_count,
            duration=detail.duration,
            duration_seconds=seconds,
            duration_category=bucket,
            subscriber_count=subscriber_count,
            category=get_category_name(detail.category_id),
        )

    def _subscriber_count(self, channel_id: str) -> int:
        """Subscriber enrichment; failures other than pool exhaustion degrade to 0."""
        try:
            return self.failover.execute_with_failover(
                self.provider.get_subscriber_count, channel_id
            )
        except PoolExhaustedError:
            raise
        except VideoSearchError as e:
            logger.warning(f"Could not fetch subscribers for channel {channel_id}: {e}")
            return 0


def _without_region(query: SearchQuery) -> SearchQuery:
    return replace(query, region_code=None)
