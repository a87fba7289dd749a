"""YouTube Data API v3 search provider.

Quota Budget (10,000 units/day free, per key):
- search.list: 100 units
- videos.list: 1 unit (batched, 50 per request)
- channels.list: 1 unit

Failures come back from googleapiclient as ``HttpError``; they are classified
here, once, into the ``services.errors`` taxonomy using the ``reason`` codes
of the API's error payload, with a message-text fallback.
"""

import json
import logging
import threading
from typing import Dict, List, Optional

import httplib2
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from models.credential import Credential
from models.video import SearchHit, SearchPage, VideoDetail
from services.errors import (
    InvalidCredentialError,
    InvalidRegionError,
    ProviderError,
    QuotaExceededError,
    VideoSearchError,
)
from services.video_sources.base import VideoSearchProvider

logger = logging.getLogger(__name__)

QUOTA_REASONS = {
    "quotaexceeded",
    "dailylimitexceeded",
    "dailylimitexceededunreg",
    "ratelimitexceeded",
    "userratelimitexceeded",
    "limitexceeded",
}
REGION_REASONS = {"invalidregioncode"}
CREDENTIAL_REASONS = {"keyinvalid", "keyexpired", "forbidden_key", "accessnotconfigured"}


def _error_payload(error: HttpError) -> dict:
    content = getattr(error, "content", None)
    if isinstance(content, bytes):
        content = content.decode("utf-8", errors="replace")
    if not isinstance(content, str):
        return {}
    try:
        payload = json.loads(content)
    except json.JSONDecodeError:
        return {}
    return payload.get("error", {}) if isinstance(payload, dict) else {}


def classify_http_error(error: HttpError) -> VideoSearchError:
    """Map a googleapiclient HttpError onto the error taxonomy.

    Args:
        error: Error raised by ``request.execute()``

    Returns:
        QuotaExceededError, InvalidRegionError, InvalidCredentialError or ProviderError
    """
    payload = _error_payload(error)
    message = payload.get("message") or str(error)
    reasons = {
        str(item.get("reason", "")).lower()
        for item in payload.get("errors", [])
        if isinstance(item, dict)
    }
    lowered = message.lower()

    if reasons & QUOTA_REASONS or "quota" in lowered:
        return QuotaExceededError(message)
    if reasons & REGION_REASONS or "regioncode" in lowered or "invalid region" in lowered:
        return InvalidRegionError(message)
    if reasons & CREDENTIAL_REASONS or "api key" in lowered:
        return InvalidCredentialError(message)
    return ProviderError(message)


class YouTubeSearchProvider(VideoSearchProvider):
    """Video search provider backed by the YouTube Data API v3.

    Features:
    - One discovery client per API key, built lazily and reused
    - Batched detail lookups (50 ids per request)
    - Structured error classification for the failover controller
    """

    # Batch sizes for API requests
    MAX_BATCH_SIZE = 50  # YouTube API limit

    # Quota costs
    QUOTA_SEARCH = 100
    QUOTA_VIDEOS = 1
    QUOTA_CHANNELS = 1

    def __init__(self):
        self._clients: Dict[int, object] = {}
        self._quota_used = 0
        self._lock = threading.RLock()

    @property
    def quota_used(self) -> int:
        """Get total quota units spent through this provider in this session."""
        return self._quota_used

    def get_source_name(self) -> str:
        return "youtube"

    def _client(self, credential: Credential):
        """Get (or build) the API client for ``credential``."""
        with self._lock:
            client = self._clients.get(credential.ordinal)
            if client is None:
                client = build(
                    "youtube",
                    "v3",
                    developerKey=credential.secret,
                    cache_discovery=False,
                )
                self._clients[credential.ordinal] = client
            return client

    def _execute(self, request, quota_cost: int):
        """Execute an API request with thread safety.

        Cached clients share one httplib2 connection, so calls are serialized.
        HttpError is classified into the error taxonomy; transport failures
        (timeouts, resets, httplib2 errors) become ProviderError.
        """
        with self._lock:
            try:
                response = request.execute()
            except HttpError as e:
                classified = classify_http_error(e)
                logger.error(f"YouTube API error ({classified.kind.value}): {classified.message}")
                raise classified from e
            except (OSError, httplib2.HttpLib2Error) as e:
                logger.error(f"YouTube API transport error: {e}")
                raise ProviderError(f"YouTube API request failed: {e}") from e

            self._quota_used += quota_cost
            return response

    def search_videos(
        self,
        credential: Credential,
        query: str,
        order: str = "viewCount",
        region_code: Optional[str] = None,
        relevance_language: Optional[str] = None,
        published_after: Optional[str] = None,
        published_before: Optional[str] = None,
        max_results: int = 50,
        page_token: Optional[str] = None,
    ) -> SearchPage:
        """Search for videos by query.

        Args:
            credential: Key to authenticate with
            query: Search query
            order: Sort order ("viewCount" or "relevance")
            region_code: ISO 3166-1 alpha-2 region, None for worldwide
            relevance_language: ISO 639-1 language hint
            published_after: Only videos published after this instant (RFC 3339)
            published_before: Only videos published before this instant (RFC 3339)
            max_results: Page size (max 50)
            page_token: Token of the page to fetch

        Returns:
            SearchPage of hits
        """
        params = {
            "part": "snippet",
            "q": query,
            "type": "video",
            "maxResults": min(max_results, self.MAX_BATCH_SIZE),
            "order": order,
        }
        if region_code:
            params["regionCode"] = region_code
        if relevance_language:
            params["relevanceLanguage"] = relevance_language
        if published_after:
            params["publishedAfter"] = published_after
        if published_before:
            params["publishedBefore"] = published_before
        if page_token:
            params["pageToken"] = page_token

        request = self._client(credential).search().list(**params)
        response = self._execute(request, self.QUOTA_SEARCH)

        hits = []
        for item in response.get("items", []):
            video_id = item.get("id", {}).get("videoId")
            if not video_id:
                continue
            snippet = item.get("snippet", {})
            hits.append(
                SearchHit(
                    video_id=video_id,
                    title=snippet.get("title", ""),
                    channel_id=snippet.get("channelId", ""),
                    channel_name=snippet.get("channelTitle", ""),
                    published_at=snippet.get("publishedAt", ""),
                )
            )

        return SearchPage(
            hits=hits,
            next_page_token=response.get("nextPageToken"),
            region_code=region_code,
        )

    def get_video_details(self, credential: Credential, video_ids: List[str]) -> List[VideoDetail]:
        """Get statistics and duration for multiple videos (batched).

        Args:
            credential: Key to authenticate with
            video_ids: List of video IDs

        Returns:
            List of VideoDetail in API order
        """
        results = []

        # Process in batches of 50
        for i in range(0, len(video_ids), self.MAX_BATCH_SIZE):
            batch = video_ids[i:i + self.MAX_BATCH_SIZE]

            request = self._client(credential).videos().list(
                part="snippet,statistics,contentDetails",
                id=",".join(batch),
            )
            response = self._execute(request, self.QUOTA_VIDEOS)

            for item in response.get("items", []):
                snippet = item.get("snippet", {})
                stats = item.get("statistics", {})
                content = item.get("contentDetails", {})
                thumbnails = snippet.get("thumbnails", {})

                results.append(
                    VideoDetail(
                        video_id=item["id"],
                        title=snippet.get("title", ""),
                        description=snippet.get("description", ""),
                        channel_id=snippet.get("channelId", ""),
                        channel_name=snippet.get("channelTitle", ""),
                        published_at=snippet.get("publishedAt", ""),
                        view_count=int(stats.get("viewCount", 0)),
                        duration=content.get("duration", ""),
                        thumbnail_url=(
                            thumbnails.get("medium", {}).get("url")
                            or thumbnails.get("default", {}).get("url", "")
                        ),
                        category_id=snippet.get("categoryId", ""),
                    )
                )

        return results

    def get_subscriber_count(self, credential: Credential, channel_id: str) -> int:
        """Get the subscriber count of one channel.

        Args:
            credential: Key to authenticate with
            channel_id: YouTube channel ID

        Returns:
            Subscriber count, 0 if hidden or channel not found
        """
        request = self._client(credential).channels().list(
            part="statistics",
            id=channel_id,
        )
        response = self._execute(request, self.QUOTA_CHANNELS)

        items = response.get("items", [])
        if not items:
            return 0
        return int(items[0].get("statistics", {}).get("subscriberCount", 0) or 0)
