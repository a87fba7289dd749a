"""Base abstraction for video search providers."""

from abc import ABC, abstractmethod
from typing import List, Optional

from models.credential import Credential
from models.video import SearchPage, VideoDetail


class VideoSearchProvider(ABC):
    """Abstract base class for quota-bound video platform APIs.

    Every call takes the credential to authenticate with as its first
    argument, so the failover controller decides which key is spent.
    Implementations raise ``services.errors`` exceptions: QuotaExceededError
    from any call, InvalidRegionError from ``search_videos`` only.
    """

    @abstractmethod
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
        """Fetch one page of search results.

        Returns:
            SearchPage with hits, the next page token and the region answered for
        """

    @abstractmethod
    def get_video_details(self, credential: Credential, video_ids: List[str]) -> List[VideoDetail]:
        """Batch lookup of statistics and duration for ``video_ids``.

        Returns:
            Details in provider order; unknown ids are omitted
        """

    @abstractmethod
    def get_subscriber_count(self, credential: Credential, channel_id: str) -> int:
        """Subscriber count of a channel (0 when hidden or unknown)."""

    def get_source_name(self) -> str:
        """Get the name of this provider."""
        return self.__class__.__name__
