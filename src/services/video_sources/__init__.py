"""Video search providers."""

from services.video_sources.base import VideoSearchProvider
from services.video_sources.youtube import YouTubeSearchProvider, classify_http_error

__all__ = ["VideoSearchProvider", "YouTubeSearchProvider", "classify_http_error"]
