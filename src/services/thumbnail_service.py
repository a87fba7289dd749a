"""Thumbnail proxy for browser downloads."""

import logging
from urllib.parse import urlparse

import httpx

logger = logging.getLogger(__name__)


class ThumbnailServiceError(Exception):
    """Error fetching a remote thumbnail."""

    pass


class ThumbnailService:
    """Streams remote thumbnail images through the API."""

    def __init__(self, timeout: float = 30.0):
        self.client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def open_stream(self, url: str) -> httpx.Response:
        """Start fetching ``url`` and return the open streaming response.

        The caller must ``aclose()`` the response once the body is consumed.

        Raises:
            ThumbnailServiceError: On invalid URLs, transport errors or non-2xx answers
        """
        if urlparse(url).scheme not in ("http", "https"):
            raise ThumbnailServiceError(f"Unsupported thumbnail URL: {url}")

        request = self.client.build_request("GET", url)
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            raise ThumbnailServiceError(f"Thumbnail request failed: {e}") from e

        if response.is_error:
            await response.aclose()
            raise ThumbnailServiceError(f"Thumbnail request failed with HTTP {response.status_code}")

        return response

    async def close(self) -> None:
        await self.client.aclose()
