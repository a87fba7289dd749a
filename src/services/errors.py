"""Error taxonomy for video search and credential failover.

Every provider failure is raised as a ``VideoSearchError`` subclass carrying an
explicit ``kind``, so callers classify failures by type instead of by message.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Classified failure kinds."""

    CONFIGURATION = "configuration"
    QUOTA_EXCEEDED = "quota_exceeded"
    INVALID_REGION = "invalid_region"
    POOL_EXHAUSTED = "pool_exhausted"
    INVALID_CREDENTIAL = "invalid_api_key"
    PROVIDER = "general_error"


class VideoSearchError(Exception):
    """Base error for the search backend."""

    kind: ErrorKind = ErrorKind.PROVIDER

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class ConfigurationError(VideoSearchError):
    """No usable credentials (or otherwise unusable settings) at startup."""

    kind = ErrorKind.CONFIGURATION


class QuotaExceededError(VideoSearchError):
    """The provider rejected the call because the key's daily quota is spent."""

    kind = ErrorKind.QUOTA_EXCEEDED


class InvalidRegionError(VideoSearchError):
    """The provider rejected the region code of a search call."""

    kind = ErrorKind.INVALID_REGION


class InvalidCredentialError(VideoSearchError):
    """The provider rejected the API key itself."""

    kind = ErrorKind.INVALID_CREDENTIAL


class ProviderError(VideoSearchError):
    """Any other provider failure."""

    kind = ErrorKind.PROVIDER


class PoolExhaustedError(VideoSearchError):
    """Every credential in the pool has hit its quota."""

    kind = ErrorKind.POOL_EXHAUSTED

    def __init__(self, available: int, exhausted: int, total: int, message: str = ""):
        super().__init__(
            message or f"All API keys have exceeded their quota ({exhausted}/{total} exhausted)"
        )
        self.available = available
        self.exhausted = exhausted
        self.total = total

    def to_dict(self) -> dict:
        """Key statistics for error responses."""
        return {
            "total": self.total,
            "available": self.available,
            "exhausted": self.exhausted,
        }
