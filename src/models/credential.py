"""Data models for YouTube API credentials."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


def mask_secret(secret: str) -> str:
    """Mask an API key down to its last four characters."""
    return f"***{secret[-4:]}" if secret else "***"


@dataclass
class Credential:
    """A single YouTube Data API key tracked by the credential pool.

    Only the pool mutates these fields; ``exhausted`` never flips back to
    False while the process is alive (quota resets daily, i.e. on restart).
    """

    name: str  # API_KEY_<ordinal>
    secret: str = field(repr=False)
    ordinal: int  # 1-based position in the configured order
    usage_count: int = 0
    exhausted: bool = False
    last_used_at: Optional[datetime] = None

    @property
    def masked(self) -> str:
        """Masked key suitable for logs."""
        return mask_secret(self.secret)


@dataclass(frozen=True)
class CredentialSnapshot:
    """Read-only view of a credential for reporting. Never holds the secret."""

    name: str
    masked_key: str
    ordinal: int
    usage_count: int
    exhausted: bool
    last_used_at: Optional[datetime]
    is_current: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON responses."""
        return {
            "name": self.name,
            "masked_key": self.masked_key,
            "ordinal": self.ordinal,
            "usage_count": self.usage_count,
            "status": "quota_exceeded" if self.exhausted else "available",
            "last_used_at": self.last_used_at.isoformat() if self.last_used_at else None,
            "is_current": self.is_current,
        }
