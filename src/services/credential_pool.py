"""Credential pool for YouTube Data API keys.

Holds every configured API key in its configured order and tracks, per key,
how often it was used, when it was last used and whether its daily quota is
spent. The pool is shared by all in-flight requests, so selection and
exhaustion marking happen under a single lock.
"""

import logging
import threading
from datetime import datetime
from typing import List, Optional, Sequence

from models.credential import Credential, CredentialSnapshot
from services.errors import ConfigurationError

logger = logging.getLogger(__name__)


class CredentialPool:
    """Ordered pool of API keys with one-way quota exhaustion."""

    def __init__(self, secrets: Sequence[str]):
        """Populate the pool in input order.

        Args:
            secrets: API keys, in the order they should be tried

        Raises:
            ConfigurationError: If no keys are given
        """
        if not secrets:
            raise ConfigurationError(
                "No YouTube API keys configured. Set YOUTUBE_API_KEY_1, YOUTUBE_API_KEY_2, ... in .env"
            )

        self._entries: List[Credential] = [
            Credential(name=f"API_KEY_{i}", secret=secret, ordinal=i)
            for i, secret in enumerate(secrets, start=1)
        ]
        self._current_ordinal = 1
        self._lock = threading.RLock()

        logger.info(f"{len(self._entries)} YouTube API key(s) configured")
        for entry in self._entries:
            logger.info(f"  {entry.ordinal}. {entry.name} ({entry.masked})")

    @classmethod
    def from_config(cls, config: dict) -> "CredentialPool":
        """Create a pool from the application config dict."""
        return cls(config.get("youtube_api_keys") or [])

    def __len__(self) -> int:
        return len(self._entries)

    def current_usable(self) -> Credential:
        """Return the first non-exhausted key by ordinal.

        When every key is exhausted the first key is returned anyway; the
        caller's next call fails fast instead of waiting for the quota reset.
        """
        with self._lock:
            for entry in self._entries:
                if not entry.exhausted:
                    self._current_ordinal = entry.ordinal
                    return entry

            logger.warning("All API keys have exceeded their quota, falling back to the first key")
            return self._entries[0]

    def record_use(self, entry: Credential) -> None:
        """Count one call against ``entry``."""
        with self._lock:
            entry.usage_count += 1
            entry.last_used_at = datetime.now()
        logger.debug(f"Using {entry.name} (usage count: {entry.usage_count})")

    def acquire(self) -> Credential:
        """Select the current usable key and record its use in one step."""
        with self._lock:
            entry = self.current_usable()
            self.record_use(entry)
            return entry

    def mark_exhausted(self, entry: Credential) -> Optional[Credential]:
        """Mark ``entry`` as out of quota and pick the next usable key.

        Idempotent. The scan runs in ordinal order and never returns
        ``entry`` itself.

        Returns:
            The next non-exhausted key, or None when the pool is spent
        """
        with self._lock:
            if not entry.exhausted:
                logger.warning(f"{entry.name} disabled: quota exceeded")
            entry.exhausted = True

            for candidate in self._entries:
                if candidate.ordinal != entry.ordinal and not candidate.exhausted:
                    self._current_ordinal = candidate.ordinal
                    logger.info(f"Switching to {candidate.name}")
                    return candidate

            logger.warning("No API keys with remaining quota")
            return None

    def counts(self) -> dict:
        """Return total / available / exhausted key counts."""
        with self._lock:
            exhausted = sum(1 for entry in self._entries if entry.exhausted)
            total = len(self._entries)
        return {"total": total, "available": total - exhausted, "exhausted": exhausted}

    def snapshot(self) -> List[CredentialSnapshot]:
        """Read-only, masked view of every key."""
        with self._lock:
            return [
                CredentialSnapshot(
                    name=entry.name,
                    masked_key=entry.masked,
                    ordinal=entry.ordinal,
                    usage_count=entry.usage_count,
                    exhausted=entry.exhausted,
                    last_used_at=entry.last_used_at,
                    is_current=entry.ordinal == self._current_ordinal,
                )
                for entry in self._entries
            ]

    def log_usage_stats(self) -> None:
        """Log per-key usage and an availability summary."""
        snapshots = self.snapshot()

        logger.info("API key usage:")
        for snap in snapshots:
            status = "quota exceeded" if snap.exhausted else "available"
            last_used = snap.last_used_at.strftime("%Y-%m-%d %H:%M:%S") if snap.last_used_at else "never"
            current = " [current]" if snap.is_current else ""
            logger.info(
                f"  {snap.name}: {status} | uses: {snap.usage_count} | last used: {last_used}{current}"
            )

        available = [s.name for s in snapshots if not s.exhausted]
        exhausted = [s.name for s in snapshots if s.exhausted]
        logger.info(f"Summary: {len(available)}/{len(snapshots)} keys available")
        if exhausted:
            logger.info(f"  Exhausted: {', '.join(exhausted)}")
        if available:
            logger.info(f"  Available: {', '.join(available)}")
