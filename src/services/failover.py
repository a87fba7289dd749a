"""Quota failover across the credential pool.

``FailoverController.execute_with_failover`` runs a quota-bound provider call
against the current usable key and, when the provider reports the key's quota
is spent, retries the same call with the next key. Callers never see how many
keys exist; they either get a result or a ``PoolExhaustedError``.
"""

import logging
from typing import Callable, Set, TypeVar

from models.credential import Credential
from services.credential_pool import CredentialPool
from services.errors import InvalidRegionError, PoolExhaustedError, QuotaExceededError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class FailoverController:
    """Executes provider calls with credential rotation and region fallback.

    Retry policy:
    - Quota exceeded: mark the key exhausted, retry with the next key. Each
      key is tried at most once per call.
    - Invalid region: drop ``region_code`` and retry once with the same key.
    - Anything else: propagate unretried.
    """

    REGION_PARAM = "region_code"

    def __init__(self, pool: CredentialPool):
        self.pool = pool

    def execute_with_failover(self, operation: Callable[..., T], *args, **kwargs) -> T:
        """Run ``operation(credential, *args, **kwargs)`` with failover.

        Args:
            operation: Provider call taking the credential as first argument
            *args: Positional arguments forwarded to the operation
            **kwargs: Keyword arguments forwarded to the operation. A non-empty
                ``region_code`` is stripped once if the provider rejects it.

        Returns:
            Whatever the operation returns

        Raises:
            PoolExhaustedError: If every key ran out of quota during this call
        """
        credential = self.pool.acquire()
        attempted: Set[int] = set()
        region_dropped = False

        while True:
            try:
                return operation(credential, *args, **kwargs)

            except QuotaExceededError as e:
                logger.warning(f"{credential.name} quota exceeded: {e}")
                attempted.add(credential.ordinal)
                credential = self._rotate(credential, attempted, e)

            except InvalidRegionError as e:
                region = kwargs.get(self.REGION_PARAM)
                if region_dropped or not region:
                    raise
                logger.warning(
                    f"Region code {region} rejected ({e}); retrying as a worldwide search"
                )
                kwargs[self.REGION_PARAM] = None
                region_dropped = True
                self.pool.record_use(credential)

    def _rotate(
        self, credential: Credential, attempted: Set[int], cause: QuotaExceededError
    ) -> Credential:
        """Exhaust ``credential`` and return the next key to try."""
        next_credential = self.pool.mark_exhausted(credential)

        if next_credential is None or next_credential.ordinal in attempted:
            counts = self.pool.counts()
            raise PoolExhaustedError(
                available=counts["available"],
                exhausted=counts["exhausted"],
                total=counts["total"],
            ) from cause

        logger.info(f"Retrying with {next_credential.name}")
        self.pool.record_use(next_credential)
        return next_credential
