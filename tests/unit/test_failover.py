"""Unit tests for quota failover and region fallback."""

from unittest.mock import Mock

import pytest

from services.credential_pool import CredentialPool
from services.errors import (
    InvalidCredentialError,
    InvalidRegionError,
    PoolExhaustedError,
    ProviderError,
    QuotaExceededError,
)
from services.failover import FailoverController


class TestQuotaRotation:
    """Tests for rotation on quota exhaustion."""

    def test_success_on_first_key(self, pool, failover):
        operation = Mock(return_value="ok")
        assert failover.execute_with_failover(operation, "q", region_code="KR") == "ok"

        credential = operation.call_args.args[0]
        assert credential.name == "API_KEY_1"
        assert operation.call_args.args[1:] == ("q",)
        assert operation.call_args.kwargs == {"region_code": "KR"}
        assert pool.snapshot()[0].usage_count == 1

    def test_rotates_to_next_key(self, pool, failover):
        def operation(credential):
            if credential.ordinal == 1:
                raise QuotaExceededError("quota")
            return credential.name

        assert failover.execute_with_failover(operation) == "API_KEY_2"
        snaps = pool.snapshot()
        assert snaps[0].exhausted is True
        assert snaps[1].usage_count == 1

    def test_all_keys_exhausted(self, pool, failover):
        operation = Mock(side_effect=QuotaExceededError("quota"))

        with pytest.raises(PoolExhaustedError) as exc_info:
            failover.execute_with_failover(operation)

        assert operation.call_count == 3
        assert exc_info.value.to_dict() == {"total": 3, "available": 0, "exhausted": 3}
        assert isinstance(exc_info.value.__cause__, QuotaExceededError)

    def test_each_key_tried_at_most_once(self):
        pool = CredentialPool(["key-one-0001", "key-two-0002"])
        failover = FailoverController(pool)
        operation = Mock(side_effect=QuotaExceededError("quota"))

        with pytest.raises(PoolExhaustedError):
            failover.execute_with_failover(operation)

        tried = [call.args[0].ordinal for call in operation.call_args_list]
        assert tried == [1, 2]

    def test_exhausted_pool_fails_fast_on_first_key(self, pool, failover):
        for _ in range(3):
            pool.mark_exhausted(pool.current_usable())
        operation = Mock(side_effect=QuotaExceededError("quota"))

        with pytest.raises(PoolExhaustedError):
            failover.execute_with_failover(operation)

        assert operation.call_count == 1
        assert operation.call_args.args[0].ordinal == 1

    def test_later_calls_start_on_rotated_key(self, pool, failover):
        def operation(credential):
            if credential.ordinal == 1:
                raise QuotaExceededError("quota")
            return credential.ordinal

        failover.execute_with_failover(operation)
        assert failover.execute_with_failover(operation) == 2


class TestRegionFallback:
    """Tests for the one-shot region retry."""

    def test_region_dropped_once_on_same_key(self, pool, failover):
        seen = []

        def operation(credential, query, region_code=None):
            seen.append((credential.ordinal, region_code))
            if region_code:
                raise InvalidRegionError("Invalid regionCode")
            return "worldwide"

        assert failover.execute_with_failover(operation, "q", region_code="XX") == "worldwide"
        assert seen == [(1, "XX"), (1, None)]
        assert pool.counts()["exhausted"] == 0

    def test_region_error_without_region_propagates(self, failover):
        operation = Mock(side_effect=InvalidRegionError("Invalid regionCode"))
        with pytest.raises(InvalidRegionError):
            failover.execute_with_failover(operation, region_code=None)
        assert operation.call_count == 1

    def test_second_region_error_propagates(self, failover):
        operation = Mock(side_effect=InvalidRegionError("Invalid regionCode"))
        with pytest.raises(InvalidRegionError):
            failover.execute_with_failover(operation, region_code="KR")
        assert operation.call_count == 2

    def test_region_fallback_then_quota_rotation(self, pool, failover):
        def operation(credential, region_code=None):
            if region_code:
                raise InvalidRegionError("Invalid regionCode")
            if credential.ordinal == 1:
                raise QuotaExceededError("quota")
            return credential.ordinal, region_code

        assert failover.execute_with_failover(operation, region_code="KR") == (2, None)


class TestOtherErrors:
    """Non-quota errors are never retried."""

    @pytest.mark.parametrize("error", [InvalidCredentialError("bad key"), ProviderError("boom"), ValueError("x")])
    def test_propagates_unretried(self, pool, failover, error):
        operation = Mock(side_effect=error)
        with pytest.raises(type(error)):
            failover.execute_with_failover(operation)
        assert operation.call_count == 1
        assert pool.counts()["exhausted"] == 0
