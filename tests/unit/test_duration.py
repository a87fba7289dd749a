"""Unit tests for duration parsing and bucketing."""

import pytest

from utils.duration import (
    COARSE_BUCKETS,
    bucket_label,
    duration_bucket,
    format_duration,
    matches_buckets,
    parse_duration,
)


class TestParseDuration:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("PT1H2M3S", 3723),
            ("PT5M30S", 330),
            ("PT45S", 45),
            ("PT2H", 7200),
            ("PT0S", 0),
        ],
    )
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", None, "5:30", "P1D", "garbage", "PT5X"])
    def test_malformed_is_zero(self, value):
        assert parse_duration(value) == 0


class TestDurationBucket:
    @pytest.mark.parametrize(
        "seconds,tag",
        [
            (0, "short1"),
            (59, "short1"),
            (60, "short2"),
            (119, "short2"),
            (120, "mid1"),
            (599, "mid1"),
            (600, "mid2"),
            (1199, "mid2"),
            (1200, "long1"),
            (1800, "long2"),
            (2400, "long3"),
            (3000, "long4"),
            (3600, "long5"),
            (5399, "long5"),
            (5400, "long6"),
            (99999, "long6"),
        ],
    )
    def test_fine_boundaries(self, seconds, tag):
        assert duration_bucket(seconds) == tag

    @pytest.mark.parametrize("seconds,tag", [(239, "short"), (240, "medium"), (1199, "medium"), (1200, "long")])
    def test_coarse_boundaries(self, seconds, tag):
        assert duration_bucket(seconds, COARSE_BUCKETS) == tag


class TestMatchesBuckets:
    def test_empty_selection_matches_everything(self):
        assert matches_buckets("long6", frozenset()) is True

    def test_selection(self):
        assert matches_buckets("mid1", {"mid1", "mid2"}) is True
        assert matches_buckets("short1", {"mid1", "mid2"}) is False


class TestFormatting:
    def test_format_duration(self):
        assert format_duration(0) == "00:00"
        assert format_duration(75) == "01:15"
        assert format_duration(3723) == "01:02:03"

    def test_bucket_label(self):
        assert bucket_label("short1").startswith("Short Form1")
        assert bucket_label("unknown-tag") == "unknown-tag"
        assert bucket_label("") == "Unknown"
