"""Unit tests for the YouTube Data API provider."""

import json
import threading
import time
from unittest.mock import MagicMock, Mock, patch

import httplib2
import pytest
from googleapiclient.errors import HttpError

from models.credential import Credential
from models.video import SearchRequest
from services.errors import (
    ErrorKind,
    InvalidCredentialError,
    InvalidRegionError,
    ProviderError,
    QuotaExceededError,
)
from services.video_search_service import SearchSettings, VideoSearchService
from services.video_sources import VideoSearchProvider, YouTubeSearchProvider, classify_http_error


def make_http_error(status: int, reason: str, message: str) -> HttpError:
    body = {"error": {"code": status, "message": message, "errors": [{"reason": reason, "message": message}]}}
    return HttpError(Mock(status=status, reason="Error"), json.dumps(body).encode("utf-8"))


@pytest.fixture
def credential() -> Credential:
    return Credential(name="API_KEY_1", secret="AIza-test-0001", ordinal=1)


@pytest.fixture
def client():
    with patch("services.video_sources.youtube.build") as mock_build:
        mock_client = MagicMock()
        mock_build.return_value = mock_client
        yield mock_client


class TestClassifyHttpError:
    """Tests for HttpError classification."""

    def test_quota_reason(self):
        error = make_http_error(403, "quotaExceeded", "The request cannot be completed because you have exceeded your quota.")
        assert isinstance(classify_http_error(error), QuotaExceededError)

    def test_daily_limit_reason(self):
        error = make_http_error(403, "dailyLimitExceeded", "Daily Limit Exceeded")
        assert classify_http_error(error).kind == ErrorKind.QUOTA_EXCEEDED

    def test_region_reason(self):
        error = make_http_error(400, "invalidRegionCode", "The regionCode parameter specifies an invalid region code.")
        assert isinstance(classify_http_error(error), InvalidRegionError)

    def test_invalid_key(self):
        error = make_http_error(400, "badRequest", "API key not valid. Please pass a valid API key.")
        assert isinstance(classify_http_error(error), InvalidCredentialError)

    def test_other_error(self):
        error = make_http_error(500, "backendError", "Backend Error")
        classified = classify_http_error(error)
        assert isinstance(classified, ProviderError)
        assert classified.message == "Backend Error"

    def test_non_json_body_uses_message_fallback(self):
        error = HttpError(Mock(status=403, reason="Daily quota exhausted"), b"<html>Forbidden</html>")
        assert isinstance(classify_http_error(error), QuotaExceededError)


class TestYouTubeSearchProvider:
    """Tests for YouTubeSearchProvider."""

    def test_is_a_video_search_provider(self):
        provider = YouTubeSearchProvider()
        assert isinstance(provider, VideoSearchProvider)
        assert provider.get_source_name() == "youtube"

    def test_search_builds_params(self, client, credential):
        client.search.return_value.list.return_value.execute.return_value = {
            "items": [
                {"id": {"videoId": "abc"}, "snippet": {"title": "T", "channelId": "UC1", "channelTitle": "C", "publishedAt": "2024-01-01T00:00:00Z"}},
                {"id": {"channelId": "UCskip"}, "snippet": {}},
            ],
            "nextPageToken": "NEXT",
        }
        provider = YouTubeSearchProvider()

        page = provider.search_videos(
            credential, "cats", order="relevance", region_code="KR", relevance_language="ko",
            published_after="2024-01-01T00:00:00Z", max_results=20, page_token="TOKEN",
        )

        client.search.return_value.list.assert_called_once_with(
            part="snippet", q="cats", type="video", maxResults=20, order="relevance",
            regionCode="KR", relevanceLanguage="ko", publishedAfter="2024-01-01T00:00:00Z", pageToken="TOKEN",
        )
        assert page.video_ids == ["abc"]
        assert page.next_page_token == "NEXT"
        assert page.region_code == "KR"
        assert provider.quota_used == 100

    def test_search_without_region_omits_param(self, client, credential):
        client.search.return_value.list.return_value.execute.return_value = {"items": []}
        page = YouTubeSearchProvider().search_videos(credential, "cats")

        assert "regionCode" not in client.search.return_value.list.call_args.kwargs
        assert page.hits == []
        assert page.region_code is None

    def test_video_details(self, client, credential):
        client.videos.return_value.list.return_value.execute.return_value = {
            "items": [
                {
                    "id": "abc",
                    "snippet": {
                        "title": "T",
                        "description": "D",
                        "channelId": "UC1",
                        "channelTitle": "C",
                        "publishedAt": "2024-01-01T00:00:00Z",
                        "categoryId": "10",
                        "thumbnails": {"default": {"url": "d.jpg"}, "medium": {"url": "m.jpg"}},
                    },
                    "statistics": {"viewCount": "12345"},
                    "contentDetails": {"duration": "PT4M2S"},
                }
            ]
        }

        details = YouTubeSearchProvider().get_video_details(credential, ["abc"])

        assert len(details) == 1
        assert details[0].view_count == 12345
        assert details[0].duration == "PT4M2S"
        assert details[0].thumbnail_url == "m.jpg"
        assert details[0].category_id == "10"

    def test_video_details_batched(self, client, credential):
        client.videos.return_value.list.return_value.execute.return_value = {"items": []}
        YouTubeSearchProvider().get_video_details(credential, [f"v{i}" for i in range(120)])
        assert client.videos.return_value.list.call_count == 3

    def test_subscriber_count(self, client, credential):
        client.channels.return_value.list.return_value.execute.return_value = {
            "items": [{"statistics": {"subscriberCount": "777"}}]
        }
        assert YouTubeSearchProvider().get_subscriber_count(credential, "UC1") == 777

    def test_subscriber_count_missing_channel(self, client, credential):
        client.channels.return_value.list.return_value.execute.return_value = {"items": []}
        assert YouTubeSearchProvider().get_subscriber_count(credential, "UCgone") == 0

    def test_http_error_is_classified(self, client, credential):
        client.search.return_value.list.return_value.execute.side_effect = make_http_error(
            403, "quotaExceeded", "quota exceeded"
        )
        with pytest.raises(QuotaExceededError) as exc_info:
            YouTubeSearchProvider().search_videos(credential, "cats")
        assert isinstance(exc_info.value.__cause__, HttpError)

    def test_client_cached_per_key(self, credential):
        with patch("services.video_sources.youtube.build") as mock_build:
            mock_build.return_value.channels.return_value.list.return_value.execute.return_value = {"items": []}
            provider = YouTubeSearchProvider()
            provider.get_subscriber_count(credential, "UC1")
            provider.get_subscriber_count(credential, "UC2")
            other = Credential(name="API_KEY_2", secret="AIza-test-0002", ordinal=2)
            provider.get_subscriber_count(other, "UC1")

        assert mock_build.call_count == 2
        mock_build.assert_any_call("youtube", "v3", developerKey="AIza-test-0002", cache_discovery=False)


class TestRequestExecution:
    """Serialization and transport error handling of API calls."""

    def test_execute_runs_under_provider_lock(self, client, credential):
        provider = YouTubeSearchProvider()
        held = []

        def record_lock():
            held.append(provider._lock._is_owned())
            return {"items": []}

        client.search.return_value.list.return_value.execute.side_effect = record_lock
        provider.search_videos(credential, "cats")

        assert held == [True]

    def test_concurrent_calls_never_overlap(self, client, credential):
        provider = YouTubeSearchProvider()
        guard = threading.Lock()
        in_flight = []
        peaks = []

        def slow_execute():
            with guard:
                in_flight.append(1)
                peaks.append(len(in_flight))
            time.sleep(0.01)
            with guard:
                in_flight.pop()
            return {"items": []}

        client.channels.return_value.list.return_value.execute.side_effect = slow_execute

        threads = [
            threading.Thread(target=provider.get_subscriber_count, args=(credential, f"UC{i}"))
            for i in range(8)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(peaks) == 8
        assert max(peaks) == 1

    @pytest.mark.parametrize(
        "error",
        [
            TimeoutError("timed out"),
            ConnectionResetError("connection reset by peer"),
            httplib2.HttpLib2Error("malformed response"),
        ],
    )
    def test_transport_errors_become_provider_errors(self, client, credential, error):
        client.channels.return_value.list.return_value.execute.side_effect = error
        provider = YouTubeSearchProvider()

        with pytest.raises(ProviderError) as exc_info:
            provider.get_subscriber_count(credential, "UC1")

        assert exc_info.value.__cause__ is error
        assert provider.quota_used == 0

    def test_channel_timeout_during_search_leaves_zero_subscribers(self, client, pool, failover):
        client.search.return_value.list.return_value.execute.return_value = {
            "items": [{"id": {"videoId": "abc"}, "snippet": {"channelId": "UC1"}}],
        }
        client.videos.return_value.list.return_value.execute.return_value = {
            "items": [
                {
                    "id": "abc",
                    "snippet": {
                        "title": "T",
                        "channelId": "UC1",
                        "channelTitle": "C",
                        "publishedAt": "2024-01-01T00:00:00Z",
                    },
                    "statistics": {"viewCount": "5000"},
                    "contentDetails": {"duration": "PT3M"},
                }
            ]
        }
        client.channels.return_value.list.return_value.execute.side_effect = TimeoutError("timed out")
        service = VideoSearchService(
            provider=YouTubeSearchProvider(),
            failover=failover,
            settings=SearchSettings(page_delay_seconds=0, enrich_subscribers=True),
            sleep=Mock(),
        )

        result = service.search(SearchRequest(keyword="cats"))

        assert [r.video_id for r in result.records] == ["abc"]
        assert result.records[0].subscriber_count == 0
        assert pool.counts()["exhausted"] == 0
