import unittest
from datetime import datetime, timedelta, timezone

import httpx

from pathwaylk_ai.ai_core.client.youtube_client import (
    API_BASE_URL,
    YouTubeSearchClient,
    format_iso8601_duration,
    parse_published_at,
)
from pathwaylk_ai.ai_core.client.youtube_result import YouTubeResult
from pathwaylk_ai.ai_core.service.retrieval.video_search_service import (
    VideoSearchService,
    build_educational_query,
    has_educational_keywords,
)

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)

SEARCH_PAYLOAD = {
    "items": [
        {"id": {"kind": "youtube#video", "videoId": "abc123"}},
        {"id": {"kind": "youtube#video", "videoId": "def456"}},
        {"id": {"kind": "youtube#channel", "channelId": "skip"}},
    ]
}

VIDEOS_PAYLOAD = {
    "items": [
        {
            "id": "def456",
            "snippet": {
                "title": "Git Crash Course",
                "channelTitle": "Dev Channel",
                "publishedAt": "2024-02-01T10:00:00Z",
                "thumbnails": {"medium": {"url": "https://img/def456.jpg"}},
            },
            "contentDetails": {"duration": "PT1H2M3S"},
            "statistics": {"viewCount": "54321"},
        },
        {
            "id": "abc123",
            "snippet": {
                "title": "Python Tutorial for Beginners",
                "channelTitle": "Code Academy",
                "description": "Learn Python",
                "publishedAt": "2023-05-10T08:30:00Z",
                "thumbnails": {"high": {"url": "https://img/abc123.jpg"}},
            },
            "contentDetails": {"duration": "PT14M5S"},
            "statistics": {"viewCount": "120000"},
        },
    ]
}


def make_http_client(handler) -> httpx.Client:
    return httpx.Client(base_url=API_BASE_URL, transport=httpx.MockTransport(handler))


class YouTubeSearchClientTests(unittest.TestCase):
    def test_search_enriches_results_in_search_order(self) -> None:
        """
        search.list 결과 순서대로 videos.list 통계를 붙여 반환하는지 확인합니다.

        @returns {None} 테스트만 수행합니다.
        """
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.path.endswith("/search"):
                return httpx.Response(200, json=SEARCH_PAYLOAD)
            return httpx.Response(200, json=VIDEOS_PAYLOAD)

        client = YouTubeSearchClient(api_key="test-key", disabled=False, http_client=make_http_client(handler))
        results = client.search("python tutorial OR course", max_results=5)

        self.assertEqual([result.video_id for result in results], ["abc123", "def456"])
        self.assertEqual(results[0].view_count, 120000)
        self.assertEqual(results[0].duration, "14:05")
        self.assertEqual(results[0].thumbnail, "https://img/abc123.jpg")
        self.assertEqual(results[0].url, "https://www.youtube.com/watch?v=abc123")
        self.assertEqual(results[1].duration, "1:02:03")

        search_params = requests[0].url.params
        self.assertEqual(search_params["q"], "python tutorial OR course")
        self.assertEqual(search_params["maxResults"], "5")
        self.assertEqual(search_params["key"], "test-key")
        self.assertEqual(requests[1].url.params["id"], "abc123,def456")

    def test_no_search_results_skips_details_call(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(200, json={"items": []})

        client = YouTubeSearchClient(api_key="test-key", disabled=False, http_client=make_http_client(handler))

        self.assertEqual(client.search("nothing"), [])
        self.assertEqual(len(calls), 1)

    def test_server_error_is_retried(self) -> None:
        statuses = [503, 200, 200]

        def handler(request: httpx.Request) -> httpx.Response:
            status = statuses.pop(0)
            if status != 200:
                return httpx.Response(status)
            if request.url.path.endswith("/search"):
                return httpx.Response(200, json=SEARCH_PAYLOAD)
            return httpx.Response(200, json=VIDEOS_PAYLOAD)

        client = YouTubeSearchClient(
            api_key="test-key", disabled=False, max_retries=2, http_client=make_http_client(handler)
        )

        self.assertEqual(len(client.search("python")), 2)

    def test_client_error_is_not_retried(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(403, json={"error": {"message": "quota exceeded"}})

        client = YouTubeSearchClient(api_key="test-key", disabled=False, http_client=make_http_client(handler))

        with self.assertRaises(httpx.HTTPStatusError):
            client.search("python")
        self.assertEqual(len(calls), 1)

    def test_disabled_client_returns_empty(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("disabled client must not call the API")

        client = YouTubeSearchClient(api_key="test-key", disabled=True, http_client=make_http_client(handler))

        self.assertFalse(client.available)
        self.assertEqual(client.search("python"), [])

    def test_duration_and_date_parsing(self) -> None:
        self.assertEqual(format_iso8601_duration("PT4M5S"), "4:05")
        self.assertEqual(format_iso8601_duration("PT2H"), "2:00:00")
        self.assertEqual(format_iso8601_duration("garbage"), "")
        self.assertEqual(parse_published_at("2024-01-02T03:04:05Z"), datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        self.assertIsNone(parse_published_at(None))


class FakeYouTubeClient:
    def __init__(self, results) -> None:
        self.results = results
        self.queries = []
        self.available = True

    def search(self, query, max_results=5, **kwargs):
        self.queries.append((query, max_results))
        return list(self.results)

    def health_check(self):
        return {"available": True}


def make_result(video_id: str, title: str, views: int = 5000, age_days: int = 100) -> YouTubeResult:
    return YouTubeResult(
        video_id=video_id,
        title=title,
        view_count=views,
        published_at=NOW - timedelta(days=age_days),
    )


class VideoSearchServiceTests(unittest.TestCase):
    def test_quality_filter(self) -> None:
        results = [
            make_result("low-views", "Python Tutorial", views=10),
            make_result("too-old", "Python Course", age_days=4 * 365),
            make_result("no-keyword", "My vacation vlog"),
            make_result("good", "Python Full Course for Beginners"),
        ]
        client = FakeYouTubeClient(results)
        service = VideoSearchService(client=client, clock=lambda: NOW)

        videos = service.search("Python", max_results=1)

        self.assertEqual([video.video_id for video in videos], ["good"])
        self.assertEqual(videos[0].url, "https://www.youtube.com/watch?v=good")
        self.assertEqual(client.queries[0][0], "Python tutorial OR course")

    def test_missing_publish_date_is_rejected(self) -> None:
        result = YouTubeResult(video_id="x", title="SQL tutorial", view_count=9000)
        service = VideoSearchService(client=FakeYouTubeClient([result]), clock=lambda: NOW)
        self.assertFalse(service.is_quality(result))

    def test_blank_topic(self) -> None:
        client = FakeYouTubeClient([make_result("good", "Git tutorial")])
        self.assertEqual(VideoSearchService(client=client).search("  "), [])
        self.assertEqual(client.queries, [])

    def test_query_helpers(self) -> None:
        self.assertEqual(build_educational_query(" React Hooks "), "React Hooks tutorial OR course")
        self.assertTrue(has_educational_keywords("Docker Explained"))
        self.assertFalse(has_educational_keywords("Funny cats"))

    def test_client_errors_propagate(self) -> None:
        class BrokenClient(FakeYouTubeClient):
            def search(self, query, max_results=5, **kwargs):
                raise httpx.ConnectError("network down")

        service = VideoSearchService(client=BrokenClient([]), clock=lambda: NOW)
        with self.assertRaises(httpx.ConnectError):
            service.search("Python")


if __name__ == "__main__":
    unittest.main()
