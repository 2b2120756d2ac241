# =============================================================================
# 학습 영상 검색 서비스
# =============================================================================
# YouTube 검색 결과 중 학습에 적합한 영상만 골라 도메인 Video로 반환합니다.
#
# 품질 기준:
#   - 조회수 1,000회 이상
#   - 최근 3년 이내 게시
#   - 제목에 교육용 키워드 포함 (tutorial, course, learn ...)
#
# 아키텍처:
#   VideoSearchService
#   └── YouTubeSearchClient (YouTube Data API v3)
#
# 사용 예시:
#   service = VideoSearchService()
#   videos = service.search("Object Oriented Programming", max_results=1)
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from pathwaylk_ai.ai_core.client.youtube_client import YouTubeSearchClient
from pathwaylk_ai.ai_core.client.youtube_result import YouTubeResult
from pathwaylk_ai.ai_core.domain.video import Video

logger = logging.getLogger(__name__)

# =============================================================================
# 상수 정의
# =============================================================================

MIN_VIEW_COUNT = 1000
MAX_VIDEO_AGE = timedelta(days=3 * 365)

# 검색어에 덧붙이는 교육용 키워드
QUERY_KEYWORDS = ("tutorial", "course")

# 제목에 하나라도 포함되어야 하는 키워드 (소문자)
EDUCATIONAL_KEYWORDS = (
    "tutorial", "course", "learn", "explained", "introduction",
    "guide", "how to", "basics", "fundamentals", "complete",
    "beginner", "advanced", "master", "programming", "coding",
)

# 품질 필터로 걸러질 몫을 감안해 요청 수보다 넉넉히 받아온다.
CANDIDATE_MULTIPLIER = 5
MAX_CANDIDATES = 25


def build_educational_query(topic: str) -> str:
    """
    @param topic 학습 주제.
    @returns 예: "Python Basics tutorial OR course".
    """
    return f"{topic.strip()} {' OR '.join(QUERY_KEYWORDS)}"


def has_educational_keywords(title: str) -> bool:
    lowered = title.lower()
    return any(keyword in lowered for keyword in EDUCATIONAL_KEYWORDS)


class VideoSearchService:
    """
    주제별 학습 영상 검색 서비스.

    Example:
        >>> service = VideoSearchService(client=YouTubeSearchClient(api_key="..."))
        >>> service.search("React Hooks", max_results=1)
        [Video(video_id='...', title='React Hooks Tutorial for Beginners', ...)]
    """

    def __init__(
        self,
        client: Optional[YouTubeSearchClient] = None,
        min_view_count: int = MIN_VIEW_COUNT,
        max_age: timedelta = MAX_VIDEO_AGE,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        @param {Optional[YouTubeSearchClient]} client - YouTube 클라이언트.
        @param {int} min_view_count - 최소 조회수.
        @param {timedelta} max_age - 허용하는 최대 게시 경과 기간.
        @param {Optional[Callable[[], datetime]]} clock - 현재 시각 공급자 (테스트용).
        @returns {None} 서비스를 초기화합니다.
        """
        self._client = client or YouTubeSearchClient()
        self._min_view_count = min_view_count
        self._max_age = max_age
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    @property
    def is_available(self) -> bool:
        return self._client.available

    def search(self, topic: str, max_results: int = 1) -> List[Video]:
        """
        주제에 맞는 학습 영상을 검색합니다.

        클라이언트 예외는 그대로 전파하며, 호출자(영상 데코레이터)가 실패 주제로 처리합니다.

        @param {str} topic - 학습 주제.
        @param {int} max_results - 반환할 최대 영상 수.
        @returns {List[Video]} 품질 기준을 통과한 영상 목록 (최대 max_results개).
        """
        if not topic or not topic.strip() or max_results <= 0:
            return []

        query = build_educational_query(topic)
        candidates = min(MAX_CANDIDATES, max(max_results * CANDIDATE_MULTIPLIER, 10))
        results = self._client.search(query, max_results=candidates)
        quality = [result for result in results if self.is_quality(result)]

        logger.info(
            "학습 영상 검색 완료",
            extra={"topic": topic, "total_found": len(results), "quality_videos": len(quality)},
        )
        return [_to_video(result) for result in quality[:max_results]]

    def is_quality(self, result: YouTubeResult) -> bool:
        """
        @param {YouTubeResult} result - 검색 결과.
        @returns {bool} 조회수/게시일/제목 키워드 기준을 모두 만족하면 True.
        """
        if result.view_count < self._min_view_count:
            return False
        if result.published_at is None:
            return False
        published = result.published_at
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        if self._clock() - published > self._max_age:
            return False
        return has_educational_keywords(result.title)

    def health_check(self) -> dict:
        return {"available": self.is_available, "client": self._client.health_check()}

    def __repr__(self) -> str:
        return f"VideoSearchService(available={self.is_available})"


def _to_video(result: YouTubeResult) -> Video:
    return Video(
        video_id=result.video_id,
        title=result.title,
        url=result.url,
        channel=result.channel,
        duration=result.duration,
        view_count=result.view_count,
        published_at=result.published_at,
        thumbnail=result.thumbnail,
        description=result.description,
    )
