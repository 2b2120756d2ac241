"""
=============================================================================
YouTube 검색 클라이언트 모듈 (YouTube Search Client Module)

YouTube Data API v3를 `httpx`로 호출하여 학습 영상을 검색하는 클라이언트입니다.
search.list로 후보 영상 ID를 찾고, videos.list로 조회수/재생 시간/게시일을 보강합니다.

주요 기능:
    1.  **타입 안전성**: 검색 옵션과 결과를 Pydantic 모델로 검증합니다.
    2.  **결함 감내**: `tenacity` 지수 백오프로 네트워크 장애와 5xx 응답을 재시도합니다.
    3.  **테스트 용이성**: `httpx.Client`를 주입받아 MockTransport로 대체할 수 있습니다.

사용 예시:
    >>> client = YouTubeSearchClient()
    >>> results = client.search("python decorators tutorial OR course", max_results=5)

환경변수:
    - `YOUTUBE_API_KEY`: YouTube Data API 키 (필수)
    - `AI_DISABLE_EXTERNAL`: 외부 API 호출 비활성화 (테스트/개발용)
=============================================================================
"""

from __future__ import annotations

import logging
import os
import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from pathwaylk_ai.ai_core.client.youtube_result import YouTubeResult

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# 상수
# -----------------------------------------------------------------------------
API_BASE_URL = "https://www.googleapis.com/youtube/v3"
DEFAULT_MAX_RESULTS = 5
DEFAULT_TIMEOUT = 15.0
DEFAULT_MAX_RETRIES = 3

_ISO_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+)D)?(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+)S)?)?$"
)


# -----------------------------------------------------------------------------
# Pydantic 옵션 모델
# -----------------------------------------------------------------------------
class YouTubeSearchOptions(BaseModel):
    """
    YouTube search.list 요청 옵션.

    잘못된 값이 API로 전달되는 것을 사전에 막습니다.
    """
    max_results: int = Field(default=DEFAULT_MAX_RESULTS, ge=1, le=50, description="후보 영상 수 (1-50)")
    order: str = Field(default="relevance", pattern="^(relevance|date|rating|viewCount)$")
    relevance_language: Optional[str] = Field(default="en", description="선호 언어 (ISO 639-1)")
    region_code: Optional[str] = Field(default=None, description="지역 코드 (ISO 3166-1 alpha-2)")
    safe_search: str = Field(default="moderate", pattern="^(none|moderate|strict)$")

    def to_api_params(self) -> Dict[str, Any]:
        """
        @returns {Dict[str, Any]} search.list 쿼리 파라미터 (None 제외).
        """
        params = {
            "maxResults": self.max_results,
            "order": self.order,
            "relevanceLanguage": self.relevance_language,
            "regionCode": self.region_code,
            "safeSearch": self.safe_search,
        }
        return {key: value for key, value in params.items() if value is not None}


# -----------------------------------------------------------------------------
# 재시도 데코레이터
# -----------------------------------------------------------------------------
def _is_transient(exc: BaseException) -> bool:
    """
    @param {BaseException} exc - 발생한 예외.
    @returns {bool} 네트워크 장애 또는 5xx/429 응답이면 True.
    """
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status >= 500 or status == 429
    return False


def create_retry_decorator(
    max_retries: int = DEFAULT_MAX_RETRIES,
    min_wait: float = 0.5,
    max_wait: float = 4.0,
) -> Callable:
    """
    @param {int} max_retries - 최대 시도 횟수.
    @param {float} min_wait - 최소 대기 시간(초).
    @param {float} max_wait - 최대 대기 시간(초).
    @returns {Callable} 재시도 데코레이터.
    """
    return retry(
        stop=stop_after_attempt(max(1, max_retries)),
        wait=wait_exponential(multiplier=0.5, min=min_wait, max=max_wait),
        retry=retry_if_exception(_is_transient),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


# -----------------------------------------------------------------------------
# YouTube 검색 클라이언트
# -----------------------------------------------------------------------------
class YouTubeSearchClient:
    """
    YouTube Data API v3 검색 클라이언트.

    Attributes:
        _api_key (str): YouTube Data API 키
        _http (httpx.Client): 공유 HTTP 클라이언트
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        disabled: Optional[bool] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """
        @param {Optional[str]} api_key - API 키. 없으면 `YOUTUBE_API_KEY` 환경변수.
        @param {float} timeout - 요청 타임아웃(초).
        @param {int} max_retries - 최대 시도 횟수.
        @param {Optional[bool]} disabled - 비활성화 여부. None이면 `AI_DISABLE_EXTERNAL`을 따른다.
        @param {Optional[httpx.Client]} http_client - 주입할 HTTP 클라이언트.
        @returns {None} 클라이언트를 초기화합니다.
        """
        self._api_key = api_key or os.getenv("YOUTUBE_API_KEY", "")
        self._timeout = timeout
        self._max_retries = max_retries
        if disabled is None:
            disabled = os.getenv("AI_DISABLE_EXTERNAL", "false").lower() == "true"
        self._disabled = disabled
        self._http = http_client or httpx.Client(base_url=API_BASE_URL, timeout=timeout)
        self._execute_with_retry = create_retry_decorator(max_retries)(self._get_json)

        if self._disabled:
            logger.info("외부 API 호출이 비활성화되었습니다 (AI_DISABLE_EXTERNAL=True).")
        elif not self._api_key:
            logger.warning("YouTube API 키가 설정되지 않았습니다.")

    @property
    def available(self) -> bool:
        """
        @returns {bool} API 키가 있고 비활성화되지 않았으면 True.
        """
        return bool(self._api_key) and not self._disabled

    # -------------------------------------------------------------------------
    # 검색 메서드
    # -------------------------------------------------------------------------
    def search(self, query: str, max_results: int = DEFAULT_MAX_RESULTS, **kwargs: Any) -> List[YouTubeResult]:
        """
        @param {str} query - 검색어.
        @param {int} max_results - 후보 영상 수.
        @param {Any} kwargs - 기타 YouTubeSearchOptions 필드.
        @returns {List[YouTubeResult]} 통계가 보강된 영상 목록 (검색 순서 유지).
        """
        options = YouTubeSearchOptions(max_results=max_results, **kwargs)
        return self.search_with_options(query, options)

    def search_with_options(self, query: str, options: YouTubeSearchOptions) -> List[YouTubeResult]:
        """
        @param {str} query - 검색어.
        @param {YouTubeSearchOptions} options - 검증된 검색 옵션.
        @returns {List[YouTubeResult]} 영상 목록. 사용 불가 상태이거나 검색어가 비면 빈 리스트.
        """
        if not self.available:
            logger.warning("YouTube 클라이언트를 사용할 수 없습니다.")
            return []
        if not query.strip():
            return []

        search_payload = self._execute_with_retry(
            "/search",
            {"part": "snippet", "type": "video", "q": query, **options.to_api_params()},
        )
        video_ids = [
            item["id"]["videoId"]
            for item in search_payload.get("items", [])
            if isinstance(item.get("id"), dict) and item["id"].get("videoId")
        ]
        if not video_ids:
            logger.info("YouTube 검색 결과 없음", extra={"query": query})
            return []

        details_payload = self._execute_with_retry(
            "/videos",
            {"part": "snippet,contentDetails,statistics", "id": ",".join(video_ids)},
        )
        details = {item.get("id"): item for item in details_payload.get("items", [])}
        results = []
        for video_id in video_ids:
            item = details.get(video_id)
            if item is None:
                continue
            result = self._parse_video(video_id, item)
            if result is not None:
                results.append(result)
        logger.info("YouTube 검색 성공", extra={"query": query, "count": len(results)})
        return results

    def health_check(self) -> Dict[str, Any]:
        return {
            "available": self.available,
            "api_key_set": bool(self._api_key),
            "disabled": self._disabled,
            "timeout": self._timeout,
            "max_retries": self._max_retries,
        }

    def close(self) -> None:
        self._http.close()

    # -------------------------------------------------------------------------
    # 내부 로직
    # -------------------------------------------------------------------------
    def _get_json(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        @param {str} path - API 경로 (/search, /videos).
        @param {Dict[str, Any]} params - 쿼리 파라미터.
        @returns {Dict[str, Any]} 응답 JSON.
        """
        response = self._http.get(path, params={**params, "key": self._api_key})
        response.raise_for_status()
        return response.json()

    def _parse_video(self, video_id: str, item: Dict[str, Any]) -> Optional[YouTubeResult]:
        """
        @param {str} video_id - 영상 ID.
        @param {Dict[str, Any]} item - videos.list 항목.
        @returns {Optional[YouTubeResult]} 파싱 결과. 형식이 어긋나면 None.
        """
        snippet = item.get("snippet") or {}
        statistics = item.get("statistics") or {}
        content = item.get("contentDetails") or {}
        thumbnails = snippet.get("thumbnails") or {}
        thumbnail = (thumbnails.get("high") or thumbnails.get("medium") or thumbnails.get("default") or {}).get("url", "")
        try:
            return YouTubeResult(
                video_id=video_id,
                title=(snippet.get("title") or "").strip(),
                channel=snippet.get("channelTitle") or "",
                description=snippet.get("description") or "",
                thumbnail=thumbnail,
                duration=format_iso8601_duration(content.get("duration") or ""),
                view_count=int(statistics.get("viewCount") or 0),
                published_at=parse_published_at(snippet.get("publishedAt")),
            )
        except (TypeError, ValueError) as e:
            logger.warning(f"영상 항목 파싱 중 오류 (건너뜀): {e}", extra={"video_id": video_id})
            return None

    def __repr__(self) -> str:
        return f"YouTubeSearchClient(available={self.available})"


# -----------------------------------------------------------------------------
# 파싱 유틸리티
# -----------------------------------------------------------------------------
def format_iso8601_duration(value: str) -> str:
    """
    ISO 8601 재생 시간을 "H:MM:SS" 또는 "M:SS"로 변환합니다.

    @param {str} value - 예: "PT1H2M3S".
    @returns {str} 예: "1:02:03". 해석 불가 시 빈 문자열.
    """
    match = _ISO_DURATION_RE.match(value or "")
    if not match or value in ("P", "PT"):
        return ""
    parts = {key: int(number) if number else 0 for key, number in match.groupdict().items()}
    hours = parts["days"] * 24 + parts["hours"]
    minutes, seconds = parts["minutes"], parts["seconds"]
    if hours:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def parse_published_at(value: Optional[str]) -> Optional[datetime]:
    """
    @param {Optional[str]} value - RFC 3339 시각 (예: "2024-01-02T03:04:05Z").
    @returns {Optional[datetime]} timezone-aware 시각 또는 None.
    """
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
