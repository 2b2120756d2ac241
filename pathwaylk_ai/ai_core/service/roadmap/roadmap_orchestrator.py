from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Protocol

from pathwaylk_ai.ai_core.common.background import BackgroundTaskRunner
from pathwaylk_ai.ai_core.common.errors import CacheStoreError, GenerationError, PathwayError
from pathwaylk_ai.ai_core.domain.learning_roadmap import LearningRoadmap
from pathwaylk_ai.ai_core.domain.video import Video
from pathwaylk_ai.ai_core.repository.roadmap_cache import RoadmapCache
from pathwaylk_ai.ai_core.service.roadmap.roadmap_generator import RoadmapGenerator
from pathwaylk_ai.ai_core.service.roadmap.video_decorator import VideoDecorator, bounded_topics

logger = logging.getLogger(__name__)

DEFAULT_CACHE_WRITE_TIMEOUT = 10.0


class ProgramLookup(Protocol):
    def get_prerequisites(self, program: str) -> List[str]:
        ...


class RoadmapOrchestrator:
    """캐시 우선(cache-aside) 학습 로드맵 조회 서비스."""

    def __init__(
        self,
        cache: RoadmapCache,
        generator: RoadmapGenerator,
        decorator: VideoDecorator,
        program_lookup: ProgramLookup,
        background: Optional[BackgroundTaskRunner] = None,
        cache_write_timeout: float = DEFAULT_CACHE_WRITE_TIMEOUT,
    ) -> None:
        """
        @param {RoadmapCache} cache - 로드맵 캐시.
        @param {RoadmapGenerator} generator - 로드맵 생성기.
        @param {VideoDecorator} decorator - 단계별 영상 데코레이터.
        @param {ProgramLookup} program_lookup - 선수 조건 조회기 (PathwayService).
        @param {Optional[BackgroundTaskRunner]} background - 캐시 저장용 백그라운드 실행기.
        @param {float} cache_write_timeout - 캐시 저장 제한 시간(초).
        @returns {None} 오케스트레이터를 초기화합니다.
        """
        self._cache = cache
        self._generator = generator
        self._decorator = decorator
        self._program_lookup = program_lookup
        self._background = background or BackgroundTaskRunner()
        self._cache_write_timeout = cache_write_timeout

    # -------------------------------------------------------------------------
    # 로드맵 조회
    # -------------------------------------------------------------------------
    def get_roadmap(self, program_name: str) -> LearningRoadmap:
        """
        영상이 포함된 전체 로드맵을 반환합니다.

        캐시 미스 시 생성 → 단계별 영상 병렬 검색 → 조립 후, 캐시 저장은 요청과 분리해 수행합니다.

        @param {str} program_name - 프로그램 이름.
        @returns {LearningRoadmap} 학습 로드맵.
        """
        program_name = _require_program(program_name)
        started = time.monotonic()

        cached = self._read_cache(program_name)
        if cached is not None:
            logger.info(
                "캐시된 학습 로드맵 반환",
                extra={"program": program_name, "elapsed_ms": _elapsed_ms(started)},
            )
            return cached

        roadmap = self._generate(program_name)
        decorated = self._decorator.decorate(roadmap)
        self._schedule_cache_write(program_name, decorated)

        logger.info(
            "학습 로드맵 생성 완료",
            extra={
                "program": program_name,
                "steps": len(decorated.steps),
                "videos": decorated.total_videos,
                "elapsed_ms": _elapsed_ms(started),
            },
        )
        return decorated

    def get_roadmap_fast(self, program_name: str) -> LearningRoadmap:
        """
        영상 없이 로드맵 구조만 빠르게 반환합니다. 캐시에는 쓰지 않습니다.

        @param {str} program_name - 프로그램 이름.
        @returns {LearningRoadmap} 모든 단계의 videos가 빈 로드맵.
        """
        program_name = _require_program(program_name)
        started = time.monotonic()

        cached = self._read_cache(program_name)
        roadmap = cached if cached is not None else self._generate(program_name)
        result = roadmap.without_videos()

        logger.info(
            "빠른 학습 로드맵 반환",
            extra={
                "program": program_name,
                "from_cache": cached is not None,
                "elapsed_ms": _elapsed_ms(started),
            },
        )
        return result

    def get_videos_for_step(self, program_name: str, step_number: int, topics: List[str]) -> List[Video]:
        """
        한 단계의 주제로 영상을 지연 조회합니다.

        @param {str} program_name - 프로그램 이름.
        @param {int} step_number - 단계 번호 (로그용).
        @param {List[str]} topics - 단계 주제 목록.
        @returns {List[Video]} 영상 목록.
        """
        program_name = _require_program(program_name)
        cleaned = bounded_topics(topics or [], self._decorator.max_topics)
        if not cleaned:
            raise ValueError("at least one topic is required")

        videos = self._decorator.fetch_videos_for_topics(cleaned)
        logger.info(
            "단계 영상 조회 완료",
            extra={
                "program": program_name,
                "step_number": step_number,
                "topics": len(cleaned),
                "videos": len(videos),
            },
        )
        return videos

    # -------------------------------------------------------------------------
    # 캐시 관리
    # -------------------------------------------------------------------------
    def get_cache_stats(self) -> Dict[str, Any]:
        return self._cache.stats()

    def invalidate_cache(self, program_name: str) -> bool:
        """
        @param {str} program_name - 프로그램 이름.
        @returns {bool} 삭제된 엔트리가 있으면 True.
        """
        return self._cache.delete(_require_program(program_name))

    def refresh_cache(self, program_name: str) -> LearningRoadmap:
        """
        캐시를 비우고 전체 로드맵을 다시 생성합니다.

        @param {str} program_name - 프로그램 이름.
        @returns {LearningRoadmap} 새로 생성된 로드맵.
        """
        program_name = _require_program(program_name)
        self._cache.delete(program_name)
        return self.get_roadmap(program_name)

    def clear_all_cache(self) -> int:
        return self._cache.clear()

    def wait_for_background(self, timeout: Optional[float] = None) -> bool:
        """
        @param timeout 최대 대기 시간(초).
        @returns 예약된 캐시 저장이 모두 끝났으면 True.
        """
        return self._background.drain(timeout)

    # -------------------------------------------------------------------------
    # 내부 단계
    # -------------------------------------------------------------------------
    def _read_cache(self, program_name: str) -> Optional[LearningRoadmap]:
        try:
            payload, found = self._cache.get(program_name)
        except CacheStoreError as exc:
            logger.warning("캐시 조회 실패, 미스로 처리", extra={"program": program_name, "error": str(exc)})
            return None
        if not found or payload is None:
            return None
        try:
            return LearningRoadmap.from_dict(payload)
        except (TypeError, ValueError, KeyError) as exc:
            logger.warning("캐시 페이로드 해석 실패, 미스로 처리", extra={"program": program_name, "error": str(exc)})
            return None

    def _lookup_prerequisites(self, program_name: str) -> List[str]:
        try:
            return list(self._program_lookup.get_prerequisites(program_name))
        except PathwayError as exc:
            logger.warning("선수 조건 조회 실패, 빈 목록 사용", extra={"program": program_name, "error": str(exc)})
            return []

    def _generate(self, program_name: str) -> LearningRoadmap:
        prerequisites = self._lookup_prerequisites(program_name)
        try:
            return self._generator.generate(program_name, prerequisites)
        except GenerationError as exc:
            if exc.program is None:
                exc.program = program_name
            logger.error("학습 로드맵 생성 실패", extra={"program": program_name, "error": str(exc)})
            raise

    def _schedule_cache_write(self, program_name: str, roadmap: LearningRoadmap) -> None:
        payload = roadmap.to_dict()
        self._background.submit("roadmap_cache_write", self._write_cache, program_name, payload)

    def _write_cache(self, program_name: str, payload: Dict[str, Any]) -> None:
        try:
            self._cache.set(program_name, payload, timeout=self._cache_write_timeout)
        except CacheStoreError as exc:
            logger.warning("로드맵 캐시 저장 실패", extra={"program": program_name, "error": str(exc)})


def _require_program(program_name: str) -> str:
    if not program_name or not program_name.strip():
        raise ValueError("program_name must not be empty")
    return program_name.strip()


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
