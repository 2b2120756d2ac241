from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeoutError, wait
from typing import List, Protocol

from pathwaylk_ai.ai_core.domain.learning_roadmap import LearningRoadmap
from pathwaylk_ai.ai_core.domain.video import Video

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOPICS = 3
DEFAULT_TOPIC_CONCURRENCY = 5
DEFAULT_TOPIC_TIMEOUT = 15.0
DEFAULT_RESULTS_PER_TOPIC = 1
DEFAULT_STEP_CONCURRENCY = 3
DEFAULT_DEADLINE = 30.0


class VideoFinder(Protocol):
    def search(self, topic: str, max_results: int = 1) -> List[Video]:
        ...


class VideoDecorator:
    """로드맵 단계마다 주제별 학습 영상을 병렬로 붙이는 데코레이터."""

    def __init__(
        self,
        finder: VideoFinder,
        max_topics: int = DEFAULT_MAX_TOPICS,
        topic_concurrency: int = DEFAULT_TOPIC_CONCURRENCY,
        topic_timeout: float = DEFAULT_TOPIC_TIMEOUT,
        results_per_topic: int = DEFAULT_RESULTS_PER_TOPIC,
        step_concurrency: int = DEFAULT_STEP_CONCURRENCY,
        deadline: float = DEFAULT_DEADLINE,
    ) -> None:
        """
        @param {VideoFinder} finder - 주제별 영상 검색기.
        @param {int} max_topics - 단계당 검색할 최대 주제 수.
        @param {int} topic_concurrency - 동시에 검색하는 주제 수 상한.
        @param {float} topic_timeout - 주제 하나의 검색 제한 시간(초).
        @param {int} results_per_topic - 주제당 최대 영상 수.
        @param {int} step_concurrency - 동시에 처리하는 단계 수 상한.
        @param {float} deadline - 전체 데코레이션 제한 시간(초).
        @returns {None} 데코레이터를 초기화합니다.
        """
        if min(max_topics, topic_concurrency, results_per_topic, step_concurrency) < 1:
            raise ValueError("concurrency and count limits must be at least 1")
        if topic_timeout <= 0 or deadline <= 0:
            raise ValueError("timeouts must be positive")
        self._finder = finder
        self._max_topics = max_topics
        self._topic_concurrency = topic_concurrency
        self._topic_timeout = topic_timeout
        self._results_per_topic = results_per_topic
        self._step_concurrency = step_concurrency
        self._deadline = deadline

    @property
    def max_topics(self) -> int:
        return self._max_topics

    def fetch_videos_for_topics(self, topics: List[str]) -> List[Video]:
        """
        주제별 검색을 병렬로 수행합니다. 실패하거나 시간 초과된 주제는 결과에서 빠지며,
        이 메서드는 예외를 던지지 않습니다.

        @param {List[str]} topics - 검색 주제 목록 (앞에서부터 max_topics개만 사용).
        @returns {List[Video]} 주제 순서대로 모은 영상 (video_id 중복 제거).
        """
        selected = bounded_topics(topics, self._max_topics)
        if not selected:
            return []

        workers = min(self._topic_concurrency, len(selected))
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="roadmap-topic")
        try:
            searches = [_TopicSearch(topic) for topic in selected]
            futures = [executor.submit(self._run_search, search) for search in searches]
            # 대기열에 남은 주제는 앞선 검색이 끝나야 시작하므로 웨이브 수만큼 시작을 기다린다.
            start_deadline = time.monotonic() + math.ceil(len(selected) / workers) * self._topic_timeout
            videos: List[Video] = []
            seen = set()
            for search, future in zip(searches, futures):
                for video in self._collect(search, future, start_deadline):
                    if video.video_id in seen:
                        continue
                    seen.add(video.video_id)
                    videos.append(video)
            return videos
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def decorate(self, roadmap: LearningRoadmap) -> LearningRoadmap:
        """
        모든 단계에 영상을 붙인 새 로드맵을 반환합니다.

        전체 제한 시간 안에 끝나지 않은 단계는 빈 영상 목록을 가지며, 늦게 끝난 작업은 결과를 덮어쓰지 못합니다.

        @param {LearningRoadmap} roadmap - 영상이 없는 로드맵.
        @returns {LearningRoadmap} 영상이 채워진 로드맵 사본.
        """
        steps = roadmap.steps
        if not steps:
            return roadmap

        slots: List[List[Video]] = [[] for _ in steps]
        lock = threading.Lock()
        sealed = False

        def fill(index: int) -> None:
            videos = self.fetch_videos_for_topics(steps[index].topics)
            with lock:
                if not sealed:
                    slots[index] = videos

        executor = ThreadPoolExecutor(
            max_workers=min(self._step_concurrency, len(steps)),
            thread_name_prefix="roadmap-step",
        )
        futures = [executor.submit(fill, index) for index in range(len(steps))]
        _, not_done = wait(futures, timeout=self._deadline)
        with lock:
            sealed = True
            decorated_steps = [step.with_videos(slots[index]) for index, step in enumerate(steps)]
        executor.shutdown(wait=False, cancel_futures=True)

        if not_done:
            logger.warning(
                "영상 데코레이션 제한 시간 초과",
                extra={
                    "program": roadmap.program_name,
                    "unfinished_steps": len(not_done),
                    "deadline_seconds": self._deadline,
                },
            )
        result = LearningRoadmap(
            program_name=roadmap.program_name,
            overview=roadmap.overview,
            total_duration=roadmap.total_duration,
            prerequisites=list(roadmap.prerequisites),
            key_skills=list(roadmap.key_skills),
            recommended_for=roadmap.recommended_for,
            steps=decorated_steps,
        )
        logger.info(
            "영상 데코레이션 완료",
            extra={"program": roadmap.program_name, "videos": result.total_videos},
        )
        return result

    def _run_search(self, search: "_TopicSearch") -> List[Video]:
        search.mark_started()
        return list(self._finder.search(search.topic, max_results=self._results_per_topic))[: self._results_per_topic]

    def _collect(self, search: "_TopicSearch", future: "Future[List[Video]]", start_deadline: float) -> List[Video]:
        """
        검색이 실제로 시작된 시각부터 topic_timeout만큼 기다립니다.

        @param search 주제 검색 상태.
        @param future 검색 작업.
        @param start_deadline 대기열 주제가 시작해야 하는 monotonic 시각.
        @returns 영상 목록. 실패/시간 초과면 빈 리스트.
        """
        try:
            if not search.started.wait(max(0.0, start_deadline - time.monotonic())):
                raise FutureTimeoutError()
            remaining = max(0.0, search.started_at + self._topic_timeout - time.monotonic())
            return future.result(timeout=remaining)
        except FutureTimeoutError:
            future.cancel()
            logger.warning(
                "주제 영상 검색 시간 초과",
                extra={"topic": search.topic, "timeout_seconds": self._topic_timeout},
            )
        except Exception as exc:
            logger.warning("주제 영상 검색 실패", extra={"topic": search.topic, "error": str(exc)})
        return []


class _TopicSearch:
    """주제 하나의 검색 시작 시각을 기록한다."""

    def __init__(self, topic: str) -> None:
        self.topic = topic
        self.started = threading.Event()
        self.started_at = 0.0

    def mark_started(self) -> None:
        self.started_at = time.monotonic()
        self.started.set()


def bounded_topics(topics: List[str], limit: int = DEFAULT_MAX_TOPICS) -> List[str]:
    """
    @param topics 원본 주제 목록.
    @param limit 최대 주제 수.
    @returns 공백을 정리하고 빈 값을 뺀 뒤 limit개로 자른 목록.
    """
    return [topic.strip() for topic in topics if topic and topic.strip()][:limit]
