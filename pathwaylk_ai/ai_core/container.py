"""
서비스 조립 모듈.

설정(`pathwaylk_ai.settings.EnvSettings`)을 읽어 그래프, 캐시, 외부 클라이언트,
경로/로드맵 서비스를 한 번에 구성합니다. 호출 계층(HTTP/CLI)은 `get_container()`만 사용합니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache
from typing import Optional

from pathwaylk_ai.ai_core.client.gemini_client import GeminiClient
from pathwaylk_ai.ai_core.client.youtube_client import YouTubeSearchClient
from pathwaylk_ai.ai_core.common.background import BackgroundTaskRunner
from pathwaylk_ai.ai_core.repository.graph_store import GraphStore
from pathwaylk_ai.ai_core.repository.in_memory_roadmap_cache_store import InMemoryRoadmapCacheStore
from pathwaylk_ai.ai_core.repository.roadmap_cache import ExpirySweeper, RoadmapCache
from pathwaylk_ai.ai_core.repository.roadmap_cache_store import RoadmapCacheStore
from pathwaylk_ai.ai_core.repository.seed_data import build_seed_graph
from pathwaylk_ai.ai_core.repository.sqlite_roadmap_cache_store import SqliteRoadmapCacheStore
from pathwaylk_ai.ai_core.service.career.job_role_service import JobRoleService
from pathwaylk_ai.ai_core.service.pathway.pathway_resolver import PathwayResolver
from pathwaylk_ai.ai_core.service.pathway.pathway_service import PathwayService
from pathwaylk_ai.ai_core.service.retrieval.video_search_service import VideoSearchService
from pathwaylk_ai.ai_core.service.roadmap.roadmap_generator import RoadmapGenerator
from pathwaylk_ai.ai_core.service.roadmap.roadmap_orchestrator import RoadmapOrchestrator
from pathwaylk_ai.ai_core.service.roadmap.video_decorator import VideoDecorator
from pathwaylk_ai.settings import EnvSettings, env

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    graph: GraphStore
    cache: RoadmapCache
    pathway_service: PathwayService
    roadmap_orchestrator: RoadmapOrchestrator
    job_role_service: JobRoleService
    background: BackgroundTaskRunner
    sweeper: Optional[ExpirySweeper] = None

    def shutdown(self) -> None:
        """스윕 스레드를 멈추고 남은 캐시 저장을 마친 뒤 실행기와 캐시 저장소를 닫습니다."""
        if self.sweeper is not None:
            self.sweeper.stop(timeout=5.0)
        self.background.shutdown(wait_for_pending=True)
        self.cache.store.close()


def load_graph(settings: EnvSettings) -> GraphStore:
    """
    @param {EnvSettings} settings - 설정.
    @returns {GraphStore} GRAPH_DATA_PATH가 있으면 JSON 그래프, 없으면 내장 시드 그래프.
    """
    if settings.GRAPH_DATA_PATH is not None:
        graph = GraphStore.from_json_file(settings.GRAPH_DATA_PATH)
        logger.info("교육 그래프 로드", extra={"source": str(settings.GRAPH_DATA_PATH), "nodes": graph.node_count})
        return graph
    graph = build_seed_graph()
    logger.info("내장 시드 그래프 사용", extra={"nodes": graph.node_count})
    return graph


def build_cache_store(settings: EnvSettings) -> RoadmapCacheStore:
    if settings.ROADMAP_CACHE_BACKEND == "sqlite":
        settings.ROADMAP_CACHE_PATH.parent.mkdir(parents=True, exist_ok=True)
        return SqliteRoadmapCacheStore(settings.ROADMAP_CACHE_PATH)
    return InMemoryRoadmapCacheStore()


def build_container(settings: EnvSettings) -> ServiceContainer:
    """
    설정으로부터 전체 서비스 그래프를 조립합니다.

    @param {EnvSettings} settings - 설정.
    @returns {ServiceContainer} 조립된 서비스 묶음.
    """
    graph = load_graph(settings)
    resolver = PathwayResolver(graph, max_depth=settings.PATHWAY_MAX_DEPTH)
    pathway_service = PathwayService(graph, resolver=resolver)

    cache = RoadmapCache(
        store=build_cache_store(settings),
        ttl=timedelta(hours=settings.ROADMAP_CACHE_TTL_HOURS),
    )
    sweeper = None
    if settings.ROADMAP_CACHE_SWEEP_SECONDS > 0:
        sweeper = ExpirySweeper(cache, interval_seconds=settings.ROADMAP_CACHE_SWEEP_SECONDS)
        sweeper.start()

    llm_client = GeminiClient(
        api_key=settings.gemini_api_key,
        model=settings.AI_DEFAULT_MODEL,
        timeout=settings.AI_TIMEOUT,
        max_retries=settings.AI_MAX_RETRIES,
        disabled=settings.AI_DISABLE_LLM or settings.AI_DISABLE_EXTERNAL,
    )
    youtube_client = YouTubeSearchClient(
        api_key=settings.youtube_api_key,
        timeout=settings.VIDEO_SEARCH_TIMEOUT,
        max_retries=settings.AI_MAX_RETRIES,
        disabled=settings.AI_DISABLE_EXTERNAL,
    )
    decorator = VideoDecorator(
        VideoSearchService(client=youtube_client),
        max_topics=settings.VIDEO_MAX_TOPICS_PER_STEP,
        topic_concurrency=settings.ROADMAP_TOPIC_CONCURRENCY,
        topic_timeout=settings.VIDEO_SEARCH_TIMEOUT,
        results_per_topic=settings.VIDEO_RESULTS_PER_TOPIC,
        step_concurrency=settings.ROADMAP_STEP_CONCURRENCY,
        deadline=settings.ROADMAP_DECORATION_DEADLINE,
    )
    background = BackgroundTaskRunner()
    orchestrator = RoadmapOrchestrator(
        cache=cache,
        generator=RoadmapGenerator(llm_client),
        decorator=decorator,
        program_lookup=pathway_service,
        background=background,
        cache_write_timeout=settings.CACHE_WRITE_TIMEOUT,
    )

    logger.info(
        "서비스 컨테이너 구성 완료",
        extra={
            "cache_backend": settings.ROADMAP_CACHE_BACKEND,
            "llm_available": llm_client.is_available,
            "video_search_available": youtube_client.available,
        },
    )
    return ServiceContainer(
        graph=graph,
        cache=cache,
        pathway_service=pathway_service,
        roadmap_orchestrator=orchestrator,
        job_role_service=JobRoleService(llm_client),
        background=background,
        sweeper=sweeper,
    )


@lru_cache(maxsize=1)
def get_container() -> ServiceContainer:
    return build_container(env)
