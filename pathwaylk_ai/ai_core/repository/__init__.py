from pathwaylk_ai.ai_core.repository.graph_store import GraphStore
from pathwaylk_ai.ai_core.repository.in_memory_roadmap_cache_store import InMemoryRoadmapCacheStore
from pathwaylk_ai.ai_core.repository.roadmap_cache import ExpirySweeper, RoadmapCache
from pathwaylk_ai.ai_core.repository.roadmap_cache_store import RoadmapCacheStore
from pathwaylk_ai.ai_core.repository.seed_data import build_seed_graph
from pathwaylk_ai.ai_core.repository.sqlite_roadmap_cache_store import SqliteRoadmapCacheStore

__all__ = [
    "ExpirySweeper",
    "GraphStore",
    "InMemoryRoadmapCacheStore",
    "RoadmapCache",
    "RoadmapCacheStore",
    "SqliteRoadmapCacheStore",
    "build_seed_graph",
]
