from pathwaylk_ai.ai_core.domain.cache_entry import CacheEntry
from pathwaylk_ai.ai_core.domain.education_path import EducationPath
from pathwaylk_ai.ai_core.domain.learning_roadmap import LearningRoadmap
from pathwaylk_ai.ai_core.domain.learning_step import LearningStep
from pathwaylk_ai.ai_core.domain.node_kind import NodeKind, Relation
from pathwaylk_ai.ai_core.domain.program_details import ProgramDetails
from pathwaylk_ai.ai_core.domain.program_tier import ProgramTier, classify_tier
from pathwaylk_ai.ai_core.domain.video import Video

__all__ = [
    "CacheEntry",
    "EducationPath",
    "LearningRoadmap",
    "LearningStep",
    "NodeKind",
    "ProgramDetails",
    "ProgramTier",
    "Relation",
    "Video",
    "classify_tier",
]
