from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from pathwaylk_ai.ai_core.domain.program_tier import ProgramTier


@dataclass
class ProgramDetails:
    """경로 탐색 결과로 반환되는 프로그램 상세 정보."""

    name: str
    institute: str = ""
    faculty: str = ""
    department: str = ""
    requirements: List[str] = field(default_factory=list)
    prerequisites: List[str] = field(default_factory=list)
    career_paths: List[str] = field(default_factory=list)
    path_distance: int = 0
    tier: ProgramTier = ProgramTier.OTHER

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "institute": self.institute,
            "faculty": self.faculty,
            "department": self.department,
            "requirements": list(self.requirements),
            "prerequisites": list(self.prerequisites),
            "career_paths": list(self.career_paths),
            "path_distance": self.path_distance,
            "tier": self.tier.name.lower(),
        }
