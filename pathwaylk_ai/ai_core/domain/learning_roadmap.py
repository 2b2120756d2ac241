from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List

from pathwaylk_ai.ai_core.domain.learning_step import LearningStep


@dataclass
class LearningRoadmap:
    """프로그램 준비를 위한 다단계 학습 로드맵."""

    program_name: str
    overview: str = ""
    total_duration: str = ""
    prerequisites: List[str] = field(default_factory=list)
    key_skills: List[str] = field(default_factory=list)
    recommended_for: str = ""
    steps: List[LearningStep] = field(default_factory=list)

    @property
    def total_videos(self) -> int:
        return sum(len(step.videos) for step in self.steps)

    def without_videos(self) -> "LearningRoadmap":
        """
        @returns 모든 단계의 영상 목록을 비운 사본.
        """
        return replace(self, steps=[step.with_videos([]) for step in self.steps])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "program_name": self.program_name,
            "overview": self.overview,
            "total_duration": self.total_duration,
            "prerequisites": list(self.prerequisites),
            "key_skills": list(self.key_skills),
            "recommended_for": self.recommended_for,
            "steps": [step.to_dict() for step in self.steps],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LearningRoadmap":
        return cls(
            program_name=str(data.get("program_name") or ""),
            overview=str(data.get("overview") or ""),
            total_duration=str(data.get("total_duration") or ""),
            prerequisites=[str(item) for item in data.get("prerequisites") or []],
            key_skills=[str(item) for item in data.get("key_skills") or []],
            recommended_for=str(data.get("recommended_for") or ""),
            steps=[LearningStep.from_dict(item) for item in data.get("steps") or []],
        )
