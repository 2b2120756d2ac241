from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List

from pathwaylk_ai.ai_core.domain.video import Video


@dataclass
class LearningStep:
    """학습 로드맵의 단일 단계."""

    step_number: int
    title: str
    description: str = ""
    topics: List[str] = field(default_factory=list)
    duration: str = ""
    difficulty: str = ""
    videos: List[Video] = field(default_factory=list)

    def with_videos(self, videos: List[Video]) -> "LearningStep":
        """
        @param videos 첨부할 영상 목록.
        @returns 영상만 교체된 새 단계 객체.
        """
        return replace(self, topics=list(self.topics), videos=list(videos))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step_number": self.step_number,
            "title": self.title,
            "description": self.description,
            "topics": list(self.topics),
            "duration": self.duration,
            "difficulty": self.difficulty,
            "videos": [video.to_dict() for video in self.videos],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LearningStep":
        return cls(
            step_number=int(data.get("step_number") or 0),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            topics=[str(topic) for topic in data.get("topics") or []],
            duration=str(data.get("duration") or ""),
            difficulty=str(data.get("difficulty") or ""),
            videos=[Video.from_dict(item) for item in data.get("videos") or []],
        )
