from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from pathwaylk_ai.ai_core.client import GeminiClient
from pathwaylk_ai.ai_core.client.gemini_client import GenerationConfig
from pathwaylk_ai.ai_core.common.errors import GenerationError
from pathwaylk_ai.ai_core.common.schema_validation import SchemaError, validate_learning_roadmap_output
from pathwaylk_ai.ai_core.domain.learning_roadmap import LearningRoadmap
from pathwaylk_ai.ai_core.domain.learning_step import LearningStep

logger = logging.getLogger(__name__)

ROADMAP_SYSTEM_PROMPT = """You are an education advisor who designs preparation roadmaps for Sri Lankan students entering higher education and vocational programs.

Respond with a single JSON object of this shape:
{
  "program_name": "string",
  "overview": "string",
  "total_duration": "string, e.g. '6-8 months'",
  "prerequisites": ["string"],
  "learning_steps": [
    {
      "step_number": 1,
      "title": "string",
      "description": "string",
      "topics": ["short, searchable topic"],
      "duration": "string, e.g. '2-3 weeks'",
      "difficulty": "beginner | intermediate | advanced"
    }
  ],
  "key_skills": ["string"],
  "recommended_for": "string"
}

Prefer free online material, practical exercises and skills valued by local employers."""

ROADMAP_USER_PROMPT = """Program: {program_name}
Prerequisites: {prerequisites}

Build a roadmap of 5-8 progressive steps that takes a student from these prerequisites to being ready for the program.
Each step builds on the previous one, lists 2-4 concrete topics, gives a realistic duration and a difficulty level.
Return only the JSON object."""

ROADMAP_GENERATION_CONFIG = GenerationConfig(temperature=0.7, response_mime_type="application/json")


class RoadmapGenerator:
    """LLM 기반 학습 로드맵 생성기."""

    def __init__(self, llm_client: Optional[GeminiClient] = None) -> None:
        """
        @param {Optional[GeminiClient]} llm_client - LLM 클라이언트.
        @returns {None} 생성기를 초기화합니다.
        """
        self._llm_client = llm_client or GeminiClient()

    @property
    def is_available(self) -> bool:
        return self._llm_client.is_available

    def generate(self, program_name: str, prerequisites: List[str]) -> LearningRoadmap:
        """
        프로그램 준비용 학습 로드맵을 생성합니다. 영상은 비어 있는 상태로 반환합니다.

        @param {str} program_name - 프로그램 이름.
        @param {List[str]} prerequisites - 선수 조건 목록.
        @returns {LearningRoadmap} 스키마 검증을 통과한 로드맵.
        """
        if not self._llm_client.is_available:
            raise GenerationError("roadmap generator is unavailable", program=program_name, phase="generate")

        prompt = ROADMAP_USER_PROMPT.format(
            program_name=program_name,
            prerequisites=", ".join(prerequisites) if prerequisites else "None specified",
        )
        logger.info(
            "학습 로드맵 생성 요청",
            extra={"program": program_name, "prerequisites": len(prerequisites)},
        )
        response = self._llm_client.generate_json(
            prompt,
            config=ROADMAP_GENERATION_CONFIG,
            system_instruction=ROADMAP_SYSTEM_PROMPT,
        )
        if not response.is_valid:
            raise GenerationError(
                f"roadmap generation failed: {response.describe_failure()}",
                program=program_name,
                phase="generate",
            )

        payload = response.data or {}
        try:
            validate_learning_roadmap_output(payload)
        except SchemaError as exc:
            logger.warning(
                "로드맵 응답 스키마 불일치",
                extra={"program": program_name, "error": str(exc)},
            )
            raise GenerationError(f"malformed roadmap: {exc}", program=program_name, phase="generate") from exc

        roadmap = _to_roadmap(program_name, payload)
        logger.info(
            "학습 로드맵 생성 완료",
            extra={"program": program_name, "steps": len(roadmap.steps)},
        )
        return roadmap


def _to_roadmap(program_name: str, payload: Dict[str, Any]) -> LearningRoadmap:
    """
    @param program_name 요청한 프로그램 이름 (캐시 키와 일치시킨다).
    @param payload 검증된 LLM JSON.
    @returns LearningRoadmap
    """
    steps = []
    for item in payload["learning_steps"]:
        steps.append(
            LearningStep(
                step_number=item["step_number"],
                title=item["title"].strip(),
                description=str(item.get("description") or ""),
                topics=[topic.strip() for topic in item["topics"] if topic.strip()],
                duration=str(item.get("duration") or ""),
                difficulty=str(item["difficulty"]).strip().lower(),
            )
        )
    return LearningRoadmap(
        program_name=program_name,
        overview=str(payload.get("overview") or ""),
        total_duration=str(payload.get("total_duration") or ""),
        prerequisites=[str(item) for item in payload.get("prerequisites") or []],
        key_skills=[str(item) for item in payload.get("key_skills") or []],
        recommended_for=str(payload.get("recommended_for") or ""),
        steps=steps,
    )
