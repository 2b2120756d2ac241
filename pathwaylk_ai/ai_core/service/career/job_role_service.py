from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pathwaylk_ai.ai_core.client import GeminiClient
from pathwaylk_ai.ai_core.client.gemini_client import GenerationConfig
from pathwaylk_ai.ai_core.common.errors import GenerationError
from pathwaylk_ai.ai_core.common.schema_validation import SchemaError, validate_job_role_output

logger = logging.getLogger(__name__)

JOB_ROLE_SYSTEM_PROMPT = """You are a career advisor who knows the Sri Lankan job market.
Describe job roles realistically for students choosing a study program: concrete responsibilities,
learnable skills, local salary ranges in LKR and companies that actually hire in Sri Lanka."""

JOB_ROLE_USER_PROMPT = """Job role: "{role_name}"
Context: a possible career outcome for students completing "{program_context}".

Return only a JSON object with these keys:
- role_name (string)
- overview (2-3 sentences)
- key_responsibilities (5 strings)
- required_skills: {{"technical": [...], "soft": [...], "tools": [...]}}
- career_path: {{"entry_level", "mid_level", "senior_level", "years_to_advance"}} as strings
- salary_info: {{"entry_level", "mid_level", "senior_level", "currency": "LKR"}} as strings
- work_environment: {{"type": string, "remote_option": boolean, "industries": [...], "company_types": [...]}}
- growth_opportunities (strings)
- certifications (strings, with provider)
- day_in_life (strings, one per part of the day)
- local_market: {{"demand": string, "top_companies": [...], "growth_projection": string, "key_cities": [...]}}"""

JOB_ROLE_GENERATION_CONFIG = GenerationConfig(temperature=0.6, response_mime_type="application/json")

# 선택 필드의 기본값
_OPTIONAL_DEFAULTS: Dict[str, Any] = {
    "work_environment": {},
    "certifications": [],
    "day_in_life": [],
    "local_market": {},
}


class JobRoleService:
    """진로(직무) 상세 정보 생성 서비스."""

    def __init__(self, llm_client: Optional[GeminiClient] = None) -> None:
        """
        @param {Optional[GeminiClient]} llm_client - LLM 클라이언트.
        @returns {None} 서비스를 초기화합니다.
        """
        self._llm_client = llm_client or GeminiClient()

    def get_job_role_details(self, role_name: str, program_context: str = "") -> Dict[str, Any]:
        """
        직무 개요, 필요 역량, 경력 경로, 급여, 현지 시장 정보를 생성합니다.

        @param {str} role_name - 직무 이름 (예: "Software Engineer").
        @param {str} program_context - 직무로 이어지는 프로그램 이름.
        @returns {Dict[str, Any]} 스키마 검증을 통과한 직무 정보.
        """
        if not role_name or not role_name.strip():
            raise ValueError("role_name must not be empty")
        role_name = role_name.strip()
        if not self._llm_client.is_available:
            raise GenerationError("job role generator is unavailable", program=program_context or None, phase="job_role")

        prompt = JOB_ROLE_USER_PROMPT.format(
            role_name=role_name,
            program_context=program_context.strip() or "a related degree or vocational program",
        )
        response = self._llm_client.generate_json(
            prompt,
            config=JOB_ROLE_GENERATION_CONFIG,
            system_instruction=JOB_ROLE_SYSTEM_PROMPT,
        )
        if not response.is_valid:
            raise GenerationError(
                f"job role generation failed: {response.describe_failure()}",
                program=program_context or None,
                phase="job_role",
            )

        payload = dict(response.data or {})
        try:
            validate_job_role_output(payload)
        except SchemaError as exc:
            raise GenerationError(f"malformed job role details: {exc}", phase="job_role") from exc

        for key, default in _OPTIONAL_DEFAULTS.items():
            payload.setdefault(key, type(default)())
        payload["role_name"] = role_name
        logger.info(
            "직무 상세 생성 완료",
            extra={"role": role_name, "responsibilities": len(payload["key_responsibilities"])},
        )
        return payload
