from typing import Any, Dict, List


class SchemaError(ValueError):
    """스키마 검증 실패."""

    pass


_DIFFICULTY_LEVELS = {"beginner", "intermediate", "advanced"}


def validate_learning_roadmap_output(payload: Dict[str, Any]) -> None:
    """
    @param payload 생성기가 반환한 학습 로드맵 JSON.
    @returns None
    """
    _require_fields(payload, [
        "program_name",
        "overview",
        "total_duration",
        "prerequisites",
        "learning_steps",
        "key_skills",
        "recommended_for",
    ])
    _require_types(payload["program_name"], str, "program_name")
    _require_types(payload["prerequisites"], list, "prerequisites")
    _require_types(payload["learning_steps"], list, "learning_steps")
    _require_types(payload["key_skills"], list, "key_skills")
    if not payload["learning_steps"]:
        raise SchemaError("Field learning_steps should not be empty")
    for index, step in enumerate(payload["learning_steps"]):
        validate_learning_step_output(step, index)


def validate_learning_step_output(step: Any, index: int = 0) -> None:
    """
    @param step 학습 단계 JSON.
    @param index 단계 위치 (오류 메시지용).
    @returns None
    """
    _require_types(step, dict, f"learning_steps[{index}]")
    _require_fields(step, ["step_number", "title", "description", "topics", "duration", "difficulty"])
    if isinstance(step["step_number"], bool) or not isinstance(step["step_number"], int):
        raise SchemaError(f"Field learning_steps[{index}].step_number should be int")
    _require_types(step["title"], str, f"learning_steps[{index}].title")
    _require_types(step["topics"], list, f"learning_steps[{index}].topics")
    if not all(isinstance(topic, str) for topic in step["topics"]):
        raise SchemaError(f"Field learning_steps[{index}].topics should contain strings")
    difficulty = str(step["difficulty"]).strip().lower()
    if difficulty not in _DIFFICULTY_LEVELS:
        raise SchemaError(f"Field learning_steps[{index}].difficulty has unknown level: {step['difficulty']}")


def validate_job_role_output(payload: Dict[str, Any]) -> None:
    """
    @param payload 직무 상세 결과 JSON.
    @returns None
    """
    _require_fields(payload, [
        "role_name",
        "overview",
        "key_responsibilities",
        "required_skills",
        "career_path",
        "salary_info",
        "growth_opportunities",
    ])
    _require_types(payload["key_responsibilities"], list, "key_responsibilities")
    _require_types(payload["required_skills"], dict, "required_skills")
    _require_types(payload["career_path"], dict, "career_path")
    _require_types(payload["salary_info"], dict, "salary_info")
    _require_types(payload["growth_opportunities"], list, "growth_opportunities")


def _require_fields(payload: Dict[str, Any], fields: List[str]) -> None:
    """
    @param payload 점검 대상 JSON.
    @param fields 필수 필드 목록.
    @returns None
    """
    missing = [field for field in fields if field not in payload]
    if missing:
        raise SchemaError(f"Missing fields: {missing}")


def _require_types(value: Any, expected_type: type, field_name: str) -> None:
    """
    @param value 점검 대상 값.
    @param expected_type 기대 타입.
    @param field_name 필드 이름.
    @returns None
    """
    if not isinstance(value, expected_type):
        raise SchemaError(f"Field {field_name} should be {expected_type.__name__}")
