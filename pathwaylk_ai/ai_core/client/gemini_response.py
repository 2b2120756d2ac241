# =============================================================================
# Gemini 응답 데이터 모델
# =============================================================================
# 로드맵/직무 생성 요청에 대한 Gemini 응답을 구조화하는 데이터 클래스입니다.
# 파싱된 JSON과 원본 텍스트, 실패 사유를 함께 보관하여
# 생성기가 "빈 응답"과 "호출 실패"를 구분할 수 있게 합니다.
#
# 사용 예시:
#   response = gemini_client.generate_json(prompt)
#   if response.is_valid:
#       steps = response.get("steps", [])
#   elif response.error:
#       logger.warning(response.error)
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass
class GeminiResponse:
    """
    Gemini API 응답 래퍼 클래스.

    Attributes:
        data (Optional[Dict[str, Any]]):
            파싱된 JSON 데이터. 파싱 실패 시 None.
        raw_text (str):
            모델이 반환한 원본 텍스트.
        model (Optional[str]):
            응답을 생성한 모델 이름.
        error (Optional[str]):
            호출 실패 사유. 성공한 응답이면 None.
        metadata (Dict[str, Any]):
            파싱 성공 여부, 응답 길이 등 부가 정보.

    Example:
        >>> response = GeminiResponse(data={"program_name": "BSE"}, raw_text="{...}")
        >>> response.is_valid
        True
        >>> response.get("missing", "default")
        'default'
    """

    data: Optional[Dict[str, Any]]
    """파싱된 JSON 데이터."""

    raw_text: str
    """원본 응답 텍스트."""

    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    """응답 생성 시각."""

    model: Optional[str] = None
    """응답을 생성한 모델 이름 (예: 'gemini-2.5-flash')."""

    error: Optional[str] = None
    """호출 실패 사유."""

    metadata: Dict[str, Any] = field(default_factory=dict)
    """부가 메타데이터."""

    @property
    def is_valid(self) -> bool:
        """
        Returns:
            bool: 오류 없이 비어있지 않은 JSON 객체를 얻었으면 True.
        """
        return self.error is None and self.data is not None and len(self.data) > 0

    @property
    def text_length(self) -> int:
        return len(self.raw_text)

    def get(self, key: str, default: Any = None) -> Any:
        """
        딕셔너리에서 안전하게 값을 가져옵니다.

        Args:
            key: 가져올 키.
            default: 키가 없을 때 반환할 기본값.

        Returns:
            Any: 해당 키의 값 또는 기본값.
        """
        if self.data is None:
            return default
        return self.data.get(key, default)

    def describe_failure(self) -> str:
        """
        Returns:
            str: 로그/예외 메시지에 쓸 실패 요약.
        """
        if self.error:
            return self.error
        if not self.raw_text.strip():
            return "empty response"
        if self.data is None:
            return "response is not valid JSON"
        return "response JSON is empty"

    def __repr__(self) -> str:
        """디버깅용 문자열 표현."""
        return (
            f"GeminiResponse("
            f"is_valid={self.is_valid}, "
            f"model={self.model}, "
            f"error={self.error!r})"
        )


# =============================================================================
# 팩토리 함수
# =============================================================================

def create_empty_response(model: Optional[str] = None) -> GeminiResponse:
    """
    빈 응답 객체를 생성합니다. 클라이언트를 사용할 수 없을 때 반환합니다.

    Args:
        model: 모델 이름.

    Returns:
        GeminiResponse: 데이터가 없는 응답 객체.
    """
    return GeminiResponse(
        data=None,
        raw_text="",
        model=model,
        error="gemini client unavailable",
        metadata={"error": "unavailable"},
    )


def create_error_response(error_message: str, model: Optional[str] = None) -> GeminiResponse:
    """
    에러 응답 객체를 생성합니다.

    Args:
        error_message: 에러 메시지.
        model: 모델 이름.

    Returns:
        GeminiResponse: 에러 정보를 담은 응답 객체.
    """
    return GeminiResponse(
        data=None,
        raw_text="",
        model=model,
        error=error_message,
        metadata={"error": True},
    )
