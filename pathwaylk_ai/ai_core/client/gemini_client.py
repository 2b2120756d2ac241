# =============================================================================
# Google Gemini API 클라이언트
# =============================================================================
# 학습 로드맵과 직무 상세 정보를 생성하는 Gemini 모델 클라이언트입니다.
#
# 주요 기능:
#   - 텍스트 생성 (generate_text)
#   - JSON 응답 생성 및 파싱 (generate_json)
#   - 재시도 로직 (tenacity 지수 백오프)
#   - 헬스 체크
#
# 환경 변수:
#   - GEMINI_API_KEY: Google AI Studio에서 발급받은 API 키
#   - AI_DISABLE_LLM: "true"로 설정 시 LLM 호출 비활성화
#   - AI_DISABLE_EXTERNAL: "true"로 설정 시 모든 외부 API 비활성화
#
# 사용 예시:
#   client = GeminiClient()
#   response = client.generate_json("Create a learning roadmap ...")
#   if response.is_valid:
#       steps = response.get("steps", [])
# =============================================================================

from __future__ import annotations

import json
import logging
import os
import re
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pathwaylk_ai.ai_core.client.gemini_response import (
    GeminiResponse,
    create_empty_response,
    create_error_response,
)

# =============================================================================
# 로거 설정
# =============================================================================
logger = logging.getLogger(__name__)

# =============================================================================
# 상수 정의
# =============================================================================

# LLM 응답에서 JSON 객체/배열을 추출하는 정규표현식
_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_JSON_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
_CODE_BLOCK_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")

# 재시도 대상 예외 (네트워크/서버 일시 장애)
_RETRYABLE_ERRORS = (ConnectionError, TimeoutError, genai_errors.ServerError)


# =============================================================================
# 열거형 정의
# =============================================================================

class GeminiModel(str, Enum):
    """
    사용 가능한 Gemini 모델 목록.

    Example:
        >>> client = GeminiClient(model=GeminiModel.PRO_25)
    """

    FLASH_25 = "gemini-2.5-flash"
    """Gemini 2.5 Flash - 빠른 응답 (기본값)."""

    PRO_25 = "gemini-2.5-pro"
    """Gemini 2.5 Pro - 고품질 추론."""

    FLASH_20 = "gemini-2.0-flash"
    """Gemini 2.0 Flash - 안정적인 빠른 응답."""


# =============================================================================
# 설정 데이터클래스
# =============================================================================

@dataclass
class GenerationConfig:
    """
    텍스트 생성 설정.

    Attributes:
        temperature (float): 응답의 무작위성 (0.0~2.0).
        top_p (float): 누적 확률 샘플링 임계값.
        max_output_tokens (int): 최대 출력 토큰 수.
        response_mime_type (Optional[str]): "application/json"이면 JSON 모드.
        stop_sequences (List[str]): 생성을 중단할 문자열들.
    """

    temperature: float = 0.7
    top_p: float = 0.95
    max_output_tokens: int = 8192
    response_mime_type: Optional[str] = None
    stop_sequences: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """설정을 GenerateContentConfig 인자 딕셔너리로 변환합니다."""
        config: Dict[str, Any] = {
            "temperature": self.temperature,
            "top_p": self.top_p,
            "max_output_tokens": self.max_output_tokens,
        }
        if self.response_mime_type:
            config["response_mime_type"] = self.response_mime_type
        if self.stop_sequences:
            config["stop_sequences"] = self.stop_sequences
        return config


JSON_GENERATION_CONFIG = GenerationConfig(temperature=0.4, response_mime_type="application/json")


# =============================================================================
# 재시도 데코레이터 생성
# =============================================================================

def create_retry_decorator(
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 10.0,
) -> Callable:
    """
    지수 백오프 재시도 데코레이터를 생성합니다.

    Args:
        max_attempts: 최대 시도 횟수.
        min_wait: 최소 대기 시간(초).
        max_wait: 최대 대기 시간(초).

    Returns:
        Callable: tenacity 재시도 데코레이터.
    """
    return retry(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(_RETRYABLE_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


# =============================================================================
# Gemini 클라이언트 클래스
# =============================================================================

class GeminiClient:
    """
    Google Gemini API 클라이언트.

    Attributes:
        model_name (str): 사용 중인 모델 이름.
        is_available (bool): 클라이언트 사용 가능 여부.

    Example:
        >>> client = GeminiClient()
        >>> response = client.generate_json("JSON으로 답변: ...")
        >>> if response.is_valid:
        ...     print(response.get("program_name"))
    """

    DEFAULT_MODEL = GeminiModel.FLASH_25
    DEFAULT_TIMEOUT = 60
    DEFAULT_MAX_RETRIES = 3

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Union[str, GeminiModel] = DEFAULT_MODEL,
        timeout: int = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        disabled: Optional[bool] = None,
    ) -> None:
        """
        GeminiClient 인스턴스를 초기화합니다.

        Args:
            api_key:
                Gemini API 키. 미제공 시 GEMINI_API_KEY 환경변수 사용.
            model:
                사용할 Gemini 모델 (GeminiModel enum 또는 문자열).
            timeout:
                API 요청 타임아웃(초).
            max_retries:
                일시 장애 시 최대 시도 횟수.
            disabled:
                호출 비활성화 여부. None이면 AI_DISABLE_LLM/AI_DISABLE_EXTERNAL 환경변수를 따른다.
        """
        self._api_key = api_key or os.getenv("GEMINI_API_KEY", "")
        self._model = model.value if isinstance(model, GeminiModel) else str(model)
        self._timeout = timeout
        self._max_retries = max_retries

        if disabled is None:
            disabled = (
                os.getenv("AI_DISABLE_LLM", "").lower() == "true"
                or os.getenv("AI_DISABLE_EXTERNAL", "").lower() == "true"
            )
        self._disabled = disabled

        self._client: Optional[genai.Client] = None
        if self._disabled:
            logger.info("Gemini 클라이언트가 설정으로 비활성화됨")
        elif not self._api_key:
            logger.warning("Gemini API 키가 설정되지 않았습니다.")
        else:
            self._client = genai.Client(
                api_key=self._api_key,
                http_options=genai_types.HttpOptions(timeout=timeout * 1000),
            )
            logger.info("Gemini 클라이언트 초기화 성공", extra={"model": self._model})

        self._execute_with_retry = create_retry_decorator(max_attempts=max_retries)(self._execute_generation)

    # -------------------------------------------------------------------------
    # 프로퍼티
    # -------------------------------------------------------------------------

    @property
    def model_name(self) -> str:
        return self._model

    @property
    def is_available(self) -> bool:
        """
        Returns:
            bool: API 키가 있고 클라이언트가 초기화되었으며 비활성화되지 않았으면 True.
        """
        return self._client is not None and not self._disabled

    # -------------------------------------------------------------------------
    # 생성 메서드
    # -------------------------------------------------------------------------

    def generate_text(
        self,
        contents: str,
        config: Optional[GenerationConfig] = None,
        system_instruction: Optional[str] = None,
    ) -> str:
        """
        주어진 프롬프트에 대한 텍스트 응답을 생성합니다.

        Args:
            contents: 생성 요청 프롬프트.
            config: 생성 설정. None이면 모델 기본값.
            system_instruction: 시스템 지시사항.

        Returns:
            str: 생성된 텍스트. 사용 불가 또는 오류 시 빈 문자열.
        """
        if not self.is_available:
            logger.warning("Gemini 클라이언트가 사용 불가능한 상태")
            return ""
        try:
            return self._timed_generation(contents, config, system_instruction)
        except Exception as e:
            logger.error(
                "텍스트 생성 실패",
                extra={"error": str(e), "model": self._model},
                exc_info=True,
            )
            return ""

    def generate_json(
        self,
        contents: str,
        config: Optional[GenerationConfig] = None,
        system_instruction: Optional[str] = None,
    ) -> GeminiResponse:
        """
        JSON 형식의 응답을 생성하고 파싱합니다.

        응답 전체가 JSON이 아니어도 코드 블록이나 본문 속 JSON 부분을 찾아 파싱합니다.

        Args:
            contents: JSON 응답을 요청하는 프롬프트.
            config: 생성 설정. None이면 JSON 모드 기본 설정.
            system_instruction: 시스템 지시사항.

        Returns:
            GeminiResponse: 파싱 결과와 원본 텍스트, 실패 사유를 담은 응답 객체.
        """
        if not self.is_available:
            return create_empty_response(model=self._model)

        try:
            raw_text = self._timed_generation(contents, config or JSON_GENERATION_CONFIG, system_instruction)
        except Exception as e:
            logger.error(
                "JSON 생성 실패",
                extra={"error": str(e), "model": self._model},
                exc_info=True,
            )
            return create_error_response(f"{type(e).__name__}: {e}", model=self._model)

        data = _safe_json_parse(raw_text)
        return GeminiResponse(
            data=data,
            raw_text=raw_text,
            model=self._model,
            metadata={
                "parse_success": data is not None,
                "raw_length": len(raw_text),
            },
        )

    def _timed_generation(
        self,
        contents: str,
        config: Optional[GenerationConfig],
        system_instruction: Optional[str],
    ) -> str:
        start_time = time.time()
        result = self._execute_with_retry(
            contents=contents,
            config=config,
            system_instruction=system_instruction,
        )
        logger.debug(
            "Gemini 생성 완료",
            extra={
                "model": self._model,
                "elapsed_seconds": round(time.time() - start_time, 2),
                "response_length": len(result),
            },
        )
        return result

    def _execute_generation(
        self,
        contents: str,
        config: Optional[GenerationConfig] = None,
        system_instruction: Optional[str] = None,
    ) -> str:
        """
        실제 API 호출을 수행합니다. 재시도 데코레이터가 적용됩니다.

        Args:
            contents: 생성 요청 프롬프트.
            config: 생성 설정.
            system_instruction: 시스템 지시사항.

        Returns:
            str: 생성된 텍스트.
        """
        if self._client is None:
            return ""

        generation_config = config.to_dict() if config else {}
        request_config = None
        if system_instruction or generation_config:
            request_config = genai_types.GenerateContentConfig(
                system_instruction=system_instruction,
                **generation_config,
            )

        response = self._client.models.generate_content(
            model=self._model,
            contents=contents,
            config=request_config,
        )
        return getattr(response, "text", "") or ""

    # -------------------------------------------------------------------------
    # 유틸리티 메서드
    # -------------------------------------------------------------------------

    def health_check(self) -> Dict[str, Any]:
        """
        Returns:
            Dict[str, Any]: available/model/api_key_set/disabled/timeout/max_retries.
        """
        return {
            "available": self.is_available,
            "model": self._model,
            "api_key_set": bool(self._api_key),
            "disabled": self._disabled,
            "timeout": self._timeout,
            "max_retries": self._max_retries,
        }

    def __repr__(self) -> str:
        return f"GeminiClient(model={self._model!r}, available={self.is_available})"


# =============================================================================
# JSON 파싱 유틸리티
# =============================================================================

def _safe_json_parse(text: str) -> Optional[Dict[str, Any]]:
    """
    텍스트에서 JSON을 안전하게 파싱합니다.

    시도 순서:
    1. 전체 텍스트를 JSON으로 파싱
    2. 마크다운 코드 블록에서 JSON 추출
    3. 정규표현식으로 JSON 객체 추출
    4. 정규표현식으로 JSON 배열 추출

    Args:
        text: JSON이 포함된 텍스트.

    Returns:
        Optional[Dict[str, Any]]: 파싱된 JSON 객체 또는 None.
            JSON 배열인 경우 {"items": [...]} 형태로 래핑됩니다.
    """
    if not text or not text.strip():
        return None

    text = text.strip()
    candidates = [text]
    code_match = _CODE_BLOCK_RE.search(text)
    if code_match:
        candidates.append(code_match.group(1).strip())
    obj_match = _JSON_OBJECT_RE.search(text)
    if obj_match:
        candidates.append(obj_match.group(0))
    arr_match = _JSON_ARRAY_RE.search(text)
    if arr_match:
        candidates.append(arr_match.group(0))

    for candidate in candidates:
        try:
            result = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if isinstance(result, dict):
            return result
        if isinstance(result, list):
            return {"items": result}

    logger.debug(
        "JSON 파싱 실패",
        extra={"text_preview": text[:100]},
    )
    return None
