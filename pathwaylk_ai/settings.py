"""
=============================================================================
PathwayLK AI - 설정 모듈 (Settings Module)
=============================================================================

이 모듈은 경로 탐색/로드맵 서비스의 전체 설정을 관리합니다.
`pydantic-settings`를 활용하여 환경변수를 타입 안전(Type-Safe)하게 로드하고 검증합니다.

설계 원칙:
    1.  **환경 분리 (Environment Isolation)**: `.env` 파일 및 환경변수로 개발/운영 환경을 분리합니다.
    2.  **타입 검증 (Type Validation)**: 잘못된 환경변수 입력 시 즉시 오류를 발생시킵니다.
    3.  **명시적 구성 (Explicit Configuration)**: 동시성 한도, 타임아웃, TTL 같은 운영 값을 한곳에 모읍니다.

주요 환경변수:
    - `GEMINI_API_KEY`: 로드맵 생성용 Gemini API 키
    - `YOUTUBE_API_KEY`: 학습 영상 검색용 YouTube Data API 키
    - `ROADMAP_CACHE_BACKEND`: 로드맵 캐시 저장소 (memory/sqlite)
    - `GRAPH_DATA_PATH`: 교육 그래프 JSON 경로 (미지정 시 내장 시드 사용)
=============================================================================
"""

from __future__ import annotations

import logging
import logging.config
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# -----------------------------------------------------------------------------
# 1. 환경변수 스키마 정의 (Pydantic Settings)
# -----------------------------------------------------------------------------
# 프로젝트 루트 디렉토리
BASE_DIR = Path(__file__).resolve().parent.parent


class EnvSettings(BaseSettings):
    """
    환경변수 로딩 및 검증을 위한 Pydantic 모델.
    모든 환경변수는 이 클래스를 통해 접근해야 합니다.
    """

    # AI 클라이언트 설정
    GEMINI_API_KEY: Optional[SecretStr] = None
    YOUTUBE_API_KEY: Optional[SecretStr] = None

    AI_DISABLE_LLM: bool = False
    AI_DISABLE_EXTERNAL: bool = False
    AI_DEFAULT_MODEL: str = "gemini-2.5-flash"
    AI_TIMEOUT: int = 60
    AI_MAX_RETRIES: int = 3

    # 교육 그래프 설정
    GRAPH_DATA_PATH: Optional[Path] = None
    PATHWAY_MAX_DEPTH: int = Field(default=10, ge=1, le=50, description="선수 과정 체인 최대 탐색 깊이")

    # 로드맵 캐시 설정
    ROADMAP_CACHE_BACKEND: str = Field(default="memory", pattern="^(memory|sqlite)$")
    ROADMAP_CACHE_PATH: Path = BASE_DIR / "data" / "roadmap_cache.sqlite3"
    ROADMAP_CACHE_TTL_HOURS: float = Field(default=7 * 24, gt=0)
    ROADMAP_CACHE_SWEEP_SECONDS: float = Field(default=3600, ge=0, description="0이면 만료 스윕 비활성화")
    CACHE_WRITE_TIMEOUT: float = Field(default=10.0, gt=0)

    # 영상 데코레이션 동시성 설정
    ROADMAP_STEP_CONCURRENCY: int = Field(default=3, ge=1)
    ROADMAP_TOPIC_CONCURRENCY: int = Field(default=5, ge=1)
    ROADMAP_DECORATION_DEADLINE: float = Field(default=30.0, gt=0)
    VIDEO_SEARCH_TIMEOUT: float = Field(default=15.0, gt=0)
    VIDEO_MAX_TOPICS_PER_STEP: int = Field(default=3, ge=1)
    VIDEO_RESULTS_PER_TOPIC: int = Field(default=1, ge=1, le=10)

    # 로깅
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = Field(default="simple", pattern="^(simple|verbose|json)$")

    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",  # 정의되지 않은 환경변수는 무시
        case_sensitive=True,
    )

    @property
    def gemini_api_key(self) -> str:
        return self.GEMINI_API_KEY.get_secret_value() if self.GEMINI_API_KEY else ""

    @property
    def youtube_api_key(self) -> str:
        return self.YOUTUBE_API_KEY.get_secret_value() if self.YOUTUBE_API_KEY else ""


# 설정 로드 (싱글톤)
try:
    env = EnvSettings()
except Exception as e:
    # 설정 로드 실패 시 치명적 오류로 간주하고 프로세스 종료
    print("=================================================================")
    print(" [CRITICAL] 환경변수 설정 로드 실패")
    print(" .env 파일 또는 환경변수를 확인해주세요.")
    print(f" Error: {e}")
    print("=================================================================")
    sys.exit(1)


# -----------------------------------------------------------------------------
# 2. 로깅 (Logging)
# -----------------------------------------------------------------------------
def build_logging_config(settings: EnvSettings) -> Dict[str, Any]:
    """
    로깅 dictConfig를 생성합니다.

    @param {EnvSettings} settings - 로그 레벨/포맷을 담은 설정.
    @returns {Dict[str, Any]} logging.config.dictConfig 입력.
    """
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "verbose": {
                "format": "[{asctime}] {levelname} {name} {module}:{lineno} - {message}",
                "style": "{",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {
                "format": "[{asctime}] {levelname} {message}",
                "style": "{",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "level": "DEBUG",
                "class": "logging.StreamHandler",
                "formatter": settings.LOG_FORMAT,
                "stream": sys.stdout,
            },
        },
        "loggers": {
            "pathwaylk_ai": {"handlers": ["console"], "level": settings.LOG_LEVEL, "propagate": False},
            "httpx": {"handlers": ["console"], "level": "WARNING", "propagate": False},
            "": {"handlers": ["console"], "level": settings.LOG_LEVEL},
        },
    }


LOGGING = build_logging_config(env)


def configure_logging(settings: Optional[EnvSettings] = None) -> None:
    """
    @param settings 사용할 설정. None이면 모듈 설정을 사용.
    @returns None
    """
    config = LOGGING if settings is None else build_logging_config(settings)
    logging.config.dictConfig(config)
