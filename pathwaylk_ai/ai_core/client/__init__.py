# =============================================================================
# 외부 서비스 클라이언트 모듈
# =============================================================================
# 로드맵 생성과 학습 영상 검색에 쓰는 외부 API 클라이언트를 제공합니다.
#
# 지원 서비스:
#   - Gemini: Google LLM API (로드맵/직무 정보 생성)
#   - YouTube: YouTube Data API v3 (학습 영상 검색)
#
# 사용 예시:
#   from pathwaylk_ai.ai_core.client import GeminiClient, YouTubeSearchClient
#
#   gemini = GeminiClient()
#   response = gemini.generate_json("...")
#
#   youtube = YouTubeSearchClient()
#   results = youtube.search("react hooks tutorial OR course")
# =============================================================================

from __future__ import annotations

# -----------------------------------------------------------------------------
# Gemini 클라이언트 (LLM)
# -----------------------------------------------------------------------------
from pathwaylk_ai.ai_core.client.gemini_client import (
    GeminiClient,
    GeminiModel,
    GenerationConfig,
)
from pathwaylk_ai.ai_core.client.gemini_response import (
    GeminiResponse,
    create_empty_response,
    create_error_response,
)

# -----------------------------------------------------------------------------
# YouTube 클라이언트 (영상 검색)
# -----------------------------------------------------------------------------
from pathwaylk_ai.ai_core.client.youtube_client import (
    YouTubeSearchClient,
    YouTubeSearchOptions,
    format_iso8601_duration,
)
from pathwaylk_ai.ai_core.client.youtube_result import YouTubeResult


__all__ = [
    # Gemini (LLM)
    "GeminiClient",
    "GeminiModel",
    "GeminiResponse",
    "GenerationConfig",
    "create_empty_response",
    "create_error_response",
    # YouTube (영상 검색)
    "YouTubeSearchClient",
    "YouTubeSearchOptions",
    "YouTubeResult",
    "format_iso8601_duration",
]

__version__ = "1.0.0"
__author__ = "PathwayLK AI Team"
