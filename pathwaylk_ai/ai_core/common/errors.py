from __future__ import annotations

from typing import Optional


class PathwayError(Exception):
    """경로/로드맵 서비스 공통 예외."""

    retryable = False

    def __init__(self, message: str, program: Optional[str] = None, phase: Optional[str] = None) -> None:
        """
        @param message 오류 메시지.
        @param program 관련 프로그램 이름.
        @param phase 실패한 처리 단계 (lookup/generate/cache 등).
        @returns None
        """
        super().__init__(message)
        self.program = program
        self.phase = phase

    def __str__(self) -> str:
        base = super().__str__()
        context = []
        if self.program:
            context.append(f"program={self.program}")
        if self.phase:
            context.append(f"phase={self.phase}")
        if not context:
            return base
        return f"{base} ({', '.join(context)})"


class InfrastructureError(PathwayError):
    """그래프/캐시 저장소 접근 실패. 호출자가 재시도할 수 있다."""

    retryable = True


class GraphStoreError(InfrastructureError):
    """그래프 저장소 질의 실패."""


class CacheStoreError(InfrastructureError):
    """캐시 저장소 읽기/쓰기 실패."""


class GenerationError(PathwayError):
    """로드맵 생성기 호출 실패 또는 해석 불가능한 출력."""
