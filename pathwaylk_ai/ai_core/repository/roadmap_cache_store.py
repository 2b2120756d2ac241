from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from pathwaylk_ai.ai_core.domain.cache_entry import CacheEntry


class RoadmapCacheStore(ABC):
    """로드맵 캐시 저장소 인터페이스. 구현체의 실패는 CacheStoreError로 전달한다."""

    @abstractmethod
    def get_active(self, key: str, now: datetime) -> Optional[CacheEntry]:
        """
        만료되지 않은 엔트리를 조회하고 조회 통계(hit_count, last_accessed_at)를 갱신합니다.

        @param key 프로그램 이름.
        @param now 기준 시각.
        @returns 갱신된 엔트리 또는 None.
        """
        raise NotImplementedError

    @abstractmethod
    def upsert(
        self,
        key: str,
        payload: Dict[str, Any],
        now: datetime,
        expires_at: datetime,
        timeout: Optional[float] = None,
    ) -> CacheEntry:
        """
        기존 엔트리가 있으면 payload/updated_at/expires_at을 덮어쓰고 version을 올립니다.
        created_at과 hit_count는 유지합니다.

        @param key 프로그램 이름.
        @param payload 저장할 로드맵 JSON.
        @param now 기준 시각.
        @param expires_at 만료 시각.
        @param timeout 저장소 접근 제한 시간(초).
        @returns 저장된 엔트리.
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        @param key 프로그램 이름.
        @returns 삭제된 엔트리가 있으면 True.
        """
        raise NotImplementedError

    @abstractmethod
    def delete_expired(self, now: datetime) -> int:
        """
        @param now 기준 시각.
        @returns 물리적으로 삭제된 만료 엔트리 수.
        """
        raise NotImplementedError

    @abstractmethod
    def extend(self, key: str, now: datetime, expires_at: datetime) -> bool:
        """
        @param key 프로그램 이름.
        @param now 기준 시각 (updated_at으로 기록).
        @param expires_at 새 만료 시각.
        @returns 대상 엔트리가 있으면 True.
        """
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> int:
        """
        @returns 삭제된 엔트리 수.
        """
        raise NotImplementedError

    @abstractmethod
    def list_entries(self) -> List[CacheEntry]:
        """
        @returns 만료 여부와 관계없이 저장된 모든 엔트리의 사본.
        """
        raise NotImplementedError

    def close(self) -> None:
        """
        저장소가 잡고 있는 자원을 정리합니다. 기본 구현은 아무것도 하지 않습니다.

        @returns None
        """
