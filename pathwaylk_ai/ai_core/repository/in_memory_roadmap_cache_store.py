from __future__ import annotations

import json
import threading
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from pathwaylk_ai.ai_core.common.errors import CacheStoreError
from pathwaylk_ai.ai_core.domain.cache_entry import CacheEntry
from pathwaylk_ai.ai_core.repository.roadmap_cache_store import RoadmapCacheStore


class InMemoryRoadmapCacheStore(RoadmapCacheStore):
    """메모리 기반 로드맵 캐시 저장소 (스레드 안전)."""

    def __init__(self) -> None:
        """
        @returns None
        """
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get_active(self, key: str, now: datetime) -> Optional[CacheEntry]:
        """
        @param key 프로그램 이름.
        @param now 기준 시각.
        @returns 갱신된 엔트리 사본 또는 None.
        """
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.is_expired(now):
                return None
            entry.hit_count += 1
            entry.last_accessed_at = now
            return self._copy(entry)

    def upsert(
        self,
        key: str,
        payload: Dict[str, Any],
        now: datetime,
        expires_at: datetime,
        timeout: Optional[float] = None,
    ) -> CacheEntry:
        """
        @param key 프로그램 이름.
        @param payload 저장할 로드맵 JSON.
        @param now 기준 시각.
        @param expires_at 만료 시각.
        @param timeout 잠금 대기 제한 시간(초). None이면 무제한.
        @returns 저장된 엔트리 사본.
        """
        stored_payload = _clone_payload(payload)
        acquired = self._lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            raise CacheStoreError("cache write timed out waiting for lock", program=key, phase="cache_write")
        try:
            current = self._entries.get(key)
            if current is None:
                entry = CacheEntry(
                    program_name=key,
                    payload=stored_payload,
                    created_at=now,
                    updated_at=now,
                    expires_at=expires_at,
                )
            else:
                entry = replace(
                    current,
                    payload=stored_payload,
                    updated_at=now,
                    expires_at=expires_at,
                    version=current.version + 1,
                )
            self._entries[key] = entry
            return self._copy(entry)
        finally:
            self._lock.release()

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def delete_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def extend(self, key: str, now: datetime, expires_at: datetime) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return False
            entry.updated_at = now
            entry.expires_at = expires_at
            return True

    def clear(self) -> int:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count

    def list_entries(self) -> List[CacheEntry]:
        with self._lock:
            return [self._copy(entry) for entry in self._entries.values()]

    @staticmethod
    def _copy(entry: CacheEntry) -> CacheEntry:
        return replace(entry, payload=_clone_payload(entry.payload))


def _clone_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    @param payload 로드맵 JSON.
    @returns JSON 직렬화를 거친 깊은 사본.
    """
    try:
        return json.loads(json.dumps(payload))
    except (TypeError, ValueError) as exc:
        raise CacheStoreError(f"payload is not JSON serializable: {exc}", phase="cache_write") from exc
