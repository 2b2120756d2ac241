from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from pathwaylk_ai.ai_core.common.errors import CacheStoreError
from pathwaylk_ai.ai_core.domain.cache_entry import CacheEntry
from pathwaylk_ai.ai_core.repository.in_memory_roadmap_cache_store import InMemoryRoadmapCacheStore
from pathwaylk_ai.ai_core.repository.roadmap_cache_store import RoadmapCacheStore

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(days=7)
TOP_PROGRAMS_LIMIT = 10


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RoadmapCache:
    """프로그램 이름을 키로 하는 TTL 로드맵 캐시."""

    def __init__(
        self,
        store: Optional[RoadmapCacheStore] = None,
        ttl: timedelta = DEFAULT_TTL,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        """
        @param {Optional[RoadmapCacheStore]} store - 엔트리 저장소. 기본은 메모리 저장소.
        @param {timedelta} ttl - 엔트리 유효 기간.
        @param {Optional[Callable[[], datetime]]} clock - 현재 시각 공급자 (테스트용).
        @returns {None} 캐시를 초기화합니다.
        """
        if ttl <= timedelta(0):
            raise ValueError("ttl must be positive")
        self._store = store or InMemoryRoadmapCacheStore()
        self._ttl = ttl
        self._clock = clock or utc_now

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    @property
    def store(self) -> RoadmapCacheStore:
        return self._store

    def get(self, key: str) -> Tuple[Optional[Dict[str, Any]], bool]:
        """
        만료된 엔트리는 물리 삭제 여부와 관계없이 미스로 취급합니다.

        @param {str} key - 프로그램 이름.
        @returns {Tuple[Optional[Dict[str, Any]], bool]} (payload, found).
        """
        _require_key(key)
        entry = self._store.get_active(key, self._clock())
        if entry is None:
            logger.debug("로드맵 캐시 미스", extra={"program": key})
            return None, False
        logger.debug("로드맵 캐시 히트", extra={"program": key, "hit_count": entry.hit_count})
        return entry.payload, True

    def set(self, key: str, payload: Dict[str, Any], timeout: Optional[float] = None) -> CacheEntry:
        """
        @param {str} key - 프로그램 이름.
        @param {Dict[str, Any]} payload - 로드맵 JSON.
        @param {Optional[float]} timeout - 저장소 접근 제한 시간(초).
        @returns {CacheEntry} 저장된 엔트리.
        """
        _require_key(key)
        now = self._clock()
        entry = self._store.upsert(key, payload, now, now + self._ttl, timeout=timeout)
        logger.info(
            "로드맵 캐시 저장",
            extra={"program": key, "version": entry.version, "expires_at": entry.expires_at.isoformat()},
        )
        return entry

    def delete(self, key: str) -> bool:
        """
        @param {str} key - 프로그램 이름.
        @returns {bool} 삭제된 엔트리가 있으면 True.
        """
        _require_key(key)
        deleted = self._store.delete(key)
        logger.info("로드맵 캐시 삭제", extra={"program": key, "deleted": deleted})
        return deleted

    def clear(self) -> int:
        """
        @returns {int} 삭제된 엔트리 수.
        """
        removed = self._store.clear()
        logger.warning("로드맵 캐시 전체 삭제", extra={"removed": removed})
        return removed

    def invalidate_expired(self) -> int:
        """
        @returns {int} 물리적으로 삭제된 만료 엔트리 수.
        """
        removed = self._store.delete_expired(self._clock())
        if removed:
            logger.info("만료된 로드맵 캐시 정리", extra={"removed": removed})
        return removed

    def refresh_ttl(self, key: str) -> None:
        """
        @param {str} key - 프로그램 이름.
        @returns {None} 엔트리가 없으면 KeyError.
        """
        _require_key(key)
        now = self._clock()
        if not self._store.extend(key, now, now + self._ttl):
            raise KeyError(key)

    def stats(self) -> Dict[str, Any]:
        """
        @returns {Dict[str, Any]} total/active/expired 엔트리 수, TTL(시간), 조회수 상위 프로그램.
        """
        now = self._clock()
        entries = self._store.list_entries()
        active = [entry for entry in entries if not entry.is_expired(now)]
        ranked = sorted(active, key=lambda entry: (-entry.hit_count, entry.program_name))
        return {
            "total_entries": len(entries),
            "active_entries": len(active),
            "expired_entries": len(entries) - len(active),
            "cache_ttl_hours": self._ttl.total_seconds() / 3600,
            "top_programs": [
                {
                    "program_name": entry.program_name,
                    "hit_count": entry.hit_count,
                    "last_accessed_at": entry.last_accessed_at.isoformat() if entry.last_accessed_at else None,
                }
                for entry in ranked[:TOP_PROGRAMS_LIMIT]
            ],
        }


class ExpirySweeper:
    """일정 주기로 만료 엔트리를 정리하는 데몬 스레드."""

    def __init__(self, cache: RoadmapCache, interval_seconds: float) -> None:
        """
        @param cache 정리 대상 캐시.
        @param interval_seconds 정리 주기(초).
        @returns None
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._cache = cache
        self._interval = interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="roadmap-cache-sweeper", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def run_once(self) -> int:
        """
        @returns 이번 주기에 삭제된 엔트리 수. 저장소 실패 시 0.
        """
        try:
            return self._cache.invalidate_expired()
        except CacheStoreError:
            logger.warning("만료 캐시 정리 실패", exc_info=True)
            return 0

    def _run(self) -> None:
        while not self._stop.wait(self._interval):
            self.run_once()


def _require_key(key: str) -> None:
    if not key or not key.strip():
        raise ValueError("program name must not be empty")
