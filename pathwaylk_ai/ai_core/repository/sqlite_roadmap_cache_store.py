from __future__ import annotations

import json
import logging
import os
import sqlite3
import threading
from contextlib import closing, contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from pathwaylk_ai.ai_core.common.errors import CacheStoreError
from pathwaylk_ai.ai_core.domain.cache_entry import CacheEntry
from pathwaylk_ai.ai_core.repository.roadmap_cache_store import RoadmapCacheStore

logger = logging.getLogger(__name__)

# =========================================================================
# Schema
# =========================================================================

_CREATE_ROADMAP_CACHE = """\
CREATE TABLE IF NOT EXISTS roadmap_cache (
    program_name      TEXT    PRIMARY KEY,
    payload           TEXT    NOT NULL,
    created_at        TEXT    NOT NULL,
    updated_at        TEXT    NOT NULL,
    expires_at        TEXT    NOT NULL,
    version           INTEGER NOT NULL DEFAULT 1,
    hit_count         INTEGER NOT NULL DEFAULT 0,
    last_accessed_at  TEXT    NOT NULL
);
"""

_CREATE_EXPIRES_INDEX = "CREATE INDEX IF NOT EXISTS idx_roadmap_cache_expires ON roadmap_cache (expires_at);"

_UPSERT = """\
INSERT INTO roadmap_cache
    (program_name, payload, created_at, updated_at, expires_at, version, hit_count, last_accessed_at)
VALUES (?, ?, ?, ?, ?, 1, 0, ?)
ON CONFLICT(program_name) DO UPDATE SET
    payload = excluded.payload,
    updated_at = excluded.updated_at,
    expires_at = excluded.expires_at,
    version = roadmap_cache.version + 1
"""

_SELECT_COLUMNS = (
    "SELECT program_name, payload, created_at, updated_at, expires_at, "
    "version, hit_count, last_accessed_at FROM roadmap_cache"
)

_DEFAULT_TIMEOUT = 5.0
_MEMORY_PATH = ":memory:"


class SqliteRoadmapCacheStore(RoadmapCacheStore):
    """SQLite 로드맵 캐시 저장소. 파일 DB는 작업마다 새 연결을 열고, ":memory:"는 연결 하나를 공유한다."""

    def __init__(self, db_path: Union[str, Path], timeout: float = _DEFAULT_TIMEOUT) -> None:
        """
        @param db_path SQLite 파일 경로 또는 ":memory:".
        @param timeout 기본 잠금 대기 시간(초).
        @returns None
        """
        self._db_path = str(db_path)
        self._timeout = timeout
        self._lock = threading.Lock()
        self._shared: Optional[sqlite3.Connection] = None
        if self._db_path == _MEMORY_PATH:
            self._shared = sqlite3.connect(_MEMORY_PATH, check_same_thread=False)
            self._shared.row_factory = sqlite3.Row
        self.migrate()

    @property
    def db_path(self) -> str:
        return self._db_path

    def migrate(self) -> None:
        """
        @returns None
        """
        with self._transaction("migrate") as conn:
            conn.execute(_CREATE_ROADMAP_CACHE)
            conn.execute(_CREATE_EXPIRES_INDEX)
        logger.info("로드맵 캐시 테이블 준비 완료", extra={"db_path": self._db_path})

    def get_active(self, key: str, now: datetime) -> Optional[CacheEntry]:
        """
        @param key 프로그램 이름.
        @param now 기준 시각.
        @returns 갱신된 엔트리 또는 None.
        """
        stamp = _to_text(now)
        with self._transaction("cache_read") as conn:
            cursor = conn.execute(
                "UPDATE roadmap_cache SET hit_count = hit_count + 1, last_accessed_at = ? "
                "WHERE program_name = ? AND expires_at > ?",
                (stamp, key, stamp),
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(f"{_SELECT_COLUMNS} WHERE program_name = ?", (key,)).fetchone()
        return _row_to_entry(row) if row else None

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
        @param timeout 잠금 대기 제한 시간(초).
        @returns 저장된 엔트리.
        """
        try:
            serialized = json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise CacheStoreError(f"payload is not JSON serializable: {exc}", program=key, phase="cache_write") from exc
        stamp = _to_text(now)
        with self._transaction("cache_write", timeout=timeout) as conn:
            conn.execute(_UPSERT, (key, serialized, stamp, stamp, _to_text(expires_at), stamp))
            row = conn.execute(f"{_SELECT_COLUMNS} WHERE program_name = ?", (key,)).fetchone()
        return _row_to_entry(row)

    def delete(self, key: str) -> bool:
        with self._transaction("cache_delete") as conn:
            cursor = conn.execute("DELETE FROM roadmap_cache WHERE program_name = ?", (key,))
            return cursor.rowcount > 0

    def delete_expired(self, now: datetime) -> int:
        with self._transaction("cache_sweep") as conn:
            cursor = conn.execute("DELETE FROM roadmap_cache WHERE expires_at <= ?", (_to_text(now),))
            return cursor.rowcount

    def extend(self, key: str, now: datetime, expires_at: datetime) -> bool:
        with self._transaction("cache_refresh") as conn:
            cursor = conn.execute(
                "UPDATE roadmap_cache SET updated_at = ?, expires_at = ? WHERE program_name = ?",
                (_to_text(now), _to_text(expires_at), key),
            )
            return cursor.rowcount > 0

    def clear(self) -> int:
        with self._transaction("cache_clear") as conn:
            cursor = conn.execute("DELETE FROM roadmap_cache")
            return cursor.rowcount

    def list_entries(self) -> List[CacheEntry]:
        with self._transaction("cache_list") as conn:
            rows = conn.execute(f"{_SELECT_COLUMNS} ORDER BY program_name").fetchall()
        return [_row_to_entry(row) for row in rows]

    # =========================================================================
    # Connection helper
    # =========================================================================

    def close(self) -> None:
        """
        인메모리 DB의 공유 연결을 닫습니다. 파일 DB는 작업마다 연결을 닫으므로 할 일이 없습니다.

        @returns None
        """
        if self._shared is not None:
            self._shared.close()
            self._shared = None

    def _connect(self, timeout: Optional[float]) -> sqlite3.Connection:
        os.makedirs(os.path.dirname(os.path.abspath(self._db_path)), exist_ok=True)
        conn = sqlite3.connect(self._db_path, timeout=self._timeout if timeout is None else timeout)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self, phase: str, timeout: Optional[float] = None) -> Iterator[sqlite3.Connection]:
        if self._shared is not None:
            with self._shared_transaction(phase, timeout) as conn:
                yield conn
            return
        try:
            with closing(self._connect(timeout)) as conn:
                with conn:
                    yield conn
        except sqlite3.Error as exc:
            raise CacheStoreError(f"sqlite cache failure: {exc}", phase=phase) from exc
        except OSError as exc:
            raise CacheStoreError(f"cannot open cache database {self._db_path}: {exc}", phase=phase) from exc

    @contextmanager
    def _shared_transaction(self, phase: str, timeout: Optional[float]) -> Iterator[sqlite3.Connection]:
        # ":memory:" DB는 연결이 닫히면 사라지므로 저장소 수명 동안 연결 하나를 잠금으로 공유한다.
        wait_seconds = self._timeout if timeout is None else timeout
        if not self._lock.acquire(timeout=wait_seconds):
            raise CacheStoreError(f"cache lock not acquired within {wait_seconds}s", phase=phase)
        try:
            with self._shared:
                yield self._shared
        except sqlite3.Error as exc:
            raise CacheStoreError(f"sqlite cache failure: {exc}", phase=phase) from exc
        finally:
            self._lock.release()

    def __repr__(self) -> str:
        return f"SqliteRoadmapCacheStore(db_path={self._db_path!r})"


def _to_text(value: datetime) -> str:
    """
    @param value 시각 (naive면 UTC로 간주).
    @returns 사전순 비교가 가능한 UTC ISO 문자열.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _row_to_entry(row: sqlite3.Row) -> CacheEntry:
    return CacheEntry(
        program_name=row["program_name"],
        payload=json.loads(row["payload"]),
        created_at=datetime.fromisoformat(row["created_at"]),
        updated_at=datetime.fromisoformat(row["updated_at"]),
        expires_at=datetime.fromisoformat(row["expires_at"]),
        version=row["version"],
        hit_count=row["hit_count"],
        last_accessed_at=datetime.fromisoformat(row["last_accessed_at"]),
    )
