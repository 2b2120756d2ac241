from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class CacheEntry:
    """로드맵 캐시 엔트리."""

    program_name: str
    payload: Dict[str, Any]
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    version: int = 1
    hit_count: int = 0
    last_accessed_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.last_accessed_at is None:
            self.last_accessed_at = self.created_at

    def is_expired(self, now: datetime) -> bool:
        """
        @param now 비교 기준 시각.
        @returns 만료 시각이 지났으면 True.
        """
        return self.expires_at <= now
