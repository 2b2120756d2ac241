from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class Video:
    """로드맵 단계에 첨부되는 학습 영상."""

    video_id: str
    title: str
    url: str
    channel: str = ""
    duration: str = ""
    view_count: int = 0
    published_at: Optional[datetime] = None
    thumbnail: str = ""
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "video_id": self.video_id,
            "title": self.title,
            "url": self.url,
            "channel": self.channel,
            "duration": self.duration,
            "view_count": self.view_count,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "thumbnail": self.thumbnail,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Video":
        published = data.get("published_at")
        if isinstance(published, str) and published:
            published = datetime.fromisoformat(published)
        return cls(
            video_id=str(data.get("video_id") or ""),
            title=str(data.get("title") or ""),
            url=str(data.get("url") or ""),
            channel=str(data.get("channel") or ""),
            duration=str(data.get("duration") or ""),
            view_count=int(data.get("view_count") or 0),
            published_at=published or None,
            thumbnail=str(data.get("thumbnail") or ""),
            description=str(data.get("description") or ""),
        )
