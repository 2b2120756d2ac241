"""
=============================================================================
YouTube 검색 결과 모델
=============================================================================

YouTube Data API(search.list + videos.list) 결과를 하나의 영상 단위로 정의합니다.
Pydantic을 사용하여 데이터 유효성을 검사하고 타입 안정성을 보장합니다.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


class YouTubeResult(BaseModel):
    """
    YouTube 영상 검색 결과를 나타내는 데이터 모델.

    Attributes:
        video_id (str): YouTube 영상 ID.
        title (str): 영상 제목.
        channel (str): 채널 이름.
        description (str): 영상 설명.
        thumbnail (str): 썸네일 URL.
        duration (str): 사람이 읽는 재생 시간 (예: "12:34").
        view_count (int): 조회수.
        published_at (Optional[datetime]): 게시 시각 (UTC).
    """

    video_id: str = Field(..., min_length=1, description="YouTube 영상 ID")
    title: str = Field(..., description="영상 제목")
    channel: str = Field("", description="채널 이름")
    description: str = Field("", description="영상 설명")
    thumbnail: str = Field("", description="썸네일 URL")
    duration: str = Field("", description="재생 시간")
    view_count: int = Field(0, ge=0, description="조회수")
    published_at: Optional[datetime] = Field(None, description="게시 시각")

    class Config:
        """Pydantic 설정."""
        frozen = True
        extra = "ignore"

    @property
    def url(self) -> str:
        return WATCH_URL.format(video_id=self.video_id)
