"""
Playback Schemas

Pydantic models for play-url issuance.
"""
from typing import Optional

from audioshelf.schemas.base import CamelModel
from audioshelf.schemas.chapter import ChapterPublic


class PlayUrlRequest(CamelModel):
    """获取播放地址请求；chapterId 为空时取 order 最小的章节"""

    chapter_id: Optional[str] = None


class PlayUrlResponse(CamelModel):
    """播放地址响应"""

    play_url: str
    mime_type: str
    chapter: ChapterPublic
    total_chapters: int
