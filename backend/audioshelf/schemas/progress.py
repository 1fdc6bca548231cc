"""
Progress Schemas

Pydantic models for playback progress requests/responses.
"""
from typing import Optional

from pydantic import Field

from audioshelf.schemas.base import CamelModel


class ProgressResponse(CamelModel):
    """播放进度响应（无记录时为零值）"""

    current_chapter_id: Optional[str] = None
    position: float = 0.0
    completed: bool = False


class ProgressUpdate(CamelModel):
    """保存播放进度请求"""

    session_id: str = Field(..., min_length=1)
    chapter_id: str = Field(..., min_length=1)
    position: float = Field(..., ge=0)
    completed: bool = False
