"""
Chapter Schemas

Pydantic models for Chapter API request/response validation.
"""
from typing import Optional

from pydantic import Field

from audioshelf.schemas.base import CamelModel


class ChapterInput(CamelModel):
    """章节输入（管理端创建/编辑）

    `id` 为空表示新章节；`order` 仅供参考，保存时按列表位置重新生成。
    """

    id: Optional[str] = None
    title: str = Field(..., min_length=1, max_length=255)
    object_key: str = Field(..., min_length=1)
    mime_type: str = Field(..., min_length=1)
    duration: float = Field(0.0, ge=0)
    order: Optional[int] = None


class ChapterPublic(CamelModel):
    """章节公开元数据"""

    id: str
    title: str
    order: int
    duration: float


class ChapterResponse(ChapterPublic):
    """章节响应"""

    mime_type: str


class AdminChapterResponse(ChapterResponse):
    """管理端章节响应（含对象存储 key）"""

    object_key: str
