"""
Book Schemas

Pydantic models for Book API request/response validation.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from audioshelf.schemas.base import CamelModel
from audioshelf.schemas.chapter import ChapterInput, ChapterResponse, AdminChapterResponse


class BookResponse(CamelModel):
    """书籍响应"""

    id: str
    title: str
    author: str
    description: Optional[str] = None
    cover_url: Optional[str] = None
    total_duration: float
    created_at: datetime
    chapters: list[ChapterResponse] = []


class AdminBookResponse(CamelModel):
    """管理端书籍详情"""

    id: str
    title: str
    author: str
    description: Optional[str] = None
    cover_object_key: Optional[str] = None
    cover_url: Optional[str] = None
    total_duration: float
    created_at: datetime
    chapters: list[AdminChapterResponse] = []


class AdminBookListItem(CamelModel):
    """管理端书籍列表项"""

    id: str
    title: str


class BookCreate(CamelModel):
    """创建书籍请求"""

    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    cover_object_key: Optional[str] = None
    chapters: list[ChapterInput] = Field(..., min_length=1)


class BookUpdate(BookCreate):
    """更新书籍请求（PUT，整体替换）"""
