"""
Schemas Module

Pydantic schemas for API request/response validation.
"""

from audioshelf.schemas.base import CamelModel
from audioshelf.schemas.chapter import (
    ChapterInput,
    ChapterPublic,
    ChapterResponse,
    AdminChapterResponse,
)
from audioshelf.schemas.book import (
    BookResponse,
    AdminBookResponse,
    AdminBookListItem,
    BookCreate,
    BookUpdate,
)
from audioshelf.schemas.progress import ProgressResponse, ProgressUpdate
from audioshelf.schemas.playback import PlayUrlRequest, PlayUrlResponse
from audioshelf.schemas.admin import (
    AdminLoginRequest,
    UploadUrlRequest,
    UploadUrlResponse,
)

__all__ = [
    "CamelModel",
    "ChapterInput",
    "ChapterPublic",
    "ChapterResponse",
    "AdminChapterResponse",
    "BookResponse",
    "AdminBookResponse",
    "AdminBookListItem",
    "BookCreate",
    "BookUpdate",
    "ProgressResponse",
    "ProgressUpdate",
    "PlayUrlRequest",
    "PlayUrlResponse",
    "AdminLoginRequest",
    "UploadUrlRequest",
    "UploadUrlResponse",
]
