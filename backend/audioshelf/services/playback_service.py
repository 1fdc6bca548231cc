"""
播放地址服务

把 (book_id, 可选 chapter_id) 解析为章节的限时播放地址及元数据。
地址有效期短（默认 300 秒），每次加载章节都重新签发，不做长期缓存。
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from audioshelf.config import PLAY_URL_TTL
from audioshelf.exceptions import NotFoundError
from audioshelf.models import Book
from audioshelf.schemas import ChapterPublic, PlayUrlResponse
from audioshelf.services.storage_service import ObjectStorage

logger = logging.getLogger(__name__)


class PlayUrlService:
    """播放地址服务"""

    def __init__(self, db: Session, storage: ObjectStorage):
        self.db = db
        self.storage = storage

    def issue(self, book_id: str, chapter_id: Optional[str] = None) -> PlayUrlResponse:
        """
        签发播放地址。

        规则:
        1. 书籍没有章节 -> NotFoundError
        2. 指定 chapter_id 时必须属于该书，否则 NotFoundError
        3. 未指定时取 order 最小的章节

        Args:
            book_id: 书籍 ID
            chapter_id: 章节 ID（可选）

        Returns:
            PlayUrlResponse: 播放地址、MIME 类型、章节元数据、章节总数

        Raises:
            NotFoundError: 书籍/章节不存在或书籍无章节
            UpstreamFailure: 对象存储签名失败
        """
        book = self.db.get(Book, book_id)
        if book is None:
            raise NotFoundError(f"Book not found: id={book_id}")

        chapters = list(book.chapters)
        if not chapters:
            raise NotFoundError(f"Book has no chapters: id={book_id}")

        if chapter_id:
            chapter = next((c for c in chapters if c.id == chapter_id), None)
            if chapter is None:
                raise NotFoundError(f"Chapter not found: id={chapter_id}")
        else:
            chapter = min(chapters, key=lambda c: c.order)

        play_url = self.storage.presign_read(chapter.object_key, ttl=PLAY_URL_TTL)
        logger.debug(f"[PlayUrlService] Issued play url for {book_id}/{chapter.id}")

        return PlayUrlResponse(
            play_url=play_url,
            mime_type=chapter.mime_type,
            chapter=ChapterPublic.model_validate(chapter),
            total_chapters=len(chapters),
        )
