"""
书籍目录服务

提供书籍/章节的查询与管理端增删改。

写入规则：
1. 章节 order 每次保存都按列表位置重新生成（1..n），不信任客户端传入的值
2. total_duration 每次保存都重新计算为章节时长之和
3. 编辑时被移除的章节、被替换的封面，其对象存储文件一并（尽力）删除
"""
import logging
from typing import Optional

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, selectinload

from audioshelf.config import COVER_URL_TTL
from audioshelf.exceptions import NotFoundError, ValidationFailure
from audioshelf.models import Book, Chapter
from audioshelf.schemas import (
    BookCreate,
    BookUpdate,
    BookResponse,
    AdminBookResponse,
    ChapterInput,
)
from audioshelf.services.storage_service import ObjectStorage

logger = logging.getLogger(__name__)


class BookService:
    """书籍目录服务"""

    def __init__(self, db: Session, storage: ObjectStorage):
        """
        初始化书籍服务

        Args:
            db: 数据库会话
            storage: 对象存储服务
        """
        self.db = db
        self.storage = storage

    # ==================== Queries ====================

    def list_books(self, search: Optional[str] = None) -> list[Book]:
        """
        列出书籍（最新创建的在前），可按标题/作者模糊搜索（不区分大小写）。
        """
        stmt = select(Book).options(selectinload(Book.chapters))
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            stmt = stmt.where(or_(Book.title.ilike(pattern), Book.author.ilike(pattern)))
        stmt = stmt.order_by(Book.created_at.desc(), Book.id)
        return list(self.db.scalars(stmt).all())

    def get_book(self, book_id: str) -> Book:
        """
        获取书籍（含有序章节）。

        Raises:
            NotFoundError: 书籍不存在
        """
        book = self.db.get(Book, book_id)
        if book is None:
            raise NotFoundError(f"Book not found: id={book_id}")
        return book

    def cover_url(self, book: Book) -> Optional[str]:
        """封面的限时读取地址；无封面返回 None"""
        if not book.cover_object_key:
            return None
        return self.storage.presign_read(book.cover_object_key, ttl=COVER_URL_TTL)

    def to_response(self, book: Book) -> BookResponse:
        """转换为公开响应（封面 key 换成预签名地址）"""
        response = BookResponse.model_validate(book)
        return response.model_copy(update={"cover_url": self.cover_url(book)})

    def to_admin_response(self, book: Book) -> AdminBookResponse:
        """转换为管理端响应（保留对象 key）"""
        response = AdminBookResponse.model_validate(book)
        return response.model_copy(update={"cover_url": self.cover_url(book)})

    # ==================== Admin Writes ====================

    def create_book(self, data: BookCreate) -> Book:
        """
        创建书籍及其章节。

        章节 order 取列表位置（从 1 开始）。
        """
        book = Book(
            title=data.title,
            author=data.author,
            description=data.description,
            cover_object_key=data.cover_object_key,
        )
        for position, item in enumerate(data.chapters, start=1):
            book.chapters.append(self._new_chapter(item, position))
        book.recompute_total_duration()

        self.db.add(book)
        self.db.flush()

        logger.info(
            f"[BookService] Created book {book.id} '{book.title}' "
            f"with {len(book.chapters)} chapters"
        )
        return book

    def update_book(self, book_id: str, data: BookUpdate) -> Book:
        """
        整体更新书籍（PUT 语义）。

        - 带 id 的章节原地更新（id 保持不变）
        - 不带 id 的章节为新章节
        - 原有但不在列表中的章节被删除，其音频对象尽力删除

        Raises:
            NotFoundError: 书籍不存在
            ValidationFailure: 章节 id 不属于该书或重复
        """
        book = self.get_book(book_id)
        existing = {chapter.id: chapter for chapter in book.chapters}

        kept_ids = [item.id for item in data.chapters if item.id]
        for chapter_id in kept_ids:
            if chapter_id not in existing:
                raise ValidationFailure(
                    f"Chapter does not belong to book: chapter_id={chapter_id}, book_id={book_id}"
                )
        if len(set(kept_ids)) != len(kept_ids):
            raise ValidationFailure("Duplicate chapter id in chapter list")

        stale_keys: list[str] = []

        # Phase 1: drop removed chapters and park kept ones on negative orders,
        # so (book_id, order) never sees a transient duplicate.
        for chapter in list(book.chapters):
            if chapter.id not in kept_ids:
                stale_keys.append(chapter.object_key)
                book.chapters.remove(chapter)
        for index, chapter_id in enumerate(kept_ids, start=1):
            existing[chapter_id].order = -index
        self.db.flush()

        # Phase 2: final orders from list position
        new_chapters = []
        for position, item in enumerate(data.chapters, start=1):
            if item.id:
                chapter = existing[item.id]
                if chapter.object_key != item.object_key:
                    stale_keys.append(chapter.object_key)
                chapter.title = item.title
                chapter.object_key = item.object_key
                chapter.mime_type = item.mime_type
                chapter.duration = item.duration
                chapter.order = position
            else:
                new_chapters.append(self._new_chapter(item, position))
        self.db.flush()

        for chapter in new_chapters:
            book.chapters.append(chapter)

        if book.cover_object_key and book.cover_object_key != data.cover_object_key:
            stale_keys.append(book.cover_object_key)

        book.title = data.title
        book.author = data.author
        book.description = data.description
        book.cover_object_key = data.cover_object_key
        self.db.flush()

        # Reload so the collection reflects the new order
        self.db.expire(book, ["chapters"])
        book.recompute_total_duration()
        self.db.flush()

        for key in stale_keys:
            self.storage.delete(key)

        logger.info(
            f"[BookService] Updated book {book.id}: {len(book.chapters)} chapters, "
            f"{len(stale_keys)} stale objects"
        )
        return book

    def delete_book(self, book_id: str) -> None:
        """
        删除书籍。

        先尽力删除所有章节音频和封面对象，再删除书籍记录
        （章节与播放进度由外键级联删除）。

        Raises:
            NotFoundError: 书籍不存在
        """
        book = self.get_book(book_id)

        keys = [chapter.object_key for chapter in book.chapters]
        if book.cover_object_key:
            keys.append(book.cover_object_key)

        failed = [key for key in keys if not self.storage.delete(key)]
        if failed:
            logger.warning(
                f"[BookService] {len(failed)} objects of book {book_id} could not be deleted"
            )

        self.db.delete(book)
        self.db.flush()
        logger.info(f"[BookService] Deleted book {book_id}")

    @staticmethod
    def _new_chapter(item: ChapterInput, position: int) -> Chapter:
        return Chapter(
            title=item.title,
            order=position,
            object_key=item.object_key,
            mime_type=item.mime_type,
            duration=item.duration,
        )
