"""
播放进度服务

按 (session_id, book_id) 存取播放进度。last-write-wins：每次保存整体覆盖
记录中的可变字段，没有冲突检测。
"""
import logging

from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from audioshelf.exceptions import NotFoundError, UpstreamFailure
from audioshelf.models import Book, PlaybackProgress
from audioshelf.models.base import utcnow
from audioshelf.schemas import ProgressResponse, ProgressUpdate

logger = logging.getLogger(__name__)


class ProgressService:
    """播放进度服务"""

    def __init__(self, db: Session):
        """
        初始化播放进度服务

        Args:
            db: 数据库会话
        """
        self.db = db

    def get(self, session_id: str, book_id: str) -> ProgressResponse:
        """
        获取播放进度。

        无记录时返回零值（None, 0, False），不视为错误。

        Raises:
            UpstreamFailure: 数据库访问失败
        """
        try:
            record = self.db.get(PlaybackProgress, (session_id, book_id))
        except SQLAlchemyError as e:
            logger.error(f"[ProgressService] Failed to read progress {session_id}/{book_id}: {e}")
            raise UpstreamFailure("Progress store unavailable") from e

        if record is None:
            return ProgressResponse()
        return ProgressResponse.model_validate(record)

    def upsert(self, book_id: str, update: ProgressUpdate) -> ProgressResponse:
        """
        保存播放进度（不存在则插入，存在则整体覆盖）。

        使用 SQLite 的 INSERT ... ON CONFLICT DO UPDATE，
        同一载荷重复保存结果不变。

        Raises:
            NotFoundError: 书籍不存在
            UpstreamFailure: 数据库写入失败
        """
        try:
            if self.db.get(Book, book_id) is None:
                raise NotFoundError(f"Book not found: id={book_id}")

            now = utcnow()
            stmt = sqlite_insert(PlaybackProgress).values(
                session_id=update.session_id,
                book_id=book_id,
                current_chapter_id=update.chapter_id,
                position=update.position,
                completed=update.completed,
                created_at=now,
                updated_at=now,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[PlaybackProgress.session_id, PlaybackProgress.book_id],
                set_={
                    "current_chapter_id": stmt.excluded.current_chapter_id,
                    "position": stmt.excluded.position,
                    "completed": stmt.excluded.completed,
                    "updated_at": stmt.excluded.updated_at,
                },
            )
            self.db.execute(stmt)
            record = self.db.get(
                PlaybackProgress,
                (update.session_id, book_id),
                populate_existing=True,
            )
        except SQLAlchemyError as e:
            logger.error(
                f"[ProgressService] Failed to save progress {update.session_id}/{book_id}: {e}"
            )
            raise UpstreamFailure("Progress store unavailable") from e

        logger.debug(
            f"[ProgressService] Saved {update.session_id}/{book_id}: "
            f"chapter={update.chapter_id} position={update.position:.1f} "
            f"completed={update.completed}"
        )
        return ProgressResponse.model_validate(record)
