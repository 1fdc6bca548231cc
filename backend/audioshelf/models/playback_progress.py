"""
PlaybackProgress Model

Per-(session, book) resume point. Sessions are anonymous client tokens.
"""
from sqlalchemy import Boolean, Float, ForeignKey, String, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from audioshelf.models.base import Base, TimestampMixin


class PlaybackProgress(Base, TimestampMixin):
    """
    Represents the resume point of one listening session for one book.

    At most one record exists per (session_id, book_id). Records are
    upserted on every save and only removed when the Book is deleted.

    Attributes:
        session_id: Anonymous client-generated session token
        book_id: Foreign key to Book
        current_chapter_id: Chapter being listened to (NULL = not started)
        position: Seconds into the current chapter
        completed: True once the last chapter has been played to its end
    """

    __tablename__ = "playback_progress"

    session_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    book_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("books.id", ondelete="CASCADE"),
        primary_key=True,
        doc="Foreign key to Book"
    )

    # No FK: a chapter deleted by an edit leaves a dangling id that the
    # resume resolver treats as "start from the first chapter".
    current_chapter_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    position: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    book = relationship("Book", back_populates="progress_records")

    __table_args__ = (
        Index("idx_progress_book", "book_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<PlaybackProgress(session_id={self.session_id}, book_id={self.book_id}, "
            f"chapter={self.current_chapter_id}, position={self.position})>"
        )
