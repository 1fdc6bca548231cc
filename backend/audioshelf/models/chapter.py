"""
Chapter Model

Represents one audio file of a multi-chapter audiobook.
"""
from sqlalchemy import Float, ForeignKey, Integer, String, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from audioshelf.models.base import Base, TimestampMixin, new_id


class Chapter(Base, TimestampMixin):
    """
    Represents a chapter of a Book.

    Attributes:
        id: Primary key (opaque string)
        book_id: Foreign key to Book
        title: Chapter title
        order: 1-based playback position, dense and unique within the book
        object_key: Object storage key of the audio file
        mime_type: Audio MIME type
        duration: Duration in seconds
    """

    __tablename__ = "chapters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    book_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("books.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Foreign key to Book"
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(
        "order",
        Integer,
        nullable=False,
        doc="1-based playback order within the book"
    )

    # Audio object
    object_key: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        doc="Object storage key of the audio file"
    )
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    duration: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        doc="Duration in seconds"
    )

    # Relationships
    book = relationship("Book", back_populates="chapters")

    __table_args__ = (
        UniqueConstraint("book_id", "order", name="_book_chapter_order_uc"),
        Index("idx_book_chapter_order", "book_id", "order"),
    )

    def __repr__(self) -> str:
        return f"<Chapter(id={self.id}, order={self.order}, title='{self.title}')>"
