"""
Book Model

Represents an audiobook: metadata plus an ordered list of chapters.
"""
from sqlalchemy import Float, String, Text, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from audioshelf.models.base import Base, TimestampMixin, new_id


class Book(Base, TimestampMixin):
    """
    Represents an audiobook.

    Attributes:
        id: Primary key (opaque string)
        title: Book title
        author: Author name
        description: Optional blurb
        cover_object_key: Object storage key of the cover image (nullable)
        total_duration: Sum of chapter durations in seconds, recomputed on every write
    """

    __tablename__ = "books"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    author: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    cover_object_key: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        doc="Object storage key of the cover image"
    )

    total_duration: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
        doc="Sum of chapter durations (seconds)"
    )

    # Relationships
    chapters = relationship(
        "Chapter",
        back_populates="book",
        cascade="all, delete-orphan",
        order_by="Chapter.order",
        passive_deletes=True,
    )
    progress_records = relationship(
        "PlaybackProgress",
        back_populates="book",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_books_created_at", "created_at"),
    )

    def recompute_total_duration(self) -> float:
        """Set total_duration to the sum of the current chapter durations."""
        self.total_duration = float(sum(chapter.duration for chapter in self.chapters))
        return self.total_duration

    def __repr__(self) -> str:
        return f"<Book(id={self.id}, title='{self.title}', chapters={len(self.chapters)})>"
