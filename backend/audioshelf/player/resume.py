"""
Resume Resolver

Decides where playback starts when a book is opened without an explicit
chapter. Runs once per open, not on chapter changes within the book.
"""
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from audioshelf.exceptions import UpstreamFailure
from audioshelf.player.api_client import AudioShelfClient
from audioshelf.schemas import BookResponse


@dataclass(frozen=True)
class ResumePoint:
    chapter_id: Optional[str]
    position: float = 0.0


def first_chapter_id(book: BookResponse) -> Optional[str]:
    """Id of the lowest-order chapter, None for an empty book."""
    if not book.chapters:
        return None
    return min(book.chapters, key=lambda c: c.order).id


class ResumeResolver:
    """
    Resume rules:
    1. Saved record, not completed, chapter still in the book -> that chapter at its position
    2. Anything else (no record, completed, chapter deleted) -> first chapter at 0
    """

    def __init__(self, client: AudioShelfClient, session_id: str):
        self.client = client
        self.session_id = session_id

    async def resolve(self, book: BookResponse) -> ResumePoint:
        start = ResumePoint(first_chapter_id(book), 0.0)

        try:
            progress = await self.client.get_progress(book.id, self.session_id)
        except UpstreamFailure as e:
            logger.warning(f"Progress unavailable for book {book.id}, starting from the beginning: {e}")
            return start

        if progress.completed or not progress.current_chapter_id:
            return start

        if not any(c.id == progress.current_chapter_id for c in book.chapters):
            logger.info(
                f"Saved chapter {progress.current_chapter_id} no longer in book {book.id}, "
                "starting from the first chapter"
            )
            return start

        return ResumePoint(progress.current_chapter_id, max(0.0, progress.position))
