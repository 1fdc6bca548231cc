"""
Models Module

Exports all ORM models for the AudioShelf application.
"""

from audioshelf.models.base import Base, TimestampMixin

from audioshelf.models.book import Book
from audioshelf.models.chapter import Chapter
from audioshelf.models.playback_progress import PlaybackProgress

__all__ = [
    "Base",
    "TimestampMixin",
    "Book",
    "Chapter",
    "PlaybackProgress",
]
