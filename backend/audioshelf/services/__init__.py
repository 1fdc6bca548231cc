"""
Services Module

Business logic for the catalogue, playback URLs, progress and object storage.
"""

from audioshelf.services.storage_service import ObjectStorage, generate_object_key
from audioshelf.services.book_service import BookService
from audioshelf.services.playback_service import PlayUrlService
from audioshelf.services.progress_service import ProgressService

__all__ = [
    "ObjectStorage",
    "generate_object_key",
    "BookService",
    "PlayUrlService",
    "ProgressService",
]
