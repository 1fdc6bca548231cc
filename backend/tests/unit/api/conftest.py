"""
API Tests Fixtures

Shared fixtures for API unit tests.
"""
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from audioshelf import config
from audioshelf.main import app
from audioshelf.database import get_db
from audioshelf.api.dependencies import get_storage
from audioshelf.models import Book, Chapter


API = "/api"


# ==================== Test Client Override ====================


@pytest.fixture(autouse=True)
def override_dependencies(test_session, storage):
    """Automatically route the database and object storage to test doubles"""
    app.dependency_overrides[get_db] = lambda: test_session
    app.dependency_overrides[get_storage] = lambda: storage
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_dependencies) -> Generator[TestClient, None, None]:
    """
    FastAPI test client with database and storage overrides.

    Startup hooks are not run, so no log files or tables are created on disk.
    """
    yield TestClient(app)


@pytest.fixture
def admin_headers() -> dict:
    return {"Authorization": f"Bearer {config.ADMIN_PASSWORD}"}


# ==================== Test Data Fixtures ====================


@pytest.fixture
def sample_book(test_session) -> Book:
    """Create a Book with three chapters (100s, 200s, 300s)"""
    book = Book(
        title="Pride and Prejudice",
        author="Jane Austen",
        description="A novel of manners.",
        cover_object_key="covers/pride.jpg",
    )
    for order in (1, 2, 3):
        book.chapters.append(
            Chapter(
                title=f"Chapter {order}",
                order=order,
                object_key=f"audio/pride-{order}.mp3",
                mime_type="audio/mpeg",
                duration=100.0 * order,
            )
        )
    book.recompute_total_duration()
    test_session.add(book)
    test_session.commit()
    test_session.refresh(book)
    return book


@pytest.fixture
def book_create_request() -> dict:
    """Sample admin create request (camelCase, as sent by the admin UI)"""
    return {
        "title": "Persuasion",
        "author": "Jane Austen",
        "coverObjectKey": "covers/persuasion.jpg",
        "chapters": [
            {"title": "One", "objectKey": "audio/p-1.mp3", "mimeType": "audio/mpeg", "duration": 61.5, "order": 4},
            {"title": "Two", "objectKey": "audio/p-2.mp3", "mimeType": "audio/mpeg", "duration": 38.5, "order": 9},
        ],
    }
