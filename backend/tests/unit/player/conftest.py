"""
Player Tests Fixtures

In-memory API double, a manually driven sleep for the save cadence, and
book builders.
"""
import asyncio
from datetime import datetime

import pytest

from audioshelf.exceptions import NotFoundError, UpstreamFailure
from audioshelf.player import AudioPlayer
from audioshelf.schemas import (
    BookResponse,
    ChapterPublic,
    ChapterResponse,
    PlayUrlResponse,
    ProgressResponse,
)


SESSION_ID = "session-under-test"


def make_book(book_id: str = "book-1", durations=(100.0, 200.0, 300.0), orders=None) -> BookResponse:
    """
    Build a BookResponse with chapters "{book_id}-c{order}".

    `orders` lists the order value of each chapter in array position, so
    array position and order can be made to disagree.
    """
    orders = orders or list(range(1, len(durations) + 1))
    chapters = [
        ChapterResponse(
            id=f"{book_id}-c{order}",
            title=f"Chapter {order}",
            order=order,
            duration=duration,
            mime_type="audio/mpeg",
        )
        for order, duration in zip(orders, durations)
    ]
    return BookResponse(
        id=book_id,
        title=f"Title of {book_id}",
        author="Author",
        total_duration=sum(durations),
        created_at=datetime(2024, 1, 1),
        chapters=chapters,
    )


class FakeApi:
    """
    Stand-in for AudioShelfClient.

    gates: chapter id -> asyncio.Event; get_play_url waits on it first
    failing_chapters: chapter ids whose play url request fails upstream
    """

    def __init__(self, *books: BookResponse):
        self.books = {book.id: book for book in books}
        self.progress = {}
        self.saves = []
        self.play_url_requests = []
        self.gates = {}
        self.failing_chapters = set()
        self.progress_error = None
        self.save_error = None

    def add_book(self, book: BookResponse):
        self.books[book.id] = book

    async def get_play_url(self, book_id, chapter_id=None):
        self.play_url_requests.append((book_id, chapter_id))
        if chapter_id in self.gates:
            await self.gates[chapter_id].wait()
        if chapter_id in self.failing_chapters:
            raise UpstreamFailure(f"storage down for {chapter_id}")
        book = self.books[book_id]
        chapter = next((c for c in book.chapters if c.id == chapter_id), None)
        if chapter is None:
            raise NotFoundError(f"Chapter not found: id={chapter_id}")
        return PlayUrlResponse(
            play_url=f"https://storage.test/{chapter.id}.mp3",
            mime_type=chapter.mime_type,
            chapter=ChapterPublic(
                id=chapter.id,
                title=chapter.title,
                order=chapter.order,
                duration=chapter.duration,
            ),
            total_chapters=len(book.chapters),
        )

    async def get_progress(self, book_id, session_id):
        if self.progress_error:
            raise self.progress_error
        return self.progress.get((session_id, book_id), ProgressResponse())

    async def save_progress(self, book_id, update):
        if self.save_error:
            raise self.save_error
        self.saves.append((book_id, update.chapter_id, update.position, update.completed))
        record = ProgressResponse(
            current_chapter_id=update.chapter_id,
            position=update.position,
            completed=update.completed,
        )
        self.progress[(update.session_id, book_id)] = record
        return record

    def saved_progress(self, book_id, session_id=SESSION_ID):
        return self.progress.get((session_id, book_id))


class ManualSleep:
    """Replacement for asyncio.sleep that only returns when released."""

    def __init__(self):
        self.intervals = []
        self._waiters = []

    async def __call__(self, seconds):
        self.intervals.append(seconds)
        waiter = asyncio.get_running_loop().create_future()
        self._waiters.append(waiter)
        await waiter

    @property
    def pending(self) -> int:
        return len([w for w in self._waiters if not w.done()])

    async def release(self):
        """Let every pending sleep return, then run the woken tasks."""
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)
        await run_pending()


async def run_pending(rounds: int = 10):
    """Give queued callbacks and tasks a chance to run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def book_factory():
    """Factory building BookResponse objects (see make_book)."""
    return make_book


@pytest.fixture
def settle():
    """Awaitable that lets pending tasks run."""
    return run_pending


@pytest.fixture
def book() -> BookResponse:
    return make_book()


@pytest.fixture
def api(book) -> FakeApi:
    return FakeApi(book)


@pytest.fixture
def manual_sleep() -> ManualSleep:
    return ManualSleep()


@pytest.fixture
def session_id() -> str:
    return SESSION_ID


@pytest.fixture
def player(api, fake_engine, manual_sleep) -> AudioPlayer:
    return AudioPlayer(
        api,
        fake_engine,
        SESSION_ID,
        save_interval=5.0,
        skip_back_threshold=3.0,
        seek_step=10.0,
        sleep=manual_sleep,
    )
