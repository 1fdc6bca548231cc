"""
Progress Persister

Writes the listener's position to the progress store:

- every `interval` seconds while playing
- immediately on pause
- before a chapter or book is abandoned (new request, close)
- on end of book, as completed at the chapter's full duration

Each save is a snapshot of (book, chapter, position) taken synchronously
when it fires. Snapshots are sent in order by a single worker; a failed
save is logged and dropped, the next tick carries a fresh position.
"""
import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from loguru import logger

from audioshelf.config import PLAYER_SAVE_INTERVAL
from audioshelf.enums import PlayerPhase
from audioshelf.exceptions import AudioShelfError
from audioshelf.player.api_client import AudioShelfClient
from audioshelf.player.engine import AudioEngine
from audioshelf.player.state import PlayerState
from audioshelf.player.store import PlayerStore
from audioshelf.schemas import ProgressUpdate


@dataclass
class _LoadedChapter:
    book_id: str
    chapter_id: str
    duration: float
    completed: bool = False


@dataclass(frozen=True)
class ProgressSnapshot:
    book_id: str
    chapter_id: str
    position: float
    completed: bool = False


class ProgressPersister:
    """Cadence and event driven progress writer."""

    def __init__(
        self,
        store: PlayerStore,
        client: AudioShelfClient,
        engine: AudioEngine,
        session_id: str,
        interval: float = PLAYER_SAVE_INTERVAL,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.store = store
        self.client = client
        self.engine = engine
        self.session_id = session_id
        self.interval = interval
        self._sleep = sleep
        self._loaded: Optional[_LoadedChapter] = None
        self._queue: asyncio.Queue = asyncio.Queue()
        self._worker: Optional[asyncio.Task] = None
        self._cadence: Optional[asyncio.Task] = None

    # ==================== Store Subscription ====================

    def on_state_change(self, previous: PlayerState, current: PlayerState) -> None:
        # Abandonment: a new request (or close) while a chapter is attached.
        # The engine still holds the old chapter at this point.
        if current.request_seq != previous.request_seq and self._loaded is not None:
            self._save_loaded(self.engine.position)
            if current.loaded_chapter is None:
                self._loaded = None

        if current.loaded_chapter is not None and current.loaded_chapter is not previous.loaded_chapter:
            self._loaded = _LoadedChapter(
                book_id=current.book.id,
                chapter_id=current.loaded_chapter.id,
                duration=current.loaded_chapter.duration,
            )

        if previous.finished and not current.finished and self._loaded is not None:
            # Re-listening the finished chapter: regular saves again
            self._loaded.completed = False

        if current.finished and not previous.finished and self._loaded is not None:
            self._loaded.completed = True
            self._save_loaded(self._loaded.duration)
        elif (
            previous.phase == PlayerPhase.LOADED_PLAYING
            and current.phase == PlayerPhase.LOADED_PAUSED
            and current.request_seq == previous.request_seq
        ):
            self._save_loaded(self.engine.position)

        if current.phase == PlayerPhase.LOADED_PLAYING:
            self._start_cadence()
        else:
            self._stop_cadence()

    # ==================== Saving ====================

    def tick(self) -> None:
        """One cadence save of the playing chapter."""
        if self.store.state.phase == PlayerPhase.LOADED_PLAYING:
            self._save_loaded(self.engine.position)

    def _save_loaded(self, position: float) -> None:
        loaded = self._loaded
        if loaded is None:
            return
        if loaded.completed:
            position = loaded.duration
        self.enqueue(
            ProgressSnapshot(
                book_id=loaded.book_id,
                chapter_id=loaded.chapter_id,
                position=max(0.0, position),
                completed=loaded.completed,
            )
        )

    def enqueue(self, snapshot: ProgressSnapshot) -> None:
        """Queue a save; never blocks the caller."""
        self._queue.put_nowait(snapshot)
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._run_worker())

    async def _run_worker(self) -> None:
        while True:
            snapshot = await self._queue.get()
            try:
                await self.client.save_progress(
                    snapshot.book_id,
                    ProgressUpdate(
                        session_id=self.session_id,
                        chapter_id=snapshot.chapter_id,
                        position=snapshot.position,
                        completed=snapshot.completed,
                    ),
                )
            except AudioShelfError as e:
                logger.warning(
                    f"Progress save dropped for book {snapshot.book_id} "
                    f"chapter {snapshot.chapter_id}: {e}"
                )
            finally:
                self._queue.task_done()

    async def drain(self) -> None:
        """Wait until every queued save has been attempted."""
        await self._queue.join()

    # ==================== Cadence ====================

    def _start_cadence(self) -> None:
        if self._cadence is None or self._cadence.done():
            self._cadence = asyncio.get_running_loop().create_task(self._run_cadence())

    def _stop_cadence(self) -> None:
        if self._cadence is not None:
            self._cadence.cancel()
            self._cadence = None

    async def _run_cadence(self) -> None:
        while True:
            await self._sleep(self.interval)
            self.tick()

    async def aclose(self) -> None:
        """Flush pending saves and stop background tasks."""
        self._stop_cadence()
        await self.drain()
        if self._worker is not None:
            self._worker.cancel()
            self._worker = None
