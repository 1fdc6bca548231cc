"""
Chapter Transition Controller

Turns requested state into a loaded stream: fetches play URLs, discards
results of superseded requests, commits the loaded chapter back into the
store, and handles order-based next/previous and end of book.
"""
import asyncio
from typing import Optional

from loguru import logger

from audioshelf.config import PLAYER_SKIP_BACK_THRESHOLD
from audioshelf.exceptions import AudioShelfError, StaleRequestError
from audioshelf.player.api_client import AudioShelfClient
from audioshelf.player.engine import AudioEngine
from audioshelf.player.state import (
    ChapterLoaded,
    PlaybackFinished,
    PlayChapter,
    PlayerState,
    RequestFailed,
)
from audioshelf.player.store import PlayerStore

# (book_id, chapter_id, request_seq)
LoadKey = tuple[str, str, int]


class ChapterTransitionController:
    """Owns the engine source and every chapter load."""

    def __init__(
        self,
        store: PlayerStore,
        client: AudioShelfClient,
        engine: AudioEngine,
        skip_back_threshold: float = PLAYER_SKIP_BACK_THRESHOLD,
    ):
        self.store = store
        self.client = client
        self.engine = engine
        self.skip_back_threshold = skip_back_threshold
        self._active: Optional[LoadKey] = None
        self._tasks: set[asyncio.Task] = set()

    # ==================== Store Subscription ====================

    def on_state_change(self, previous: PlayerState, current: PlayerState) -> None:
        previous_book = previous.book.id if previous.book else None
        current_book = current.book.id if current.book else None

        if previous_book is not None and previous_book != current_book:
            # Book switch or close: the old stream goes away now
            self._active = None
            if previous.loaded_chapter is not None:
                self.engine.stop()

        if current.loading and current.requested_chapter_id is not None:
            key = (current_book, current.requested_chapter_id, current.request_seq)
            if key != self._active:
                self._active = key
                self._spawn(self._load(key))
            return

        self._reconcile(current)

    def _reconcile(self, state: PlayerState) -> None:
        """Drive the engine towards the playing intent."""
        if not state.is_loaded:
            return
        if state.is_playing and self.engine.paused:
            self.engine.play()
        elif not state.is_playing and not self.engine.paused:
            self.engine.pause()

    # ==================== Loading ====================

    def _spawn(self, coro) -> None:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _ensure_current(self, key: LoadKey) -> None:
        if self._active != key:
            raise StaleRequestError(f"load {key} superseded by {self._active}")

    async def _load(self, key: LoadKey) -> None:
        try:
            await self._apply_load(key)
        except StaleRequestError as e:
            logger.debug(f"Discarding stale load result: {e}")

    async def _apply_load(self, key: LoadKey) -> None:
        book_id, chapter_id, seq = key
        try:
            result = await self.client.get_play_url(book_id, chapter_id)
        except AudioShelfError as e:
            self._ensure_current(key)
            logger.warning(f"Failed to load chapter {chapter_id} of book {book_id}: {e}")
            loaded = self.store.state.loaded_chapter
            self._active = (book_id, loaded.id, seq) if loaded else None
            self.store.dispatch(RequestFailed(seq, str(e)))
            return

        self._ensure_current(key)

        start = self.store.state.initial_position
        self.engine.load(result.play_url, result.mime_type, start_position=start)
        # Sync-back: the resolved chapter becomes the requested one
        self._active = (book_id, result.chapter.id, seq)
        self.store.dispatch(
            ChapterLoaded(seq, book_id, result.chapter, result.total_chapters)
        )

    async def wait_idle(self) -> None:
        """Wait until no chapter load is in flight."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # ==================== Navigation ====================

    def skip_forward(self) -> None:
        """Next chapter by order; past the last one the book is finished."""
        state = self.store.state
        if not state.controls_enabled:
            return
        following = state.chapter_by_order(state.loaded_chapter.order + 1)
        if following is not None:
            self.store.dispatch(PlayChapter(following.id))
        else:
            self._finish(state)

    def handle_chapter_ended(self) -> None:
        self.skip_forward()

    def skip_backward(self) -> None:
        """
        Restart the chapter when more than the threshold has played,
        otherwise go to the previous chapter by order. No-op on the first.
        """
        state = self.store.state
        if not state.controls_enabled:
            return
        if self.engine.position > self.skip_back_threshold:
            self.engine.seek(0.0)
            return
        preceding = state.chapter_by_order(state.loaded_chapter.order - 1)
        if preceding is not None:
            self.store.dispatch(PlayChapter(preceding.id))

    def _finish(self, state: PlayerState) -> None:
        logger.info(f"Finished book {state.book.id} at chapter {state.loaded_chapter.id}")
        self.store.dispatch(PlaybackFinished())
