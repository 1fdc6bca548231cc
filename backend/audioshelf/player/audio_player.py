"""
Audio Player

Facade that wires the store, the progress persister, the chapter
transition controller and the engine. The persister is subscribed before
the controller so abandonment saves read the engine before its source is
replaced or stopped.
"""
import asyncio
from typing import Awaitable, Callable, Optional

from loguru import logger

from audioshelf.config import (
    PLAYER_SAVE_INTERVAL,
    PLAYER_SEEK_STEP,
    PLAYER_SKIP_BACK_THRESHOLD,
)
from audioshelf.exceptions import AudioShelfError
from audioshelf.player.api_client import AudioShelfClient
from audioshelf.player.controller import ChapterTransitionController
from audioshelf.player.engine import AudioEngine, EngineListener
from audioshelf.player.persister import ProgressPersister
from audioshelf.player.resume import ResumeResolver
from audioshelf.player.state import (
    ClosePlayer,
    PlayBook,
    PlayChapter,
    PlayerState,
    RequestFailed,
    ResumeResolved,
    SetPlaying,
    TogglePlayPause,
)
from audioshelf.player.store import PlayerStore
from audioshelf.schemas import BookResponse


class AudioPlayer(EngineListener):
    """
    Player entry point.

    Usage:
        async with AudioShelfClient() as client:
            player = AudioPlayer(client, engine, SessionIdStore().get())
            await player.play_book(book)
            ...
            await player.shutdown()
    """

    def __init__(
        self,
        client: AudioShelfClient,
        engine: AudioEngine,
        session_id: str,
        save_interval: float = PLAYER_SAVE_INTERVAL,
        skip_back_threshold: float = PLAYER_SKIP_BACK_THRESHOLD,
        seek_step: float = PLAYER_SEEK_STEP,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.engine = engine
        self.seek_step = seek_step
        self.store = PlayerStore()
        self.resolver = ResumeResolver(client, session_id)
        self.persister = ProgressPersister(
            self.store, client, engine, session_id,
            interval=save_interval, sleep=sleep,
        )
        self.controller = ChapterTransitionController(
            self.store, client, engine,
            skip_back_threshold=skip_back_threshold,
        )
        self.store.subscribe(self.persister.on_state_change)
        self.store.subscribe(self.controller.on_state_change)
        engine.attach(self)

    @property
    def state(self) -> PlayerState:
        return self.store.state

    @property
    def controls_enabled(self) -> bool:
        return self.store.state.controls_enabled

    # ==================== Intents ====================

    async def play_book(self, book: BookResponse, chapter_id: Optional[str] = None) -> None:
        """
        Open a book. Without chapter_id playback resumes from the saved
        progress of this session (or the first chapter).
        """
        self.store.dispatch(PlayBook(book, chapter_id))
        if chapter_id is not None:
            return

        seq = self.store.state.request_seq
        # Reopening the playing book: its abandonment save must land before progress is read
        await self.persister.drain()
        try:
            point = await self.resolver.resolve(book)
        except AudioShelfError as e:
            logger.warning(f"Could not resolve resume point for book {book.id}: {e}")
            self.store.dispatch(RequestFailed(seq, str(e)))
            return

        if point.chapter_id is None:
            self.store.dispatch(RequestFailed(seq, f"Book has no chapters: {book.title}"))
            return
        self.store.dispatch(ResumeResolved(seq, point.chapter_id, point.position))

    def play_chapter(self, chapter_id: str) -> None:
        self.store.dispatch(PlayChapter(chapter_id))

    def toggle_play_pause(self) -> None:
        self.store.dispatch(TogglePlayPause())

    def close(self) -> None:
        self.store.dispatch(ClosePlayer())

    def skip_forward(self) -> None:
        self.controller.skip_forward()

    def skip_backward(self) -> None:
        self.controller.skip_backward()

    def seek(self, position: float) -> None:
        """Jump to an absolute offset, clamped to the loaded chapter."""
        state = self.store.state
        if not state.controls_enabled:
            return
        duration = state.loaded_chapter.duration
        self.engine.seek(min(max(0.0, position), duration))

    def seek_by(self, offset: float) -> None:
        """Relative jump, e.g. lock-screen style +/- seek_step."""
        self.seek(self.engine.position + offset)

    def seek_forward(self) -> None:
        self.seek_by(self.seek_step)

    def seek_backward(self) -> None:
        self.seek_by(-self.seek_step)

    # ==================== Engine Events ====================

    def on_engine_play(self) -> None:
        self.store.dispatch(SetPlaying(True))

    def on_engine_pause(self) -> None:
        self.store.dispatch(SetPlaying(False))

    def on_engine_ended(self) -> None:
        self.controller.handle_chapter_ended()

    # ==================== Lifecycle ====================

    async def wait_idle(self) -> None:
        """Wait for in-flight chapter loads and queued saves."""
        await self.controller.wait_idle()
        await self.persister.drain()

    async def shutdown(self) -> None:
        """Close the player, saving the current position first."""
        self.close()
        await self.controller.wait_idle()
        await self.persister.aclose()
