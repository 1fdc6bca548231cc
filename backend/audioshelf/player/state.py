"""
Playback State Machine

Immutable player state, the actions that change it, and the pure reducer.

The requested chapter and the loaded chapter are separate fields: a request
moves the player to REQUESTED, and only a matching ChapterLoaded result
(same request_seq, same book) commits it as loaded. Results carrying an
older request_seq are ignored.
"""
from dataclasses import dataclass, replace
from typing import Optional

from audioshelf.enums import PlayerPhase
from audioshelf.schemas import BookResponse, ChapterPublic


@dataclass(frozen=True)
class PlayerState:
    """
    Snapshot of the player.

    Attributes:
        book: Current book (None = idle)
        requested_chapter_id: Chapter asked for; None while the resume point is resolving
        loaded_chapter: Chapter whose stream is attached to the engine
        total_chapters: Chapter count reported with the loaded chapter
        initial_position: Seek offset to apply once the requested chapter loads
        is_playing: Playing intent (engine events reconcile it to reality)
        loading: A play-url request is in flight
        finished: The last chapter played to its end
        error: User-visible message of the last failed request
        request_seq: Identity of the latest request; bumped on every new request
    """

    book: Optional[BookResponse] = None
    requested_chapter_id: Optional[str] = None
    loaded_chapter: Optional[ChapterPublic] = None
    total_chapters: int = 0
    initial_position: float = 0.0
    is_playing: bool = False
    loading: bool = False
    finished: bool = False
    error: Optional[str] = None
    request_seq: int = 0

    @property
    def phase(self) -> PlayerPhase:
        if self.book is None:
            return PlayerPhase.IDLE
        if self.loading:
            return PlayerPhase.REQUESTED
        if self.loaded_chapter is None:
            return PlayerPhase.IDLE
        return PlayerPhase.LOADED_PLAYING if self.is_playing else PlayerPhase.LOADED_PAUSED

    @property
    def is_loaded(self) -> bool:
        return self.phase.is_loaded

    @property
    def controls_enabled(self) -> bool:
        """Skip/seek controls are usable only with a resolved stream."""
        return self.is_loaded

    def chapter_by_order(self, order: int) -> Optional[ChapterPublic]:
        """Chapter of the current book with exactly this order value."""
        if self.book is None:
            return None
        return next((c for c in self.book.chapters if c.order == order), None)


# ==================== Actions ====================


@dataclass(frozen=True)
class PlayBook:
    """Open a book. Without chapter_id the resume point is resolved first."""

    book: BookResponse
    chapter_id: Optional[str] = None


@dataclass(frozen=True)
class ResumeResolved:
    seq: int
    chapter_id: str
    position: float


@dataclass(frozen=True)
class PlayChapter:
    """Switch to an explicit chapter of the current book, from 0."""

    chapter_id: str


@dataclass(frozen=True)
class TogglePlayPause:
    pass


@dataclass(frozen=True)
class SetPlaying:
    """Engine-originated play/pause."""

    playing: bool


@dataclass(frozen=True)
class ClosePlayer:
    pass


@dataclass(frozen=True)
class ChapterLoaded:
    seq: int
    book_id: str
    chapter: ChapterPublic
    total_chapters: int


@dataclass(frozen=True)
class RequestFailed:
    seq: int
    message: str


@dataclass(frozen=True)
class PlaybackFinished:
    pass


# ==================== Reducer ====================


def _new_request(state: PlayerState, **changes) -> PlayerState:
    return replace(
        state,
        loading=True,
        is_playing=True,
        finished=False,
        error=None,
        request_seq=state.request_seq + 1,
        **changes,
    )


def reduce(state: PlayerState, action) -> PlayerState:
    """
    Apply an action. Returns the same object when the action changes nothing,
    which includes every stale result.
    """
    if isinstance(action, PlayBook):
        same_book = state.book is not None and state.book.id == action.book.id
        return _new_request(
            state,
            book=action.book,
            requested_chapter_id=action.chapter_id,
            initial_position=0.0,
            # Switching books detaches the previous stream
            loaded_chapter=state.loaded_chapter if same_book else None,
            total_chapters=state.total_chapters if same_book else 0,
        )

    if isinstance(action, ResumeResolved):
        if action.seq != state.request_seq or not state.loading:
            return state
        return replace(
            state,
            requested_chapter_id=action.chapter_id,
            initial_position=max(0.0, action.position),
        )

    if isinstance(action, PlayChapter):
        if state.book is None:
            return state
        return _new_request(
            state,
            requested_chapter_id=action.chapter_id,
            initial_position=0.0,
        )

    if isinstance(action, TogglePlayPause):
        if state.book is None:
            return state
        playing = not state.is_playing
        # Playing again after the end starts a re-listen
        return replace(state, is_playing=playing, finished=state.finished and not playing)

    if isinstance(action, SetPlaying):
        if state.book is None or state.is_playing == action.playing:
            return state
        return replace(state, is_playing=action.playing, finished=state.finished and not action.playing)

    if isinstance(action, ClosePlayer):
        if state.book is None:
            return state
        return PlayerState(request_seq=state.request_seq + 1)

    if isinstance(action, ChapterLoaded):
        if (
            action.seq != state.request_seq
            or state.book is None
            or state.book.id != action.book_id
        ):
            return state
        return replace(
            state,
            loaded_chapter=action.chapter,
            requested_chapter_id=action.chapter.id,
            total_chapters=action.total_chapters,
            loading=False,
        )

    if isinstance(action, RequestFailed):
        if action.seq != state.request_seq or not state.loading:
            return state
        loaded = state.loaded_chapter
        return replace(
            state,
            loading=False,
            error=action.message,
            requested_chapter_id=loaded.id if loaded else None,
            is_playing=state.is_playing if loaded else False,
        )

    if isinstance(action, PlaybackFinished):
        if not state.is_loaded:
            return state
        return replace(state, is_playing=False, finished=True)

    raise TypeError(f"Unknown player action: {action!r}")
