"""
ChapterTransitionController Unit Tests

Loads, stale-result handling, order-based navigation and end of book,
driven through the AudioPlayer facade with a FakeEngine.
"""
import asyncio

import pytest

from audioshelf.enums import PlayerPhase
from audioshelf.exceptions import StaleRequestError
from audioshelf.player import PlayerStore
from audioshelf.player.controller import ChapterTransitionController
from audioshelf.schemas import ProgressResponse


async def start(player, book, chapter_id=None):
    await player.play_book(book, chapter_id)
    await player.wait_idle()


class TestLoading:

    @pytest.mark.asyncio
    async def test_load_applies_offset_and_plays(self, player, book, fake_engine, api, session_id):
        """
        Given: Saved progress at chapter 2, 42.5s
        When: The book is opened
        Then: Chapter 2 is loaded at 42.5s and the engine plays
        """
        api.progress[(session_id, book.id)] = ProgressResponse(
            current_chapter_id="book-1-c2", position=42.5
        )

        await start(player, book)

        assert fake_engine.loads() == [("load", "https://storage.test/book-1-c2.mp3", 42.5)]
        assert fake_engine.calls[-1] == ("play",)
        assert player.state.phase == PlayerPhase.LOADED_PLAYING
        assert api.play_url_requests == [("book-1", "book-1-c2")]

    @pytest.mark.asyncio
    async def test_loading_disables_controls(self, player, book, fake_engine, api, settle):
        api.gates["book-1-c1"] = asyncio.Event()
        await player.play_book(book, "book-1-c1")
        await settle()

        assert player.state.phase == PlayerPhase.REQUESTED
        assert player.controls_enabled is False
        player.skip_forward()
        player.skip_backward()
        player.seek(50.0)
        assert player.state.request_seq == 1
        assert fake_engine.calls == []

        api.gates["book-1-c1"].set()
        await player.wait_idle()
        assert player.controls_enabled is True

    @pytest.mark.asyncio
    async def test_pause_intent_during_loading_is_applied(self, player, book, fake_engine, api, settle):
        api.gates["book-1-c1"] = asyncio.Event()
        await player.play_book(book, "book-1-c1")
        player.toggle_play_pause()

        api.gates["book-1-c1"].set()
        await player.wait_idle()

        assert player.state.phase == PlayerPhase.LOADED_PAUSED
        assert ("play",) not in fake_engine.calls


class TestStaleResults:

    @pytest.mark.asyncio
    async def test_late_result_for_superseded_chapter_is_discarded(
        self, player, book, fake_engine, api, settle
    ):
        """
        Given: A load of chapter 1 still in flight
        When: Chapter 2 is requested and resolves, then chapter 1 resolves
        Then: Chapter 2 stays loaded; chapter 1 never reaches the engine
        """
        api.gates["book-1-c1"] = asyncio.Event()
        await player.play_book(book, "book-1-c1")
        player.play_chapter("book-1-c2")
        await settle()
        assert player.state.loaded_chapter.id == "book-1-c2"

        api.gates["book-1-c1"].set()
        await player.wait_idle()

        assert player.state.loaded_chapter.id == "book-1-c2"
        assert player.state.requested_chapter_id == "book-1-c2"
        assert player.state.initial_position == 0.0
        assert [url for _, url, _ in fake_engine.loads()] == ["https://storage.test/book-1-c2.mp3"]

    @pytest.mark.asyncio
    async def test_earlier_result_for_superseded_chapter_is_discarded(
        self, player, book, fake_engine, api
    ):
        api.gates["book-1-c2"] = asyncio.Event()
        await player.play_book(book, "book-1-c1")
        player.play_chapter("book-1-c2")
        player.play_chapter("book-1-c3")

        api.gates["book-1-c2"].set()
        await player.wait_idle()

        assert player.state.loaded_chapter.id == "book-1-c3"
        assert [url for _, url, _ in fake_engine.loads()] == ["https://storage.test/book-1-c3.mp3"]

    @pytest.mark.asyncio
    async def test_result_after_close_is_discarded(self, player, book, fake_engine, api, settle):
        api.gates["book-1-c1"] = asyncio.Event()
        await player.play_book(book, "book-1-c1")
        player.close()

        api.gates["book-1-c1"].set()
        await player.wait_idle()

        assert player.state.phase == PlayerPhase.IDLE
        assert fake_engine.loads() == []

    @pytest.mark.asyncio
    async def test_superseded_failure_is_not_surfaced(self, player, book, api):
        api.gates["book-1-c1"] = asyncio.Event()
        api.failing_chapters.add("book-1-c1")
        await player.play_book(book, "book-1-c1")
        player.play_chapter("book-1-c2")

        api.gates["book-1-c1"].set()
        await player.wait_idle()

        assert player.state.error is None
        assert player.state.loaded_chapter.id == "book-1-c2"

    def test_superseded_key_raises_stale_request(self, api, fake_engine):
        controller = ChapterTransitionController(PlayerStore(), api, fake_engine)

        with pytest.raises(StaleRequestError):
            controller._ensure_current(("book-1", "book-1-c1", 1))


class TestFailures:

    @pytest.mark.asyncio
    async def test_failed_next_chapter_keeps_current_playback(self, player, book, fake_engine, api):
        """
        Given: Chapter 1 playing
        When: Loading chapter 2 fails upstream
        Then: An error is surfaced and chapter 1 keeps playing
        """
        await start(player, book, "book-1-c1")
        api.failing_chapters.add("book-1-c2")

        player.play_chapter("book-1-c2")
        await player.wait_idle()

        state = player.state
        assert "storage down" in state.error
        assert state.phase == PlayerPhase.LOADED_PLAYING
        assert state.loaded_chapter.id == "book-1-c1"
        assert state.requested_chapter_id == "book-1-c1"
        assert fake_engine.source == "https://storage.test/book-1-c1.mp3"

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, player, book, api):
        await start(player, book, "book-1-c1")
        api.failing_chapters.add("book-1-c2")
        player.play_chapter("book-1-c2")
        await player.wait_idle()

        api.failing_chapters.clear()
        player.play_chapter("book-1-c2")
        await player.wait_idle()

        assert player.state.error is None
        assert player.state.loaded_chapter.id == "book-1-c2"

    @pytest.mark.asyncio
    async def test_failed_first_load_disables_controls(self, player, book, api):
        api.failing_chapters.add("book-1-c1")

        await start(player, book, "book-1-c1")

        assert player.state.error
        assert player.state.is_playing is False
        assert player.controls_enabled is False

    @pytest.mark.asyncio
    async def test_unknown_chapter_is_not_found(self, player, book):
        await start(player, book, "no-such-chapter")

        assert "Chapter not found" in player.state.error


class TestNavigation:

    @pytest.mark.asyncio
    async def test_chapter_end_advances_by_order(self, player, book, fake_engine):
        await start(player, book, "book-1-c1")
        fake_engine.advance(100.0)

        fake_engine.emit_ended()
        await player.wait_idle()

        assert player.state.loaded_chapter.id == "book-1-c2"
        assert player.state.is_playing is True
        assert fake_engine.loads()[-1] == ("load", "https://storage.test/book-1-c2.mp3", 0.0)

    @pytest.mark.asyncio
    async def test_adjacency_uses_order_not_array_position(self, player, api, fake_engine, book_factory):
        """
        Given: Chapters listed as [order 1, order 3, order 2]
        When: Skipping forward from order 1, then back from order 2
        Then: Order 2 follows order 1 and order 1 precedes order 2
        """
        book = book_factory("shuffled", durations=(10.0, 30.0, 20.0), orders=[1, 3, 2])
        api.add_book(book)
        await start(player, book, "shuffled-c1")

        player.skip_forward()
        await player.wait_idle()
        assert player.state.loaded_chapter.order == 2

        player.skip_backward()
        await player.wait_idle()
        assert player.state.loaded_chapter.order == 1

    @pytest.mark.asyncio
    async def test_skip_back_within_threshold_goes_to_previous(self, player, book, fake_engine):
        """Position 2.0s on chapter 2 of 3 -> chapter 1 at 0."""
        await start(player, book, "book-1-c2")
        fake_engine.advance(2.0)

        player.skip_backward()
        await player.wait_idle()

        assert player.state.loaded_chapter.id == "book-1-c1"
        assert fake_engine.loads()[-1] == ("load", "https://storage.test/book-1-c1.mp3", 0.0)

    @pytest.mark.asyncio
    async def test_skip_back_past_threshold_restarts_chapter(self, player, book, fake_engine):
        """Position 10.0s on chapter 2 of 3 -> chapter 2 at 0."""
        await start(player, book, "book-1-c2")
        fake_engine.advance(10.0)
        seq = player.state.request_seq

        player.skip_backward()
        await player.wait_idle()

        assert player.state.loaded_chapter.id == "book-1-c2"
        assert player.state.request_seq == seq
        assert fake_engine.position == 0.0
        assert fake_engine.calls[-1] == ("seek", 0.0)

    @pytest.mark.asyncio
    async def test_skip_back_on_first_chapter_is_noop(self, player, book, fake_engine):
        await start(player, book, "book-1-c1")
        fake_engine.advance(1.0)
        seq = player.state.request_seq

        player.skip_backward()

        assert player.state.request_seq == seq
        assert fake_engine.position == 1.0

    @pytest.mark.asyncio
    async def test_skip_forward_on_last_chapter_finishes(self, player, book, fake_engine):
        await start(player, book, "book-1-c3")

        player.skip_forward()
        await player.wait_idle()

        assert player.state.finished is True
        assert player.state.phase == PlayerPhase.LOADED_PAUSED
        assert fake_engine.paused is True


class TestEngineReconciliation:

    @pytest.mark.asyncio
    async def test_engine_stall_updates_intent(self, player, book, fake_engine):
        await start(player, book, "book-1-c1")

        fake_engine.emit_pause()

        assert player.state.is_playing is False
        fake_engine.emit_play()
        assert player.state.is_playing is True

    @pytest.mark.asyncio
    async def test_toggle_drives_engine(self, player, book, fake_engine):
        await start(player, book, "book-1-c1")

        player.toggle_play_pause()
        assert fake_engine.paused is True

        player.toggle_play_pause()
        assert fake_engine.paused is False

    @pytest.mark.asyncio
    async def test_book_switch_stops_previous_stream(self, player, book, fake_engine, api, book_factory):
        other = book_factory("book-2")
        api.add_book(other)
        await start(player, book, "book-1-c1")

        await start(player, other, "book-2-c1")

        stop_index = fake_engine.calls.index(("stop",))
        assert fake_engine.calls[stop_index + 1][0] == "load"
        assert fake_engine.source == "https://storage.test/book-2-c1.mp3"
        assert player.state.book.id == "book-2"

    @pytest.mark.asyncio
    async def test_close_stops_loaded_stream(self, player, book, fake_engine):
        await start(player, book, "book-1-c1")

        player.close()

        assert fake_engine.calls[-1] == ("stop",)
        assert player.state.phase == PlayerPhase.IDLE
        assert player.controls_enabled is False
