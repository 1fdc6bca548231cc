"""
Audio Engine Interface

The decoder/output device is outside the playback core. Exactly one engine
instance is attached to the player; loading a new source replaces the old
one, so two streams are never decoded at the same time.
"""
from abc import ABC, abstractmethod


class EngineListener(ABC):
    """Callbacks an engine emits for changes it makes on its own."""

    @abstractmethod
    def on_engine_play(self) -> None:
        """Playback actually started or resumed."""

    @abstractmethod
    def on_engine_pause(self) -> None:
        """Playback actually paused (user, device, or a network stall)."""

    @abstractmethod
    def on_engine_ended(self) -> None:
        """The loaded source played to its end."""


class AudioEngine(ABC):
    """
    Abstract playback engine.

    Implementations wrap a concrete decoder (mpv, gstreamer, a browser
    bridge, ...). `load` replaces the current source.
    """

    @property
    @abstractmethod
    def position(self) -> float:
        """Seconds into the loaded source."""

    @property
    @abstractmethod
    def paused(self) -> bool:
        """True when no audio is being produced."""

    @abstractmethod
    def attach(self, listener: EngineListener) -> None:
        """Register the single listener for engine events."""

    @abstractmethod
    def load(self, url: str, mime_type: str, start_position: float = 0.0) -> None:
        """Replace the current source and seek to start_position."""

    @abstractmethod
    def play(self) -> None:
        pass

    @abstractmethod
    def pause(self) -> None:
        pass

    @abstractmethod
    def seek(self, position: float) -> None:
        pass

    @abstractmethod
    def stop(self) -> None:
        """Detach the current source entirely."""
