"""
Player Phase Enumeration

Defines the four phases of the client playback state machine.
"""
from enum import Enum


class PlayerPhase(str, Enum):
    """
    Playback state machine phase.

    IDLE          - no book loaded
    REQUESTED     - a book/chapter was asked for, stream not yet resolved
    LOADED_PAUSED - stream attached, intent is paused
    LOADED_PLAYING - stream attached, intent is playing
    """

    IDLE = "idle"
    REQUESTED = "requested"
    LOADED_PAUSED = "loaded_paused"
    LOADED_PLAYING = "loaded_playing"

    @property
    def is_loaded(self) -> bool:
        """True when a chapter stream is attached to the engine."""
        return self in (PlayerPhase.LOADED_PAUSED, PlayerPhase.LOADED_PLAYING)

    @property
    def label(self) -> str:
        """
        Get human-readable label for the phase.

        Returns:
            str: Chinese label for display
        """
        labels = {
            "idle": "空闲",
            "requested": "加载中",
            "loaded_paused": "已暂停",
            "loaded_playing": "播放中",
        }
        return labels[self.value]
