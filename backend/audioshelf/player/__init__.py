"""
Player Client Module

asyncio playback core: state machine, chapter transitions, resume
resolution and progress persistence against the AudioShelf API.
"""

from audioshelf.player.audio_player import AudioPlayer
from audioshelf.player.api_client import AudioShelfClient
from audioshelf.player.engine import AudioEngine, EngineListener
from audioshelf.player.session import SessionIdStore
from audioshelf.player.state import PlayerState, reduce
from audioshelf.player.store import PlayerStore

__all__ = [
    "AudioPlayer",
    "AudioShelfClient",
    "AudioEngine",
    "EngineListener",
    "SessionIdStore",
    "PlayerState",
    "PlayerStore",
    "reduce",
]
