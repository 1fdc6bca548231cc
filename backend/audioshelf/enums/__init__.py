"""
Enums Module

Exports all enumeration types for the AudioShelf application.
"""

from audioshelf.enums.player_phase import PlayerPhase

__all__ = [
    "PlayerPhase",
]
