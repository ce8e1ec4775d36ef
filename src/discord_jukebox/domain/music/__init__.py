"""
Music Domain

Tracks, the track queue and the live call session.
"""

from discord_jukebox.domain.music.entities import CallSession, Track, TrackQueue
from discord_jukebox.domain.music.value_objects import (
    PlayMode,
    ShutdownReason,
    SupervisorState,
    TrackEndAction,
)

__all__ = [
    # Entities
    "Track",
    "TrackQueue",
    "CallSession",
    # Value Objects
    "PlayMode",
    "TrackEndAction",
    "SupervisorState",
    "ShutdownReason",
]
