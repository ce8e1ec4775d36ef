"""Immutable value objects for the music domain."""

from __future__ import annotations

from enum import Enum


class PlayMode(Enum):
    """Transport state of a loaded track."""

    PLAY = "play"
    PAUSE = "pause"
    STOP = "stop"
    END = "end"

    @property
    def is_playing(self) -> bool:
        return self == PlayMode.PLAY


class TrackEndAction(Enum):
    """What the supervisor does when a track ends."""

    LEAVE = "leave"  # driveby
    TIMEOUT = "timeout"


class SupervisorState(Enum):
    """Lifecycle of the idle/disconnect supervisor.

    State transitions:
    - ACTIVE -> COUNTDOWN (track ended with the TIMEOUT policy)
    - COUNTDOWN -> ACTIVE (countdown cancelled, or expired while a track plays)
    - ACTIVE/COUNTDOWN -> LEFT (shutdown)
    - LEFT -> ACTIVE (a new session was joined)
    """

    ACTIVE = "active"
    COUNTDOWN = "countdown"
    LEFT = "left"


class ShutdownReason(Enum):
    """Reasons the session can be torn down."""

    IDLE_TIMEOUT = "idle_timeout"
    DRIVEBY_FINISHED = "driveby_finished"
    CHANNEL_EMPTY = "channel_empty"
    USER_LEAVE = "user_leave"
    BOT_SHUTDOWN = "bot_shutdown"
    RESOLUTION_FAILED = "resolution_failed"
    PLAYBACK_FAILED = "playback_failed"
