"""
Shared Domain Kernel

Contains exceptions, events, message constants and annotated types shared
across the domain.
"""

from discord_jukebox.domain.shared.events import ClientDisconnected, DomainEvent, TrackEnded
from discord_jukebox.domain.shared.exceptions import (
    DomainError,
    JoinError,
    ParseError,
    QueueError,
    ResolutionError,
    SessionError,
    TransportError,
)

__all__ = [
    "DomainError",
    "ParseError",
    "SessionError",
    "QueueError",
    "JoinError",
    "ResolutionError",
    "TransportError",
    "DomainEvent",
    "TrackEnded",
    "ClientDisconnected",
]
