"""Domain events fed into the session supervisor.

Transport callbacks arrive on arbitrary threads and tasks. They are turned into
these immutable events and queued, so the supervisor handles them one at a time
on its own control loop.
"""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.shared.types import (
    ChannelIdField,
    GuildIdField,
    NonEmptyStr,
    UserIdField,
)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class DomainEvent(BaseModel):
    """Base class for all domain events."""

    model_config = ConfigDict(frozen=True)

    event_id: NonEmptyStr = Field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = Field(default_factory=_utcnow)


class TrackEnded(DomainEvent):
    """The voice transport finished (or was stopped on) a loaded track."""

    guild_id: GuildIdField
    track_uid: UUID


class ClientDisconnected(DomainEvent):
    """A member left the voice channel the bot is sitting in."""

    guild_id: GuildIdField
    channel_id: ChannelIdField
    user_id: UserIdField
