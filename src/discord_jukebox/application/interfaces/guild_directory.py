"""Port interface for looking up a guild's voice channels."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.shared.types import ChannelIdField, DiscordSnowflake, UserIdField


class VoiceChannelInfo(BaseModel):
    """Snapshot of a voice channel and who is in it."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: ChannelIdField
    name: str
    bitrate: int
    member_ids: tuple[UserIdField, ...] = Field(default_factory=tuple)

    @property
    def member_count(self) -> int:
        return len(self.member_ids)

    def has_member(self, user_id: DiscordSnowflake) -> bool:
        return user_id in self.member_ids


class GuildDirectory(ABC):
    """Interface for enumerating voice channels in a guild."""

    @abstractmethod
    def voice_channels(self, guild_id: DiscordSnowflake) -> list[VoiceChannelInfo]:
        """Voice channels of the guild in display order. Empty if the guild is unknown."""
        ...
