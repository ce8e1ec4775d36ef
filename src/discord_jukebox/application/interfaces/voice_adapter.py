"""Port interface for Discord voice operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING
from uuid import UUID

from discord_jukebox.domain.shared.types import ChannelIdField, DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ...domain.music.value_objects import PlayMode

TrackEndCallback = Callable[[DiscordSnowflake, UUID], Awaitable[None]]


class VoiceAdapter(ABC):
    """Interface for Discord voice channel operations.

    The transport holds at most one loaded track per guild. Whenever a loaded
    track finishes or is stopped, the track-end callback is invoked with the
    guild ID and the track's ``uid``.
    """

    @abstractmethod
    async def connect(self, guild_id: DiscordSnowflake, channel_id: ChannelIdField) -> bool:
        """Connect to a voice channel."""
        ...

    @abstractmethod
    async def disconnect(self, guild_id: DiscordSnowflake) -> bool:
        """Disconnect from voice in a guild."""
        ...

    @abstractmethod
    async def move_to(self, guild_id: DiscordSnowflake, channel_id: ChannelIdField) -> bool:
        """Move to a different voice channel."""
        ...

    @abstractmethod
    def set_bitrate(self, guild_id: DiscordSnowflake, bitrate: int) -> None:
        """Set the encoder bitrate (bits per second) used for tracks played from now on."""
        ...

    @abstractmethod
    def get_current_channel_id(self, guild_id: DiscordSnowflake) -> ChannelIdField | None:
        """Get the current voice channel ID, or None if not connected."""
        ...

    @abstractmethod
    async def play(self, guild_id: DiscordSnowflake, track: "Track") -> bool:
        """Load ``track`` from its start, replacing whatever was loaded."""
        ...

    @abstractmethod
    async def stop(self, guild_id: DiscordSnowflake) -> bool:
        """Stop and unload the loaded track. True if nothing was loaded."""
        ...

    @abstractmethod
    async def stop_track(self, guild_id: DiscordSnowflake, track_uid: UUID) -> bool:
        """Stop the given track if it is the loaded one; otherwise a no-op."""
        ...

    @abstractmethod
    async def pause(self, guild_id: DiscordSnowflake) -> bool:
        """Pause current playback."""
        ...

    @abstractmethod
    async def resume(self, guild_id: DiscordSnowflake) -> bool:
        """Resume paused playback."""
        ...

    @abstractmethod
    def get_play_mode(self, guild_id: DiscordSnowflake, track_uid: UUID) -> "PlayMode":
        """Transport state of the given track; END if it is not the loaded one."""
        ...

    @abstractmethod
    def count_channel_members(self, guild_id: DiscordSnowflake) -> int:
        """Members in the bot's current voice channel, the bot included."""
        ...

    @abstractmethod
    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        """Set callback for when a track ends."""
        ...
