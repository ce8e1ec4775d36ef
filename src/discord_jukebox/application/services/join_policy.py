"""Channel Join Policy - picks a voice channel and joins it."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ...domain.shared.exceptions import JoinFailed, NoOccupiedChannel, SummonerNotFound
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ..interfaces.guild_directory import GuildDirectory, VoiceChannelInfo
    from ..interfaces.voice_adapter import VoiceAdapter

logger = logging.getLogger(__name__)


class ChannelJoinPolicy:
    """Decides which voice channel to join and performs the join."""

    def __init__(self, *, guild_directory: GuildDirectory, voice_adapter: VoiceAdapter) -> None:
        self._directory = guild_directory
        self._voice = voice_adapter

    def find_summoner_channel(
        self, guild_id: DiscordSnowflake, user_id: DiscordSnowflake
    ) -> VoiceChannelInfo:
        """First voice channel the user is sitting in."""
        for channel in self._directory.voice_channels(guild_id):
            if channel.has_member(user_id):
                logger.info(LogTemplates.JOIN_SUMMONER_FOUND, user_id, channel.name)
                return channel
        raise SummonerNotFound(user_id)

    def find_most_crowded_channel(self, guild_id: DiscordSnowflake) -> VoiceChannelInfo:
        """Voice channel with the most members; ties go to the earlier channel."""
        best: VoiceChannelInfo | None = None
        for channel in self._directory.voice_channels(guild_id):
            if best is None or channel.member_count > best.member_count:
                best = channel

        if best is None or best.member_count == 0:
            raise NoOccupiedChannel()
        logger.info(LogTemplates.JOIN_MOST_CROWDED, best.name, best.member_count)
        return best

    async def connect(self, guild_id: DiscordSnowflake, channel: VoiceChannelInfo) -> bool:
        """Join ``channel`` at its configured bitrate.

        Returns True if a connection or move happened, False if the bot was
        already there.
        """
        self._voice.set_bitrate(guild_id, channel.bitrate)

        current = self._voice.get_current_channel_id(guild_id)
        if current == channel.id:
            logger.info(LogTemplates.VOICE_ALREADY_IN_CHANNEL, channel.name)
            return False

        if current is None:
            joined = await self._voice.connect(guild_id, channel.id)
        else:
            joined = await self._voice.move_to(guild_id, channel.id)

        if not joined:
            raise JoinFailed(channel.name)
        return True
