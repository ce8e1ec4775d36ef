"""GuildDirectory implementation backed by discord.py's guild cache."""

from __future__ import annotations

import logging

import discord

from discord_jukebox.application.interfaces.guild_directory import GuildDirectory, VoiceChannelInfo

logger = logging.getLogger(__name__)


class DiscordGuildDirectory(GuildDirectory):
    def __init__(self, bot: discord.Client) -> None:
        self._bot = bot

    @staticmethod
    def _to_info(channel: discord.VoiceChannel) -> VoiceChannelInfo:
        return VoiceChannelInfo(
            id=channel.id,
            name=channel.name,
            bitrate=int(channel.bitrate),
            member_ids=tuple(member.id for member in channel.members),
        )

    def voice_channels(self, guild_id: int) -> list[VoiceChannelInfo]:
        guild = self._bot.get_guild(guild_id)
        if guild is None:
            logger.debug("Guild %s not in cache", guild_id)
            return []
        # guild.voice_channels is already sorted by position
        return [self._to_info(channel) for channel in guild.voice_channels]
