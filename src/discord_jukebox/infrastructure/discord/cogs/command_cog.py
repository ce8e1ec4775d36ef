"""Text-command cog: feeds audio channel messages to the session controller."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_jukebox.application.services.session_controller import CommandContext, CommandReply
from discord_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from discord_jukebox.utils.reply import fit_message

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class CommandCog(commands.Cog):
    """Listens to the audio text channel and answers every command.

    Messages from one author in one channel are handled strictly in the
    order they arrive; other authors are not held up.
    """

    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container
        self._audio_channel_id = container.settings.discord.audio_channel_id
        # Keyed by (channel, author); dropped once no message holds or awaits the lock.
        self._conversation_locks: dict[tuple[int, int], asyncio.Lock] = {}
        self._conversation_users: dict[tuple[int, int], int] = {}

    def _is_command_message(self, message: discord.Message) -> bool:
        if message.author.bot or message.guild is None:
            return False
        if message.channel.id != self._audio_channel_id:
            return False
        return bool(message.content)

    @staticmethod
    def _to_context(message: discord.Message) -> CommandContext:
        return CommandContext(
            guild_id=message.guild.id,  # type: ignore[union-attr]
            channel_id=message.channel.id,
            user_id=message.author.id,
            content=message.content,
        )

    @contextlib.asynccontextmanager
    async def _conversation(self, key: tuple[int, int]) -> AsyncIterator[None]:
        lock = self._conversation_locks.setdefault(key, asyncio.Lock())
        self._conversation_users[key] = self._conversation_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._conversation_users[key] -= 1
            if not self._conversation_users[key]:
                del self._conversation_users[key]
                del self._conversation_locks[key]

    # ─────────────────────────────────────────────────────────────────
    # Listener
    # ─────────────────────────────────────────────────────────────────

    @commands.Cog.listener()
    async def on_message(self, message: discord.Message) -> None:
        if not self._is_command_message(message):
            return

        async with self._conversation((message.channel.id, message.author.id)):
            reply = await self.container.controller.handle(self._to_context(message))
            await self._acknowledge(message, reply)

    # ─────────────────────────────────────────────────────────────────
    # Feedback
    # ─────────────────────────────────────────────────────────────────

    async def _acknowledge(self, message: discord.Message, reply: CommandReply) -> None:
        try:
            await message.add_reaction(reply.marker)
        except discord.HTTPException as e:
            logger.warning(LogTemplates.COMMAND_REACTION_FAILED, message.channel.id, e)

        if not reply.text:
            return

        try:
            if reply.is_success:
                await message.channel.send(fit_message(reply.text))
            else:
                await message.reply(
                    fit_message(DiscordUIMessages.ERROR_GENERIC.format(message=reply.text)),
                    mention_author=False,
                )
        except discord.HTTPException as e:
            logger.warning(LogTemplates.COMMAND_REPLY_FAILED, message.channel.id, e)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(CommandCog(bot, container))
