"""Discord cogs - text command and event listeners."""

from discord_jukebox.infrastructure.discord.cogs.command_cog import CommandCog
from discord_jukebox.infrastructure.discord.cogs.event_cog import EventCog

__all__ = [
    "CommandCog",
    "EventCog",
]
