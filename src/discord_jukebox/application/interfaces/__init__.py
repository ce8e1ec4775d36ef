"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_jukebox.application.interfaces.audio_resolver import AudioResolver
from discord_jukebox.application.interfaces.guild_directory import GuildDirectory, VoiceChannelInfo
from discord_jukebox.application.interfaces.voice_adapter import VoiceAdapter

__all__ = [
    "AudioResolver",
    "GuildDirectory",
    "VoiceChannelInfo",
    "VoiceAdapter",
]
