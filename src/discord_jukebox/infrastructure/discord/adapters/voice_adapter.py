"""Discord voice adapter implementing VoiceAdapter for connection and playback."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING
from uuid import UUID

import discord

from discord_jukebox.application.interfaces.voice_adapter import TrackEndCallback, VoiceAdapter
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.value_objects import PlayMode
from discord_jukebox.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ....domain.music.entities import Track

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0
FADE_IN_SECONDS: float = 0.5
MIN_BITRATE_KBPS: int = 16
MAX_BITRATE_KBPS: int = 512

# Matches yt-dlp's Android client user-agent to avoid YouTube 403 responses
ANDROID_USER_AGENT = "com.google.android.youtube/19.44.38 (Linux; U; Android 14) gzip"


def bitrate_to_kbps(bitrate: int) -> int:
    """Convert a channel bitrate in bps to the encoder's kbps range."""
    return max(MIN_BITRATE_KBPS, min(MAX_BITRATE_KBPS, bitrate // 1000))


class DiscordVoiceAdapter(VoiceAdapter):
    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()
        self._volume = self._settings.default_volume
        self._ffmpeg_options = self._settings.ffmpeg_options
        self._on_track_end: TrackEndCallback | None = None
        self._loaded: dict[int, Track] = {}
        self._bitrate_kbps: dict[int, int] = {}

    def _get_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return None

        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    def _get_voice_channel(
        self, guild_id: int, channel_id: int
    ) -> discord.VoiceChannel | discord.StageChannel | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return None
        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.VOICE_CHANNEL_NOT_FOUND, channel_id)
            return None
        return channel

    # ─────────────────────────────────────────────────────────────────
    # Connection
    # ─────────────────────────────────────────────────────────────────

    async def connect(self, guild_id: int, channel_id: int) -> bool:
        channel = self._get_voice_channel(guild_id, channel_id)
        if channel is None:
            return False

        try:
            async with asyncio.timeout(CONNECT_TIMEOUT):
                await channel.connect(self_deaf=True)
            logger.info(LogTemplates.VOICE_CONNECTED, channel.name, channel.guild.name)
            return True
        except TimeoutError:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            return False
        except discord.Forbidden:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            return False
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False
        except Exception:
            logger.exception("Failed to connect to voice")
            return False

    async def disconnect(self, guild_id: int) -> bool:
        self._loaded.pop(guild_id, None)
        vc = self._get_voice_client(guild_id)
        if not vc:
            return True

        try:
            await vc.disconnect(force=True)
            logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
            return True
        except Exception:
            logger.exception("Failed to disconnect from voice")
            return False

    async def move_to(self, guild_id: int, channel_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return await self.connect(guild_id, channel_id)

        channel = self._get_voice_channel(guild_id, channel_id)
        if channel is None:
            return False

        try:
            async with asyncio.timeout(CONNECT_TIMEOUT):
                await vc.move_to(channel)
            logger.info(LogTemplates.VOICE_MOVED, channel.name)
            return True
        except TimeoutError:
            logger.error(LogTemplates.VOICE_MOVE_TIMEOUT, channel_id)
            return False
        except Exception:
            logger.exception("Failed to move to channel")
            return False

    def set_bitrate(self, guild_id: int, bitrate: int) -> None:
        kbps = bitrate_to_kbps(bitrate)
        self._bitrate_kbps[guild_id] = kbps
        logger.debug(LogTemplates.VOICE_BITRATE_SET, guild_id, kbps)

    def get_current_channel_id(self, guild_id: int) -> int | None:
        vc = self._get_voice_client(guild_id)
        if vc and vc.channel:
            return vc.channel.id
        return None

    def count_channel_members(self, guild_id: int) -> int:
        vc = self._get_voice_client(guild_id)
        if not vc or not vc.channel:
            return 0
        return len(vc.channel.members)

    # ─────────────────────────────────────────────────────────────────
    # Playback
    # ─────────────────────────────────────────────────────────────────

    def _build_source(self, track: Track) -> discord.AudioSource:
        # User-Agent must match yt-dlp's Android client to prevent YouTube 403
        base_before_opts = self._ffmpeg_options.get("before_options", "")
        before_opts = f'{base_before_opts} -headers "User-Agent: {ANDROID_USER_AGENT}"'
        base_opts = self._ffmpeg_options.get("options", "")
        fade_opts = f'{base_opts} -af "afade=t=in:ss=0:d={FADE_IN_SECONDS}"'

        source = discord.FFmpegPCMAudio(
            track.stream_url,
            before_options=before_opts,
            options=fade_opts,
        )
        return discord.PCMVolumeTransformer(source, volume=self._volume)

    async def play(self, guild_id: int, track: Track) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            logger.warning(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            return False

        # The replaced track still reports its end through its own callback.
        if vc.is_playing() or vc.is_paused():
            vc.stop()

        track_uid = track.uid

        def after_callback(error: Exception | None = None) -> None:
            if error:
                logger.warning(LogTemplates.PLAYBACK_ERROR, guild_id, error)
            asyncio.run_coroutine_threadsafe(
                self._handle_track_end(guild_id, track_uid),
                self._bot.loop,
            )

        try:
            source = self._build_source(track)
            self._loaded[guild_id] = track
            kbps = self._bitrate_kbps.get(guild_id)
            if kbps is None:
                vc.play(source, after=after_callback)
            else:
                vc.play(source, after=after_callback, bitrate=kbps)
            logger.info(LogTemplates.PLAYBACK_STARTED, track.display_title, guild_id)
            return True
        except discord.ClientException as e:
            self._loaded.pop(guild_id, None)
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            return False
        except Exception as e:
            self._loaded.pop(guild_id, None)
            logger.error(LogTemplates.PLAYBACK_FAILED_START, e)
            return False

    async def stop(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            self._loaded.pop(guild_id, None)
            return True

        if vc.is_playing() or vc.is_paused():
            vc.stop()
            logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
        return True

    async def stop_track(self, guild_id: int, track_uid: UUID) -> bool:
        loaded = self._loaded.get(guild_id)
        if loaded is None or loaded.uid != track_uid:
            return True
        return await self.stop(guild_id)

    async def pause(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return False

        if vc.is_playing():
            vc.pause()
            logger.info(LogTemplates.PLAYBACK_PAUSED, guild_id)
            return True

        return False

    async def resume(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return False

        if vc.is_paused():
            vc.resume()
            logger.info(LogTemplates.PLAYBACK_RESUMED, guild_id)
            return True

        return False

    def get_play_mode(self, guild_id: int, track_uid: UUID) -> PlayMode:
        loaded = self._loaded.get(guild_id)
        vc = self._get_voice_client(guild_id)
        if loaded is None or loaded.uid != track_uid or vc is None:
            return PlayMode.END
        if vc.is_paused():
            return PlayMode.PAUSE
        if vc.is_playing():
            return PlayMode.PLAY
        return PlayMode.STOP

    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        self._on_track_end = callback

    async def _handle_track_end(self, guild_id: int, track_uid: UUID) -> None:
        """Called from the FFmpeg thread via run_coroutine_threadsafe."""
        loaded = self._loaded.get(guild_id)
        if loaded is not None and loaded.uid == track_uid:
            del self._loaded[guild_id]
        logger.debug(LogTemplates.TRACK_ENDED, track_uid, guild_id)

        if self._on_track_end is None:
            logger.warning(LogTemplates.PLAYBACK_NO_CALLBACK, guild_id)
            return
        try:
            await self._on_track_end(guild_id, track_uid)
        except Exception as e:
            logger.error(LogTemplates.PLAYBACK_CALLBACK_ERROR, guild_id, e)
