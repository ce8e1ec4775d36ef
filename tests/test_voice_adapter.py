"""
Unit Tests for DiscordVoiceAdapter

Tests for:
- Bitrate conversion
- Connect / move / disconnect, including refusals and timeouts
- Playback: replacing the current source, encoder bitrate, failures
- Play mode reporting keyed by track uid
- Track-end handling from the FFmpeg thread

discord.py objects are replaced with MagicMock(spec=...) stand-ins.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import discord
import pytest
from conftest import make_track

from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.value_objects import PlayMode
from discord_jukebox.infrastructure.discord.adapters.voice_adapter import (
    ANDROID_USER_AGENT,
    DiscordVoiceAdapter,
    bitrate_to_kbps,
)

GUILD = 123
CHANNEL = 456
OTHER_CHANNEL = 789


def _voice_channel(channel_id=CHANNEL, name="Music", members=2):
    channel = MagicMock(spec=discord.VoiceChannel)
    channel.id = channel_id
    channel.name = name
    channel.guild = MagicMock()
    channel.members = [MagicMock() for _ in range(members)]
    channel.connect = AsyncMock()
    return channel


def _voice_client(channel=None, playing=False, paused=False):
    vc = MagicMock(spec=discord.VoiceClient)
    vc.channel = channel or _voice_channel()
    vc.is_playing.return_value = playing
    vc.is_paused.return_value = paused
    vc.is_connected.return_value = True
    vc.disconnect = AsyncMock()
    vc.move_to = AsyncMock()
    return vc


@pytest.fixture
def guild():
    guild = MagicMock()
    guild.voice_client = None
    guild.get_channel.side_effect = lambda cid: {CHANNEL: _voice_channel()}.get(cid)
    return guild


@pytest.fixture
def mock_bot(guild):
    bot = MagicMock()
    bot.get_guild.side_effect = lambda gid: guild if gid == GUILD else None
    return bot


@pytest.fixture
def adapter(mock_bot):
    return DiscordVoiceAdapter(mock_bot, settings=AudioSettings())


class TestBitrate:
    @pytest.mark.parametrize(
        "bps,kbps", [(64_000, 64), (96_000, 96), (8_000, 16), (1_000_000, 512), (96_999, 96)]
    )
    def test_bitrate_to_kbps(self, bps, kbps):
        assert bitrate_to_kbps(bps) == kbps


# =============================================================================
# Connection
# =============================================================================


class TestConnection:
    async def test_connect_deafened(self, adapter, guild):
        channel = _voice_channel()
        guild.get_channel.side_effect = None
        guild.get_channel.return_value = channel

        assert await adapter.connect(GUILD, CHANNEL) is True

        channel.connect.assert_awaited_once_with(self_deaf=True)

    async def test_connect_unknown_channel(self, adapter):
        assert await adapter.connect(GUILD, OTHER_CHANNEL) is False

    async def test_connect_unknown_guild(self, adapter):
        assert await adapter.connect(999, CHANNEL) is False

    @pytest.mark.parametrize(
        "error",
        [
            TimeoutError(),
            discord.ClientException("Already connected"),
            discord.Forbidden(MagicMock(status=403, reason="Forbidden"), "No permission"),
            RuntimeError("Unexpected"),
        ],
    )
    async def test_connect_failures(self, adapter, guild, error):
        channel = _voice_channel()
        channel.connect.side_effect = error
        guild.get_channel.side_effect = None
        guild.get_channel.return_value = channel

        assert await adapter.connect(GUILD, CHANNEL) is False

    async def test_disconnect_without_voice_client(self, adapter):
        assert await adapter.disconnect(GUILD) is True

    async def test_disconnect_forgets_loaded_track(self, adapter, guild):
        vc = _voice_client()
        guild.voice_client = vc
        track = make_track("a")
        adapter._loaded[GUILD] = track

        assert await adapter.disconnect(GUILD) is True

        vc.disconnect.assert_awaited_once_with(force=True)
        assert adapter.get_play_mode(GUILD, track.uid) is PlayMode.END

    async def test_disconnect_refused(self, adapter, guild):
        vc = _voice_client()
        vc.disconnect.side_effect = RuntimeError("Disconnect failed")
        guild.voice_client = vc

        assert await adapter.disconnect(GUILD) is False

    async def test_move_to(self, adapter, guild):
        vc = _voice_client()
        guild.voice_client = vc

        assert await adapter.move_to(GUILD, CHANNEL) is True

        vc.move_to.assert_awaited_once()

    async def test_move_without_voice_client_connects(self, adapter):
        with patch.object(adapter, "connect", AsyncMock(return_value=True)) as mock_connect:
            assert await adapter.move_to(GUILD, CHANNEL) is True

        mock_connect.assert_awaited_once_with(GUILD, CHANNEL)

    async def test_move_timeout(self, adapter, guild):
        vc = _voice_client()
        vc.move_to.side_effect = TimeoutError()
        guild.voice_client = vc

        assert await adapter.move_to(GUILD, CHANNEL) is False

    def test_channel_lookups(self, adapter, guild):
        assert adapter.get_current_channel_id(GUILD) is None
        assert adapter.count_channel_members(GUILD) == 0

        guild.voice_client = _voice_client(channel=_voice_channel(CHANNEL, members=3))

        assert adapter.get_current_channel_id(GUILD) == CHANNEL
        assert adapter.count_channel_members(GUILD) == 3


# =============================================================================
# Playback
# =============================================================================


class TestPlayback:
    async def test_play_without_voice_client(self, adapter):
        assert await adapter.play(GUILD, make_track("a")) is False

    async def test_play_replaces_current_source(self, adapter, guild):
        vc = _voice_client(playing=True)
        guild.voice_client = vc
        source = MagicMock()

        with patch.object(adapter, "_build_source", return_value=source):
            assert await adapter.play(GUILD, make_track("a")) is True

        vc.stop.assert_called_once()
        assert vc.play.call_args.args[0] is source
        assert "bitrate" not in vc.play.call_args.kwargs

    async def test_play_uses_channel_bitrate(self, adapter, guild):
        vc = _voice_client()
        guild.voice_client = vc
        adapter.set_bitrate(GUILD, 96_000)

        with patch.object(adapter, "_build_source", return_value=MagicMock()):
            await adapter.play(GUILD, make_track("a"))

        vc.stop.assert_not_called()
        assert vc.play.call_args.kwargs["bitrate"] == 96

    async def test_play_failure_unloads(self, adapter, guild):
        vc = _voice_client()
        vc.play.side_effect = discord.ClientException("Not connected")
        guild.voice_client = vc
        track = make_track("a")

        with patch.object(adapter, "_build_source", return_value=MagicMock()):
            assert await adapter.play(GUILD, track) is False

        assert GUILD not in adapter._loaded

    def test_build_source_adds_headers_and_fade(self, adapter):
        module = "discord_jukebox.infrastructure.discord.adapters.voice_adapter.discord"
        with (
            patch(f"{module}.FFmpegPCMAudio") as mock_ffmpeg,
            patch(f"{module}.PCMVolumeTransformer") as mock_volume,
        ):
            adapter._build_source(make_track("https://a"))

        args, kwargs = mock_ffmpeg.call_args
        assert args[0] == "https://a#stream"
        assert ANDROID_USER_AGENT in kwargs["before_options"]
        assert "-reconnect 1" in kwargs["before_options"]
        assert "afade=t=in" in kwargs["options"]
        assert mock_volume.call_args.kwargs["volume"] == 0.5

    async def test_stop_track_only_stops_matching_uid(self, adapter, guild):
        vc = _voice_client(playing=True)
        guild.voice_client = vc
        track = make_track("a")
        adapter._loaded[GUILD] = track

        assert await adapter.stop_track(GUILD, uuid4()) is True
        vc.stop.assert_not_called()

        assert await adapter.stop_track(GUILD, track.uid) is True
        vc.stop.assert_called_once()

    async def test_pause_and_resume(self, adapter, guild):
        vc = _voice_client(playing=True)
        guild.voice_client = vc

        assert await adapter.pause(GUILD) is True
        assert await adapter.resume(GUILD) is False

        vc.is_playing.return_value = False
        vc.is_paused.return_value = True

        assert await adapter.pause(GUILD) is False
        assert await adapter.resume(GUILD) is True


class TestPlayMode:
    def test_modes(self, adapter, guild):
        vc = _voice_client(playing=True)
        guild.voice_client = vc
        track = make_track("a")
        adapter._loaded[GUILD] = track

        assert adapter.get_play_mode(GUILD, track.uid) is PlayMode.PLAY

        vc.is_playing.return_value = False
        vc.is_paused.return_value = True
        assert adapter.get_play_mode(GUILD, track.uid) is PlayMode.PAUSE

        vc.is_paused.return_value = False
        assert adapter.get_play_mode(GUILD, track.uid) is PlayMode.STOP

    def test_other_track_is_ended(self, adapter, guild):
        guild.voice_client = _voice_client(playing=True)
        adapter._loaded[GUILD] = make_track("a")

        assert adapter.get_play_mode(GUILD, uuid4()) is PlayMode.END

    def test_nothing_loaded(self, adapter):
        assert adapter.get_play_mode(GUILD, uuid4()) is PlayMode.END


# =============================================================================
# Track end
# =============================================================================


class TestTrackEnd:
    async def test_matching_end_unloads_and_notifies(self, adapter):
        callback = AsyncMock()
        adapter.set_on_track_end_callback(callback)
        track = make_track("a")
        adapter._loaded[GUILD] = track

        await adapter._handle_track_end(GUILD, track.uid)

        assert GUILD not in adapter._loaded
        callback.assert_awaited_once_with(GUILD, track.uid)

    async def test_replaced_track_end_keeps_new_track(self, adapter):
        callback = AsyncMock()
        adapter.set_on_track_end_callback(callback)
        old, new = make_track("old"), make_track("new")
        adapter._loaded[GUILD] = new

        await adapter._handle_track_end(GUILD, old.uid)

        assert adapter._loaded[GUILD] is new
        callback.assert_awaited_once_with(GUILD, old.uid)

    async def test_callback_errors_are_contained(self, adapter):
        adapter.set_on_track_end_callback(AsyncMock(side_effect=RuntimeError("boom")))

        await adapter._handle_track_end(GUILD, uuid4())

    async def test_no_callback(self, adapter):
        await adapter._handle_track_end(GUILD, uuid4())

    async def test_after_callback_runs_on_bot_loop(self, adapter, guild, mock_bot):
        mock_bot.loop = asyncio.get_running_loop()
        callback = AsyncMock()
        adapter.set_on_track_end_callback(callback)
        vc = _voice_client()
        guild.voice_client = vc
        track = make_track("a")

        with patch.object(adapter, "_build_source", return_value=MagicMock()):
            await adapter.play(GUILD, track)

        after = vc.play.call_args.kwargs["after"]
        after(None)
        await asyncio.sleep(0.01)

        callback.assert_awaited_once_with(GUILD, track.uid)
        assert GUILD not in adapter._loaded
