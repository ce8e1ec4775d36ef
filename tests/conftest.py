from __future__ import annotations

from uuid import UUID

import pytest
import pytest_asyncio

from discord_jukebox.application.interfaces.audio_resolver import AudioResolver
from discord_jukebox.application.interfaces.guild_directory import GuildDirectory, VoiceChannelInfo
from discord_jukebox.application.interfaces.voice_adapter import TrackEndCallback, VoiceAdapter
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.music.value_objects import PlayMode
from discord_jukebox.domain.shared.exceptions import ResolutionError

GUILD_ID = 111111111111111111
OTHER_GUILD_ID = 222222222222222222
USER_ID = 333333333333333333
TEXT_CHANNEL_ID = 444444444444444444
LOUNGE_ID = 500000000000000001
MUSIC_ID = 500000000000000002
EMPTY_ID = 500000000000000003


# ============================================================================
# Fakes
# ============================================================================


class FakeVoiceAdapter(VoiceAdapter):
    """In-memory voice transport.

    Holds at most one loaded track. Stopping, replacing or disconnecting a
    loaded track reports its end through the callback, like the real adapter.
    Operation names listed in ``fail`` return False.
    """

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.fail: set[str] = set()
        self.channel_id: int | None = None
        self.bitrate: int | None = None
        self.loaded: Track | None = None
        self.mode = PlayMode.END
        self.members = 2
        self.ended: list[UUID] = []
        self._guild_id: int | None = None
        self._callback: TrackEndCallback | None = None

    async def _end_loaded(self) -> None:
        track, self.loaded = self.loaded, None
        self.mode = PlayMode.END
        if track is None:
            return
        self.ended.append(track.uid)
        if self._callback is not None:
            await self._callback(self._guild_id or GUILD_ID, track.uid)

    async def finish(self) -> None:
        """The loaded track plays to its natural end."""
        await self._end_loaded()

    async def connect(self, guild_id: int, channel_id: int) -> bool:
        self.calls.append(("connect", channel_id))
        if "connect" in self.fail:
            return False
        self._guild_id = guild_id
        self.channel_id = channel_id
        return True

    async def disconnect(self, guild_id: int) -> bool:
        self.calls.append(("disconnect",))
        if "disconnect" in self.fail:
            return False
        self.channel_id = None
        await self._end_loaded()
        return True

    async def move_to(self, guild_id: int, channel_id: int) -> bool:
        self.calls.append(("move_to", channel_id))
        if "move_to" in self.fail:
            return False
        self.channel_id = channel_id
        return True

    def set_bitrate(self, guild_id: int, bitrate: int) -> None:
        self.calls.append(("set_bitrate", bitrate))
        self.bitrate = bitrate

    def get_current_channel_id(self, guild_id: int) -> int | None:
        return self.channel_id

    async def play(self, guild_id: int, track: Track) -> bool:
        self.calls.append(("play", track.source_url))
        if "play" in self.fail:
            return False
        self._guild_id = guild_id
        await self._end_loaded()
        self.loaded = track
        self.mode = PlayMode.PLAY
        return True

    async def stop(self, guild_id: int) -> bool:
        self.calls.append(("stop",))
        if "stop" in self.fail:
            return False
        await self._end_loaded()
        return True

    async def stop_track(self, guild_id: int, track_uid: UUID) -> bool:
        if self.loaded is None or self.loaded.uid != track_uid:
            return True
        return await self.stop(guild_id)

    async def pause(self, guild_id: int) -> bool:
        self.calls.append(("pause",))
        if "pause" in self.fail or self.mode is not PlayMode.PLAY:
            return False
        self.mode = PlayMode.PAUSE
        return True

    async def resume(self, guild_id: int) -> bool:
        self.calls.append(("resume",))
        if "resume" in self.fail or self.mode is not PlayMode.PAUSE:
            return False
        self.mode = PlayMode.PLAY
        return True

    def get_play_mode(self, guild_id: int, track_uid: UUID) -> PlayMode:
        if self.loaded is None or self.loaded.uid != track_uid:
            return PlayMode.END
        return self.mode

    def count_channel_members(self, guild_id: int) -> int:
        return self.members

    def set_on_track_end_callback(self, callback: TrackEndCallback) -> None:
        self._callback = callback

    @property
    def played(self) -> list[str]:
        return [call[1] for call in self.calls if call[0] == "play"]


class FakeGuildDirectory(GuildDirectory):
    def __init__(self, channels: list[VoiceChannelInfo] | None = None) -> None:
        self.channels = channels if channels is not None else []

    def voice_channels(self, guild_id: int) -> list[VoiceChannelInfo]:
        return list(self.channels)


class FakeResolver(AudioResolver):
    """Resolves any query to a track named after it, unless told to fail."""

    def __init__(self) -> None:
        self.failing: set[str] = set()
        self.queries: list[str] = []
        self.searches: list[str] = []
        self.no_results = False

    async def resolve(self, query: str) -> Track:
        self.queries.append(query)
        if query in self.failing:
            raise ResolutionError(query, "unavailable")
        return make_track(query)

    async def search(self, query: str, limit: int = 1) -> list[Track]:
        self.searches.append(query)
        if query in self.failing:
            raise ResolutionError(query, "unavailable")
        if self.no_results:
            return []
        return [make_track(f"https://example.com/{query.replace(' ', '-')}", title=query)]


def make_track(source_url: str, **kwargs) -> Track:
    return Track(source_url=source_url, stream_url=f"{source_url}#stream", **kwargs)


def make_channel(channel_id: int, name: str, members: tuple[int, ...] = (), bitrate: int = 64_000):
    return VoiceChannelInfo(id=channel_id, name=name, bitrate=bitrate, member_ids=members)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def track_factory():
    return make_track


@pytest.fixture
def voice():
    return FakeVoiceAdapter()


@pytest.fixture
def resolver():
    return FakeResolver()


@pytest.fixture
def directory():
    return FakeGuildDirectory(
        [
            make_channel(LOUNGE_ID, "Lounge", (900000000000000001,)),
            make_channel(MUSIC_ID, "Music", (USER_ID, 900000000000000002), bitrate=96_000),
            make_channel(EMPTY_ID, "Empty"),
        ]
    )


@pytest.fixture
def store():
    from discord_jukebox.application.services.session_store import SessionStore

    return SessionStore(max_queue_size=10)


@pytest.fixture
def engine(voice):
    from discord_jukebox.application.services.queue_engine import QueueEngine

    return QueueEngine(voice_adapter=voice)


@pytest.fixture
def session(store):
    return store.open(GUILD_ID, MUSIC_ID, 96_000)


@pytest.fixture
def join_policy(directory, voice):
    from discord_jukebox.application.services.join_policy import ChannelJoinPolicy

    return ChannelJoinPolicy(guild_directory=directory, voice_adapter=voice)


@pytest_asyncio.fixture
async def supervisor(store, engine, voice):
    from discord_jukebox.application.services.idle_supervisor import IdleSupervisor

    sup = IdleSupervisor(
        session_store=store,
        queue_engine=engine,
        voice_adapter=voice,
        idle_timeout_seconds=0.05,
        disconnect_settle_seconds=0.01,
    )
    voice.set_on_track_end_callback(sup.on_track_end)
    sup.start()
    yield sup
    await sup.stop()


@pytest.fixture
def controller(store, engine, join_policy, supervisor, resolver):
    from discord_jukebox.application.services.session_controller import SessionController

    return SessionController(
        session_store=store,
        queue_engine=engine,
        join_policy=join_policy,
        supervisor=supervisor,
        audio_resolver=resolver,
    )
