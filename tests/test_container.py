"""
Unit Tests for Dependency Injection Container

Tests for:
- Container initialization with settings
- Lazy initialization and caching of adapters and services
- Bot instance management (set_bot, bot property, error when not set)
- Wiring between the session services
- Lifecycle methods (initialize, shutdown)
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from discord_jukebox.application.services.idle_supervisor import IdleSupervisor
from discord_jukebox.application.services.session_controller import SessionController
from discord_jukebox.application.services.session_store import SessionStore
from discord_jukebox.config.container import Container, create_container
from discord_jukebox.config.settings import SessionSettings, Settings
from discord_jukebox.domain.music.value_objects import SupervisorState
from discord_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpResolver
from discord_jukebox.infrastructure.discord.adapters.guild_directory import DiscordGuildDirectory
from discord_jukebox.infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        session=SessionSettings(
            idle_timeout_seconds=5, disconnect_settle_seconds=0.1, max_queue_size=7
        ),
    )


@pytest.fixture
def mock_bot():
    bot = MagicMock()
    bot.user = MagicMock()
    bot.user.id = 123456789
    return bot


@pytest.fixture
def container(settings, mock_bot):
    container = create_container(settings)
    container.set_bot(mock_bot)
    return container


class TestBot:
    def test_bot_before_set_raises(self, settings):
        with pytest.raises(RuntimeError, match="set_bot"):
            _ = Container(settings).bot

    def test_set_bot(self, container, mock_bot):
        assert container.bot is mock_bot

    def test_adapters_need_the_bot(self, settings):
        with pytest.raises(RuntimeError):
            _ = Container(settings).voice_adapter


class TestLazyComponents:
    def test_create_container_keeps_settings(self, settings):
        assert create_container(settings).settings is settings

    def test_nothing_built_up_front(self, settings):
        container = Container(settings)

        assert container._session_store is None
        assert container._supervisor is None
        assert container._controller is None

    def test_adapter_types(self, container):
        assert isinstance(container.voice_adapter, DiscordVoiceAdapter)
        assert isinstance(container.guild_directory, DiscordGuildDirectory)
        assert isinstance(container.audio_resolver, YtDlpResolver)

    @pytest.mark.parametrize(
        "name",
        [
            "voice_adapter",
            "guild_directory",
            "audio_resolver",
            "session_store",
            "queue_engine",
            "join_policy",
            "supervisor",
            "controller",
        ],
    )
    def test_components_are_cached(self, container, name):
        assert getattr(container, name) is getattr(container, name)

    def test_session_settings_flow_through(self, container):
        assert isinstance(container.session_store, SessionStore)
        assert container.session_store._max_queue_size == 7

        supervisor = container.supervisor
        assert isinstance(supervisor, IdleSupervisor)
        assert supervisor._idle_timeout == 5
        assert supervisor._settle_delay == 0.1

    def test_controller_shares_the_session_services(self, container):
        controller = container.controller

        assert isinstance(controller, SessionController)
        assert controller._store is container.session_store
        assert controller._supervisor is container.supervisor
        assert controller._engine is container.queue_engine
        assert container.supervisor._store is container.session_store


class TestLifecycle:
    async def test_initialize_wires_callback_and_starts_loop(self, container):
        await container.initialize()

        assert container.voice_adapter._on_track_end == container.supervisor.on_track_end
        assert container.supervisor._loop_task is not None

        await container.shutdown()

        assert container.supervisor._loop_task is None
        assert container.supervisor.state is SupervisorState.LEFT

    async def test_shutdown_without_supervisor_is_a_no_op(self, settings):
        await Container(settings).shutdown()

    async def test_shutdown_swallows_supervisor_errors(self, container):
        container._supervisor = MagicMock()
        container._supervisor.close = AsyncMock(side_effect=RuntimeError("boom"))

        await container.shutdown()

        container._supervisor.close.assert_awaited_once()
