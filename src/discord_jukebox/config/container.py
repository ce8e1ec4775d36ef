"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the session services and Discord adapters.
Components are created on-demand and cached for reuse.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.interfaces.audio_resolver import AudioResolver
    from ..application.interfaces.guild_directory import GuildDirectory
    from ..application.interfaces.voice_adapter import VoiceAdapter
    from ..application.services.idle_supervisor import IdleSupervisor
    from ..application.services.join_policy import ChannelJoinPolicy
    from ..application.services.queue_engine import QueueEngine
    from ..application.services.session_controller import SessionController
    from ..application.services.session_store import SessionStore
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    Components are lazily initialized when first accessed. Adapters need the
    bot, so :meth:`set_bot` must be called before they are touched.
    """

    settings: Settings
    _bot: Bot | None = None

    # Infrastructure adapters
    _voice_adapter: VoiceAdapter | None = None
    _guild_directory: GuildDirectory | None = None
    _audio_resolver: AudioResolver | None = None

    # Application services
    _session_store: SessionStore | None = None
    _queue_engine: QueueEngine | None = None
    _join_policy: ChannelJoinPolicy | None = None
    _supervisor: IdleSupervisor | None = None
    _controller: SessionController | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError("Bot not initialized. Call set_bot() first.")
        return self._bot

    # === Adapters ===

    @property
    def voice_adapter(self) -> VoiceAdapter:
        if self._voice_adapter is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter

            self._voice_adapter = DiscordVoiceAdapter(self.bot, settings=self.settings.audio)
        return self._voice_adapter

    @property
    def guild_directory(self) -> GuildDirectory:
        if self._guild_directory is None:
            from ..infrastructure.discord.adapters.guild_directory import DiscordGuildDirectory

            self._guild_directory = DiscordGuildDirectory(self.bot)
        return self._guild_directory

    @property
    def audio_resolver(self) -> AudioResolver:
        if self._audio_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._audio_resolver = YtDlpResolver(self.settings.audio)
        return self._audio_resolver

    # === Application services ===

    @property
    def session_store(self) -> SessionStore:
        if self._session_store is None:
            from ..application.services.session_store import SessionStore

            self._session_store = SessionStore(
                max_queue_size=self.settings.session.max_queue_size
            )
        return self._session_store

    @property
    def queue_engine(self) -> QueueEngine:
        if self._queue_engine is None:
            from ..application.services.queue_engine import QueueEngine

            self._queue_engine = QueueEngine(voice_adapter=self.voice_adapter)
        return self._queue_engine

    @property
    def join_policy(self) -> ChannelJoinPolicy:
        if self._join_policy is None:
            from ..application.services.join_policy import ChannelJoinPolicy

            self._join_policy = ChannelJoinPolicy(
                guild_directory=self.guild_directory,
                voice_adapter=self.voice_adapter,
            )
        return self._join_policy

    @property
    def supervisor(self) -> IdleSupervisor:
        if self._supervisor is None:
            from ..application.services.idle_supervisor import IdleSupervisor

            self._supervisor = IdleSupervisor(
                session_store=self.session_store,
                queue_engine=self.queue_engine,
                voice_adapter=self.voice_adapter,
                idle_timeout_seconds=self.settings.session.idle_timeout_seconds,
                disconnect_settle_seconds=self.settings.session.disconnect_settle_seconds,
            )
        return self._supervisor

    @property
    def controller(self) -> SessionController:
        if self._controller is None:
            from ..application.services.session_controller import SessionController

            self._controller = SessionController(
                session_store=self.session_store,
                queue_engine=self.queue_engine,
                join_policy=self.join_policy,
                supervisor=self.supervisor,
                audio_resolver=self.audio_resolver,
            )
        return self._controller

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Wire the track-end callback and start the supervisor loop."""
        self.voice_adapter.set_on_track_end_callback(self.supervisor.on_track_end)
        self.supervisor.start()

    async def shutdown(self) -> None:
        """Leave any live call and stop the supervisor."""
        if self._supervisor is not None:
            try:
                await self._supervisor.close()
            except Exception as exc:
                logger.warning("Failed stopping session supervisor: %r", exc)


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
