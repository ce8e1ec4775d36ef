"""Session Controller - turns chat commands into queue, join and teardown operations."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable, Sequence
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ...domain.commands.grammar import ResolvedCommand, parse_command, parse_index
from ...domain.commands.tokens import TokenTag
from ...domain.music.entities import CallSession, Track
from ...domain.music.value_objects import ShutdownReason, TrackEndAction
from ...domain.shared.exceptions import (
    DomainError,
    ResolutionError,
    SessionEnded,
    TransportError,
)
from ...domain.shared.messages import (
    DiscordUIMessages,
    EmojiConstants,
    ErrorMessages,
    LogTemplates,
)
from ...domain.shared.types import DiscordSnowflake, NonEmptyStr

if TYPE_CHECKING:
    from ..interfaces.audio_resolver import AudioResolver
    from ..interfaces.guild_directory import VoiceChannelInfo
    from .idle_supervisor import IdleSupervisor
    from .join_policy import ChannelJoinPolicy
    from .queue_engine import QueueEngine
    from .session_store import SessionStore

logger = logging.getLogger(__name__)

_T = TokenTag


class CommandContext(BaseModel):
    """A chat message addressed to the bot."""

    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    channel_id: DiscordSnowflake
    user_id: DiscordSnowflake
    content: str


class ReplyStatus(Enum):
    """Outcome of a handled command."""

    SUCCESS = "success"
    FAILURE = "failure"


class CommandReply(BaseModel):
    """What the chat side should do with a handled command."""

    model_config = ConfigDict(frozen=True)

    status: ReplyStatus
    text: str | None = None
    error_code: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status == ReplyStatus.SUCCESS

    @property
    def marker(self) -> str:
        return EmojiConstants.SUCCESS if self.is_success else EmojiConstants.FAILURE

    @classmethod
    def success(cls, text: str | None = None) -> CommandReply:
        return cls(status=ReplyStatus.SUCCESS, text=text)

    @classmethod
    def failure(cls, error: DomainError) -> CommandReply:
        return cls(status=ReplyStatus.FAILURE, text=error.message, error_code=error.code)

    @classmethod
    def unexpected(cls) -> CommandReply:
        return cls(
            status=ReplyStatus.FAILURE,
            text=ErrorMessages.UNEXPECTED_ERROR,
            error_code="UNEXPECTED_ERROR",
        )


Handler = Callable[[CommandContext, Sequence[str]], Awaitable["str | None"]]


class SessionController:
    """Parses a command, runs it and reports the outcome.

    This is the only place a :class:`DomainError` becomes a user-facing
    failure. Media resolution and voice joins happen outside the session
    lock; results are applied only if the session they were meant for is
    still live.
    """

    def __init__(
        self,
        *,
        session_store: SessionStore,
        queue_engine: QueueEngine,
        join_policy: ChannelJoinPolicy,
        supervisor: IdleSupervisor,
        audio_resolver: AudioResolver,
    ) -> None:
        self._store = session_store
        self._engine = queue_engine
        self._join_policy = join_policy
        self._supervisor = supervisor
        self._resolver = audio_resolver

        self._handlers: dict[tuple[TokenTag, ...], Handler] = {
            (_T.HELP,): self._help,
            (_T.LIST,): self._list,
            (_T.PAUSE,): self._pause,
            (_T.RESUME,): self._resume,
            (_T.SKIP,): self._skip,
            (_T.CLEAR,): self._clear,
            (_T.STOP,): self._stop,
            (_T.LEAVE,): self._leave,
            (_T.PLAY,): self._play_url,
            (_T.PLAY, _T.SEARCH): self._play_search,
            (_T.DRIVEBY,): self._driveby_url,
            (_T.DRIVEBY, _T.SEARCH): self._driveby_search,
            (_T.QUEUE,): self._queue,
            (_T.NEXT,): self._next,
            (_T.GOTO,): self._goto,
            (_T.RM,): self._rm,
        }

    async def handle(self, ctx: CommandContext) -> CommandReply:
        logger.debug(LogTemplates.COMMAND_RECEIVED, ctx.user_id, ctx.channel_id, ctx.content)
        try:
            command = parse_command(ctx.content)
            text = await self._dispatch(command, ctx)
        except DomainError as exc:
            logger.info(LogTemplates.COMMAND_FAILED, ctx.content, exc.message)
            return CommandReply.failure(exc)
        except Exception:
            logger.exception(LogTemplates.COMMAND_UNEXPECTED_ERROR, ctx.content)
            return CommandReply.unexpected()
        return CommandReply.success(text)

    async def _dispatch(self, command: ResolvedCommand, ctx: CommandContext) -> str | None:
        handler = self._handlers[command.keywords]
        return await handler(ctx, command.arguments)

    # ─────────────────────────────────────────────────────────────────
    # Informational
    # ─────────────────────────────────────────────────────────────────

    async def _help(self, ctx: CommandContext, args: Sequence[str]) -> str:
        return DiscordUIMessages.HELP_TEXT

    async def _list(self, ctx: CommandContext, args: Sequence[str]) -> str:
        async with self._store.lock:
            return self._engine.render(self._store.require())

    # ─────────────────────────────────────────────────────────────────
    # Transport control
    # ─────────────────────────────────────────────────────────────────

    async def _pause(self, ctx: CommandContext, args: Sequence[str]) -> None:
        async with self._store.lock:
            await self._engine.pause(self._store.require())

    async def _resume(self, ctx: CommandContext, args: Sequence[str]) -> None:
        async with self._store.lock:
            session = self._store.require()
            await self._drive(session, self._engine.resume(session))

    async def _skip(self, ctx: CommandContext, args: Sequence[str]) -> None:
        async with self._store.lock:
            session = self._store.require()
            await self._drive(session, self._engine.skip(session))

    async def _clear(self, ctx: CommandContext, args: Sequence[str]) -> None:
        async with self._store.lock:
            self._engine.clear(self._store.require())

    async def _stop(self, ctx: CommandContext, args: Sequence[str]) -> None:
        async with self._store.lock:
            session = self._store.require()
            await self._drive(session, self._engine.stop(session))

    async def _leave(self, ctx: CommandContext, args: Sequence[str]) -> None:
        async with self._store.lock:
            self._store.require()
            await self._supervisor.shutdown(ShutdownReason.USER_LEAVE, raise_on_failure=True)

    async def _goto(self, ctx: CommandContext, args: Sequence[str]) -> None:
        index = parse_index(args[0])
        async with self._store.lock:
            session = self._store.require()
            self._supervisor.cancel_countdown()
            await self._drive(session, self._engine.goto(session, index))

    async def _rm(self, ctx: CommandContext, args: Sequence[str]) -> None:
        indices = [parse_index(arg) for arg in args]
        async with self._store.lock:
            await self._engine.remove(self._store.require(), indices)

    # ─────────────────────────────────────────────────────────────────
    # Play / driveby: join first, then resolve
    # ─────────────────────────────────────────────────────────────────

    async def _play_url(self, ctx: CommandContext, args: Sequence[str]) -> None:
        await self._play(ctx, args[0], search=False, driveby=False)

    async def _play_search(self, ctx: CommandContext, args: Sequence[str]) -> None:
        await self._play(ctx, " ".join(args), search=True, driveby=False)

    async def _driveby_url(self, ctx: CommandContext, args: Sequence[str]) -> None:
        await self._play(ctx, args[0], search=False, driveby=True)

    async def _driveby_search(self, ctx: CommandContext, args: Sequence[str]) -> None:
        await self._play(ctx, " ".join(args), search=True, driveby=True)

    async def _play(
        self, ctx: CommandContext, query: NonEmptyStr, *, search: bool, driveby: bool
    ) -> None:
        async with self._loading(ctx.guild_id):
            if driveby:
                channel = self._join_policy.find_most_crowded_channel(ctx.guild_id)
            else:
                channel = self._join_policy.find_summoner_channel(ctx.guild_id, ctx.user_id)
            session_id, created = await self._join(ctx.guild_id, channel)

            try:
                track = await self._resolve(query, search=search)
            except ResolutionError:
                if created:
                    await self._abandon(session_id)
                raise

            async with self._store.lock:
                session = self._reclaim(session_id)
                self._supervisor.cancel_countdown()
                session.end_action = TrackEndAction.LEAVE if driveby else TrackEndAction.TIMEOUT
                await self._drive(
                    session, self._engine.enqueue_play(session, track), created=created
                )
                if driveby:
                    self._engine.clear(session)

    # ─────────────────────────────────────────────────────────────────
    # Queue / next: resolve first, then join
    # ─────────────────────────────────────────────────────────────────

    async def _queue(self, ctx: CommandContext, args: Sequence[str]) -> None:
        async with self._loading(ctx.guild_id):
            session_id, created, tracks = await self._resolve_and_join(ctx, args)
            async with self._store.lock:
                session = self._reclaim(session_id)
                self._supervisor.cancel_countdown()
                session.end_action = TrackEndAction.TIMEOUT
                await self._drive(
                    session, self._engine.enqueue_tail(session, tracks), created=created
                )

    async def _next(self, ctx: CommandContext, args: Sequence[str]) -> None:
        async with self._loading(ctx.guild_id):
            session_id, created, tracks = await self._resolve_and_join(ctx, args)
            async with self._store.lock:
                session = self._reclaim(session_id)
                self._supervisor.cancel_countdown()
                if session.queue.is_empty:
                    session.end_action = TrackEndAction.TIMEOUT
                await self._drive(
                    session, self._engine.enqueue_next(session, tracks), created=created
                )

    async def _resolve_and_join(
        self, ctx: CommandContext, urls: Sequence[str]
    ) -> tuple[UUID, bool, list[Track]]:
        """Resolve ``urls`` in order, then join the summoner's channel."""
        tracks = [await self._resolve(url, search=False) for url in urls]

        channel = self._join_policy.find_summoner_channel(ctx.guild_id, ctx.user_id)
        session_id, created = await self._join(ctx.guild_id, channel)
        return session_id, created, tracks

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @contextlib.asynccontextmanager
    async def _loading(self, guild_id: DiscordSnowflake) -> AsyncIterator[None]:
        """Hold off idle hangups while this command resolves media and joins.

        When the last pending load finishes and the live session has nothing
        loaded and no countdown, the end policy is applied so it cannot sit
        in the channel forever.
        """
        async with self._store.lock:
            self._supervisor.cancel_countdown()
            self._store.check_available(guild_id)
            self._supervisor.begin_load()
        try:
            yield
        finally:
            async with self._store.lock:
                session = self._store.current
                if (
                    self._supervisor.end_load() == 0
                    and session is not None
                    and not self._supervisor.has_countdown
                ):
                    await self._settle(session)

    async def _drive(
        self, session: CallSession, operation: Awaitable[None], *, created: bool = False
    ) -> None:
        """Run an engine call that drives the transport. Caller holds the lock.

        A session this command created is hung up again if playback could not
        start.
        """
        try:
            await operation
        except TransportError:
            if created:
                await self._supervisor.shutdown(ShutdownReason.PLAYBACK_FAILED)
            else:
                await self._settle(session)
            raise
        await self._settle(session)

    async def _settle(self, session: CallSession) -> None:
        """Apply the end policy if nothing is loaded any more. Caller holds the lock."""
        if self._engine.is_idle(session):
            await self._supervisor.apply_end_policy(session)

    async def _join(
        self, guild_id: DiscordSnowflake, channel: VoiceChannelInfo
    ) -> tuple[UUID, bool]:
        """Connect to ``channel`` and bind the session to it.

        Returns the session ID and whether this call created the session.
        """
        await self._join_policy.connect(guild_id, channel)
        async with self._store.lock:
            created = self._store.current is None
            session = self._store.open(guild_id, channel.id, channel.bitrate)
            self._supervisor.activate()
            return session.session_id, created

    async def _abandon(self, session_id: UUID) -> None:
        async with self._store.lock:
            session = self._store.current
            if session is not None and session.session_id == session_id:
                await self._supervisor.shutdown(ShutdownReason.RESOLUTION_FAILED)

    def _reclaim(self, session_id: UUID) -> CallSession:
        try:
            return self._store.require_same(session_id)
        except SessionEnded:
            logger.info(LogTemplates.RESOLVE_DISCARDED, session_id)
            raise

    async def _resolve(self, query: NonEmptyStr, *, search: bool) -> Track:
        if not search:
            return await self._resolver.resolve(query)
        results = await self._resolver.search(query, limit=1)
        if not results:
            raise ResolutionError(query, ErrorMessages.NO_RESULTS)
        return results[0]
