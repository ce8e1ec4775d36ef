"""Idle/Disconnect Supervisor - tears the call down when it is idle or abandoned."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING
from uuid import UUID

from ...domain.music.value_objects import PlayMode, ShutdownReason, SupervisorState, TrackEndAction
from ...domain.shared.events import ClientDisconnected, DomainEvent, TrackEnded
from ...domain.shared.exceptions import TransportError
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import DiscordSnowflake

if TYPE_CHECKING:
    from ...domain.music.entities import CallSession
    from ..interfaces.voice_adapter import VoiceAdapter
    from .queue_engine import QueueEngine
    from .session_store import SessionStore

logger = logging.getLogger(__name__)


class IdleSupervisor:
    """Consumes track-end and disconnect events on its own control loop.

    Transport callbacks only :meth:`publish`; the events are handled one at a
    time by :meth:`run`. Methods documented as "caller holds the lock" expect
    the :class:`SessionStore` lock to be held already.
    """

    def __init__(
        self,
        *,
        session_store: SessionStore,
        queue_engine: QueueEngine,
        voice_adapter: VoiceAdapter,
        idle_timeout_seconds: float = 30.0,
        disconnect_settle_seconds: float = 0.25,
    ) -> None:
        self._store = session_store
        self._engine = queue_engine
        self._voice = voice_adapter
        self._idle_timeout = idle_timeout_seconds
        self._settle_delay = disconnect_settle_seconds

        self._events: asyncio.Queue[DomainEvent] = asyncio.Queue()
        self._timer: asyncio.Task[None] | None = None
        self._loop_task: asyncio.Task[None] | None = None
        self._state = SupervisorState.LEFT
        self._pending_loads = 0

    @property
    def state(self) -> SupervisorState:
        return self._state

    @property
    def has_countdown(self) -> bool:
        return self._timer is not None

    # ─────────────────────────────────────────────────────────────────
    # Event intake
    # ─────────────────────────────────────────────────────────────────

    def publish(self, event: DomainEvent) -> None:
        self._events.put_nowait(event)

    async def on_track_end(self, guild_id: DiscordSnowflake, track_uid: UUID) -> None:
        """Track-end callback handed to the voice adapter."""
        self.publish(TrackEnded(guild_id=guild_id, track_uid=track_uid))

    # ─────────────────────────────────────────────────────────────────
    # Control loop
    # ─────────────────────────────────────────────────────────────────

    def start(self) -> None:
        if self._loop_task is None or self._loop_task.done():
            self._loop_task = asyncio.create_task(self.run())
            logger.info(LogTemplates.SUPERVISOR_STARTED)

    async def stop(self) -> None:
        """Stop the control loop and any pending countdown."""
        self._cancel_countdown()
        task, self._loop_task = self._loop_task, None
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
            logger.info(LogTemplates.SUPERVISOR_STOPPED)

    async def run(self) -> None:
        while True:
            event = await self._events.get()
            try:
                await self.dispatch(event)
            except Exception:
                logger.exception(LogTemplates.SUPERVISOR_EVENT_ERROR, type(event).__name__)
            finally:
                self._events.task_done()

    async def drain(self) -> None:
        """Wait until every published event has been handled."""
        await self._events.join()

    async def dispatch(self, event: DomainEvent) -> None:
        if isinstance(event, TrackEnded):
            await self._handle_track_ended(event)
        elif isinstance(event, ClientDisconnected):
            await self._handle_client_disconnected(event)

    # ─────────────────────────────────────────────────────────────────
    # Handlers
    # ─────────────────────────────────────────────────────────────────

    def _live_session(self, guild_id: DiscordSnowflake, event_name: str) -> CallSession | None:
        session = self._store.current
        if session is None or session.guild_id != guild_id:
            logger.debug(LogTemplates.EVENT_WITHOUT_SESSION, event_name)
            return None
        return session

    async def _handle_track_ended(self, event: TrackEnded) -> None:
        async with self._store.lock:
            session = self._live_session(event.guild_id, "TrackEnded")
            if session is None:
                return
            try:
                if not await self._engine.handle_track_end(session, event.track_uid):
                    return
            except TransportError as exc:
                # The next track failed to start; the end policy still applies.
                logger.warning(LogTemplates.PLAYBACK_ERROR, session.guild_id, exc.message)

            await self.apply_end_policy(session)

    async def _handle_client_disconnected(self, event: ClientDisconnected) -> None:
        async with self._store.lock:
            session = self._live_session(event.guild_id, "ClientDisconnected")
            if session is None or session.channel_id != event.channel_id:
                return
            session_id = session.session_id

        # The member list can still include whoever just left for a moment.
        await asyncio.sleep(self._settle_delay)

        async with self._store.lock:
            session = self._store.current
            if session is None or session.session_id != session_id:
                return
            members = self._voice.count_channel_members(session.guild_id)
            if members > 1:
                logger.debug(LogTemplates.DISCONNECT_NOT_ALONE, session.channel_id, members)
                return
            logger.info(LogTemplates.DISCONNECT_ALONE, session.channel_id)
            await self.shutdown(ShutdownReason.CHANNEL_EMPTY)

    # ─────────────────────────────────────────────────────────────────
    # Countdown
    # ─────────────────────────────────────────────────────────────────

    def _start_countdown(self, session: CallSession) -> None:
        self._cancel_countdown()
        self._timer = asyncio.create_task(self._countdown(session.session_id, session.guild_id))
        self._state = SupervisorState.COUNTDOWN
        logger.info(LogTemplates.COUNTDOWN_STARTED, self._idle_timeout, session.guild_id)

    def _cancel_countdown(self) -> bool:
        timer, self._timer = self._timer, None
        if timer is not None and not timer.done():
            timer.cancel()
            return True
        return False

    def cancel_countdown(self) -> None:
        """Abort a pending countdown. Caller holds the lock."""
        if self._cancel_countdown():
            session = self._store.current
            logger.debug(LogTemplates.COUNTDOWN_CANCELLED, session.guild_id if session else None)
        if self._state is SupervisorState.COUNTDOWN:
            self._state = SupervisorState.ACTIVE

    def activate(self) -> None:
        """Mark a freshly joined session as active. Caller holds the lock."""
        self._state = SupervisorState.ACTIVE

    async def apply_end_policy(self, session: CallSession) -> None:
        """React to ``session`` running out of playback. Caller holds the lock.

        Also used when a command leaves nothing loaded, since no track-end
        notification follows in that case.
        """
        if session.end_action is TrackEndAction.LEAVE:
            await self.shutdown(ShutdownReason.DRIVEBY_FINISHED)
        else:
            self._start_countdown(session)

    # ─────────────────────────────────────────────────────────────────
    # Pending loads
    # ─────────────────────────────────────────────────────────────────

    @property
    def pending_loads(self) -> int:
        return self._pending_loads

    def begin_load(self) -> None:
        """Note a command that is resolving or joining. Caller holds the lock.

        A countdown that expires while loads are pending does not hang up.
        """
        self._pending_loads += 1

    def end_load(self) -> int:
        """Caller holds the lock. Returns how many loads are still pending."""
        self._pending_loads = max(0, self._pending_loads - 1)
        return self._pending_loads

    async def _countdown(self, session_id: UUID, guild_id: DiscordSnowflake) -> None:
        await asyncio.sleep(self._idle_timeout)

        async with self._store.lock:
            if self._timer is not asyncio.current_task():
                logger.debug(LogTemplates.COUNTDOWN_SUPERSEDED, guild_id)
                return
            self._timer = None

            session = self._store.current
            if session is None or session.session_id != session_id:
                return

            head = session.queue.head
            if head is not None and self._voice.get_play_mode(guild_id, head.uid) is PlayMode.PLAY:
                logger.info(LogTemplates.COUNTDOWN_EXPIRED_ACTIVE, guild_id)
                self._state = SupervisorState.ACTIVE
            elif self._pending_loads:
                logger.info(LogTemplates.COUNTDOWN_DEFERRED, guild_id, self._pending_loads)
                self._state = SupervisorState.ACTIVE
            else:
                logger.info(LogTemplates.COUNTDOWN_EXPIRED_IDLE, guild_id)
                await self.shutdown(ShutdownReason.IDLE_TIMEOUT)

    # ─────────────────────────────────────────────────────────────────
    # Teardown
    # ─────────────────────────────────────────────────────────────────

    async def shutdown(self, reason: ShutdownReason, *, raise_on_failure: bool = False) -> None:
        """Stop the queue, leave the channel and drop the session. Caller holds the lock.

        A failed leave is logged and the state still becomes LEFT. With
        ``raise_on_failure`` the failure is also raised as :class:`TransportError`.
        """
        self._cancel_countdown()
        session = self._store.current
        if session is None:
            self._state = SupervisorState.LEFT
            return

        logger.info(LogTemplates.SHUTDOWN_STARTED, session.guild_id, reason.value)
        await self._engine.teardown(session)
        left = await self._voice.disconnect(session.guild_id)
        self._store.drop()
        self._state = SupervisorState.LEFT

        if not left:
            logger.warning(LogTemplates.SHUTDOWN_LEAVE_FAILED, session.guild_id)
            if raise_on_failure:
                raise TransportError("leave")

    async def close(self) -> None:
        """Tear the session down and stop the loop, for bot shutdown."""
        async with self._store.lock:
            await self.shutdown(ShutdownReason.BOT_SHUTDOWN)
        await self.stop()
