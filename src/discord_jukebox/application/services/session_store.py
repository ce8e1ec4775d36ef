"""Holder for the single live call session and the lock guarding it."""

from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from ...domain.music.entities import CallSession, TrackQueue
from ...domain.shared.exceptions import NoActiveSession, SessionBusy, SessionEnded
from ...domain.shared.messages import LogTemplates
from ...domain.shared.types import ChannelIdField, DiscordSnowflake, MaxQueueSize

logger = logging.getLogger(__name__)


class SessionStore:
    """Owns the live :class:`CallSession`, if any.

    Callers hold :attr:`lock` for every read-modify-write of the session, its
    queue, its end action and the supervisor's timer. Nothing here acquires the
    lock itself.
    """

    def __init__(self, *, max_queue_size: MaxQueueSize = 50) -> None:
        self._lock = asyncio.Lock()
        self._session: CallSession | None = None
        self._max_queue_size = max_queue_size

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    @property
    def current(self) -> CallSession | None:
        return self._session

    def require(self) -> CallSession:
        if self._session is None:
            raise NoActiveSession()
        return self._session

    def require_same(self, session_id: UUID) -> CallSession:
        """Return the live session if it is still ``session_id``."""
        if self._session is None or self._session.session_id != session_id:
            raise SessionEnded()
        return self._session

    def check_available(self, guild_id: DiscordSnowflake) -> None:
        if self._session is not None and self._session.guild_id != guild_id:
            raise SessionBusy(self._session.guild_id)

    def open(
        self,
        guild_id: DiscordSnowflake,
        channel_id: ChannelIdField,
        bitrate: int | None = None,
    ) -> CallSession:
        """Bind the session to ``channel_id``, creating it on the first join.

        Moving to another channel of the same guild keeps the queue.
        """
        self.check_available(guild_id)
        if self._session is None:
            self._session = CallSession(
                guild_id=guild_id,
                channel_id=channel_id,
                bitrate=bitrate,
                queue=TrackQueue(max_size=self._max_queue_size),
            )
            logger.info(
                LogTemplates.SESSION_CREATED, self._session.session_id, guild_id, channel_id
            )
        else:
            self._session.channel_id = channel_id
            self._session.bitrate = bitrate
        return self._session

    def drop(self) -> CallSession | None:
        session, self._session = self._session, None
        if session is not None:
            logger.info(LogTemplates.SESSION_DROPPED, session.session_id)
        return session
