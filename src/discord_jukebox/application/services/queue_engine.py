"""Queue Engine - applies queue operations to a call session and drives the voice transport."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING
from uuid import UUID

from ...domain.music.entities import CallSession, Track
from ...domain.music.value_objects import PlayMode
from ...domain.shared.exceptions import EmptyQueue, TransportError
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ..interfaces.voice_adapter import VoiceAdapter

logger = logging.getLogger(__name__)


class QueueEngine:
    """Queue operations on an explicit :class:`CallSession`.

    Callers hold the session lock. ``session.loaded_uid`` mirrors which track
    the transport holds, so end notifications for anything else are stale.
    A track that was displaced from the head and later reaches it again is
    played from its start.
    """

    def __init__(self, *, voice_adapter: VoiceAdapter) -> None:
        self._voice = voice_adapter

    # === Transport helpers ===

    async def _load(self, session: CallSession, track: Track) -> None:
        session.loaded_uid = track.uid
        if not await self._voice.play(session.guild_id, track):
            session.loaded_uid = None
            raise TransportError("play")

    async def _resume_head(self, session: CallSession) -> None:
        """Make sure the head is playing, starting it if it is not the loaded track."""
        head = session.queue.head
        if head is None:
            return
        if not session.is_loaded(head):
            await self._load(session, head)
            return
        if self._voice.get_play_mode(session.guild_id, head.uid) == PlayMode.PAUSE:
            if not await self._voice.resume(session.guild_id):
                raise TransportError("resume")

    async def _unload(self, session: CallSession) -> bool:
        # Forget the loaded track first so its end notification is stale.
        session.loaded_uid = None
        return await self._voice.stop(session.guild_id)

    # === Enqueue ===

    async def enqueue_play(self, session: CallSession, track: Track) -> None:
        """Put ``track`` at the head of the queue and play it."""
        session.queue.push(track)
        if len(session.queue) > 1:
            head = session.queue.head
            if session.is_loaded(head) and head is not None:
                if self._voice.get_play_mode(session.guild_id, head.uid) == PlayMode.PLAY:
                    await self._voice.pause(session.guild_id)
            session.queue.move_tail_to_front()
            logger.info(LogTemplates.QUEUE_PLAY_NOW, track.display_title, session.guild_id)
        await self._resume_head(session)

    async def enqueue_tail(self, session: CallSession, tracks: Sequence[Track]) -> None:
        """Append ``tracks``; the first one starts if the queue was empty."""
        was_empty = session.queue.is_empty
        session.queue.extend(tracks)
        logger.info(LogTemplates.QUEUE_ENQUEUED, len(tracks), session.guild_id)
        if was_empty:
            await self._resume_head(session)

    async def enqueue_next(self, session: CallSession, tracks: Sequence[Track]) -> None:
        """Insert ``tracks`` right after the head, keeping their order."""
        if not tracks:
            return
        if session.queue.is_empty:
            # Check capacity for the whole batch before anything starts playing.
            session.queue.validate_capacity(len(tracks))
            await self.enqueue_play(session, tracks[0])
            rest = tracks[1:]
        else:
            rest = tracks
        if rest:
            session.queue.insert_after_head(rest)
        logger.info(LogTemplates.QUEUE_ENQUEUED_NEXT, len(tracks), session.guild_id)

    # === Removal and navigation ===

    async def remove(self, session: CallSession, indices: Sequence[int]) -> list[Track]:
        """Remove tracks at 1-based ``indices``. All indices are checked first."""
        doomed = session.queue.select(indices)
        for track in doomed:
            if session.is_loaded(track):
                session.loaded_uid = None
            await self._voice.stop_track(session.guild_id, track.uid)
            session.queue.remove(track.uid)
            logger.info(LogTemplates.QUEUE_REMOVED, track.display_title, session.guild_id)
        return doomed

    async def goto(self, session: CallSession, index: int) -> None:
        """Jump to 1-based ``index``, the same as skipping ``index`` times."""
        session.queue.validate_index(index)
        await self._unload(session)
        for _ in range(index):
            track = session.queue.pop_head()
            await self._voice.stop_track(session.guild_id, track.uid)
        logger.info(LogTemplates.QUEUE_GOTO, index, session.guild_id)
        await self._resume_head(session)

    def clear(self, session: CallSession) -> int:
        """Drop everything except the head."""
        dropped = session.queue.drain_after_head()
        logger.info(LogTemplates.QUEUE_CLEARED, dropped, session.guild_id)
        return dropped

    # === Transport control ===

    async def pause(self, session: CallSession) -> None:
        if session.queue.is_empty:
            raise EmptyQueue()
        if not await self._voice.pause(session.guild_id):
            raise TransportError("pause")

    async def resume(self, session: CallSession) -> None:
        if session.queue.is_empty:
            raise EmptyQueue()
        await self._resume_head(session)

    async def skip(self, session: CallSession) -> None:
        """Stop the head; the resulting end notification advances the queue."""
        head = session.queue.head
        if head is None:
            raise EmptyQueue()
        if not session.is_loaded(head):
            # Nothing in the transport will report an end, so advance here.
            session.queue.pop_head()
            await self._resume_head(session)
            return
        if not await self._voice.stop(session.guild_id):
            raise TransportError("skip")

    async def stop(self, session: CallSession) -> None:
        """Stop the head and empty the queue without leaving the channel."""
        if session.queue.is_empty:
            raise EmptyQueue()
        session.queue.clear()
        if not await self._unload(session):
            raise TransportError("stop")
        logger.info(LogTemplates.QUEUE_STOPPED, session.guild_id)

    async def teardown(self, session: CallSession) -> None:
        """Empty the queue and unload the transport, never raising for an empty queue."""
        session.queue.clear()
        await self._unload(session)

    # === Notifications and rendering ===

    def is_idle(self, session: CallSession) -> bool:
        """True when the transport holds nothing, so no end notification is coming."""
        return session.loaded_uid is None

    async def handle_track_end(self, session: CallSession, track_uid: UUID) -> bool:
        """Advance past a finished track.

        Returns False when ``track_uid`` is not the loaded track, i.e. the
        notification is stale.
        """
        if track_uid != session.loaded_uid:
            logger.debug(LogTemplates.TRACK_END_STALE, track_uid, session.guild_id)
            return False

        session.loaded_uid = None
        head = session.queue.head
        if head is not None and head.uid == track_uid:
            session.queue.pop_head()
        logger.info(LogTemplates.TRACK_ENDED, track_uid, session.guild_id)

        if not session.queue.is_empty:
            await self._resume_head(session)
        return True

    def render(self, session: CallSession) -> str:
        if session.queue.is_empty:
            raise EmptyQueue()

        lines = []
        for position, track in session.queue.positions():
            prefix = ">>> " if position == 0 else f"{position} - "
            lines.append(prefix + track.describe())
        return "```\n" + "\n".join(lines) + "\n```"
