"""Core domain entities for the music domain."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.music.value_objects import TrackEndAction
from discord_jukebox.domain.shared.exceptions import (
    EmptyQueue,
    EmptyQueueCannotClear,
    InvalidIndex,
    QueueFull,
)
from discord_jukebox.domain.shared.types import (
    BitrateBps,
    ChannelIdField,
    DurationSeconds,
    GuildIdField,
    MaxQueueSize,
    NonEmptyStr,
    TrackTitleStr,
)


class Track(BaseModel):
    """Immutable value object representing a playable track.

    ``uid`` is assigned when the track is resolved. Two resolutions of the same
    URL are different tracks, so removal and track-end matching use ``uid``
    rather than the URL.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    uid: UUID = Field(default_factory=uuid4)
    source_url: NonEmptyStr
    stream_url: NonEmptyStr | None = None
    title: TrackTitleStr | None = None
    artist: NonEmptyStr | None = None
    duration_seconds: DurationSeconds | None = None

    @property
    def duration_formatted(self) -> str:
        """Format duration as MM:SS or HH:MM:SS."""
        if self.duration_seconds is None:
            return "Unknown"

        hours, remainder = divmod(self.duration_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)

        if hours > 0:
            return f"{hours}:{minutes:02d}:{seconds:02d}"
        return f"{minutes}:{seconds:02d}"

    @property
    def display_title(self) -> str:
        return self.title or self.source_url

    def describe(self) -> str:
        """``title[, artist][, duration]`` as shown in the queue listing."""
        parts = [self.display_title]
        if self.artist:
            parts.append(self.artist)
        if self.duration_seconds is not None:
            parts.append(self.duration_formatted)
        return ", ".join(parts)


class TrackQueue(BaseModel):
    """Ordered track list.

    Position 0 is the track bound to the playback slot (playing, paused, or
    about to start). User-facing indices are 1-based and never address
    position 0.
    """

    model_config = ConfigDict(strict=True)

    tracks: list[Track] = Field(default_factory=list)
    max_size: MaxQueueSize = 50

    def __len__(self) -> int:
        return len(self.tracks)

    def positions(self) -> Iterator[tuple[int, Track]]:
        return enumerate(self.tracks)

    @property
    def is_empty(self) -> bool:
        return not self.tracks

    @property
    def head(self) -> Track | None:
        return self.tracks[0] if self.tracks else None

    def validate_capacity(self, extra: int) -> None:
        if len(self.tracks) + extra > self.max_size:
            raise QueueFull(self.max_size)

    def push(self, track: Track) -> None:
        """Append a single track to the tail."""
        self.validate_capacity(1)
        self.tracks.append(track)

    def extend(self, tracks: Sequence[Track]) -> None:
        """Append tracks to the tail in order. Nothing is added if they don't all fit."""
        self.validate_capacity(len(tracks))
        self.tracks.extend(tracks)

    def insert_after_head(self, tracks: Sequence[Track]) -> None:
        """Insert tracks right after position 0, preserving their order."""
        if not self.tracks:
            raise EmptyQueue()
        self.validate_capacity(len(tracks))
        self.tracks[1:1] = list(tracks)

    def move_tail_to_front(self) -> Track:
        track = self.tracks.pop()
        self.tracks.insert(0, track)
        return track

    def pop_head(self) -> Track:
        if not self.tracks:
            raise EmptyQueue()
        return self.tracks.pop(0)

    def validate_index(self, index: int) -> None:
        """Check a 1-based user index against ``[1, len-1]``."""
        if not self.tracks:
            raise EmptyQueue()
        if not 1 <= index <= len(self.tracks) - 1:
            raise InvalidIndex(index)

    def select(self, indices: Iterable[int]) -> list[Track]:
        """Resolve 1-based indices to tracks.

        Every index is validated before anything is returned. Duplicates
        resolve to the same track once.
        """
        ordered = list(dict.fromkeys(indices))
        for index in ordered:
            self.validate_index(index)
        return [self.tracks[index] for index in ordered]

    def remove(self, uid: UUID) -> Track | None:
        for position, track in enumerate(self.tracks):
            if track.uid == uid:
                return self.tracks.pop(position)
        return None

    def drain_after_head(self) -> int:
        """Drop everything but position 0 and return how many tracks were dropped."""
        if not self.tracks:
            raise EmptyQueueCannotClear()
        dropped = len(self.tracks) - 1
        del self.tracks[1:]
        return dropped

    def clear(self) -> list[Track]:
        dropped = list(self.tracks)
        self.tracks.clear()
        return dropped


class CallSession(BaseModel):
    """A joined voice call and everything that only lives while it does."""

    model_config = ConfigDict(strict=True)

    session_id: UUID = Field(default_factory=uuid4)
    guild_id: GuildIdField
    channel_id: ChannelIdField
    bitrate: BitrateBps | None = None
    queue: TrackQueue = Field(default_factory=TrackQueue)
    end_action: TrackEndAction = TrackEndAction.TIMEOUT

    # uid of the track currently held by the voice transport
    loaded_uid: UUID | None = None

    def is_loaded(self, track: Track | None) -> bool:
        return track is not None and track.uid == self.loaded_uid
