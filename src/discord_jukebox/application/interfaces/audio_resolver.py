"""Port interface for resolving audio tracks from queries and URLs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.types import NonEmptyStr, PositiveInt

if TYPE_CHECKING:
    from ...domain.music.entities import Track


class AudioResolver(ABC):
    """Interface for resolving URLs and search queries to playable tracks.

    Implementations raise :class:`ResolutionError` instead of returning
    nothing, so the caller can report why a track could not be loaded.
    """

    @abstractmethod
    async def resolve(self, query: NonEmptyStr) -> "Track":
        """Resolve a URL to a playable track."""
        ...

    @abstractmethod
    async def search(self, query: NonEmptyStr, limit: PositiveInt = 1) -> list["Track"]:
        """Search for tracks matching a query, best match first."""
        ...
