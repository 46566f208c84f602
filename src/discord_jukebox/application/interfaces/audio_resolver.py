"""Port interface for resolving queries and URLs to tracks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from ...domain.music.entities import Track


class AudioResolver(ABC):
    """Interface for resolving URLs and search queries to tracks."""

    @abstractmethod
    async def resolve(self, query: NonEmptyStr) -> "Track | None":
        """Resolve a query or URL to a track, or None if nothing matches.

        Raises:
            ResolutionError: The lookup itself failed.
        """
        ...

    @abstractmethod
    def is_url(self, query: NonEmptyStr) -> bool:
        ...
