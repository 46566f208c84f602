"""Port interface for the local audio file cache."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.value_objects import TrackId


class MediaCache(ABC):
    """Maps a track ID to a local audio file that is ready to play."""

    @abstractmethod
    def has(self, track_id: "TrackId") -> bool:
        ...

    @abstractmethod
    def get(self, track_id: "TrackId") -> Path | None:
        """Return the cached file for a track, or None on a miss."""
        ...

    @abstractmethod
    def put(self, track_id: "TrackId", path: Path) -> None:
        ...

    @abstractmethod
    def path_for(self, track_id: "TrackId") -> Path:
        """Deterministic location where the audio file for a track is written."""
        ...
