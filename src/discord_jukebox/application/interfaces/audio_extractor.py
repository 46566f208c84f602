"""Port interface for producing local audio files via an external extraction process."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.value_objects import TrackId


class AudioExtractor(ABC):
    """Interface for downloading and converting one media item to a local audio file."""

    @abstractmethod
    async def extract(self, track_id: "TrackId", source_url: str) -> Path:
        """Return the path of a ready audio file for the track.

        Concurrent calls for the same track ID share a single extraction.

        Raises:
            ExtractionError: If the extraction process failed, timed out or was killed.
        """
        ...

    @abstractmethod
    async def shutdown(self) -> None:
        """Terminate every in-flight extraction process."""
        ...
