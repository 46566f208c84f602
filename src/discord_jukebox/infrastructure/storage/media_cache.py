"""Filesystem-backed cache of extracted audio files."""

from __future__ import annotations

import logging
from pathlib import Path

from discord_jukebox.application.interfaces.media_cache import MediaCache
from discord_jukebox.domain.music.value_objects import TrackId
from discord_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class FileMediaCache(MediaCache):
    """Maps track IDs to ``<cache_dir>/<id>.<format>`` files.

    Entries are never evicted. A file that disappears from disk is dropped
    from the index on the next lookup, so the item will be extracted again.
    """

    def __init__(self, cache_dir: Path, audio_format: str = "mp3") -> None:
        self._cache_dir = Path(cache_dir)
        self._audio_format = audio_format
        self._entries: dict[str, Path] = {}

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def initialize(self) -> None:
        """Create the cache directory and index the files already in it."""
        self._cache_dir.mkdir(parents=True, exist_ok=True)
        for path in self._cache_dir.glob(f"*.{self._audio_format}"):
            if path.is_file():
                self._entries[path.stem] = path
        logger.info(LogTemplates.CACHE_DIR_READY, self._cache_dir, len(self._entries))

    def path_for(self, track_id: TrackId) -> Path:
        return self._cache_dir / f"{track_id.value}.{self._audio_format}"

    def has(self, track_id: TrackId) -> bool:
        return self.get(track_id) is not None

    def get(self, track_id: TrackId) -> Path | None:
        path = self._entries.get(track_id.value)
        if path is not None:
            if path.is_file():
                return path
            logger.warning("Cached file for %s vanished: %s", track_id.value, path)
            del self._entries[track_id.value]

        # Files written by an earlier run that were not indexed yet
        candidate = self.path_for(track_id)
        if candidate.is_file():
            self._entries[track_id.value] = candidate
            return candidate
        return None

    def put(self, track_id: TrackId, path: Path) -> None:
        self._entries[track_id.value] = path
        logger.debug(LogTemplates.CACHE_STORED, track_id.value, path)

    def __len__(self) -> int:
        return len(self._entries)
