"""AudioResolver implementation using yt-dlp for URL lookup and search."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Final, cast

from pydantic import BaseModel, ConfigDict, field_validator
from yt_dlp import YoutubeDL
from yt_dlp.utils import YoutubeDLError

from discord_jukebox.application.interfaces.audio_resolver import AudioResolver
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.music.value_objects import TrackId
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.domain.shared.messages import LogTemplates
from discord_jukebox.domain.shared.types import HttpUrlStr, NonEmptyStr, PositiveInt

logger = logging.getLogger(__name__)

DEFAULT_RETRIES: Final[int] = 3
DEFAULT_SOCKET_TIMEOUT: Final[int] = 10
TITLE_MAX_LENGTH: Final[int] = 500


# ── Pydantic models for yt-dlp data ────────────────────────────────────


class YtDlpVideoInfo(BaseModel):
    """Trimmed yt-dlp metadata for one video.

    Extra fields from yt-dlp are silently ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: NonEmptyStr | None = None
    title: NonEmptyStr = "Unknown Title"
    webpage_url: HttpUrlStr | None = None

    @field_validator("id", "webpage_url", mode="before")
    @classmethod
    def _coerce_empty_to_none(cls, v: Any) -> str | None:
        """Convert empty / whitespace-only / non-string values to None."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("title", mode="before")
    @classmethod
    def _coerce_title(cls, v: Any) -> str:
        """Fall back to default when yt-dlp sends empty or non-string title."""
        if not isinstance(v, str) or not v.strip():
            return "Unknown Title"
        return v[:TITLE_MAX_LENGTH]


class YtDlpOpts(BaseModel):
    """Typed yt-dlp configuration options passed to YoutubeDL."""

    model_config = ConfigDict(frozen=True)

    quiet: bool = True
    noprogress: bool = True
    noplaylist: bool = True
    skip_download: bool = True
    retries: PositiveInt = DEFAULT_RETRIES
    socket_timeout: PositiveInt = DEFAULT_SOCKET_TIMEOUT


class YtDlpResolver(AudioResolver):
    """Turns a YouTube link or free text into a ``Track``.

    Links are recognised by their watch or short-link form and the video ID
    is taken from the link itself; yt-dlp is only asked for the title.
    Anything else becomes a ``ytsearch1:`` query.
    """

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()
        self._opts = YtDlpOpts()

    def _extract_info_sync(self, url: str) -> YtDlpVideoInfo | None:
        try:
            with YoutubeDL(params=cast(Any, self._opts.model_dump())) as ydl:
                data = ydl.extract_info(url, download=False)
                return YtDlpVideoInfo.model_validate(dict(data)) if isinstance(data, dict) else None
        except YoutubeDLError as e:
            logger.warning(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, url, e)
            raise ResolutionError(url, str(e)) from e

    def _search_sync(self, query: str) -> YtDlpVideoInfo | None:
        try:
            with YoutubeDL(params=cast(Any, self._opts.model_dump())) as ydl:
                data = ydl.extract_info(f"ytsearch1:{query}", download=False)

                if not isinstance(data, dict):
                    return None

                entries = data.get("entries") or []
                for entry in entries:
                    if entry:
                        return YtDlpVideoInfo.model_validate(dict(entry))
                return None
        except YoutubeDLError as e:
            logger.warning(LogTemplates.YTDLP_FAILED_SEARCH, query, e)
            raise ResolutionError(query, str(e)) from e

    async def resolve(self, query: str) -> Track | None:
        """Return the matching track, or None when nothing matches.

        Raises:
            ResolutionError: yt-dlp could not look the query up.
        """
        track_id = TrackId.parse_url(query)

        if track_id is not None:
            logger.info(LogTemplates.RESOLVE_URL, query)
            info = await asyncio.to_thread(self._extract_info_sync, track_id.watch_url)
            if info is None:
                return None
        else:
            logger.info(LogTemplates.RESOLVE_SEARCH, query)
            info = await asyncio.to_thread(self._search_sync, query)
            if info is None or info.id is None:
                return None
            track_id = TrackId(info.id)

        logger.info(LogTemplates.RESOLVE_FOUND, info.title, track_id.value)
        return Track(id=track_id, title=info.title, source_url=track_id.watch_url)

    def is_url(self, query: str) -> bool:
        return TrackId.parse_url(query) is not None
