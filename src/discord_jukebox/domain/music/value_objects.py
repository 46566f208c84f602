"""Immutable value objects for the music bounded context."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Annotated, Final

from pydantic import PlainSerializer, PlainValidator

from discord_jukebox.domain.shared.messages import ErrorMessages

YOUTUBE_WATCH_HOST: Final[str] = "https://www.youtube.com/watch?v="

# Canonical watch URL (v= anywhere in the query string) and the youtu.be short link.
_YOUTUBE_ID_PATTERNS: Final[tuple[re.Pattern[str], ...]] = (
    re.compile(r"youtube\.com/watch\?(?:[^#]*&)?v=([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtu\.be/([a-zA-Z0-9_-]{11})"),
)


@dataclass(frozen=True)
class TrackId:
    """Opaque media item identifier, typically a YouTube video ID."""

    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError(ErrorMessages.EMPTY_TRACK_ID)

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)

    @property
    def watch_url(self) -> str:
        return f"{YOUTUBE_WATCH_HOST}{self.value}"

    @classmethod
    def parse_url(cls, url: str) -> TrackId | None:
        """Extract the video ID from a watch URL or a youtu.be short link, without any lookup."""
        for pattern in _YOUTUBE_ID_PATTERNS:
            match = pattern.search(url)
            if match:
                return cls(match.group(1))
        return None


# Serializes as plain string in JSON, stores as TrackId in the model.
TrackIdField = Annotated[
    TrackId,
    PlainValidator(lambda v: TrackId(v) if isinstance(v, str) else v),
    PlainSerializer(lambda v: v.value, return_type=str),
]


class PipelineStage(Enum):
    """Where the head item of a session currently is in the download-then-play pipeline.

    RESOLVING -> CACHE_HIT | DOWNLOADING -> PLAYING -> TERMINAL
    """

    IDLE = "idle"
    RESOLVING = "resolving"
    CACHE_HIT = "cache_hit"
    DOWNLOADING = "downloading"
    PLAYING = "playing"
    TERMINAL = "terminal"

    @property
    def is_active(self) -> bool:
        return self in {
            PipelineStage.RESOLVING,
            PipelineStage.CACHE_HIT,
            PipelineStage.DOWNLOADING,
            PipelineStage.PLAYING,
        }


class TerminalOutcome(Enum):
    """How the playback device finished rendering an item."""

    COMPLETED = "completed"
    ERRORED = "errored"


class SessionDestroyReason(Enum):
    """Reasons a session can be torn down."""

    STOPPED = "stopped"
    QUEUE_EXHAUSTED = "queue_exhausted"
    SETUP_FAILED = "setup_failed"
    SHUTDOWN = "shutdown"
