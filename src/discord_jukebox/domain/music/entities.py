"""Core domain entities for the music bounded context."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.music.value_objects import PipelineStage, TrackId
from discord_jukebox.domain.shared.datetime_utils import utcnow
from discord_jukebox.domain.shared.exceptions import InvalidOperationError
from discord_jukebox.domain.shared.messages import ErrorMessages
from discord_jukebox.domain.shared.types import (
    ChannelIdField,
    DiscordSnowflake,
    HttpUrlStr,
    NonEmptyStr,
    NonNegativeInt,
    TrackTitleStr,
    UtcDatetimeField,
)


class Track(BaseModel):
    """Immutable value object representing a requested media item."""

    model_config = ConfigDict(frozen=True, strict=True)

    id: TrackId
    title: TrackTitleStr
    source_url: HttpUrlStr

    # Request metadata (set when queued)
    requested_by_id: DiscordSnowflake | None = None
    requested_by_name: NonEmptyStr | None = None
    requested_at: UtcDatetimeField | None = None

    def with_requester(
        self, user_id: DiscordSnowflake, user_name: NonEmptyStr, requested_at: datetime | None = None
    ) -> Track:
        """Return a copy of this track with requester metadata populated."""
        return self.model_copy(
            update={
                "requested_by_id": user_id,
                "requested_by_name": user_name,
                "requested_at": requested_at or utcnow(),
            }
        )


class SessionQueue(BaseModel):
    """Playback backlog and device handles for a single Discord guild.

    The head of ``backlog`` is the item currently playing (or about to).
    The session is only registered while the backlog is non-empty.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    guild_id: DiscordSnowflake
    voice_channel_id: ChannelIdField
    text_channel_id: ChannelIdField
    session_id: NonEmptyStr = Field(default_factory=lambda: uuid4().hex)
    backlog: list[Track] = Field(default_factory=list)

    # Playback device bound to the guild's voice connection
    player: Any = None

    stage: PipelineStage = PipelineStage.IDLE
    run_token: str | None = None
    current_download: TrackId | None = None
    status_message_id: int | None = None
    tracks_processed: NonNegativeInt = 0

    created_at: UtcDatetimeField = Field(default_factory=utcnow)
    last_activity: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def head(self) -> Track | None:
        return self.backlog[0] if self.backlog else None

    @property
    def queue_length(self) -> int:
        return len(self.backlog)

    @property
    def has_tracks(self) -> bool:
        return bool(self.backlog)

    def touch(self) -> None:
        """Update last activity timestamp."""
        self.last_activity = utcnow()

    def push(self, track: Track) -> int:
        """Append a track to the backlog tail and return its zero-based position."""
        self.backlog.append(track)
        self.touch()
        return len(self.backlog) - 1

    def pop_head(self) -> Track:
        """Remove the head item once it reached a terminal state."""
        if not self.backlog:
            raise InvalidOperationError(
                operation="pop_head",
                current_state=self.stage.value,
                message=ErrorMessages.EMPTY_BACKLOG,
            )

        track = self.backlog.pop(0)
        self.tracks_processed += 1
        self.current_download = None
        self.run_token = None
        self.status_message_id = None
        self.stage = PipelineStage.TERMINAL
        self.touch()
        return track

    def clear_backlog(self) -> int:
        """Clear all tracks from the backlog and return the count removed."""
        count = len(self.backlog)
        self.backlog.clear()
        self.current_download = None
        self.run_token = None
        self.stage = PipelineStage.IDLE
        self.touch()
        return count

    def begin_run(self) -> str:
        """Start a fresh pipeline run for the head item and return its token."""
        if not self.backlog:
            raise InvalidOperationError(
                operation="begin_run",
                current_state=self.stage.value,
                message=ErrorMessages.EMPTY_BACKLOG,
            )

        self.run_token = uuid4().hex
        self.stage = PipelineStage.RESOLVING
        self.touch()
        return self.run_token

    def is_current_run(self, run_token: str | None) -> bool:
        return run_token is not None and self.run_token == run_token

    def set_stage(self, stage: PipelineStage) -> None:
        self.stage = stage
        if stage == PipelineStage.DOWNLOADING and self.head is not None:
            self.current_download = self.head.id
        else:
            self.current_download = None
        self.touch()
