"""Command and handler for playing a track from a query or URL."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

from discord_jukebox.application.services.queue_controller import (
    EnqueueStatus,
    RequestContext,
)
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.domain.shared.messages import DiscordUIMessages
from discord_jukebox.domain.shared.types import (
    ChannelIdField,
    DiscordSnowflake,
    NonEmptyStr,
    NonNegativeInt,
)

if TYPE_CHECKING:
    from ..interfaces.audio_resolver import AudioResolver
    from ..services.queue_controller import QueueController


class PlayTrackStatus(Enum):
    """Status codes for play track results."""

    NOW_PLAYING = "now_playing"
    QUEUED = "queued"
    NO_CHANNEL = "no_channel"
    EMPTY_QUERY = "empty_query"
    TRACK_NOT_FOUND = "track_not_found"
    RESOLUTION_ERROR = "resolution_error"
    SETUP_FAILED = "setup_failed"


class PlayTrackCommand(BaseModel):
    """Request to resolve a query/URL and enqueue it for the requester's guild."""

    model_config = ConfigDict(frozen=True, strict=True)

    guild_id: DiscordSnowflake
    text_channel_id: ChannelIdField
    voice_channel_id: ChannelIdField | None = None
    user_id: DiscordSnowflake
    user_name: NonEmptyStr
    query: str = ""

    requested_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @field_validator("query", mode="before")
    @classmethod
    def _strip_query(cls, v: str) -> str:
        if isinstance(v, str):
            return v.strip()
        return v

    def to_context(self) -> RequestContext:
        return RequestContext(
            guild_id=self.guild_id,
            text_channel_id=self.text_channel_id,
            voice_channel_id=self.voice_channel_id,
            user_id=self.user_id,
            user_name=self.user_name,
        )


class PlayTrackResult(BaseModel):
    """Result of a play track command."""

    model_config = ConfigDict(frozen=True, strict=True)

    status: PlayTrackStatus
    message: str
    track: Track | None = None
    queue_position: NonNegativeInt | None = None
    queue_length: NonNegativeInt = 0
    announced: bool = False

    @property
    def is_success(self) -> bool:
        return self.status in {PlayTrackStatus.NOW_PLAYING, PlayTrackStatus.QUEUED}

    @property
    def started_playing(self) -> bool:
        return self.status == PlayTrackStatus.NOW_PLAYING

    @classmethod
    def success(
        cls,
        track: Track,
        queue_position: int,
        queue_length: int,
        started_playing: bool = False,
        announced: bool = False,
    ) -> PlayTrackResult:
        if started_playing:
            status = PlayTrackStatus.NOW_PLAYING
            message = DiscordUIMessages.STATUS_PREPARING.format(title=track.title)
        else:
            status = PlayTrackStatus.QUEUED
            message = DiscordUIMessages.STATUS_QUEUED.format(
                title=track.title, position=queue_position
            )

        return cls(
            status=status,
            message=message,
            track=track,
            queue_position=queue_position,
            queue_length=queue_length,
            announced=announced,
        )

    @classmethod
    def error(cls, status: PlayTrackStatus, message: str) -> PlayTrackResult:
        return cls(status=status, message=message)


class PlayTrackHandler:
    """Validates the request, resolves the query, and hands the track to the controller."""

    def __init__(
        self,
        *,
        audio_resolver: AudioResolver,
        queue_controller: QueueController,
    ) -> None:
        self._audio_resolver = audio_resolver
        self._queue_controller = queue_controller

    async def handle(self, command: PlayTrackCommand) -> PlayTrackResult:
        if command.voice_channel_id is None:
            return PlayTrackResult.error(
                PlayTrackStatus.NO_CHANNEL, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE
            )

        if not command.query:
            return PlayTrackResult.error(
                PlayTrackStatus.EMPTY_QUERY, DiscordUIMessages.STATE_EMPTY_QUERY
            )

        try:
            track = await self._audio_resolver.resolve(command.query)
        except ResolutionError as e:
            return PlayTrackResult.error(
                PlayTrackStatus.RESOLUTION_ERROR,
                DiscordUIMessages.ERROR_RESOLUTION.format(error=e.cause or e),
            )

        if track is None:
            return PlayTrackResult.error(
                PlayTrackStatus.TRACK_NOT_FOUND,
                DiscordUIMessages.ERROR_TRACK_NOT_FOUND.format(query=command.query),
            )

        track = track.with_requester(
            user_id=command.user_id,
            user_name=command.user_name,
            requested_at=command.requested_at,
        )

        outcome = await self._queue_controller.enqueue_or_start(track, command.to_context())

        if outcome.status == EnqueueStatus.NO_CHANNEL:
            return PlayTrackResult.error(
                PlayTrackStatus.NO_CHANNEL, DiscordUIMessages.STATE_NEED_TO_BE_IN_VOICE
            )
        if outcome.status == EnqueueStatus.SETUP_FAILED:
            return PlayTrackResult.error(
                PlayTrackStatus.SETUP_FAILED,
                DiscordUIMessages.ERROR_SETUP_FAILED.format(error=outcome.error),
            )

        return PlayTrackResult.success(
            track=outcome.track or track,
            queue_position=outcome.position,
            queue_length=outcome.queue_length,
            started_playing=outcome.started,
            announced=outcome.announced,
        )
