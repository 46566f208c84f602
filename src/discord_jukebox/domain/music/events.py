"""Playback device notifications for the music bounded context."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from discord_jukebox.domain.shared.datetime_utils import utcnow
from discord_jukebox.domain.shared.types import DiscordSnowflake, NonEmptyStr, UtcDatetimeField

from .value_objects import TerminalOutcome, TrackId, TrackIdField


class PlaybackTerminated(BaseModel):
    """Terminal notification raised by a playback device for one rendered item.

    ``run_token`` identifies the pipeline run that started the playback, so a
    late event from a stopped or replaced session can be recognised and dropped.
    """

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    track_id: TrackIdField
    run_token: NonEmptyStr
    outcome: TerminalOutcome = TerminalOutcome.COMPLETED
    error: str | None = None
    timestamp: UtcDatetimeField = Field(default_factory=utcnow)

    @property
    def is_error(self) -> bool:
        return self.outcome == TerminalOutcome.ERRORED

    @classmethod
    def completed(cls, guild_id: int, track_id: TrackId, run_token: str) -> PlaybackTerminated:
        return cls(guild_id=guild_id, track_id=track_id, run_token=run_token)

    @classmethod
    def errored(
        cls, guild_id: int, track_id: TrackId, run_token: str, error: str
    ) -> PlaybackTerminated:
        return cls(
            guild_id=guild_id,
            track_id=track_id,
            run_token=run_token,
            outcome=TerminalOutcome.ERRORED,
            error=error,
        )
