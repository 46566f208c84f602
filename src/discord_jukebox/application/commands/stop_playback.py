"""Command and handler for stopping playback and leaving the voice channel."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from discord_jukebox.application.services.queue_controller import StopStatus as OutcomeStatus
from discord_jukebox.domain.shared.messages import DiscordUIMessages
from discord_jukebox.domain.shared.types import DiscordSnowflake, NonNegativeInt

if TYPE_CHECKING:
    from ..services.queue_controller import QueueController


class StopStatus(Enum):
    """Status codes for stop results."""

    SUCCESS = "success"
    NOTHING_PLAYING = "nothing_playing"


class StopPlaybackCommand(BaseModel):
    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    user_id: DiscordSnowflake


class StopResult(BaseModel):

    status: StopStatus
    message: str
    tracks_cleared: NonNegativeInt = 0

    @property
    def is_success(self) -> bool:
        return self.status == StopStatus.SUCCESS

    @classmethod
    def success(cls, tracks_cleared: int = 0) -> StopResult:
        return cls(
            status=StopStatus.SUCCESS,
            message=DiscordUIMessages.ACTION_STOPPED,
            tracks_cleared=tracks_cleared,
        )

    @classmethod
    def error(cls, status: StopStatus, message: str) -> StopResult:
        return cls(status=status, message=message)


class StopPlaybackHandler:

    def __init__(self, *, queue_controller: QueueController) -> None:
        self._queue_controller = queue_controller

    async def handle(self, command: StopPlaybackCommand) -> StopResult:
        outcome = await self._queue_controller.stop(command.guild_id)

        if outcome.status == OutcomeStatus.NOTHING_PLAYING:
            return StopResult.error(
                StopStatus.NOTHING_PLAYING, DiscordUIMessages.STATE_NOTHING_PLAYING
            )

        return StopResult.success(outcome.tracks_cleared)
