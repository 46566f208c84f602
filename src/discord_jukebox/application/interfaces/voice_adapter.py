"""Port interface for Discord voice transport operations."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord_jukebox.domain.shared.types import ChannelIdField, DiscordSnowflake

if TYPE_CHECKING:
    from .playback_driver import PlaybackDriver


class VoiceAdapter(ABC):
    """Interface for the voice connection a guild session plays through."""

    @abstractmethod
    async def connect(self, guild_id: DiscordSnowflake, channel_id: ChannelIdField) -> None:
        """Join a voice channel.

        Raises:
            SetupFailedError: If the connection could not be established.
        """
        ...

    @abstractmethod
    async def disconnect(self, guild_id: DiscordSnowflake) -> bool:
        """Leave voice in a guild. Returns True when no connection remains."""
        ...

    @abstractmethod
    def create_player(self, guild_id: DiscordSnowflake) -> "PlaybackDriver":
        """Create the playback device bound to the guild's current voice connection.

        Raises:
            SetupFailedError: If the guild has no usable voice connection.
        """
        ...

    @abstractmethod
    def is_connected(self, guild_id: DiscordSnowflake) -> bool:
        ...
