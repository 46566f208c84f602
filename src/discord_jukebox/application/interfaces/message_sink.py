"""Port interface for posting status and failure messages to a chat channel."""

from __future__ import annotations

from abc import ABC, abstractmethod

from discord_jukebox.domain.shared.types import ChannelIdField


class MessageSink(ABC):
    """Interface for the session's notification channel."""

    @abstractmethod
    async def send(self, channel_id: ChannelIdField, content: str) -> int | None:
        """Send a message and return its ID, or None if it could not be delivered."""
        ...

    @abstractmethod
    async def edit(self, channel_id: ChannelIdField, message_id: int, content: str) -> bool:
        """Replace the content of a previously sent message."""
        ...
