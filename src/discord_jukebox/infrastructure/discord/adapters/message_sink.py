"""Discord message sink posting session status lines to text channels."""

from __future__ import annotations

import logging

import discord

from discord_jukebox.application.interfaces.message_sink import MessageSink
from discord_jukebox.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


class DiscordMessageSink(MessageSink):
    """Sends and edits plain text messages; delivery failures are logged, never raised."""

    def __init__(self, bot: discord.Client) -> None:
        self._bot = bot

    def _get_channel(self, channel_id: int) -> discord.abc.Messageable | None:
        channel = self._bot.get_channel(channel_id)
        if isinstance(channel, discord.abc.Messageable):
            return channel
        return None

    async def send(self, channel_id: int, content: str) -> int | None:
        channel = self._get_channel(channel_id)
        if channel is None:
            logger.warning(LogTemplates.NOTIFY_FAILED, channel_id, "channel not found")
            return None

        try:
            message = await channel.send(content)
        except discord.HTTPException as e:
            logger.warning(LogTemplates.NOTIFY_FAILED, channel_id, e)
            return None
        return message.id

    async def edit(self, channel_id: int, message_id: int, content: str) -> bool:
        channel = self._get_channel(channel_id)
        if channel is None:
            return False

        try:
            message = channel.get_partial_message(message_id)
            await message.edit(content=content)
        except (AttributeError, discord.HTTPException) as e:
            logger.debug(LogTemplates.NOTIFY_FAILED, channel_id, e)
            return False
        return True
