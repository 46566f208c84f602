"""Prefix-command music cog delegating to the application command handlers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import discord
from discord.ext import commands

from discord_jukebox.application.commands.play_track import PlayTrackCommand
from discord_jukebox.application.commands.stop_playback import StopPlaybackCommand
from discord_jukebox.domain.shared.messages import DiscordUIMessages, ErrorMessages

if TYPE_CHECKING:
    from ....config.container import Container

logger = logging.getLogger(__name__)


class MusicCog(commands.Cog):
    def __init__(self, bot: commands.Bot, container: Container) -> None:
        self.bot = bot
        self.container = container

    @staticmethod
    def _voice_channel_id(author: discord.abc.User) -> int | None:
        voice = getattr(author, "voice", None)
        channel = getattr(voice, "channel", None)
        return channel.id if channel is not None else None

    @commands.command(name="play")
    async def play(self, ctx: commands.Context, *, query: str = "") -> None:
        """Play a YouTube link or the first search result, or queue it."""
        if ctx.guild is None:
            await ctx.send(DiscordUIMessages.STATE_SERVER_ONLY)
            return

        author = ctx.author
        command = PlayTrackCommand(
            guild_id=ctx.guild.id,
            text_channel_id=ctx.channel.id,
            voice_channel_id=self._voice_channel_id(author),
            user_id=author.id,
            user_name=getattr(author, "display_name", None) or author.name,
            query=query,
        )

        result = await self.container.play_track_handler.handle(command)
        if not result.is_success:
            logger.info("Play rejected in guild %s: %s", ctx.guild.id, result.status.value)

        # The session's status message already says "Preparing to play"
        if result.announced:
            return
        await ctx.send(result.message)

    @commands.command(name="stop")
    async def stop(self, ctx: commands.Context) -> None:
        """Clear the queue, stop playing and leave the voice channel."""
        if ctx.guild is None:
            await ctx.send(DiscordUIMessages.STATE_SERVER_ONLY)
            return

        result = await self.container.stop_playback_handler.handle(
            StopPlaybackCommand(guild_id=ctx.guild.id, user_id=ctx.author.id)
        )
        await ctx.send(result.message)


async def setup(bot: commands.Bot) -> None:
    container = getattr(bot, "container", None)
    if container is None:
        raise RuntimeError(ErrorMessages.CONTAINER_NOT_FOUND)

    await bot.add_cog(MusicCog(bot, container))
