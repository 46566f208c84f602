"""Discord voice adapter implementing VoiceAdapter for connections and playback devices."""

from __future__ import annotations

import asyncio
import logging

import discord

from discord_jukebox.application.interfaces.playback_driver import PlaybackDriver
from discord_jukebox.application.interfaces.voice_adapter import VoiceAdapter
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.shared.exceptions import SetupFailedError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from discord_jukebox.infrastructure.audio.ffmpeg_player import FFmpegPlaybackDriver

logger = logging.getLogger(__name__)

CONNECT_TIMEOUT: float = 10.0


class DiscordVoiceAdapter(VoiceAdapter):
    def __init__(self, bot: discord.Client, settings: AudioSettings | None = None) -> None:
        self._bot = bot
        self._settings = settings or AudioSettings()

    def _get_voice_client(self, guild_id: int) -> discord.VoiceClient | None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            return None

        vc = guild.voice_client
        return vc if isinstance(vc, discord.VoiceClient) else None

    async def connect(self, guild_id: int, channel_id: int) -> None:
        guild = self._bot.get_guild(guild_id)
        if not guild:
            logger.warning(LogTemplates.GUILD_NOT_FOUND, guild_id)
            raise SetupFailedError(guild_id, ErrorMessages.VOICE_CONNECT_FAILED)

        channel = guild.get_channel(channel_id)
        if not isinstance(channel, discord.VoiceChannel | discord.StageChannel):
            logger.warning(LogTemplates.CHANNEL_NOT_VOICE, channel_id)
            raise SetupFailedError(guild_id, ErrorMessages.VOICE_CONNECT_FAILED)

        try:
            async with asyncio.timeout(CONNECT_TIMEOUT):
                vc = self._get_voice_client(guild_id)
                if vc is not None and vc.is_connected():
                    if vc.channel is None or vc.channel.id != channel_id:
                        await vc.move_to(channel)
                else:
                    await channel.connect(self_deaf=False)
        except TimeoutError as e:
            logger.error(LogTemplates.VOICE_CONNECTION_TIMEOUT, channel_id)
            raise SetupFailedError(guild_id, str(e) or ErrorMessages.VOICE_CONNECT_FAILED) from e
        except discord.Forbidden as e:
            logger.error(LogTemplates.VOICE_NO_PERMISSION, channel_id)
            raise SetupFailedError(guild_id, str(e)) from e
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            raise SetupFailedError(guild_id, str(e)) from e

        logger.info(LogTemplates.VOICE_CONNECTED, channel.name, guild.name)

    async def disconnect(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        if not vc:
            return True  # Not connected

        try:
            await vc.disconnect(force=True)
            logger.info(LogTemplates.VOICE_DISCONNECTED, guild_id)
            return True
        except Exception:
            logger.exception(LogTemplates.VOICE_CLEANUP_ERROR, guild_id)
            return False

    def create_player(self, guild_id: int) -> PlaybackDriver:
        vc = self._get_voice_client(guild_id)
        if vc is None or not vc.is_connected():
            logger.warning(LogTemplates.VOICE_NOT_CONNECTED, guild_id)
            raise SetupFailedError(guild_id, ErrorMessages.PLAYER_NOT_CONNECTED)

        return FFmpegPlaybackDriver(vc, guild_id, settings=self._settings)

    def is_connected(self, guild_id: int) -> bool:
        vc = self._get_voice_client(guild_id)
        return vc is not None and vc.is_connected()
