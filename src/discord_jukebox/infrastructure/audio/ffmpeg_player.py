"""
FFmpeg Playback Driver

Renders cached audio files into a guild's voice connection with discord.py's
FFmpegPCMAudio and reports how each item ended.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import discord

from discord_jukebox.application.interfaces.playback_driver import PlaybackDriver, TerminalHandler
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.events import PlaybackTerminated
from discord_jukebox.domain.shared.exceptions import PlaybackError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_jukebox.domain.music.entities import Track

logger = logging.getLogger(__name__)


@dataclass
class FFmpegConfig:
    """Configuration for FFmpeg audio processing."""

    before_options: str = "-nostdin"
    options: str = "-vn"

    # Volume (handled by PCMVolumeTransformer)
    default_volume: float = 1.0

    @classmethod
    def from_settings(cls, settings: AudioSettings) -> FFmpegConfig:
        return cls(
            before_options=settings.ffmpeg_options.get("before_options", "-nostdin"),
            options=settings.ffmpeg_options.get("options", "-vn"),
            default_volume=settings.default_volume,
        )

    def get_before_options(self) -> str:
        """Get FFmpeg before_options string."""
        return self.before_options

    def get_options(self) -> str:
        """Get FFmpeg options string."""
        return self.options


class FFmpegPlaybackDriver(PlaybackDriver):
    """Playback device bound to one guild's ``discord.VoiceClient``.

    discord.py calls the ``after`` callback from its audio thread; the
    terminal notification is bridged back onto the event loop with
    ``asyncio.run_coroutine_threadsafe``.
    """

    def __init__(
        self,
        voice_client: discord.VoiceClient,
        guild_id: int,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
        settings: AudioSettings | None = None,
        config: FFmpegConfig | None = None,
    ) -> None:
        self._voice_client = voice_client
        self._guild_id = guild_id
        self._loop = loop
        self._settings = settings or AudioSettings()
        self._config = config or FFmpegConfig.from_settings(self._settings)
        self._handler: TerminalHandler | None = None

    @property
    def guild_id(self) -> int:
        return self._guild_id

    def set_terminal_handler(self, handler: TerminalHandler) -> None:
        self._handler = handler

    def create_source(self, path: Path, volume: float | None = None) -> discord.PCMVolumeTransformer:
        """Create an audio source for a local file.

        Args:
            path: The cached audio file.
            volume: Optional volume level (0.0-2.0).

        Returns:
            A PCMVolumeTransformer wrapping an FFmpegPCMAudio source.
        """
        source = discord.FFmpegPCMAudio(
            str(path),
            before_options=self._config.get_before_options(),
            options=self._config.get_options(),
        )

        vol = volume if volume is not None else self._config.default_volume
        return discord.PCMVolumeTransformer(source, volume=vol)

    async def start(self, path: Path, track: Track, run_token: str) -> None:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()

        if not self._voice_client.is_connected():
            raise PlaybackError(ErrorMessages.PLAYER_NOT_CONNECTED)

        if self._voice_client.is_playing() or self._voice_client.is_paused():
            self._voice_client.stop()

        try:
            source = self.create_source(path)
            self._voice_client.play(source, after=self._make_after(track, run_token))
        except discord.ClientException as e:
            logger.error(LogTemplates.VOICE_CLIENT_ERROR, e)
            raise PlaybackError(str(e)) from e
        except Exception as e:
            raise PlaybackError(str(e)) from e

    def stop(self) -> None:
        """Halt rendering; the pending ``after`` callback still fires once."""
        if self._voice_client.is_playing() or self._voice_client.is_paused():
            self._voice_client.stop()

    def is_playing(self) -> bool:
        return self._voice_client.is_playing()

    def _make_after(self, track: Track, run_token: str) -> Callable[[Exception | None], None]:
        fired = False

        def after(error: Exception | None) -> None:
            nonlocal fired
            if fired:
                return
            fired = True

            logger.info(LogTemplates.TRACK_ENDED, self._guild_id, error)
            if error is not None:
                event = PlaybackTerminated.errored(self._guild_id, track.id, run_token, str(error))
            else:
                event = PlaybackTerminated.completed(self._guild_id, track.id, run_token)

            if self._loop is None or self._loop.is_closed():
                return
            asyncio.run_coroutine_threadsafe(self._dispatch(event), self._loop)

        return after

    async def _dispatch(self, event: PlaybackTerminated) -> None:
        if self._handler is None:
            logger.warning(LogTemplates.PLAYBACK_NO_HANDLER, self._guild_id)
            return

        try:
            await self._handler(event)
        except Exception:
            logger.exception(LogTemplates.PLAYBACK_HANDLER_ERROR, self._guild_id)
