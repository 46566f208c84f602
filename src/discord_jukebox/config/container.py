"""Dependency Injection Container

Manages the application's dependency graph, providing lazy initialization
and lifecycle management for the registry, adapters, controller and handlers.
Components are created on-demand and cached for reuse throughout the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from discord.ext.commands import Bot

    from ..application.commands.play_track import PlayTrackHandler
    from ..application.commands.stop_playback import StopPlaybackHandler
    from ..application.interfaces.audio_extractor import AudioExtractor
    from ..application.interfaces.audio_resolver import AudioResolver
    from ..application.interfaces.message_sink import MessageSink
    from ..application.interfaces.voice_adapter import VoiceAdapter
    from ..application.services.queue_controller import QueueController
    from ..application.services.session_activity import SessionActivityLog
    from ..domain.music.repository import SessionRegistry
    from ..infrastructure.storage.media_cache import FileMediaCache
    from .settings import Settings


@dataclass
class Container:
    """Dependency injection container.

    This container manages all application dependencies and their lifecycle.
    Components are lazily initialized when first accessed.
    """

    settings: Settings
    _bot: Bot | None = None

    # Session state and storage
    _session_registry: SessionRegistry | None = None
    _media_cache: FileMediaCache | None = None

    # Infrastructure adapters
    _extractor: AudioExtractor | None = None
    _audio_resolver: AudioResolver | None = None
    _voice_adapter: VoiceAdapter | None = None
    _message_sink: MessageSink | None = None

    # Application services
    _queue_controller: QueueController | None = None
    _session_activity: SessionActivityLog | None = None

    # Command handlers
    _play_track_handler: PlayTrackHandler | None = None
    _stop_playback_handler: StopPlaybackHandler | None = None

    def set_bot(self, bot: Bot) -> None:
        """Set the Discord bot instance."""
        self._bot = bot

    @property
    def bot(self) -> Bot:
        """Get the Discord bot instance."""
        if self._bot is None:
            raise RuntimeError(ErrorMessages.BOT_NOT_INITIALIZED)
        return self._bot

    # === Session state and storage ===

    @property
    def session_registry(self) -> SessionRegistry:
        if self._session_registry is None:
            from ..infrastructure.persistence.session_registry import InMemorySessionRegistry

            self._session_registry = InMemorySessionRegistry()
        return self._session_registry

    @property
    def media_cache(self) -> FileMediaCache:
        if self._media_cache is None:
            from ..infrastructure.storage.media_cache import FileMediaCache

            self._media_cache = FileMediaCache(
                self.settings.audio.cache_dir, audio_format=self.settings.audio.audio_format
            )
        return self._media_cache

    # === Infrastructure Adapters ===

    @property
    def extractor(self) -> AudioExtractor:
        """Get the yt-dlp extraction orchestrator."""
        if self._extractor is None:
            from ..infrastructure.audio.ytdlp_extractor import YtDlpExtractionOrchestrator

            self._extractor = YtDlpExtractionOrchestrator(
                self.media_cache, settings=self.settings.audio
            )
        return self._extractor

    @property
    def audio_resolver(self) -> AudioResolver:
        """Get the audio resolver."""
        if self._audio_resolver is None:
            from ..infrastructure.audio.ytdlp_resolver import YtDlpResolver

            self._audio_resolver = YtDlpResolver(self.settings.audio)
        return self._audio_resolver

    @property
    def voice_adapter(self) -> VoiceAdapter:
        """Get the voice adapter."""
        if self._voice_adapter is None:
            from ..infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter

            self._voice_adapter = DiscordVoiceAdapter(self.bot, self.settings.audio)
        return self._voice_adapter

    @property
    def message_sink(self) -> MessageSink:
        if self._message_sink is None:
            from ..infrastructure.discord.adapters.message_sink import DiscordMessageSink

            self._message_sink = DiscordMessageSink(self.bot)
        return self._message_sink

    # === Application Services ===

    @property
    def queue_controller(self) -> QueueController:
        """Get the per-guild queue controller."""
        if self._queue_controller is None:
            from ..application.services.queue_controller import QueueController

            self._queue_controller = QueueController(
                session_registry=self.session_registry,
                voice_adapter=self.voice_adapter,
                media_cache=self.media_cache,
                extractor=self.extractor,
                message_sink=self.message_sink,
            )
        return self._queue_controller

    @property
    def session_activity(self) -> SessionActivityLog:
        """Get the subscriber that logs a summary of each finished session."""
        if self._session_activity is None:
            from ..application.services.session_activity import SessionActivityLog

            self._session_activity = SessionActivityLog()
        return self._session_activity

    # === Command Handlers ===

    @property
    def play_track_handler(self) -> PlayTrackHandler:
        if self._play_track_handler is None:
            from ..application.commands.play_track import PlayTrackHandler

            self._play_track_handler = PlayTrackHandler(
                audio_resolver=self.audio_resolver,
                queue_controller=self.queue_controller,
            )
        return self._play_track_handler

    @property
    def stop_playback_handler(self) -> StopPlaybackHandler:
        if self._stop_playback_handler is None:
            from ..application.commands.stop_playback import StopPlaybackHandler

            self._stop_playback_handler = StopPlaybackHandler(
                queue_controller=self.queue_controller
            )
        return self._stop_playback_handler

    # === Lifecycle ===

    async def initialize(self) -> None:
        """Create the cache directory, index the files already downloaded and subscribe to events."""
        self.media_cache.initialize()
        self.session_activity.start()

    async def shutdown(self) -> None:
        """Tear down every session, then kill in-flight extractions."""
        if self._queue_controller is not None:
            try:
                await self._queue_controller.shutdown()
            except Exception as exc:
                logger.warning("Failed stopping sessions: %r", exc)

        if self._extractor is not None:
            await self._extractor.shutdown()

        if self._session_activity is not None:
            self._session_activity.stop()


def create_container(settings: Settings) -> Container:
    """Create a new dependency injection container."""
    return Container(settings)
