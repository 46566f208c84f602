"""Shared fixtures and in-memory fakes for the jukebox test suite."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from discord_jukebox.application.interfaces.audio_extractor import AudioExtractor
from discord_jukebox.application.interfaces.message_sink import MessageSink
from discord_jukebox.application.interfaces.playback_driver import PlaybackDriver, TerminalHandler
from discord_jukebox.application.interfaces.voice_adapter import VoiceAdapter
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.music.events import PlaybackTerminated
from discord_jukebox.domain.music.value_objects import TrackId
from discord_jukebox.domain.shared.exceptions import ExtractionError, PlaybackError, SetupFailedError

GUILD_ID = 111111111111111111
OTHER_GUILD_ID = 222222222222222222
TEXT_CHANNEL_ID = 333333333333333333
VOICE_CHANNEL_ID = 444444444444444444
USER_ID = 555555555555555555


# ============================================================================
# Fakes
# ============================================================================


class FakePlaybackDriver(PlaybackDriver):
    """Records started files; terminal events are fired explicitly by the test."""

    def __init__(self, guild_id: int) -> None:
        self.guild_id = guild_id
        self.handler: TerminalHandler | None = None
        self.started: list[tuple[Path, Track, str]] = []
        self.stop_calls = 0
        self.fail_start: str | None = None
        self._playing = False

    def set_terminal_handler(self, handler: TerminalHandler) -> None:
        self.handler = handler

    async def start(self, path: Path, track: Track, run_token: str) -> None:
        if self.fail_start is not None:
            raise PlaybackError(self.fail_start)
        self.started.append((path, track, run_token))
        self._playing = True

    def stop(self) -> None:
        self.stop_calls += 1
        self._playing = False

    def is_playing(self) -> bool:
        return self._playing

    @property
    def titles(self) -> list[str]:
        return [track.title for _, track, _ in self.started]

    async def finish(self, error: str | None = None, *, index: int = -1) -> PlaybackTerminated:
        """Deliver the terminal event for a started item, as the device would."""
        _, track, token = self.started[index]
        self._playing = False
        if error is None:
            event = PlaybackTerminated.completed(self.guild_id, track.id, token)
        else:
            event = PlaybackTerminated.errored(self.guild_id, track.id, token, error)
        assert self.handler is not None
        await self.handler(event)
        return event


class FakeVoiceAdapter(VoiceAdapter):
    def __init__(self) -> None:
        self.connected: set[int] = set()
        self.connect_calls: list[tuple[int, int]] = []
        self.disconnect_calls: list[int] = []
        self.drivers: dict[int, FakePlaybackDriver] = {}
        self.connect_error: Exception | None = None
        self.player_error: Exception | None = None

    async def connect(self, guild_id: int, channel_id: int) -> None:
        self.connect_calls.append((guild_id, channel_id))
        if self.connect_error is not None:
            raise self.connect_error
        self.connected.add(guild_id)

    async def disconnect(self, guild_id: int) -> bool:
        self.disconnect_calls.append(guild_id)
        self.connected.discard(guild_id)
        return True

    def create_player(self, guild_id: int) -> PlaybackDriver:
        if self.player_error is not None:
            raise self.player_error
        driver = FakePlaybackDriver(guild_id)
        self.drivers[guild_id] = driver
        return driver

    def is_connected(self, guild_id: int) -> bool:
        return guild_id in self.connected


class FakeMessageSink(MessageSink):
    def __init__(self) -> None:
        self.sent: list[tuple[int, int, str]] = []
        self.edits: list[tuple[int, int, str]] = []
        self.log: list[str] = []
        self._next_id = 1000

    async def send(self, channel_id: int, content: str) -> int | None:
        self._next_id += 1
        self.sent.append((channel_id, self._next_id, content))
        self.log.append(content)
        return self._next_id

    async def edit(self, channel_id: int, message_id: int, content: str) -> bool:
        self.edits.append((channel_id, message_id, content))
        self.log.append(content)
        return True

    def errors(self) -> list[str]:
        return [content for _, _, content in self.sent if content.startswith("Error playing song")]


class FakeExtractor(AudioExtractor):
    """Writes a small file into the media cache instead of running yt-dlp."""

    def __init__(self, media_cache) -> None:
        self.media_cache = media_cache
        self.calls: list[str] = []
        self.failures: dict[str, str] = {}
        self.gates: dict[str, asyncio.Event] = {}
        self.shutdown_called = False

    def hold(self, track_id: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[track_id] = gate
        return gate

    async def extract(self, track_id: TrackId, source_url: str) -> Path:
        self.calls.append(track_id.value)
        gate = self.gates.get(track_id.value)
        if gate is not None:
            await gate.wait()
        if track_id.value in self.failures:
            raise ExtractionError(track_id.value, self.failures[track_id.value])

        path = self.media_cache.path_for(track_id)
        path.write_bytes(b"ID3")
        self.media_cache.put(track_id, path)
        return path

    async def shutdown(self) -> None:
        self.shutdown_called = True


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


def make_track(track_id: str = "dQw4w9WgXcQ", title: str | None = None) -> Track:
    tid = TrackId(track_id)
    return Track(id=tid, title=title or f"Song {track_id}", source_url=tid.watch_url)


@pytest.fixture
def sample_track():
    """Create a sample track for testing."""
    return make_track("dQw4w9WgXcQ", "Never Gonna Give You Up")


@pytest.fixture
def request_context():
    """Factory for the requester's guild, channels and identity."""
    from discord_jukebox.application.services.queue_controller import RequestContext

    def _make(guild_id: int = GUILD_ID, voice_channel_id: int | None = VOICE_CHANNEL_ID):
        return RequestContext(
            guild_id=guild_id,
            text_channel_id=TEXT_CHANNEL_ID,
            voice_channel_id=voice_channel_id,
            user_id=USER_ID,
            user_name="Tester",
        )

    return _make


# ============================================================================
# Controller Fixtures
# ============================================================================


@pytest.fixture
def media_cache(tmp_path):
    from discord_jukebox.infrastructure.storage.media_cache import FileMediaCache

    cache = FileMediaCache(tmp_path / "cache")
    cache.initialize()
    return cache


@pytest.fixture
def event_bus():
    from discord_jukebox.domain.shared.events import EventBus

    return EventBus()


@pytest.fixture
def session_registry():
    from discord_jukebox.infrastructure.persistence.session_registry import (
        InMemorySessionRegistry,
    )

    return InMemorySessionRegistry()


@pytest.fixture
def voice_adapter():
    return FakeVoiceAdapter()


@pytest.fixture
def message_sink():
    return FakeMessageSink()


@pytest.fixture
def extractor(media_cache):
    return FakeExtractor(media_cache)


@pytest.fixture
def controller(session_registry, voice_adapter, media_cache, extractor, message_sink, event_bus):
    from discord_jukebox.application.services.queue_controller import QueueController

    return QueueController(
        session_registry=session_registry,
        voice_adapter=voice_adapter,
        media_cache=media_cache,
        extractor=extractor,
        message_sink=message_sink,
        event_bus=event_bus,
    )
