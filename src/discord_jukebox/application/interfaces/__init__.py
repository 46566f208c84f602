"""
Application Interfaces (Ports)

Abstract interfaces that define contracts between the application
layer and infrastructure adapters. These are the "ports" in
hexagonal architecture.
"""

from discord_jukebox.application.interfaces.audio_extractor import AudioExtractor
from discord_jukebox.application.interfaces.audio_resolver import AudioResolver
from discord_jukebox.application.interfaces.media_cache import MediaCache
from discord_jukebox.application.interfaces.message_sink import MessageSink
from discord_jukebox.application.interfaces.playback_driver import PlaybackDriver
from discord_jukebox.application.interfaces.voice_adapter import VoiceAdapter

__all__ = [
    "AudioExtractor",
    "AudioResolver",
    "MediaCache",
    "MessageSink",
    "PlaybackDriver",
    "VoiceAdapter",
]
