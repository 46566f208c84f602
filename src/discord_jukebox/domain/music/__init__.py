"""
Music Bounded Context

Domain logic for requested tracks, per-guild session queues, and playback notifications.
"""

from discord_jukebox.domain.music.entities import SessionQueue, Track
from discord_jukebox.domain.music.events import PlaybackTerminated
from discord_jukebox.domain.music.repository import SessionRegistry
from discord_jukebox.domain.music.value_objects import PipelineStage, TerminalOutcome, TrackId

__all__ = [
    # Entities
    "Track",
    "SessionQueue",
    # Value Objects
    "TrackId",
    "PipelineStage",
    "TerminalOutcome",
    # Events
    "PlaybackTerminated",
    # Repository
    "SessionRegistry",
]
