"""
Shared Domain Kernel

Contains exceptions, messages, constrained types and the event bus shared across the project.
"""

from discord_jukebox.domain.shared.exceptions import (
    DomainError,
    ExtractionError,
    InvalidOperationError,
    PlaybackError,
    ResolutionError,
    SetupFailedError,
)

__all__ = [
    "DomainError",
    "InvalidOperationError",
    "SetupFailedError",
    "ResolutionError",
    "ExtractionError",
    "PlaybackError",
]
