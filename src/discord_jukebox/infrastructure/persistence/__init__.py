"""Session state storage."""

from discord_jukebox.infrastructure.persistence.session_registry import InMemorySessionRegistry

__all__ = ["InMemorySessionRegistry"]
