"""Local media storage."""

from discord_jukebox.infrastructure.storage.media_cache import FileMediaCache

__all__ = ["FileMediaCache"]
