"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (in-memory session registry)
- Storage (file-backed media cache)
- Discord (bot, cogs, adapters)
- Audio (yt-dlp, FFmpeg)
"""

from discord_jukebox.infrastructure.discord.adapters.voice_adapter import DiscordVoiceAdapter
from discord_jukebox.infrastructure.discord.bot import create_bot

__all__ = [
    "create_bot",
    "DiscordVoiceAdapter",
]
