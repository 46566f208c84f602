"""Audio infrastructure - yt-dlp resolver and extractor, FFmpeg playback driver."""

from discord_jukebox.infrastructure.audio.ffmpeg_player import FFmpegConfig, FFmpegPlaybackDriver
from discord_jukebox.infrastructure.audio.ytdlp_extractor import YtDlpExtractionOrchestrator
from discord_jukebox.infrastructure.audio.ytdlp_resolver import YtDlpResolver

__all__ = [
    "FFmpegConfig",
    "FFmpegPlaybackDriver",
    "YtDlpExtractionOrchestrator",
    "YtDlpResolver",
]
