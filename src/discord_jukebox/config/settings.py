"""Application Settings and Configuration

Pydantic-based settings management using environment variables.
Settings are loaded from environment variables with support for .env files,
type validation, and sensible defaults. All settings are frozen and immutable
after initialization.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import CommandPrefixStr, TimeoutSeconds, VolumeFloat


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: CommandPrefixStr = Field(
        default="!",
        validation_alias=AliasChoices("command_prefix", "prefix"),
    )


class AudioSettings(BaseModel):
    """Download and playback configuration."""

    model_config = SettingsConfigDict(frozen=True, strict=True, populate_by_name=True)

    default_volume: VolumeFloat = 1.0
    cache_dir: Path = Field(
        default=Path("temp"), validation_alias=AliasChoices("cache_dir", "temp_dir")
    )
    ytdlp_binary: str = Field(
        default="yt-dlp",
        min_length=1,
        validation_alias=AliasChoices("ytdlp_binary", "ytdlp_path"),
    )
    audio_format: str = "mp3"
    extraction_timeout_seconds: TimeoutSeconds = Field(
        default=300,
        validation_alias=AliasChoices("extraction_timeout_seconds", "extraction_timeout"),
    )
    ffmpeg_options: dict[str, str] = Field(
        default_factory=lambda: {
            "before_options": "-nostdin",
            "options": "-vn",
        }
    )

    @field_validator("cache_dir", mode="before")
    @classmethod
    def coerce_cache_dir(cls, v: str | Path) -> Path:
        """Accept a plain string path from the environment."""
        return Path(v) if isinstance(v, str) else v

    @field_validator("audio_format")
    @classmethod
    def validate_audio_format(cls, v: str) -> str:
        """The format doubles as the cached file extension."""
        if not v.isalnum():
            raise ValueError(ErrorMessages.INVALID_AUDIO_FORMAT)
        return v.lower()


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, DEBUG, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX (nested with prefix)
    - AUDIO__CACHE_DIR, AUDIO__YTDLP_BINARY, AUDIO__EXTRACTION_TIMEOUT_SECONDS, etc.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        strict=True,
    )

    environment: Literal["development", "production", "test"] = "development"
    debug: bool = False
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    audio: AudioSettings = Field(default_factory=AudioSettings)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
