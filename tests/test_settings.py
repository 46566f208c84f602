"""
Unit Tests for Application Settings Configuration

Tests for:
- Default values
- Nested settings loaded from environment variables
- Validation of audio and logging options
- Settings caching and clearing
"""

from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from discord_jukebox.config.settings import (
    AudioSettings,
    DiscordSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Run without a .env file or inherited bot variables."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "DISCORD__TOKEN",
        "AUDIO__CACHE_DIR",
        "AUDIO__YTDLP_BINARY",
        "LOG_LEVEL",
        "ENVIRONMENT",
    ):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


# =============================================================================
# DiscordSettings Tests
# =============================================================================


class TestDiscordSettings:
    def test_defaults(self):
        discord = DiscordSettings()

        assert discord.token.get_secret_value() == ""
        assert discord.command_prefix == "!"

    def test_token_alias(self):
        discord = DiscordSettings(bot_token=SecretStr("aliased-token"))

        assert discord.token.get_secret_value() == "aliased-token"

    def test_prefix_maximum_length(self):
        with pytest.raises(ValidationError, match="at most 5 characters"):
            DiscordSettings(command_prefix="!@#$%^")


# =============================================================================
# AudioSettings Tests
# =============================================================================


class TestAudioSettings:
    def test_defaults(self):
        audio = AudioSettings()

        assert audio.cache_dir == Path("temp")
        assert audio.ytdlp_binary == "yt-dlp"
        assert audio.audio_format == "mp3"
        assert audio.extraction_timeout_seconds == 300
        assert audio.ffmpeg_options == {"before_options": "-nostdin", "options": "-vn"}

    def test_cache_dir_from_string(self):
        assert AudioSettings(cache_dir="/var/cache/jukebox").cache_dir == Path("/var/cache/jukebox")

    def test_audio_format_lowercased(self):
        assert AudioSettings(audio_format="M4A").audio_format == "m4a"

    def test_audio_format_rejects_paths(self):
        with pytest.raises(ValidationError, match="alphanumeric"):
            AudioSettings(audio_format="../mp3")

    @pytest.mark.parametrize("timeout", [0, 3601])
    def test_timeout_range(self, timeout):
        with pytest.raises(ValidationError):
            AudioSettings(extraction_timeout_seconds=timeout)

    def test_volume_range(self):
        with pytest.raises(ValidationError):
            AudioSettings(default_volume=2.5)

    def test_immutability(self):
        audio = AudioSettings()

        with pytest.raises(ValidationError):
            audio.audio_format = "opus"


# =============================================================================
# Settings Tests
# =============================================================================


class TestSettings:
    def test_defaults(self):
        settings = Settings()

        assert settings.environment == "development"
        assert settings.log_level == "INFO"
        assert isinstance(settings.audio, AudioSettings)

    def test_nested_environment_variables(self, monkeypatch):
        """Should read nested values with the double-underscore delimiter."""
        monkeypatch.setenv("DISCORD__TOKEN", "env-token")
        monkeypatch.setenv("AUDIO__CACHE_DIR", "/tmp/jukebox")
        monkeypatch.setenv("AUDIO__YTDLP_BINARY", "/opt/bin/yt-dlp")

        settings = Settings()

        assert settings.discord.token.get_secret_value() == "env-token"
        assert settings.audio.cache_dir == Path("/tmp/jukebox")
        assert settings.audio.ytdlp_binary == "/opt/bin/yt-dlp"

    def test_log_level_normalized(self):
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError, match="Invalid log level"):
            Settings(log_level="LOUD")

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(environment="staging")


class TestGetSettings:
    def test_cached(self):
        assert get_settings() is get_settings()

    def test_clear_cache(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        clear_settings_cache()

        second = get_settings()

        assert second is not first
        assert second.log_level == "WARNING"
