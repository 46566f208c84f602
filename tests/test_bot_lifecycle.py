"""
Unit Tests for Bot Lifecycle

Tests for src/discord_jukebox/infrastructure/discord/bot.py:
- Intents, prefix and container wiring
- setup_hook container initialization and cog loading
- Command error replies
- close() shutting the container down
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from discord.ext import commands

from discord_jukebox.infrastructure.discord.bot import COGS, MusicBot, create_bot


@pytest.fixture
def mock_settings():
    settings = MagicMock()
    settings.discord.command_prefix = "!"
    return settings


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.initialize = AsyncMock()
    container.shutdown = AsyncMock()
    container.set_bot = MagicMock()
    return container


@pytest.fixture
def bot(mock_container, mock_settings):
    return MusicBot(container=mock_container, settings=mock_settings)


# =============================================================================
# Initialization
# =============================================================================


class TestBotInitialization:
    async def test_intents(self, bot):
        """Should request message content and voice state intents."""
        assert bot.intents.message_content is True
        assert bot.intents.voice_states is True
        assert bot.intents.guilds is True
        assert bot.intents.guild_messages is True

    async def test_command_prefix(self, mock_container, mock_settings):
        mock_settings.discord.command_prefix = "?"

        bot = MusicBot(container=mock_container, settings=mock_settings)

        assert bot.command_prefix == "?"

    async def test_help_disabled(self, bot):
        assert bot.help_command is None

    async def test_registers_with_container(self, bot, mock_container):
        mock_container.set_bot.assert_called_once_with(bot)
        assert bot.container is mock_container
        assert isinstance(bot._shutdown_event, asyncio.Event)

    async def test_create_bot(self, mock_container, mock_settings):
        bot = create_bot(mock_container, mock_settings)

        assert isinstance(bot, MusicBot)
        assert bot.settings is mock_settings


# =============================================================================
# Setup Hook
# =============================================================================


class TestSetupHook:
    async def test_initializes_container_then_loads_cogs(self, bot, mock_container):
        with patch.object(bot, "_load_cogs", new_callable=AsyncMock) as mock_load:
            await bot.setup_hook()

        mock_container.initialize.assert_awaited_once()
        mock_load.assert_awaited_once()

    async def test_container_failure_propagates(self, bot, mock_container):
        mock_container.initialize.side_effect = OSError("read-only filesystem")

        with patch.object(bot, "_load_cogs", new_callable=AsyncMock) as mock_load:
            with pytest.raises(OSError):
                await bot.setup_hook()

        mock_load.assert_not_called()

    async def test_loads_music_cog(self, bot):
        with patch.object(bot, "load_extension", new_callable=AsyncMock) as mock_load:
            await bot._load_cogs()

        assert [c.args[0] for c in mock_load.await_args_list] == list(COGS)

    async def test_cog_failure_is_logged(self, bot):
        with patch.object(
            bot, "load_extension", new_callable=AsyncMock, side_effect=RuntimeError("bad cog")
        ):
            await bot._load_cogs()


# =============================================================================
# Command Errors
# =============================================================================


class TestCommandErrors:
    async def test_unknown_command_ignored(self, bot):
        ctx = MagicMock()
        ctx.send = AsyncMock()

        await bot.on_command_error(ctx, commands.CommandNotFound("nope"))

        ctx.send.assert_not_called()

    async def test_replies_with_original_error(self, bot):
        ctx = MagicMock()
        ctx.send = AsyncMock()
        ctx.command.name = "play"
        error = commands.CommandInvokeError(RuntimeError("boom"))

        await bot.on_command_error(ctx, error)

        ctx.send.assert_awaited_once_with("❌ An error occurred: boom")


# =============================================================================
# Close
# =============================================================================


class TestBotClose:
    async def test_close_shuts_container_down(self, bot, mock_container):
        with patch.object(commands.Bot, "close", new_callable=AsyncMock):
            await bot.close()

        mock_container.shutdown.assert_awaited_once()
        assert bot._shutdown_event.is_set()

    async def test_close_survives_container_error(self, bot, mock_container):
        mock_container.shutdown.side_effect = RuntimeError("stuck")

        with patch.object(commands.Bot, "close", new_callable=AsyncMock) as mock_close:
            await bot.close()

        mock_close.assert_awaited_once()
        assert bot._shutdown_event.is_set()
