"""
Unit Tests for MusicCog

Tests for the !play and !stop prefix commands:
- Building application commands from the invocation context
- Replies for each result
- Guild-only handling
- Extension setup
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import GUILD_ID, TEXT_CHANNEL_ID, USER_ID, VOICE_CHANNEL_ID, make_track

from discord_jukebox.application.commands import (
    PlayTrackHandler,
    PlayTrackResult,
    PlayTrackStatus,
    StopPlaybackHandler,
    StopResult,
)
from discord_jukebox.infrastructure.discord.cogs.music_cog import MusicCog, setup

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_bot():
    bot = MagicMock()
    bot.add_cog = AsyncMock()
    return bot


@pytest.fixture
def mock_container():
    container = MagicMock()
    container.play_track_handler.handle = AsyncMock(
        return_value=PlayTrackResult.success(make_track(title="Song"), 0, 1, started_playing=True)
    )
    container.stop_playback_handler.handle = AsyncMock(return_value=StopResult.success(1))
    return container


@pytest.fixture
def cog(mock_bot, mock_container):
    return MusicCog(mock_bot, mock_container)


def make_ctx(in_voice: bool = True, in_guild: bool = True) -> MagicMock:
    ctx = MagicMock()
    ctx.send = AsyncMock()
    ctx.guild = MagicMock(id=GUILD_ID) if in_guild else None
    ctx.channel.id = TEXT_CHANNEL_ID
    ctx.author.id = USER_ID
    ctx.author.display_name = "Tester"
    if in_voice:
        ctx.author.voice.channel.id = VOICE_CHANNEL_ID
    else:
        ctx.author.voice = None
    return ctx


# =============================================================================
# !play
# =============================================================================


class TestPlayCommand:
    async def test_builds_command_from_context(self, cog, mock_container):
        ctx = make_ctx()

        await cog.play.callback(cog, ctx, query="  never gonna give you up ")

        command = mock_container.play_track_handler.handle.await_args.args[0]
        assert command.guild_id == GUILD_ID
        assert command.text_channel_id == TEXT_CHANNEL_ID
        assert command.voice_channel_id == VOICE_CHANNEL_ID
        assert command.user_name == "Tester"
        assert command.query == "never gonna give you up"

    async def test_replies_with_result(self, cog):
        ctx = make_ctx()

        await cog.play.callback(cog, ctx, query="song")

        ctx.send.assert_awaited_once_with("🔄 Preparing to play: Song")

    async def test_no_reply_when_status_already_posted(self, cog, mock_container):
        """Should leave the status line to the session's own status message."""
        mock_container.play_track_handler.handle.return_value = PlayTrackResult.success(
            make_track(title="Song"), 0, 1, started_playing=True, announced=True
        )
        ctx = make_ctx()

        await cog.play.callback(cog, ctx, query="song")

        ctx.send.assert_not_called()

    async def test_author_not_in_voice(self, cog, mock_container):
        mock_container.play_track_handler.handle.return_value = PlayTrackResult.error(
            PlayTrackStatus.NO_CHANNEL, "You need to be in a voice channel!"
        )
        ctx = make_ctx(in_voice=False)

        await cog.play.callback(cog, ctx, query="song")

        command = mock_container.play_track_handler.handle.await_args.args[0]
        assert command.voice_channel_id is None
        ctx.send.assert_awaited_once_with("You need to be in a voice channel!")

    async def test_direct_message(self, cog, mock_container):
        ctx = make_ctx(in_guild=False)

        await cog.play.callback(cog, ctx, query="song")

        mock_container.play_track_handler.handle.assert_not_called()
        ctx.send.assert_awaited_once_with("This command only works in a server.")

    async def test_end_to_end_with_controller(self, mock_bot, controller, message_sink):
        """Should walk one status message for the first request and reply to the second."""
        resolver = AsyncMock()
        resolver.resolve.side_effect = [
            make_track("aaaaaaaaaaa", "First"),
            make_track("bbbbbbbbbbb", "Second"),
        ]
        container = MagicMock()
        container.play_track_handler = PlayTrackHandler(
            audio_resolver=resolver, queue_controller=controller
        )
        cog = MusicCog(mock_bot, container)
        first_ctx, second_ctx = make_ctx(), make_ctx()

        await cog.play.callback(cog, first_ctx, query="first")
        await cog.play.callback(cog, second_ctx, query="second")
        await controller.join()

        first_ctx.send.assert_not_called()
        second_ctx.send.assert_awaited_once_with("🎵 Added to queue: Second (position 1)")
        assert message_sink.log == [
            "🔄 Preparing to play: First",
            "🔄 Downloading: First",
            "🎶 Now playing: First",
        ]
        assert len(message_sink.sent) == 1


# =============================================================================
# !stop
# =============================================================================


class TestStopCommand:
    async def test_stop(self, cog, mock_container):
        ctx = make_ctx()

        await cog.stop.callback(cog, ctx)

        command = mock_container.stop_playback_handler.handle.await_args.args[0]
        assert command.guild_id == GUILD_ID
        ctx.send.assert_awaited_once_with("Stopped and left the channel!")

    async def test_stop_with_real_handler(self, mock_bot, controller):
        container = MagicMock()
        container.stop_playback_handler = StopPlaybackHandler(queue_controller=controller)
        cog = MusicCog(mock_bot, container)
        ctx = make_ctx()

        await cog.stop.callback(cog, ctx)

        ctx.send.assert_awaited_once_with("Nothing is playing!")

    async def test_direct_message(self, cog, mock_container):
        ctx = make_ctx(in_guild=False)

        await cog.stop.callback(cog, ctx)

        mock_container.stop_playback_handler.handle.assert_not_called()


# =============================================================================
# Extension setup
# =============================================================================


class TestSetup:
    async def test_adds_cog(self, mock_bot):
        mock_bot.container = MagicMock()

        await setup(mock_bot)

        cog = mock_bot.add_cog.await_args.args[0]
        assert isinstance(cog, MusicCog)
        assert cog.container is mock_bot.container

    async def test_requires_container(self, mock_bot):
        mock_bot.container = None

        with pytest.raises(RuntimeError, match="Container not found"):
            await setup(mock_bot)
