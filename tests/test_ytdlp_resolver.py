"""
Unit Tests for YtDlpResolver

Tests for the yt-dlp based resolver:
- URL detection
- yt-dlp info dict validation
- Resolve by link (ID from the link, title from yt-dlp)
- Resolve by free-text search
- Error handling
"""

from unittest.mock import MagicMock, patch

import pytest
from yt_dlp.utils import DownloadError

from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.value_objects import TrackId
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.infrastructure.audio.ytdlp_resolver import (
    TITLE_MAX_LENGTH,
    YtDlpOpts,
    YtDlpResolver,
    YtDlpVideoInfo,
)

YDL_PATH = "discord_jukebox.infrastructure.audio.ytdlp_resolver.YoutubeDL"

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def resolver():
    """Create a YtDlpResolver instance."""
    return YtDlpResolver(AudioSettings())


def mock_youtube_dl(result=None, side_effect=None) -> MagicMock:
    """Build a YoutubeDL class mock whose context manager returns ``result``."""
    ydl_class = MagicMock()
    ydl = ydl_class.return_value.__enter__.return_value
    if side_effect is not None:
        ydl.extract_info.side_effect = side_effect
    else:
        ydl.extract_info.return_value = result
    return ydl_class


# =============================================================================
# Model Tests
# =============================================================================


class TestYtDlpVideoInfo:
    def test_ignores_extra_fields(self):
        info = YtDlpVideoInfo.model_validate(
            {"id": "dQw4w9WgXcQ", "title": "Song", "duration": 212, "formats": []}
        )

        assert info.id == "dQw4w9WgXcQ"
        assert info.title == "Song"

    def test_blank_values_become_defaults(self):
        info = YtDlpVideoInfo.model_validate({"id": "  ", "title": "", "webpage_url": 42})

        assert info.id is None
        assert info.title == "Unknown Title"
        assert info.webpage_url is None

    def test_long_title_is_truncated(self):
        info = YtDlpVideoInfo.model_validate({"title": "x" * (TITLE_MAX_LENGTH + 50)})

        assert len(info.title) == TITLE_MAX_LENGTH


class TestYtDlpOpts:
    def test_metadata_only_defaults(self):
        opts = YtDlpOpts().model_dump()

        assert opts["skip_download"] is True
        assert opts["noplaylist"] is True
        assert opts["quiet"] is True


# =============================================================================
# URL Detection
# =============================================================================


class TestIsUrl:
    @pytest.mark.parametrize(
        "query",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtube.com/watch?feature=share&v=dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
        ],
    )
    def test_youtube_links(self, resolver, query):
        assert resolver.is_url(query) is True

    @pytest.mark.parametrize("query", ["never gonna give you up", "https://example.com/song.mp3"])
    def test_not_links(self, resolver, query):
        assert resolver.is_url(query) is False


# =============================================================================
# Resolve
# =============================================================================


class TestResolve:
    async def test_link_uses_id_from_link(self, resolver):
        """Should take the ID from the link and only ask yt-dlp for the title."""
        ydl_class = mock_youtube_dl({"id": "something-else", "title": "Never Gonna Give You Up"})

        with patch(YDL_PATH, ydl_class):
            track = await resolver.resolve("https://youtu.be/dQw4w9WgXcQ")

        assert track is not None
        assert track.id == TrackId("dQw4w9WgXcQ")
        assert track.title == "Never Gonna Give You Up"
        assert track.source_url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

        ydl = ydl_class.return_value.__enter__.return_value
        ydl.extract_info.assert_called_once_with(
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ", download=False
        )

    async def test_link_lookup_failure_raises(self, resolver):
        """Should raise a resolution error when yt-dlp cannot fetch the link's metadata."""
        ydl_class = mock_youtube_dl(
            side_effect=DownloadError("ERROR: [youtube] dQw4w9WgXcQ: Video unavailable")
        )

        with patch(YDL_PATH, ydl_class):
            with pytest.raises(ResolutionError) as exc_info:
                await resolver.resolve("https://www.youtube.com/watch?v=dQw4w9WgXcQ")

        assert exc_info.value.query == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        assert exc_info.value.cause == "ERROR: [youtube] dQw4w9WgXcQ: Video unavailable"

    async def test_search_takes_first_result(self, resolver):
        """Should build a ytsearch1 query and use the first entry."""
        ydl_class = mock_youtube_dl(
            {"entries": [None, {"id": "9bZkp7q19f0", "title": "Gangnam Style"}]}
        )

        with patch(YDL_PATH, ydl_class):
            track = await resolver.resolve("gangnam style")

        assert track is not None
        assert track.id == TrackId("9bZkp7q19f0")
        assert track.source_url == "https://www.youtube.com/watch?v=9bZkp7q19f0"

        ydl = ydl_class.return_value.__enter__.return_value
        ydl.extract_info.assert_called_once_with("ytsearch1:gangnam style", download=False)

    async def test_search_without_results(self, resolver):
        ydl_class = mock_youtube_dl({"entries": []})

        with patch(YDL_PATH, ydl_class):
            assert await resolver.resolve("zzzz no such video zzzz") is None

    async def test_search_entry_without_id(self, resolver):
        """Should not build a track when the search result has no ID."""
        ydl_class = mock_youtube_dl({"entries": [{"title": "Mystery"}]})

        with patch(YDL_PATH, ydl_class):
            assert await resolver.resolve("mystery") is None

    async def test_search_error_raises(self, resolver):
        ydl_class = mock_youtube_dl(side_effect=DownloadError("ERROR: network down"))

        with patch(YDL_PATH, ydl_class):
            with pytest.raises(ResolutionError) as exc_info:
                await resolver.resolve("anything")

        assert exc_info.value.query == "anything"

    async def test_unexpected_error_propagates(self, resolver):
        """Should not disguise programming errors as resolution failures."""
        ydl_class = mock_youtube_dl(side_effect=RuntimeError("bug"))

        with patch(YDL_PATH, ydl_class):
            with pytest.raises(RuntimeError):
                await resolver.resolve("anything")

    async def test_non_dict_result(self, resolver):
        ydl_class = mock_youtube_dl(None)

        with patch(YDL_PATH, ydl_class):
            assert await resolver.resolve("https://youtu.be/dQw4w9WgXcQ") is None
