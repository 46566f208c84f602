"""Port interface for a playback device rendering local audio files."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...domain.music.entities import Track
    from ...domain.music.events import PlaybackTerminated

TerminalHandler = Callable[["PlaybackTerminated"], Awaitable[None]]


class PlaybackDriver(ABC):
    """One playback device instance, owned by one guild session.

    A started item always ends with exactly one ``PlaybackTerminated``
    notification delivered to the registered handler.
    """

    @abstractmethod
    def set_terminal_handler(self, handler: TerminalHandler) -> None:
        """Register the coroutine receiving completion and error notifications."""
        ...

    @abstractmethod
    async def start(self, path: Path, track: "Track", run_token: str) -> None:
        """Start rendering a local file.

        Raises:
            PlaybackError: If the device could not start rendering.
        """
        ...

    @abstractmethod
    def stop(self) -> None:
        """Halt rendering immediately."""
        ...

    @abstractmethod
    def is_playing(self) -> bool:
        ...
