"""AudioExtractor implementation that runs the yt-dlp CLI as a subprocess."""

from __future__ import annotations

import asyncio
import codecs
import logging
import re
import shlex
from collections import deque
from pathlib import Path
from typing import TYPE_CHECKING, Final

from discord_jukebox.application.interfaces.audio_extractor import AudioExtractor
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.shared.exceptions import ExtractionError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from discord_jukebox.application.interfaces.media_cache import MediaCache
    from discord_jukebox.domain.music.value_objects import TrackId

logger = logging.getLogger(__name__)

STDERR_TAIL_LINES: Final[int] = 5
READ_CHUNK_BYTES: Final[int] = 4096
MAX_LINE_CHARS: Final[int] = 4096

# yt-dlp redraws its progress bar with carriage returns when piped.
_LINE_BREAK: Final[re.Pattern[str]] = re.compile(r"\r\n|\r|\n")


class YtDlpExtractionOrchestrator(AudioExtractor):
    """Downloads one item at a time per track ID into the media cache.

    Each extraction runs in its own task. Callers await it through
    ``asyncio.shield`` so a cancelled caller (for example a stopped session)
    does not kill a download another session may be waiting on, and the
    finished file still lands in the cache.
    """

    def __init__(self, media_cache: MediaCache, settings: AudioSettings | None = None) -> None:
        self._media_cache = media_cache
        self._settings = settings or AudioSettings()
        self._inflight: dict[str, asyncio.Task[Path]] = {}
        self._processes: dict[str, asyncio.subprocess.Process] = {}
        self._closing = False

    @property
    def inflight_count(self) -> int:
        return len(self._inflight)

    def build_command(self, output_path: Path, source_url: str) -> list[str]:
        return [
            self._settings.ytdlp_binary,
            "-x",
            "--audio-format",
            self._settings.audio_format,
            "-o",
            str(output_path),
            source_url,
        ]

    async def extract(self, track_id: TrackId, source_url: str) -> Path:
        cached = self._media_cache.get(track_id)
        if cached is not None:
            logger.info(LogTemplates.CACHE_HIT, cached)
            return cached

        if self._closing:
            raise ExtractionError(track_id.value, ErrorMessages.EXTRACTION_ABORTED)

        key = track_id.value
        task = self._inflight.get(key)
        if task is not None:
            logger.debug(LogTemplates.EXTRACTION_JOIN_INFLIGHT, key)
        else:
            task = asyncio.create_task(self._run(track_id, source_url), name=f"ytdlp-{key}")
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._forget(key, t))

        return await asyncio.shield(task)

    async def shutdown(self) -> None:
        """Kill every running yt-dlp process and wait for the extraction tasks to settle."""
        self._closing = True
        for key, process in list(self._processes.items()):
            self._kill(key, process)

        if self._inflight:
            await asyncio.gather(*self._inflight.values(), return_exceptions=True)

    async def _run(self, track_id: TrackId, source_url: str) -> Path:
        key = track_id.value
        output_path = self._media_cache.path_for(track_id)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        command = self.build_command(output_path, source_url)
        logger.info(LogTemplates.EXTRACTION_STARTED, source_url, key)
        logger.debug(LogTemplates.EXTRACTION_COMMAND, shlex.join(command))

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            cause = ErrorMessages.EXTRACTION_SPAWN_FAILED.format(error=e)
            logger.error(LogTemplates.EXTRACTION_FAILED, key, cause)
            raise ExtractionError(key, cause) from e

        self._processes[key] = process
        stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        timeout = self._settings.extraction_timeout_seconds

        try:
            async with asyncio.timeout(timeout):
                await asyncio.gather(
                    self._pump(process.stdout, key, logging.DEBUG, LogTemplates.EXTRACTION_STDOUT),
                    self._pump(
                        process.stderr,
                        key,
                        logging.WARNING,
                        LogTemplates.EXTRACTION_STDERR,
                        tail=stderr_tail,
                    ),
                )
                returncode = await process.wait()
        except TimeoutError as e:
            self._kill(key, process)
            await process.wait()
            cause = ErrorMessages.EXTRACTION_TIMEOUT.format(seconds=timeout)
            logger.error(LogTemplates.EXTRACTION_FAILED, key, cause)
            raise ExtractionError(key, cause) from e
        except (OSError, ValueError) as e:
            self._kill(key, process)
            await process.wait()
            cause = ErrorMessages.EXTRACTION_STREAM_FAILED.format(error=e)
            logger.error(LogTemplates.EXTRACTION_FAILED, key, cause)
            raise ExtractionError(key, cause) from e
        except asyncio.CancelledError:
            self._kill(key, process)
            raise
        finally:
            self._processes.pop(key, None)

        if returncode != 0:
            cause = (
                ErrorMessages.EXTRACTION_ABORTED
                if self._closing
                else ErrorMessages.EXTRACTION_EXIT_CODE.format(
                    code=returncode, stderr="\n".join(stderr_tail) or "no output"
                )
            )
            logger.error(LogTemplates.EXTRACTION_FAILED, key, cause)
            raise ExtractionError(key, cause)

        if not output_path.is_file():
            cause = ErrorMessages.EXTRACTION_MISSING_OUTPUT.format(path=output_path)
            logger.error(LogTemplates.EXTRACTION_FAILED, key, cause)
            raise ExtractionError(key, cause)

        self._media_cache.put(track_id, output_path)
        logger.info(LogTemplates.EXTRACTION_COMPLETED, output_path)
        return output_path

    @staticmethod
    async def _pump(
        stream: asyncio.StreamReader | None,
        key: str,
        level: int,
        template: str,
        *,
        tail: deque[str] | None = None,
    ) -> None:
        """Drain ``stream`` in fixed-size chunks and log it line by line.

        Lines end at ``\\n``, ``\\r`` or ``\\r\\n``. A partial line longer than
        ``MAX_LINE_CHARS`` is flushed as is, so no output can stall the pipe.
        """
        if stream is None:
            return

        def emit(text: str) -> None:
            line = text.rstrip()
            if not line:
                return
            logger.log(level, template, key, line)
            if tail is not None:
                tail.append(line)

        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""
        while chunk := await stream.read(READ_CHUNK_BYTES):
            *lines, pending = _LINE_BREAK.split(pending + decoder.decode(chunk))
            for line in lines:
                emit(line)
            if len(pending) > MAX_LINE_CHARS:
                emit(pending)
                pending = ""
        emit(pending + decoder.decode(b"", final=True))

    def _kill(self, key: str, process: asyncio.subprocess.Process) -> None:
        if process.returncode is not None:
            return
        try:
            process.kill()
            logger.warning(LogTemplates.EXTRACTION_KILLED, key)
        except ProcessLookupError:
            pass

    def _forget(self, key: str, task: asyncio.Task[Path]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        # Mark the exception retrieved when every waiter was cancelled
        if not task.cancelled():
            task.exception()
