"""Queue Controller - the per-guild enqueue, download, play and advance state machine."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from functools import partial
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict

from ...domain.music.entities import SessionQueue, Track
from ...domain.music.value_objects import PipelineStage, SessionDestroyReason
from ...domain.shared.events import (
    DomainEvent,
    EventBus,
    ExtractionFailed,
    QueueExhausted,
    SessionCreated,
    SessionDestroyed,
    TrackFinishedPlaying,
    TrackStartedPlaying,
    get_event_bus,
)
from ...domain.shared.exceptions import ExtractionError, PlaybackError
from ...domain.shared.messages import DiscordUIMessages, ErrorMessages, LogTemplates
from ...domain.shared.types import ChannelIdField, DiscordSnowflake, NonEmptyStr, NonNegativeInt

if TYPE_CHECKING:
    from ...domain.music.events import PlaybackTerminated
    from ...domain.music.repository import SessionRegistry
    from ..interfaces.audio_extractor import AudioExtractor
    from ..interfaces.media_cache import MediaCache
    from ..interfaces.message_sink import MessageSink
    from ..interfaces.voice_adapter import VoiceAdapter

logger = logging.getLogger(__name__)


class RequestContext(BaseModel):
    """Where a playback request came from."""

    model_config = ConfigDict(frozen=True)

    guild_id: DiscordSnowflake
    text_channel_id: ChannelIdField
    voice_channel_id: ChannelIdField | None = None
    user_id: DiscordSnowflake
    user_name: NonEmptyStr


class EnqueueStatus(Enum):
    STARTED = "started"
    QUEUED = "queued"
    NO_CHANNEL = "no_channel"
    SETUP_FAILED = "setup_failed"


class EnqueueOutcome(BaseModel):

    status: EnqueueStatus
    track: Track | None = None
    position: NonNegativeInt = 0
    queue_length: NonNegativeInt = 0
    error: str | None = None
    status_message_id: DiscordSnowflake | None = None

    @property
    def accepted(self) -> bool:
        return self.status in {EnqueueStatus.STARTED, EnqueueStatus.QUEUED}

    @property
    def started(self) -> bool:
        return self.status == EnqueueStatus.STARTED

    @property
    def announced(self) -> bool:
        """Whether the session already posted the status message for this request."""
        return self.status_message_id is not None


class StopStatus(Enum):
    STOPPED = "stopped"
    NOTHING_PLAYING = "nothing_playing"


class StopOutcome(BaseModel):

    status: StopStatus
    tracks_cleared: NonNegativeInt = 0


class QueueController:
    """Owns every guild session: enqueue-or-start, download-then-play, and advance.

    All registry and ``SessionQueue`` mutations happen here while holding the
    guild's registry lock. Extraction runs outside the lock, so a long download
    never blocks ``stop`` or other guilds.
    """

    def __init__(
        self,
        *,
        session_registry: SessionRegistry,
        voice_adapter: VoiceAdapter,
        media_cache: MediaCache,
        extractor: AudioExtractor,
        message_sink: MessageSink,
        event_bus: EventBus | None = None,
    ) -> None:
        self._registry = session_registry
        self._voice_adapter = voice_adapter
        self._media_cache = media_cache
        self._extractor = extractor
        self._message_sink = message_sink
        self._event_bus = event_bus or get_event_bus()

        self._pipelines: dict[DiscordSnowflake, asyncio.Task[None]] = {}
        self._background_tasks: set[asyncio.Task[None]] = set()

    # === Commands ===

    async def enqueue_or_start(self, track: Track, context: RequestContext) -> EnqueueOutcome:
        """Append to the guild's backlog, or create the session and start playing."""
        if context.voice_channel_id is None:
            return EnqueueOutcome(status=EnqueueStatus.NO_CHANNEL)

        guild_id = context.guild_id
        if track.requested_by_id is None:
            track = track.with_requester(user_id=context.user_id, user_name=context.user_name)

        async with self._registry.lock(guild_id):
            session = await self._registry.get(guild_id)
            if session is not None:
                position = session.push(track)
                logger.info(LogTemplates.QUEUE_ENQUEUED, track.title, position, guild_id)
                return EnqueueOutcome(
                    status=EnqueueStatus.QUEUED,
                    track=track,
                    position=position,
                    queue_length=session.queue_length,
                )

            session = SessionQueue(
                guild_id=guild_id,
                voice_channel_id=context.voice_channel_id,
                text_channel_id=context.text_channel_id,
                backlog=[track],
            )
            await self._registry.add(session)

            try:
                await self._voice_adapter.connect(guild_id, context.voice_channel_id)
                session.player = self._voice_adapter.create_player(guild_id)
            except Exception as e:
                await self._registry.remove(guild_id)
                logger.error(LogTemplates.SESSION_SETUP_FAILED, guild_id, e)
                await self._release_voice(guild_id)
                self._emit(
                    SessionDestroyed(
                        guild_id=guild_id, reason=SessionDestroyReason.SETUP_FAILED.value
                    )
                )
                return EnqueueOutcome(
                    status=EnqueueStatus.SETUP_FAILED,
                    track=track,
                    error=getattr(e, "cause", None) or str(e) or ErrorMessages.VOICE_CONNECT_FAILED,
                )

            logger.info(LogTemplates.SESSION_CREATED, session.session_id, guild_id)
            self._emit(SessionCreated(guild_id=guild_id, voice_channel_id=context.voice_channel_id))
            await self._announce(session, DiscordUIMessages.STATUS_PREPARING.format(title=track.title))
            self._start_pipeline(session)

            return EnqueueOutcome(
                status=EnqueueStatus.STARTED,
                track=track,
                position=0,
                queue_length=session.queue_length,
                status_message_id=session.status_message_id,
            )

    async def stop(self, guild_id: DiscordSnowflake) -> StopOutcome:
        """Clear the backlog, halt playback, leave voice and forget the session."""
        async with self._registry.lock(guild_id):
            session = await self._registry.get(guild_id)
            if session is None:
                return StopOutcome(status=StopStatus.NOTHING_PLAYING)

            cleared = session.queue_length
            await self._teardown(session, SessionDestroyReason.STOPPED)

        logger.info(LogTemplates.PLAYBACK_STOPPED, guild_id)
        return StopOutcome(status=StopStatus.STOPPED, tracks_cleared=cleared)

    async def shutdown(self) -> None:
        """Tear down every active session."""
        for session in await self._registry.get_all():
            async with self._registry.lock(session.guild_id):
                if await self._registry.is_registered(session):
                    await self._teardown(session, SessionDestroyReason.SHUTDOWN)
        await self.join()

    async def join(self) -> None:
        """Wait until no pipeline step or event publication is pending."""
        while True:
            pending = [
                task
                for task in (*self._pipelines.values(), *self._background_tasks)
                if not task.done()
            ]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # === Pipeline ===

    def _start_pipeline(self, session: SessionQueue) -> None:
        """Start the download-then-play run for the head item. Caller holds the lock."""
        run_token = session.begin_run()
        task = asyncio.create_task(
            self._run_pipeline(session, run_token),
            name=f"pipeline-{session.guild_id}-{run_token[:8]}",
        )
        task.add_done_callback(partial(self._on_pipeline_done, session.guild_id))
        self._pipelines[session.guild_id] = task

    async def _run_pipeline(self, session: SessionQueue, run_token: str) -> None:
        track = session.head
        if track is None:
            return

        try:
            path = self._media_cache.get(track.id)
            from_cache = path is not None

            if path is not None:
                logger.info(LogTemplates.CACHE_HIT, path)
                if not await self._enter_stage(session, run_token, PipelineStage.CACHE_HIT):
                    return
            else:
                if not await self._enter_stage(
                    session,
                    run_token,
                    PipelineStage.DOWNLOADING,
                    announce=DiscordUIMessages.STATUS_DOWNLOADING.format(title=track.title),
                ):
                    return

                try:
                    path = await self._extractor.extract(track.id, track.source_url)
                except ExtractionError as e:
                    await self._fail_and_advance(session, run_token, track, e.cause, extraction=True)
                    return

            await self._play(session, run_token, track, path, from_cache=from_cache)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(LogTemplates.PIPELINE_CRASHED, session.guild_id)
            await self._fail_and_advance(session, run_token, track, str(e))

    async def _enter_stage(
        self,
        session: SessionQueue,
        run_token: str,
        stage: PipelineStage,
        *,
        announce: str | None = None,
    ) -> bool:
        async with self._registry.lock(session.guild_id):
            if not await self._is_live(session, run_token):
                return False

            session.set_stage(stage)
            logger.debug(
                LogTemplates.PIPELINE_STAGE, session.guild_id, session.head.title, stage.value
            )
            if announce:
                await self._announce(session, announce)
            return True

    async def _play(
        self,
        session: SessionQueue,
        run_token: str,
        track: Track,
        path: Path,
        *,
        from_cache: bool,
    ) -> None:
        async with self._registry.lock(session.guild_id):
            if not await self._is_live(session, run_token):
                return

            session.set_stage(PipelineStage.PLAYING)
            player = session.player
            player.set_terminal_handler(partial(self._on_playback_terminated, session))

            try:
                await player.start(path, track, run_token)
            except PlaybackError as e:
                logger.warning(LogTemplates.PLAYBACK_ERROR, session.guild_id, e.cause)
                await self._report_failure(session, track, e.cause)
                await self._advance(session)
                return

            await self._announce(session, DiscordUIMessages.STATUS_NOW_PLAYING.format(title=track.title))

        logger.info(LogTemplates.PLAYBACK_STARTED, track.title, session.guild_id)
        self._emit(
            TrackStartedPlaying(
                guild_id=session.guild_id,
                track_id=track.id.value,
                track_title=track.title,
                from_cache=from_cache,
            )
        )

    async def _on_playback_terminated(self, session: SessionQueue, event: PlaybackTerminated) -> None:
        """Terminal notification from the session's playback device."""
        async with self._registry.lock(session.guild_id):
            if not await self._is_live(session, event.run_token):
                logger.debug(LogTemplates.SESSION_STALE_EVENT, "playback event", session.guild_id)
                return

            track = session.head
            if event.is_error:
                logger.warning(LogTemplates.PLAYBACK_ERROR, session.guild_id, event.error)
                await self._report_failure(session, track, event.error or "unknown error")
            else:
                self._emit(
                    TrackFinishedPlaying(
                        guild_id=session.guild_id,
                        track_id=track.id.value,
                        track_title=track.title,
                    )
                )
            await self._advance(session)

    async def _fail_and_advance(
        self,
        session: SessionQueue,
        run_token: str,
        track: Track,
        cause: str,
        *,
        extraction: bool = False,
    ) -> None:
        async with self._registry.lock(session.guild_id):
            if not await self._is_live(session, run_token):
                logger.debug(LogTemplates.SESSION_STALE_EVENT, "failure", session.guild_id)
                return

            await self._report_failure(session, track, cause, extraction=extraction)
            await self._advance(session)

    # === Transitions (caller holds the guild lock) ===

    async def _advance(self, session: SessionQueue) -> None:
        """Pop the head and move on: the only way a session leaves an item behind."""
        finished = session.pop_head()

        if not session.has_tracks:
            logger.info(LogTemplates.QUEUE_EMPTY, session.guild_id)
            processed = session.tracks_processed
            await self._teardown(session, SessionDestroyReason.QUEUE_EXHAUSTED)
            self._emit(
                QueueExhausted(
                    guild_id=session.guild_id,
                    last_track_id=finished.id.value,
                    tracks_processed=processed,
                )
            )
            return

        logger.info(LogTemplates.QUEUE_ADVANCED, session.guild_id, session.queue_length)
        self._start_pipeline(session)

    async def _teardown(self, session: SessionQueue, reason: SessionDestroyReason) -> None:
        guild_id = session.guild_id
        await self._registry.remove(guild_id)
        session.clear_backlog()

        task = self._pipelines.pop(guild_id, None)
        if task is not None and task is not asyncio.current_task():
            task.cancel()

        if session.player is not None:
            session.player.stop()

        await self._release_voice(guild_id)
        logger.info(LogTemplates.SESSION_DESTROYED, guild_id, reason.value)
        self._emit(SessionDestroyed(guild_id=guild_id, reason=reason.value))

    async def _is_live(self, session: SessionQueue, run_token: str | None) -> bool:
        return await self._registry.is_registered(session) and session.is_current_run(run_token)

    # === Notifications ===

    async def _announce(self, session: SessionQueue, content: str) -> None:
        """Update the current item's status message, sending a new one if needed."""
        if session.status_message_id is not None:
            edited = await self._message_sink.edit(
                session.text_channel_id, session.status_message_id, content
            )
            if edited:
                return

        session.status_message_id = await self._message_sink.send(session.text_channel_id, content)

    async def _report_failure(
        self, session: SessionQueue, track: Track, cause: str, *, extraction: bool = False
    ) -> None:
        await self._message_sink.send(
            session.text_channel_id, DiscordUIMessages.ERROR_PLAYING_SONG.format(error=cause)
        )
        if extraction:
            self._emit(
                ExtractionFailed(
                    guild_id=session.guild_id,
                    track_id=track.id.value,
                    track_title=track.title,
                    cause=cause,
                )
            )
        else:
            self._emit(
                TrackFinishedPlaying(
                    guild_id=session.guild_id,
                    track_id=track.id.value,
                    track_title=track.title,
                    error=cause,
                )
            )

    # === Helpers ===

    async def _release_voice(self, guild_id: DiscordSnowflake) -> None:
        try:
            await self._voice_adapter.disconnect(guild_id)
        except Exception:
            logger.exception(LogTemplates.VOICE_CLEANUP_ERROR, guild_id)

    def _emit(self, event: DomainEvent) -> None:
        """Publish outside the guild lock so subscribers may call back into the controller."""
        task = asyncio.create_task(self._event_bus.publish(event))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    def _on_pipeline_done(self, guild_id: DiscordSnowflake, task: asyncio.Task[None]) -> None:
        if self._pipelines.get(guild_id) is task:
            self._pipelines.pop(guild_id, None)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(LogTemplates.PIPELINE_CRASHED, guild_id, exc_info=exc)
