"""Event subscriber that tallies what each guild session did and logs it on teardown."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from ...domain.shared.datetime_utils import utcnow
from ...domain.shared.events import (
    EventBus,
    ExtractionFailed,
    QueueExhausted,
    SessionCreated,
    SessionDestroyed,
    TrackFinishedPlaying,
    TrackStartedPlaying,
    get_event_bus,
)
from ...domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)


@dataclass
class SessionActivity:
    started_at: datetime
    played: int = 0
    from_cache: int = 0
    completed: int = 0
    failed: int = 0

    @property
    def downloaded(self) -> int:
        return self.played - self.from_cache


class SessionActivityLog:
    """Subscribes to the queue controller's events.

    Keeps running counters per live session and logs one summary line when
    the session is destroyed, whatever the reason.
    """

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self._bus = event_bus or get_event_bus()
        self._sessions: dict[int, SessionActivity] = {}
        self._started = False

    def start(self) -> None:
        if self._started:
            return
        self._bus.subscribe(SessionCreated, self._on_session_created)
        self._bus.subscribe(TrackStartedPlaying, self._on_track_started)
        self._bus.subscribe(TrackFinishedPlaying, self._on_track_finished)
        self._bus.subscribe(ExtractionFailed, self._on_extraction_failed)
        self._bus.subscribe(QueueExhausted, self._on_queue_exhausted)
        self._bus.subscribe(SessionDestroyed, self._on_session_destroyed)
        self._started = True

    def stop(self) -> None:
        if not self._started:
            return
        self._bus.unsubscribe(SessionCreated, self._on_session_created)
        self._bus.unsubscribe(TrackStartedPlaying, self._on_track_started)
        self._bus.unsubscribe(TrackFinishedPlaying, self._on_track_finished)
        self._bus.unsubscribe(ExtractionFailed, self._on_extraction_failed)
        self._bus.unsubscribe(QueueExhausted, self._on_queue_exhausted)
        self._bus.unsubscribe(SessionDestroyed, self._on_session_destroyed)
        self._started = False

    def activity_for(self, guild_id: int) -> SessionActivity | None:
        return self._sessions.get(guild_id)

    async def _on_session_created(self, event: SessionCreated) -> None:
        self._sessions[event.guild_id] = SessionActivity(started_at=event.occurred_at)

    async def _on_track_started(self, event: TrackStartedPlaying) -> None:
        activity = self._sessions.get(event.guild_id)
        if activity is None:
            return
        activity.played += 1
        if event.from_cache:
            activity.from_cache += 1

    async def _on_track_finished(self, event: TrackFinishedPlaying) -> None:
        activity = self._sessions.get(event.guild_id)
        if activity is None:
            return
        if event.error is None:
            activity.completed += 1
        else:
            activity.failed += 1

    async def _on_extraction_failed(self, event: ExtractionFailed) -> None:
        activity = self._sessions.get(event.guild_id)
        if activity is not None:
            activity.failed += 1
        logger.info(
            LogTemplates.ACTIVITY_EXTRACTION_FAILED, event.track_title, event.guild_id, event.cause
        )

    async def _on_queue_exhausted(self, event: QueueExhausted) -> None:
        logger.debug(LogTemplates.ACTIVITY_QUEUE_EXHAUSTED, event.guild_id, event.tracks_processed)

    async def _on_session_destroyed(self, event: SessionDestroyed) -> None:
        # Setup failures never had a SessionCreated
        activity = self._sessions.pop(event.guild_id, None)
        if activity is None:
            return

        lasted = (utcnow() - activity.started_at).total_seconds()
        logger.info(
            LogTemplates.ACTIVITY_SUMMARY,
            event.guild_id,
            event.reason,
            activity.played,
            activity.from_cache,
            activity.downloaded,
            activity.completed,
            activity.failed,
            lasted,
        )
