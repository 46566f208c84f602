"""In-memory implementation of the guild session registry."""

from __future__ import annotations

import asyncio
import logging

from discord_jukebox.domain.music.entities import SessionQueue
from discord_jukebox.domain.music.repository import SessionRegistry
from discord_jukebox.domain.shared.exceptions import InvalidOperationError

logger = logging.getLogger(__name__)


class InMemorySessionRegistry(SessionRegistry):
    """Keeps at most one live session per guild for the lifetime of the process."""

    def __init__(self) -> None:
        self._sessions: dict[int, SessionQueue] = {}
        self._locks: dict[int, asyncio.Lock] = {}

    def lock(self, guild_id: int) -> asyncio.Lock:
        lock = self._locks.get(guild_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[guild_id] = lock
        return lock

    async def get(self, guild_id: int) -> SessionQueue | None:
        return self._sessions.get(guild_id)

    async def add(self, session: SessionQueue) -> None:
        if session.guild_id in self._sessions:
            raise InvalidOperationError(
                operation="add",
                current_state="registered",
                message=f"Guild {session.guild_id} already has an active session",
            )
        self._sessions[session.guild_id] = session
        logger.debug("Registered session %s for guild %s", session.session_id, session.guild_id)

    async def remove(self, guild_id: int) -> SessionQueue | None:
        session = self._sessions.pop(guild_id, None)
        if session is not None:
            logger.debug("Deregistered session %s for guild %s", session.session_id, guild_id)
        return session

    async def is_registered(self, session: SessionQueue) -> bool:
        return self._sessions.get(session.guild_id) is session

    async def get_all(self) -> list[SessionQueue]:
        return list(self._sessions.values())

    async def count(self) -> int:
        return len(self._sessions)
