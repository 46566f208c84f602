"""
Music Domain Repository Interfaces

Abstract base classes defining the contract for the session queue registry.
Implementations live in the infrastructure layer.
"""

import asyncio
from abc import ABC, abstractmethod

from discord_jukebox.domain.music.entities import SessionQueue


class SessionRegistry(ABC):
    """Abstract process-wide registry of active guild session queues.

    The registry is the single source of truth for "is this guild already
    playing something". Callers mutating it must hold ``lock(guild_id)``.
    """

    @abstractmethod
    def lock(self, guild_id: int) -> asyncio.Lock:
        """Return the lock serializing mutations for one guild.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The same lock instance for every call with the same guild ID.
        """
        ...

    @abstractmethod
    async def get(self, guild_id: int) -> SessionQueue | None:
        """Retrieve the active session for a guild.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The session if registered, None otherwise.
        """
        ...

    @abstractmethod
    async def add(self, session: SessionQueue) -> None:
        """Register a new session.

        Args:
            session: The session to register.

        Raises:
            InvalidOperationError: If the guild already has a registered session.
        """
        ...

    @abstractmethod
    async def remove(self, guild_id: int) -> SessionQueue | None:
        """Deregister the session of a guild.

        Args:
            guild_id: The Discord guild ID.

        Returns:
            The removed session, or None if the guild had none.
        """
        ...

    @abstractmethod
    async def is_registered(self, session: SessionQueue) -> bool:
        """Check that this exact session instance is still the registered one.

        Args:
            session: The session to check.

        Returns:
            True if the guild's registered session is ``session`` itself.
        """
        ...

    @abstractmethod
    async def get_all(self) -> list[SessionQueue]:
        """Get all registered sessions.

        Returns:
            List of active sessions.
        """
        ...

    @abstractmethod
    async def count(self) -> int:
        """Get the number of registered sessions.

        Returns:
            Active session count.
        """
        ...
