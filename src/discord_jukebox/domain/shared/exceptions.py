"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class SetupFailedError(DomainError):
    """Raised when the voice transport or playback device cannot be acquired."""

    def __init__(self, guild_id: int, cause: str) -> None:
        super().__init__(f"Could not set up playback in guild {guild_id}: {cause}", code="SETUP_FAILED")
        self.guild_id = guild_id
        self.cause = cause


class ResolutionError(DomainError):
    """Raised when a query cannot be resolved to a playable track."""

    def __init__(self, query: str, cause: str | None = None) -> None:
        msg = f"Could not resolve '{query}'" + (f": {cause}" if cause else "")
        super().__init__(msg, code="RESOLUTION_FAILED")
        self.query = query
        self.cause = cause


class ExtractionError(DomainError):
    """Raised when the external extraction utility fails to produce an audio file."""

    def __init__(self, track_id: str, cause: str) -> None:
        super().__init__(cause, code="EXTRACTION_FAILED")
        self.track_id = track_id
        self.cause = cause


class PlaybackError(DomainError):
    """Raised when the playback device cannot render a file."""

    def __init__(self, cause: str) -> None:
        super().__init__(cause, code="PLAYBACK_ERROR")
        self.cause = cause
