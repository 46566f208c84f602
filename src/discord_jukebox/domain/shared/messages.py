"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Track Validation Errors
    EMPTY_TRACK_ID = "Track ID cannot be empty"
    EMPTY_TRACK_TITLE = "Track title cannot be empty"

    # Queue Errors
    EMPTY_BACKLOG = "Session backlog is empty"

    # Settings Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    INVALID_AUDIO_FORMAT = "Audio format must be alphanumeric"

    # Voice/Setup Errors
    VOICE_CONNECT_FAILED = "Could not connect to voice channel"
    PLAYER_NOT_CONNECTED = "Voice client is not connected"

    # Extraction Errors
    EXTRACTION_EXIT_CODE = "yt-dlp exited with code {code}: {stderr}"
    EXTRACTION_MISSING_OUTPUT = "yt-dlp finished but {path} was not created"
    EXTRACTION_TIMEOUT = "yt-dlp timed out after {seconds}s"
    EXTRACTION_SPAWN_FAILED = "Could not start yt-dlp: {error}"
    EXTRACTION_ABORTED = "Extraction aborted"
    EXTRACTION_STREAM_FAILED = "Could not read yt-dlp output: {error}"

    # Authentication/Security Errors
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    INVALID_SETTINGS = "Invalid configuration: {error}"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Cache Operations
    CACHE_DIR_READY = "Media cache ready at %s (%d cached files)"
    CACHE_HIT = "File already exists, skipping download: %s"
    CACHE_STORED = "Cached %s at %s"

    # Extraction
    EXTRACTION_STARTED = "Starting download for: %s (ID: %s)"
    EXTRACTION_COMMAND = "Executing command: %s"
    EXTRACTION_STDOUT = "yt-dlp output [%s]: %s"
    EXTRACTION_STDERR = "yt-dlp error [%s]: %s"
    EXTRACTION_COMPLETED = "Download completed: %s"
    EXTRACTION_FAILED = "Download error for %s: %s"
    EXTRACTION_JOIN_INFLIGHT = "Joining in-flight download for %s"
    EXTRACTION_KILLED = "Killed yt-dlp process for %s"

    # Resolution
    RESOLVE_URL = "Detected YouTube URL: %s"
    RESOLVE_SEARCH = "Searching YouTube for: %s"
    RESOLVE_FOUND = "Found video: %s (ID: %s)"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info for %s: %s"
    YTDLP_FAILED_SEARCH = "Search failed for '%s': %s"

    # Voice/Audio Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild %s"
    VOICE_CLEANUP_ERROR = "Error during voice cleanup in guild %s"
    GUILD_NOT_FOUND = "Guild %s not found"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"

    # Playback Operations
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_ERROR = "Player error in guild %s: %s"
    TRACK_ENDED = "Song ended in guild %s (error=%s)"
    PLAYBACK_HANDLER_ERROR = "Error in playback terminal handler for guild %s"
    PLAYBACK_NO_HANDLER = "No terminal handler registered for guild %s"

    # Session / Queue
    SESSION_CREATED = "Created session %s for guild %s"
    SESSION_SETUP_FAILED = "Error joining voice channel in guild %s: %s"
    SESSION_DESTROYED = "Session for guild %s destroyed (%s)"
    SESSION_STALE_EVENT = "Ignoring stale %s for guild %s"
    QUEUE_ENQUEUED = "Queued '%s' at position %d in guild %s"
    QUEUE_ADVANCED = "Advancing queue in guild %s (%d remaining)"
    QUEUE_EMPTY = "Queue exhausted in guild %s"
    PIPELINE_STAGE = "Guild %s: '%s' -> %s"
    PIPELINE_CRASHED = "Pipeline crashed in guild %s"
    NOTIFY_FAILED = "Could not deliver message to channel %s: %s"

    # Session Activity
    ACTIVITY_SUMMARY = (
        "Session for guild %s ended (%s): %d played (%d cached, %d downloaded), "
        "%d completed, %d failed, %.0fs"
    )
    ACTIVITY_EXTRACTION_FAILED = "Skipped '%s' in guild %s: %s"
    ACTIVITY_QUEUE_EXHAUSTED = "Guild %s ran out of tracks after %d"

    # Bot Lifecycle
    BOT_STARTING = "Starting Discord jukebox ({environment})"
    BOT_STARTING_RUN = "Running bot..."
    BOT_STOPPED = "Bot stopped"
    BOT_KEYBOARD_INTERRUPT = "Keyboard interrupt, shutting down"
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_CONTAINER_INITIALIZED = "Container initialized"
    BOT_CONTAINER_INIT_FAILED = "Container initialization failed: %s"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_READY = "Logged in as %s (ID: %s)"
    BOT_CONNECTED_GUILDS = "Connected to %d guild(s)"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %.1fs"
    BOT_CONTAINER_SHUTDOWN = "Container shut down"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error shutting down container: %r"
    BOT_SHUTDOWN_COMPLETE = "Shutdown complete"
    BOT_COMMAND_ERROR = "Error in command %s: %s"


class DiscordUIMessages:
    """User-facing messages sent to Discord channels."""

    # Preconditions
    STATE_NEED_TO_BE_IN_VOICE = "You need to be in a voice channel!"
    STATE_EMPTY_QUERY = "Please provide a YouTube URL or search term!"
    STATE_SERVER_ONLY = "This command only works in a server."
    STATE_NOTHING_PLAYING = "Nothing is playing!"

    # Play flow
    STATUS_PREPARING = "🔄 Preparing to play: {title}"
    STATUS_DOWNLOADING = "🔄 Downloading: {title}"
    STATUS_NOW_PLAYING = "🎶 Now playing: {title}"
    STATUS_QUEUED = "🎵 Added to queue: {title} (position {position})"

    # Stop
    ACTION_STOPPED = "Stopped and left the channel!"

    # Errors
    ERROR_TRACK_NOT_FOUND = "Error: Could not find anything for `{query}`"
    ERROR_RESOLUTION = "Error: {error}"
    ERROR_SETUP_FAILED = "Error: {error}"
    ERROR_PLAYING_SONG = "Error playing song: {error}"
    ERROR_OCCURRED = "❌ An error occurred: {error}"
