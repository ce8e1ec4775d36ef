"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Discord ID Validation Errors
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"

    # Command Parsing Errors
    NO_TOKENS_PARSED = "No tokens parsed from message"
    NO_VALID_COMMAND = "No valid command found, try `help`"
    EXTRA_ARGUMENTS = "Valid command found, but {leftover} extra argument(s) were given"
    INVALID_NUMBER_ARGUMENT = "Couldn't parse index from argument: {text}"

    # Session Errors
    NO_ACTIVE_SESSION = "Not in a voice call"
    SESSION_BUSY = "Already in a call in another server ({guild_id})"
    SESSION_ENDED = "The session ended while the track was loading"

    # Queue Errors
    EMPTY_QUEUE = "Queue is empty"
    EMPTY_QUEUE_CANNOT_CLEAR = "Queue is empty, nothing to clear"
    INVALID_INDEX = "Index {index} is invalid"
    QUEUE_FULL = "Queue is full (max {max_size} tracks)"

    # Join Errors
    SUMMONER_NOT_FOUND = "Couldn't find you in a voice channel"
    NO_OCCUPIED_CHANNEL = "No voice channel has anyone in it"
    JOIN_FAILED = "Error joining channel {channel}"

    # Audio/Stream Errors
    RESOLUTION_FAILED = "Couldn't create track for {query}: {reason}"
    NO_URL_IN_INFO_DICT = "No URL found in info dict"
    NO_RESULTS = "No results found"
    TRANSPORT_REFUSED = "Error during {operation}"

    # Configuration Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    AUDIO_CHANNEL_REQUIRED = "DISCORD__AUDIO_CHANNEL_ID environment variable is required"
    CONTAINER_NOT_FOUND = "Container not found on bot instance"
    UNEXPECTED_ERROR = "Something went wrong, check the logs"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Voice Operations
    VOICE_CONNECTED = "Connected to voice channel %s in %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_MOVED = "Moved to voice channel %s"
    VOICE_ALREADY_IN_CHANNEL = "Already in voice channel %s, nothing to do"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_MOVE_TIMEOUT = "Timeout moving to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_CHANNEL_NOT_FOUND = "Voice channel %s not found"
    VOICE_NOT_CONNECTED = "Not connected to voice in guild %s"
    VOICE_BITRATE_SET = "Bitrate for guild %s set to %s kbps"

    # Playback Operations
    PLAYBACK_STARTED = "Started playing '%s' in guild %s"
    PLAYBACK_STOPPED = "Stopped playback in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"
    PLAYBACK_ERROR = "Playback error in guild %s: %s"
    PLAYBACK_FAILED_START = "Failed to start playback: %s"
    PLAYBACK_NO_CALLBACK = "No track end callback set for guild %s"
    PLAYBACK_CALLBACK_ERROR = "Error in track end callback for guild %s: %s"

    # Track/Queue Operations
    TRACK_ENDED = "Track %s ended in guild %s"
    TRACK_END_STALE = "Ignoring stale track end for %s in guild %s"
    QUEUE_PLAY_NOW = "Moved '%s' to the head of the queue in guild %s"
    QUEUE_ENQUEUED = "Enqueued %s track(s) at the tail in guild %s"
    QUEUE_ENQUEUED_NEXT = "Enqueued %s track(s) to play next in guild %s"
    QUEUE_REMOVED = "Removed track '%s' from queue in guild %s"
    QUEUE_CLEARED = "Cleared %s tracks from queue in guild %s"
    QUEUE_GOTO = "Jumped %s tracks ahead in guild %s"
    QUEUE_STOPPED = "Stopped player and emptied queue in guild %s"

    # Join Policy
    JOIN_SUMMONER_FOUND = "Found user %s in voice channel %s"
    JOIN_MOST_CROWDED = "Most crowded channel is %s with %s members"

    # Session / Supervisor
    SESSION_CREATED = "Created call session %s in guild %s channel %s"
    SESSION_DROPPED = "Dropped call session %s"
    SUPERVISOR_STARTED = "Session supervisor started"
    SUPERVISOR_STOPPED = "Session supervisor stopped"
    SUPERVISOR_EVENT_ERROR = "Error handling supervisor event %s"
    COUNTDOWN_STARTED = "Idle countdown of %ss started in guild %s"
    COUNTDOWN_CANCELLED = "Idle countdown cancelled in guild %s"
    COUNTDOWN_EXPIRED_IDLE = "Idle countdown expired in guild %s, leaving"
    COUNTDOWN_EXPIRED_ACTIVE = "Idle countdown expired in guild %s but a track is playing"
    COUNTDOWN_SUPERSEDED = "Idle countdown in guild %s was superseded"
    COUNTDOWN_DEFERRED = "Idle countdown expired in guild %s with %s load(s) pending, staying"
    DISCONNECT_ALONE = "Bot is alone in channel %s, leaving"
    DISCONNECT_NOT_ALONE = "Channel %s still has %s members"
    SHUTDOWN_STARTED = "Shutting down session in guild %s (reason: %s)"
    SHUTDOWN_LEAVE_FAILED = "Failed to leave voice channel in guild %s during shutdown"
    EVENT_WITHOUT_SESSION = "Ignoring %s, no live session"

    # Resolution/Search
    YTDLP_NO_STREAM_URL = "No stream URL found for %s"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    YTDLP_POT_CONFIGURED = "bgutil-ytdlp-pot-provider configured (server=%s)"
    CACHE_HIT_URL = "Cache hit for URL: %s"
    RESOLVE_DISCARDED = "Discarding resolved tracks for ended session %s"

    # Commands
    COMMAND_RECEIVED = "Command from %s in channel %s: %r"
    COMMAND_FAILED = "Command %r failed: %s"
    COMMAND_UNEXPECTED_ERROR = "Unexpected error handling command %r"
    COMMAND_REPLY_FAILED = "Failed to send reply in channel %s: %s"
    COMMAND_REACTION_FAILED = "Failed to add reaction in channel %s: %s"

    # Application Lifecycle
    BOT_STARTING = "Starting Discord Jukebox in {environment} mode"
    BOT_SETUP = "Setting up bot..."
    BOT_CONTAINER_INITIALIZED = "Container initialized successfully"
    BOT_CONTAINER_INIT_FAILED = "Failed to initialize container: %s"
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_CONTAINER_SHUTDOWN = "Container shutdown complete"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %s"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"
    BOT_GUILD_JOINED = "Joined guild %s (%s)"
    BOT_GUILD_REMOVED = "Removed from guild %s (%s)"

    # Bot Cog Management
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"


class DiscordUIMessages:
    """User-facing Discord messages and responses.

    These strings are posted directly into the audio text channel.
    """

    HELP_TEXT = (
        "```\n"
        "help - show this\n"
        "play 'url' - plays the given url, inserts into the front of the queue\n"
        "play search 'words' - searches and plays the first result\n"
        "driveby 'url' - driveby a channel with the given url\n"
        "driveby search 'words' - driveby a channel with the first search result\n"
        "queue 'url' * - queue up the given url(s), starts playing if queue was empty\n"
        "next 'url' * - queue up the given url(s) to play next\n"
        "goto X (>0) - jump to and play the queue index given\n"
        "rm X Y, etc (>0) - remove queue elements, provide indices separated by spaces\n"
        "list - lists the current queue\n"
        "pause - pause currently playing track\n"
        "resume - resume a currently paused track\n"
        "skip - skip the current track\n"
        "clear - clears everything in the queue but the song playing\n"
        "stop - stop the player, but don't leave\n"
        "leave - tells the player to get out of here\n"
        "```"
    )

    ERROR_GENERIC = "❌ {message}"


class EmojiConstants:
    """Emoji constants for consistent visual feedback."""

    SUCCESS = "👍"
    FAILURE = "❌"
