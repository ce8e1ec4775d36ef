"""Exception hierarchy for domain-level errors.

Every error that can reach a user derives from :class:`DomainError`. The
session controller is the only place that turns these into chat replies.
"""

from __future__ import annotations

from discord_jukebox.domain.shared.messages import ErrorMessages


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


# === Parsing ===


class ParseError(DomainError):
    """Raised when command text cannot be turned into a command."""


class NoTokensParsed(ParseError):
    def __init__(self) -> None:
        super().__init__(ErrorMessages.NO_TOKENS_PARSED, code="NO_TOKENS_PARSED")


class NoValidCommandFound(ParseError):
    def __init__(self) -> None:
        super().__init__(ErrorMessages.NO_VALID_COMMAND, code="NO_VALID_COMMAND")


class ValidCommandExtraArguments(ParseError):
    """A command shape matched, but tokens were left over."""

    def __init__(self, leftover: int) -> None:
        super().__init__(
            ErrorMessages.EXTRA_ARGUMENTS.format(leftover=leftover),
            code="EXTRA_ARGUMENTS",
        )
        self.leftover = leftover


class InvalidNumberArgument(ParseError):
    def __init__(self, text: str) -> None:
        super().__init__(
            ErrorMessages.INVALID_NUMBER_ARGUMENT.format(text=text),
            code="INVALID_NUMBER_ARGUMENT",
        )
        self.text = text


# === Session ===


class SessionError(DomainError):
    """Raised for problems with the live call session."""


class NoActiveSession(SessionError):
    def __init__(self) -> None:
        super().__init__(ErrorMessages.NO_ACTIVE_SESSION, code="NO_ACTIVE_SESSION")


class SessionBusy(SessionError):
    """The single session is already bound to another guild."""

    def __init__(self, guild_id: int) -> None:
        super().__init__(
            ErrorMessages.SESSION_BUSY.format(guild_id=guild_id), code="SESSION_BUSY"
        )
        self.guild_id = guild_id


class SessionEnded(SessionError):
    """The session a slow operation was working for went away meanwhile."""

    def __init__(self) -> None:
        super().__init__(ErrorMessages.SESSION_ENDED, code="SESSION_ENDED")


# === Queue ===


class QueueError(DomainError):
    """Raised when a queue operation is not valid for the current queue."""


class EmptyQueue(QueueError):
    def __init__(self) -> None:
        super().__init__(ErrorMessages.EMPTY_QUEUE, code="EMPTY_QUEUE")


class EmptyQueueCannotClear(QueueError):
    def __init__(self) -> None:
        super().__init__(ErrorMessages.EMPTY_QUEUE_CANNOT_CLEAR, code="EMPTY_QUEUE_CANNOT_CLEAR")


class InvalidIndex(QueueError):
    def __init__(self, index: int) -> None:
        super().__init__(ErrorMessages.INVALID_INDEX.format(index=index), code="INVALID_INDEX")
        self.index = index


class QueueFull(QueueError):
    def __init__(self, max_size: int) -> None:
        super().__init__(ErrorMessages.QUEUE_FULL.format(max_size=max_size), code="QUEUE_FULL")
        self.max_size = max_size


# === Joining ===


class JoinError(DomainError):
    """Raised when no suitable voice channel can be joined."""


class SummonerNotFound(JoinError):
    def __init__(self, user_id: int) -> None:
        super().__init__(ErrorMessages.SUMMONER_NOT_FOUND, code="SUMMONER_NOT_FOUND")
        self.user_id = user_id


class NoOccupiedChannel(JoinError):
    def __init__(self) -> None:
        super().__init__(ErrorMessages.NO_OCCUPIED_CHANNEL, code="NO_OCCUPIED_CHANNEL")


class JoinFailed(JoinError):
    def __init__(self, channel_name: str) -> None:
        super().__init__(
            ErrorMessages.JOIN_FAILED.format(channel=channel_name), code="JOIN_FAILED"
        )
        self.channel_name = channel_name


# === Media resolution ===


class ResolutionError(DomainError):
    """Raised when a URL or search cannot be turned into a playable track."""

    def __init__(self, query: str, reason: str) -> None:
        super().__init__(
            ErrorMessages.RESOLUTION_FAILED.format(query=query, reason=reason),
            code="RESOLUTION_FAILED",
        )
        self.query = query
        self.reason = reason


# === Transport ===


class TransportError(DomainError):
    """Raised when the voice transport refuses a playback operation."""

    def __init__(self, operation: str) -> None:
        super().__init__(
            ErrorMessages.TRANSPORT_REFUSED.format(operation=operation), code="TRANSPORT_ERROR"
        )
        self.operation = operation
