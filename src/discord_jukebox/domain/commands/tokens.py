"""Tokenizer for chat commands."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from discord_jukebox.domain.shared.exceptions import NoTokensParsed


class TokenTag(Enum):
    """Token kinds produced by :func:`tokenize`.

    ``ARGUMENT`` and ``ARGUMENTS`` only appear in command patterns; the
    tokenizer never emits them.
    """

    HELP = "help"
    LIST = "list"
    PAUSE = "pause"
    RESUME = "resume"
    SKIP = "skip"
    CLEAR = "clear"
    STOP = "stop"
    LEAVE = "leave"
    PLAY = "play"
    DRIVEBY = "driveby"
    QUEUE = "queue"
    NEXT = "next"
    RM = "rm"
    GOTO = "goto"
    SEARCH = "search"

    GENERIC = "<generic>"
    ARGUMENT = "<argument>"
    ARGUMENTS = "<arguments>"

    @property
    def is_placeholder(self) -> bool:
        return self in (TokenTag.ARGUMENT, TokenTag.ARGUMENTS)


KEYWORDS: dict[str, TokenTag] = {
    tag.value: tag
    for tag in TokenTag
    if tag not in (TokenTag.GENERIC, TokenTag.ARGUMENT, TokenTag.ARGUMENTS)
}


@dataclass(frozen=True)
class Token:
    """A single lexed word. ``text`` is only set for generic tokens."""

    tag: TokenTag
    text: str | None = None

    @property
    def is_generic(self) -> bool:
        return self.tag is TokenTag.GENERIC

    @classmethod
    def generic(cls, text: str) -> Token:
        return cls(TokenTag.GENERIC, text)


def tokenize(text: str) -> list[Token]:
    """Split ``text`` on whitespace into keyword and generic tokens.

    Keywords match exactly and case-sensitively; anything else is generic.

    Raises:
        NoTokensParsed: If the text is empty or only whitespace.
    """
    words = text.split()
    if not words:
        raise NoTokensParsed()

    tokens: list[Token] = []
    for word in words:
        tag = KEYWORDS.get(word)
        tokens.append(Token(tag) if tag is not None else Token.generic(word))
    return tokens
