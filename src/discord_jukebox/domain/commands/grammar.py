"""Command grammar: the table of valid command shapes and the matcher over it."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from discord_jukebox.domain.commands.tokens import Token, TokenTag, tokenize
from discord_jukebox.domain.shared.exceptions import (
    InvalidNumberArgument,
    NoValidCommandFound,
    ValidCommandExtraArguments,
)

CommandPattern = tuple[TokenTag, ...]

_T = TokenTag

# Row order is the tie-break: the first pattern that consumes the whole
# token stream wins, so "play search" must come before "play".
COMMAND_TABLE: tuple[CommandPattern, ...] = (
    (_T.HELP,),
    (_T.LIST,),
    (_T.PAUSE,),
    (_T.RESUME,),
    (_T.SKIP,),
    (_T.CLEAR,),
    (_T.STOP,),
    (_T.LEAVE,),
    (_T.PLAY, _T.SEARCH, _T.ARGUMENTS),
    (_T.PLAY, _T.ARGUMENT),
    (_T.DRIVEBY, _T.SEARCH, _T.ARGUMENTS),
    (_T.DRIVEBY, _T.ARGUMENT),
    (_T.QUEUE, _T.ARGUMENTS),
    (_T.NEXT, _T.ARGUMENTS),
    (_T.GOTO, _T.ARGUMENT),
    (_T.RM, _T.ARGUMENTS),
)


@dataclass(frozen=True)
class ResolvedCommand:
    """A matched command: its keywords and the captured generic words."""

    keywords: tuple[TokenTag, ...]
    arguments: tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return " ".join(tag.value for tag in self.keywords)


def _match_pattern(pattern: CommandPattern, tokens: Sequence[Token]) -> int | None:
    """Return how many tokens ``pattern`` consumes, or None if it doesn't match.

    A trailing ``ARGUMENTS`` slot consumes every remaining token and fails
    unless there is at least one and all of them are generic.
    """
    position = 0
    for slot in pattern:
        if slot is TokenTag.ARGUMENTS:
            rest = tokens[position:]
            if not rest or not all(token.is_generic for token in rest):
                return None
            return len(tokens)

        if position >= len(tokens):
            return None
        token = tokens[position]
        if slot is TokenTag.ARGUMENT:
            if not token.is_generic:
                return None
        elif token.tag is not slot:
            return None
        position += 1
    return position


def match_tokens(
    tokens: Sequence[Token], table: Sequence[CommandPattern] = COMMAND_TABLE
) -> ResolvedCommand:
    """Match a token stream against ``table``.

    Raises:
        ValidCommandExtraArguments: If no row consumed everything but some row
            matched a prefix of the stream.
        NoValidCommandFound: If no row matched at all.
    """
    leftover: int | None = None
    for pattern in table:
        consumed = _match_pattern(pattern, tokens)
        if consumed is None:
            continue
        if consumed < len(tokens):
            if leftover is None:
                leftover = len(tokens) - consumed
            continue
        return ResolvedCommand(
            keywords=tuple(slot for slot in pattern if not slot.is_placeholder),
            arguments=tuple(token.text for token in tokens if token.text is not None),
        )

    if leftover is not None:
        raise ValidCommandExtraArguments(leftover)
    raise NoValidCommandFound()


def parse_command(text: str, table: Sequence[CommandPattern] = COMMAND_TABLE) -> ResolvedCommand:
    """Tokenize and match ``text`` in one step."""
    return match_tokens(tokenize(text), table)


def parse_index(text: str) -> int:
    """Parse a queue index argument as a non-negative decimal integer."""
    if not text.isascii() or not text.isdigit():
        raise InvalidNumberArgument(text)
    return int(text)
