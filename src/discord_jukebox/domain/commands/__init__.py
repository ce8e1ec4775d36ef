"""
Commands Domain

Tokenizer and grammar for the text commands posted in the audio channel.
"""

from discord_jukebox.domain.commands.grammar import (
    COMMAND_TABLE,
    ResolvedCommand,
    match_tokens,
    parse_command,
    parse_index,
)
from discord_jukebox.domain.commands.tokens import Token, TokenTag, tokenize

__all__ = [
    "Token",
    "TokenTag",
    "tokenize",
    "COMMAND_TABLE",
    "ResolvedCommand",
    "match_tokens",
    "parse_command",
    "parse_index",
]
