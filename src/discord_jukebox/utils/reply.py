"""Helpers for fitting bot replies into Discord messages."""

from __future__ import annotations

from typing import Final

DISCORD_MESSAGE_LIMIT: Final[int] = 2000
CODE_FENCE: Final[str] = "```"


def truncate(text: str, max_length: int = DISCORD_MESSAGE_LIMIT) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"


def fit_message(text: str, max_length: int = DISCORD_MESSAGE_LIMIT) -> str:
    """Shorten ``text`` to a single message, keeping a code block closed.

    Whole lines are dropped from the end of a fenced block so the rendered
    queue stays readable.
    """
    if len(text) <= max_length:
        return text

    if not (text.startswith(CODE_FENCE) and text.endswith(CODE_FENCE)):
        return truncate(text, max_length)

    lines = text[: -len(CODE_FENCE)].rstrip("\n").split("\n")
    suffix = "\n…\n" + CODE_FENCE
    while len(lines) > 1 and len("\n".join(lines)) + len(suffix) > max_length:
        lines.pop()
    body = "\n".join(lines)
    if len(body) + len(suffix) > max_length:
        return truncate(text, max_length)
    return body + suffix
