# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic:
- shared/: Exceptions, events, messages and annotated types
- commands/: Command tokenizer and grammar
- music/: Tracks, the track queue and the call session
"""

from discord_jukebox.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
