"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Discord (bot, cogs, voice and guild adapters)
- Audio (yt-dlp resolution)

Nothing is re-exported here; settings import audio models from this package
and the adapters import settings back.
"""
