"""AudioResolver implementation using yt-dlp for URL resolution and search."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Final, cast

from yt_dlp import YoutubeDL

from discord_jukebox.application.interfaces.audio_resolver import AudioResolver
from discord_jukebox.config.settings import AudioSettings
from discord_jukebox.domain.music.entities import Track
from discord_jukebox.domain.shared.exceptions import ResolutionError
from discord_jukebox.domain.shared.messages import ErrorMessages, LogTemplates
from discord_jukebox.infrastructure.audio.models import (
    CACHE_MAX_SIZE,
    CACHE_TTL,
    LOG_URL_TRUNCATE,
    AudioFormatInfo,
    CacheEntry,
    ExtractorArgs,
    YouTubeExtractorConfig,
    YtDlpOpts,
    YtDlpTrackInfo,
)

logger = logging.getLogger(__name__)

MAX_DURATION_SECONDS: Final[int] = 86_400

_info_cache: dict[str, CacheEntry] = {}

class YtDlpResolver(AudioResolver):

    def __init__(self, settings: AudioSettings | None = None) -> None:
        self._settings = settings or AudioSettings()

        extractor_args = None
        if self._settings.pot_server_url:
            extractor_args = ExtractorArgs(
                youtube=YouTubeExtractorConfig(pot_server_url=self._settings.pot_server_url)
            )
            logger.info(LogTemplates.YTDLP_POT_CONFIGURED, self._settings.pot_server_url)

        self._base_opts = YtDlpOpts(
            format=self._settings.ytdlp_format,
            extractor_args=extractor_args,
        )

    def _get_opts(self, **overrides: Any) -> YtDlpOpts:
        if overrides:
            return self._base_opts.model_copy(update=overrides)
        return self._base_opts

    def _info_to_track(self, info: YtDlpTrackInfo, query: str) -> Track:
        stream_url = self._extract_stream_url(info)
        if not stream_url:
            logger.warning(LogTemplates.YTDLP_NO_STREAM_URL, info.display_title or query)
            raise ResolutionError(query, ErrorMessages.NO_URL_IN_INFO_DICT)

        duration = info.duration
        if duration is not None and duration > MAX_DURATION_SECONDS:
            duration = None

        return Track(
            source_url=info.webpage_url or query,
            stream_url=stream_url,
            title=info.display_title[:500] if info.display_title else None,
            artist=info.performer,
            duration_seconds=duration,
        )

    def _extract_stream_url(self, info: YtDlpTrackInfo) -> str | None:
        if info.url:
            return info.url
        return self._extract_stream_from_formats(info.formats)

    @staticmethod
    def _extract_stream_from_formats(formats: list[AudioFormatInfo]) -> str | None:
        if not formats:
            return None
        audio_formats = [f for f in formats if f.acodec != "none" and f.url]
        if audio_formats:
            return audio_formats[-1].url
        return None

    @staticmethod
    def _parse_info(data: dict[str, Any]) -> YtDlpTrackInfo:
        return YtDlpTrackInfo.model_validate(data)

    @staticmethod
    def _prune_cache(now: float) -> None:
        if len(_info_cache) <= CACHE_MAX_SIZE:
            return
        expired = [k for k, entry in _info_cache.items() if now - entry.cached_at >= CACHE_TTL]
        for k in expired:
            _info_cache.pop(k, None)
        # Insertion order is age order, so the oldest entries go first.
        while len(_info_cache) > CACHE_MAX_SIZE:
            _info_cache.pop(next(iter(_info_cache)))

    def _extract_info_sync(self, url: str) -> YtDlpTrackInfo | None:
        now = time.time()
        cached = _info_cache.get(url)
        if cached is not None:
            if now - cached.cached_at < CACHE_TTL:
                logger.debug(LogTemplates.CACHE_HIT_URL, url[:LOG_URL_TRUNCATE])
                return cached.info
            _info_cache.pop(url, None)

        with YoutubeDL(params=cast(Any, self._get_opts().model_dump(exclude_none=True))) as ydl:
            data = ydl.extract_info(url, download=False)

        if not isinstance(data, dict):
            return None
        result = self._parse_info(dict(data))
        _info_cache[url] = CacheEntry(info=result, cached_at=now)
        self._prune_cache(now)
        return result

    def _search_sync(self, query: str, limit: int = 1) -> list[YtDlpTrackInfo]:
        search_query = f"ytsearch{limit}:{query}"
        with YoutubeDL(params=cast(Any, self._get_opts().model_dump(exclude_none=True))) as ydl:
            data = ydl.extract_info(search_query, download=False)

        if not isinstance(data, dict):
            return []
        entries = data.get("entries", [])
        if not isinstance(entries, list):
            return []
        return [self._parse_info(dict(e)) for e in entries if e]

    async def resolve(self, query: str) -> Track:
        try:
            info = await asyncio.to_thread(self._extract_info_sync, query)
        except Exception as exc:
            logger.exception(LogTemplates.YTDLP_FAILED_EXTRACT_INFO, query)
            raise ResolutionError(query, str(exc)) from exc

        if info is None:
            raise ResolutionError(query, ErrorMessages.NO_RESULTS)
        return self._info_to_track(info, query)

    async def search(self, query: str, limit: int = 1) -> list[Track]:
        try:
            results = await asyncio.to_thread(self._search_sync, query, limit)
        except Exception as exc:
            logger.exception(LogTemplates.YTDLP_FAILED_SEARCH, query)
            raise ResolutionError(query, str(exc)) from exc

        tracks: list[Track] = []
        for info in results:
            try:
                tracks.append(self._info_to_track(info, query))
            except ResolutionError:
                continue
        return tracks
