"""MusicBrainz provider implementing IArtistLookupProvider.

Uses the musicbrainzngs library to resolve an act name to its MusicBrainz
identifier, the key setlist.fm files setlists under.  Enforces the
MusicBrainz rate limit of 1 request per second via asyncio-based
throttling; the blocking client call runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import time

import musicbrainzngs
import structlog

from src.config.settings import Settings
from src.interfaces.artist_lookup_provider import ArtistSearchResult, IArtistLookupProvider
from src.utils.errors import FetchError

logger = structlog.get_logger(logger_name=__name__)


class MusicBrainzProvider(IArtistLookupProvider):
    """MusicBrainz artist lookup, throttled to one request per second.

    Results are ordered by search score; on equal scores an exact
    (case-insensitive) name match comes first, so tribute acts sharing the
    top score never displace the act itself.
    """

    _MIN_REQUEST_INTERVAL: float = 1.0  # seconds between requests

    def __init__(self, settings: Settings, search_limit: int = 10) -> None:
        self._search_limit = search_limit
        self._last_request_time: float = 0.0

        musicbrainzngs.set_useragent(
            settings.musicbrainz_app_name,
            settings.musicbrainz_app_version,
            settings.musicbrainz_contact or None,
        )
        logger.info(
            "musicbrainz_provider_initialized",
            user_agent=settings.musicbrainz_user_agent(),
        )

    # ------------------------------------------------------------------
    # Rate-limiting helper
    # ------------------------------------------------------------------

    async def _throttle(self) -> None:
        """Enforce the MusicBrainz 1 req/sec rate limit."""
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self._MIN_REQUEST_INTERVAL:
            await asyncio.sleep(self._MIN_REQUEST_INTERVAL - elapsed)
        self._last_request_time = time.monotonic()

    # ------------------------------------------------------------------
    # IArtistLookupProvider implementation
    # ------------------------------------------------------------------

    async def search_artist(self, name: str) -> list[ArtistSearchResult]:
        """Search MusicBrainz for artists matching *name*, best match first."""
        await self._throttle()
        try:
            response = await asyncio.to_thread(
                musicbrainzngs.search_artists, artist=name, limit=self._search_limit
            )
        except musicbrainzngs.WebServiceError as exc:
            logger.warning("musicbrainz_artist_search_failed", query=name, error=str(exc))
            raise FetchError(
                message=f"MusicBrainz artist search failed for '{name}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        results: list[ArtistSearchResult] = []
        for artist in response.get("artist-list", []):
            score = int(artist.get("ext:score", 0))
            results.append(
                ArtistSearchResult(
                    id=artist["id"],
                    name=artist.get("name", ""),
                    disambiguation=artist.get("disambiguation"),
                    confidence=score / 100.0,
                )
            )
        wanted = name.strip().casefold()
        results.sort(
            key=lambda r: (r.confidence, r.name.casefold() == wanted),
            reverse=True,
        )

        logger.debug(
            "musicbrainz_artist_search",
            query=name,
            result_count=len(results),
        )
        return results

    def get_provider_name(self) -> str:
        """Return the provider identifier."""
        return "musicbrainz"

    def is_available(self) -> bool:
        """MusicBrainz is always available (no API key required)."""
        return True
