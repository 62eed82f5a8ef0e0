"""setlist.fm REST provider implementing ISetlistProvider.

Fetches one page of an artist's setlists from
``{base_url}/artist/{mbid}/setlists``.  setlist.fm keys artists by their
MusicBrainz identifier and authenticates with an ``x-api-key`` header.

The API throttles aggressively (HTTP 429).  This provider does not retry:
it raises :class:`~src.utils.errors.RateLimitError` and leaves the
cooldown policy to the index builder.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from src.config.settings import Settings
from src.interfaces.setlist_provider import ISetlistProvider
from src.utils.errors import FetchError, RateLimitError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 30.0


class SetlistFmProvider(ISetlistProvider):
    """setlist.fm API client.

    Parameters
    ----------
    settings:
        Application settings holding the API key and base URL.
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
        A private client is created when omitted.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._api_key = settings.setlist_fm_api_key.strip()
        self._base_url = settings.setlist_fm_base_url.rstrip("/")
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(_DEFAULT_TIMEOUT))

    # ------------------------------------------------------------------
    # ISetlistProvider implementation
    # ------------------------------------------------------------------

    async def get_artist_setlists(
        self,
        artist_id: str,
        page: int = 1,
        year: int | None = None,
    ) -> dict[str, Any]:
        """Fetch one page of setlists for *artist_id*."""
        params: dict[str, Any] = {"p": page, "fmt": "json"}
        if year is not None:
            params["year"] = year
        headers = {"x-api-key": self._api_key, "Accept": "application/json"}
        url = f"{self._base_url}/artist/{artist_id}/setlists"

        try:
            response = await self._client.get(url, params=params, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("setlistfm_request_failed", page=page, year=year, error=str(exc))
            raise FetchError(
                message=f"setlist.fm request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if response.status_code == 429:
            logger.warning("setlistfm_rate_limited", page=page, year=year)
            raise RateLimitError(
                message="setlist.fm rate limit exceeded",
                provider_name=self.get_provider_name(),
            )
        if response.status_code != 200:
            logger.warning(
                "setlistfm_bad_status",
                page=page,
                year=year,
                status=response.status_code,
            )
            raise FetchError(
                message=f"setlist.fm returned HTTP {response.status_code}",
                provider_name=self.get_provider_name(),
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise FetchError(
                message=f"setlist.fm returned invalid JSON: {exc}",
                provider_name=self.get_provider_name(),
                status_code=response.status_code,
            ) from exc

        if not isinstance(data, dict):
            raise FetchError(
                message="setlist.fm returned an unexpected payload",
                provider_name=self.get_provider_name(),
                status_code=response.status_code,
            )

        logger.debug(
            "setlistfm_page_fetched",
            page=page,
            year=year,
            setlists=len(data.get("setlist") or []),
        )
        return data

    def get_provider_name(self) -> str:
        return "setlistfm"

    def is_available(self) -> bool:
        """Available only when an API key is configured."""
        return bool(self._api_key)

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()
