"""Internet Archive provider implementing IArchiveProvider.

Talks to two public, keyless endpoints:

- ``/advancedsearch.php`` -- Lucene-style item search, JSON output.
- ``/metadata/{identifier}`` -- one item's metadata, including ``files``.

Metadata responses are immutable in practice, so they are cached through
an optional :class:`~src.interfaces.cache_provider.ICacheProvider`.
Search responses are never cached.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from src.config.settings import Settings
from src.interfaces.archive_provider import IArchiveProvider
from src.interfaces.cache_provider import ICacheProvider
from src.utils.errors import FetchError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 20.0
_DEFAULT_HEADERS = {
    "User-Agent": "StealYourStats/1.0.0",
    "Accept": "application/json",
}
# Characters encodeURIComponent leaves alone beyond Python's always-safe set.
_URL_SAFE_EXTRA = "!*'()"


class InternetArchiveProvider(IArchiveProvider):
    """archive.org search and metadata client.

    Parameters
    ----------
    settings:
        Application settings holding the archive base URL and cache TTL.
    http_client:
        Injected ``httpx.AsyncClient``.  A private client is created when
        omitted.
    cache:
        Optional cache for metadata responses.
    """

    def __init__(
        self,
        settings: Settings,
        http_client: httpx.AsyncClient | None = None,
        cache: ICacheProvider | None = None,
    ) -> None:
        self._base_url = settings.archive_base_url.rstrip("/")
        self._cache = cache
        self._cache_ttl = settings.archive_metadata_cache_ttl
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(_DEFAULT_TIMEOUT),
            headers=_DEFAULT_HEADERS,
            follow_redirects=True,
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET *url* and return the decoded JSON object, raising FetchError."""
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FetchError(
                message=f"HTTP {exc.response.status_code} from {url}",
                provider_name=self.get_provider_name(),
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchError(
                message=f"HTTP error fetching {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise FetchError(
                message=f"Invalid JSON from {url}: {exc}",
                provider_name=self.get_provider_name(),
                status_code=response.status_code,
            ) from exc

        if not isinstance(data, dict):
            raise FetchError(
                message=f"Unexpected payload from {url}",
                provider_name=self.get_provider_name(),
                status_code=response.status_code,
            )
        return data

    # ------------------------------------------------------------------
    # IArchiveProvider implementation
    # ------------------------------------------------------------------

    async def search(
        self,
        query: str,
        fields: list[str],
        rows: int = 50,
    ) -> dict[str, Any]:
        """Run an advanced search and return the raw JSON response."""
        params: dict[str, Any] = {
            "q": query,
            "fl[]": list(fields),
            "rows": rows,
            "output": "json",
        }
        try:
            data = await self._get_json(f"{self._base_url}/advancedsearch.php", params=params)
        except FetchError as exc:
            logger.warning("archive_search_failed", query=query, error=str(exc))
            raise

        logger.debug(
            "archive_search_completed",
            query=query,
            results=len((data.get("response") or {}).get("docs") or []),
        )
        return data

    async def get_metadata(self, identifier: str) -> dict[str, Any]:
        """Return item metadata for *identifier*, served from cache when possible."""
        cache_key = f"archive_metadata:{identifier}"
        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                return cached

        try:
            data = await self._get_json(f"{self._base_url}/metadata/{quote(identifier)}")
        except FetchError as exc:
            logger.warning("archive_metadata_failed", identifier=identifier, error=str(exc))
            raise

        if self._cache is not None:
            await self._cache.set(cache_key, data, ttl=self._cache_ttl)
        logger.debug(
            "archive_metadata_fetched",
            identifier=identifier,
            files=len(data.get("files") or []),
        )
        return data

    def streaming_url(self, identifier: str, file_name: str) -> str:
        """Return ``{base}/download/{identifier}/{url-encoded file name}``."""
        return (
            f"{self._base_url}/download/{identifier}/"
            f"{quote(file_name, safe=_URL_SAFE_EXTRA)}"
        )

    def get_provider_name(self) -> str:
        return "internet_archive"

    async def close(self) -> None:
        """Close the HTTP client if this provider created it."""
        if self._owns_client:
            await self._client.aclose()
