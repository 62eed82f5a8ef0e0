"""Abstract base class for setlist-database providers.

Defines the contract the song index builder needs from a setlist source
(e.g. setlist.fm): one page of an artist's setlists, optionally limited
to a year.  Payloads are returned as parsed JSON; the builder reads them
defensively because every field may be missing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ISetlistProvider(ABC):
    """Contract for paginated setlist sources."""

    @abstractmethod
    async def get_artist_setlists(
        self,
        artist_id: str,
        page: int = 1,
        year: int | None = None,
    ) -> dict[str, Any]:
        """Fetch one page of setlists for *artist_id*.

        Parameters
        ----------
        artist_id:
            The act's MusicBrainz identifier.
        page:
            1-indexed page number.
        year:
            Restrict results to this calendar year when given.

        Returns
        -------
        dict
            Parsed JSON shaped like ``{"setlist": [RawSetlist, ...]}``.  A
            missing or empty ``setlist`` list means there are no more pages.
            Each RawSetlist carries ``id``, ``eventDate`` (``DD-MM-YYYY``),
            ``venue.{id,name,city.name,city.country.name}`` and
            ``sets.set[].song[].name``.

        Raises
        ------
        src.utils.errors.RateLimitError
            If the provider answered HTTP 429.
        src.utils.errors.FetchError
            For any other failed request.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"setlistfm"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the provider is configured for use."""
