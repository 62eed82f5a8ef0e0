"""Abstract base class for music-registry artist lookups.

Used to resolve an act's name to the MusicBrainz identifier the setlist
source keys its data on.  The adapter pattern keeps the registry client
swappable and lets tests inject a fake.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ArtistSearchResult:
    """A single result returned by an artist-name search.

    Attributes
    ----------
    id:
        Registry identifier for the artist (a MusicBrainz MBID).
    name:
        The artist's canonical name as listed by the registry.
    disambiguation:
        Optional extra text to distinguish identically-named artists
        (e.g. ``"US rock band"``).
    confidence:
        Estimated match confidence between 0.0 and 1.0.
    """

    id: str
    name: str
    disambiguation: str | None = None
    confidence: float = 0.0


class IArtistLookupProvider(ABC):
    """Contract for resolving artist names to registry identifiers."""

    @abstractmethod
    async def search_artist(self, name: str) -> list[ArtistSearchResult]:
        """Search the registry for artists matching *name*.

        Parameters
        ----------
        name:
            The act name to search for.

        Returns
        -------
        list[ArtistSearchResult]
            Zero or more results ranked by confidence.

        Raises
        ------
        src.utils.errors.FetchError
            If the registry call fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"musicbrainz"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured for use."""
