"""Abstract base class for audio-archive providers.

Defines the two calls the archive resolver makes against an audio archive
such as the Internet Archive: an advanced search returning candidate
items, and a metadata fetch returning one item's file listing.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class IArchiveProvider(ABC):
    """Contract for audio-archive search and file-listing lookups."""

    @abstractmethod
    async def search(
        self,
        query: str,
        fields: list[str],
        rows: int = 50,
    ) -> dict[str, Any]:
        """Run an advanced-search *query* and return parsed JSON.

        The result is shaped like ``{"response": {"docs": [RawDoc, ...]}}``
        where each RawDoc may carry ``identifier``, ``title``, ``year``,
        ``venue``, ``coverage``, ``source`` and ``format`` (a string or a
        list of strings).

        Raises
        ------
        src.utils.errors.FetchError
            If the request fails.
        """

    @abstractmethod
    async def get_metadata(self, identifier: str) -> dict[str, Any]:
        """Return the item metadata for *identifier*.

        The result is shaped like ``{"files": [RawFile, ...]}`` where each
        RawFile may carry ``name``, ``size``, ``format``, ``length``,
        ``track`` and ``title``.

        Raises
        ------
        src.utils.errors.FetchError
            If the request fails.
        """

    @abstractmethod
    def streaming_url(self, identifier: str, file_name: str) -> str:
        """Return the direct download/stream URL for one file of an item."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier such as ``"internet_archive"``."""
