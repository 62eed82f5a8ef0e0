"""Abstract base class for response caches.

The archive provider keeps item metadata here so that resolving the same
recording twice (a show lookup followed by a song-track lookup, say) costs
one upstream request.  Keys are provider-chosen strings such as
``archive_metadata:<identifier>``; values are the decoded JSON payloads.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Async key-value cache with optional per-entry expiry."""

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the payload stored under *key*, or ``None`` once it has expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*.

        ``ttl`` is in seconds.  Without it the entry lives as long as the
        backend's own retention allows.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Drop *key*; missing keys are ignored."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` while *key* holds an unexpired payload."""
