"""In-memory cache provider using cachetools.TTLCache.

Holds archive item metadata for the lifetime of one process.  Entries
expire after the cache-wide TTL; a shorter per-entry ``ttl`` passed to
:meth:`MemoryCacheProvider.set` is honoured on read.
"""

from __future__ import annotations

import time
from typing import Any, Callable

import structlog
from cachetools import TTLCache

from src.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class MemoryCacheProvider(ICacheProvider):
    """In-memory TTL cache backed by ``cachetools.TTLCache``.

    Parameters
    ----------
    max_size:
        Maximum number of entries before the least-recently-used entry
        is evicted.
    ttl:
        Cache-wide time-to-live in seconds.
    timer:
        Monotonic clock shared with the underlying ``TTLCache``; tests
        pass a fake clock to expire entries without sleeping.
    """

    def __init__(
        self,
        max_size: int = 512,
        ttl: int = 3600,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._timer = timer
        # Values are stored as (deadline, value) pairs.
        self._cache: TTLCache[str, tuple[float, Any]] = TTLCache(
            maxsize=max_size, ttl=ttl, timer=timer
        )

    # ------------------------------------------------------------------
    # ICacheProvider implementation
    # ------------------------------------------------------------------

    async def get(self, key: str) -> Any | None:
        """Retrieve the cached value for *key*, or ``None`` if missing/expired."""
        entry = self._cache.get(key)
        if entry is None:
            logger.debug("cache_miss", key=key)
            return None
        deadline, value = entry
        if self._timer() >= deadline:
            self._cache.pop(key, None)
            logger.debug("cache_expired", key=key)
            return None
        logger.debug("cache_hit", key=key)
        return value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*, expiring after *ttl* seconds if given."""
        deadline = self._timer() + ttl if ttl is not None else float("inf")
        self._cache[key] = (deadline, value)
        logger.debug("cache_set", key=key, ttl=ttl)

    async def delete(self, key: str) -> None:
        """Remove *key* from the cache (no-op if absent)."""
        self._cache.pop(key, None)
        logger.debug("cache_delete", key=key)

    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""
        return await self.get(key) is not None

    def __len__(self) -> int:
        return len(self._cache)
