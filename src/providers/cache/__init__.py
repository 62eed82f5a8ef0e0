"""Cache providers.

In-memory TTL-based cache used to avoid refetching Internet Archive item
metadata while a listener browses the tracks of the same recording.

MemoryCacheProvider is a dict-based cache, fast but not shared across
processes.  For multi-worker deployments, swap in a Redis adapter
implementing ICacheProvider without changing the resolver.
"""

from src.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
