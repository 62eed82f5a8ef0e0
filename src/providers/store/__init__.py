"""Song index persistence backends."""

from src.providers.store.json_index_store import JsonIndexStore

__all__ = ["JsonIndexStore"]
