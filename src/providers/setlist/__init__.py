"""Setlist-database providers.

SetlistFmProvider is the only implementation: setlist.fm is the source
the song index is folded from.
"""

from src.providers.setlist.setlistfm_provider import SetlistFmProvider

__all__ = ["SetlistFmProvider"]
