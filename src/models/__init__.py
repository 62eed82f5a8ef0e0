"""Steal Your Stats domain models — re-exports all public model classes.

Other parts of the codebase can import directly from ``src.models``
(e.g. ``from src.models import SongIndex``) instead of the submodules:

    - song_index.py — The denormalized song index (songs, shows, venues)
    - archive.py    — Internet Archive candidates, recordings and tracks

If you add a new model class, add it to ``__all__`` too.
"""

from __future__ import annotations

# --- Song index models: what gets built from setlists, persisted and
# swapped as a whole. ---
from src.models.song_index import (
    IndexStats,
    ShowInfo,
    ShowVenue,
    SongIndex,
    SongIndexEntry,
)
# --- Archive models: scored recording candidates and playable tracks. ---
from src.models.archive import (
    ArchiveCandidate,
    ArchiveSearchResult,
    AudioTrack,
    ShowQuery,
    ShowRecording,
    SongTrackResult,
)

__all__ = [
    # song index
    "IndexStats",
    "ShowInfo",
    "ShowVenue",
    "SongIndex",
    "SongIndexEntry",
    # archive
    "ArchiveCandidate",
    "ArchiveSearchResult",
    "AudioTrack",
    "ShowQuery",
    "ShowRecording",
    "SongTrackResult",
]
