"""Abstract base class for song-index persistence.

The index is stored and loaded whole: there are no partial updates, so
implementations only need "save everything" and "load everything".
Implementations may use a JSON file, a database row, or object storage.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.song_index import SongIndex


class IIndexStore(ABC):
    """Contract for whole-index persistence."""

    @abstractmethod
    async def load(self) -> SongIndex | None:
        """Return the persisted index, or ``None`` if nothing is stored.

        Raises
        ------
        src.utils.errors.IndexStoreError
            If stored data exists but cannot be read or parsed.
        """

    @abstractmethod
    async def save(self, index: SongIndex) -> None:
        """Replace whatever is stored with *index*.

        Raises
        ------
        src.utils.errors.IndexStoreError
            If the index cannot be written.
        """
