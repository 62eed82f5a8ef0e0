"""Public interface definitions for all external service providers.

Every upstream source the song index and archive resolver depend on is
accessed through the abstract base classes defined in this package.
Concrete adapters live in ``src/providers/`` and are wired together in
``src/main.py`` (HTTP app) or ``src/cli/song_index.py`` (command line).
Tests inject fakes or mocks in their place.

CONCRETE PROVIDER MAP:
    Interface                  ->  Concrete implementation (in src/providers/)
    ---------------------------------------------------------------------
    ISetlistProvider           ->  SetlistFmProvider
    IArchiveProvider           ->  InternetArchiveProvider
    IIndexStore                ->  JsonIndexStore
    ICacheProvider             ->  MemoryCacheProvider
    IArtistLookupProvider      ->  MusicBrainzProvider
"""

from src.interfaces.archive_provider import IArchiveProvider
from src.interfaces.artist_lookup_provider import ArtistSearchResult, IArtistLookupProvider
from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.index_store import IIndexStore
from src.interfaces.setlist_provider import ISetlistProvider

__all__ = [
    "ArtistSearchResult",
    "IArchiveProvider",
    "IArtistLookupProvider",
    "ICacheProvider",
    "IIndexStore",
    "ISetlistProvider",
]
