"""Music-registry provider implementations.

MusicBrainzProvider resolves act names to MusicBrainz identifiers, which
setlist.fm uses as its artist key.
"""

from src.providers.music_db.musicbrainz_provider import MusicBrainzProvider

__all__ = ["MusicBrainzProvider"]
