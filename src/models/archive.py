"""Pydantic v2 models for Internet Archive show resolution.

These are the shapes the archive resolver returns: scored candidate
recordings for a requested show, and playable audio tracks extracted
from a recording's file listing.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_WIRE_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class AudioTrack(BaseModel):
    """A single playable file inside an archive recording.

    ``format`` is the archive's free-text label ("VBR MP3", "24bit Flac"),
    not an enum.
    """

    model_config = _WIRE_CONFIG

    name: str
    url: str
    size: int = 0
    format: str = ""
    duration: float | None = None       # seconds
    track_number: int | None = None
    title: str | None = None            # falls back to ``name`` when absent

    @property
    def display_title(self) -> str:
        return self.title or self.name


class ArchiveCandidate(BaseModel):
    """A scored guess at which archived recording matches a requested show."""

    model_config = _WIRE_CONFIG

    identifier: str
    title: str | None = None
    year: int | None = None
    venue: str | None = None
    coverage: str | None = None
    source: str | None = None
    formats: list[str] = Field(default_factory=list)
    score: int = 0


class ShowQuery(BaseModel):
    """What the caller knows about the show it wants to hear.

    ``date`` may be ``YYYY-MM-DD`` (archive convention) or ``DD-MM-YYYY``
    (setlist convention); the resolver normalizes it.
    """

    model_config = _WIRE_CONFIG

    date: str
    venue: str | None = None
    city: str | None = None
    state: str | None = None


class ArchiveSearchResult(BaseModel):
    """Outcome of a date-based show search.

    An empty ``candidates`` list with ``best_identifier=None`` is the
    normal "not found" result.
    """

    model_config = _WIRE_CONFIG

    candidates: list[ArchiveCandidate] = Field(default_factory=list)
    best_identifier: str | None = None
    tracks: list[AudioTrack] = Field(default_factory=list)


class ShowRecording(BaseModel):
    """One archived recording with its playable files."""

    model_config = _WIRE_CONFIG

    identifier: str
    title: str
    date: str
    venue: str | None = None
    audio_files: list[AudioTrack] = Field(default_factory=list)
    total_duration: float = 0.0
    format: str = "MP3"     # MP3 | FLAC | SHN | VBR


class SongTrackResult(BaseModel):
    """Tracks for one song within one recording.

    ``found=False`` with a non-empty ``tracks`` list means the song could
    not be pinned down and the whole recording is returned instead.
    """

    model_config = _WIRE_CONFIG

    identifier: str
    song_title: str
    tracks: list[AudioTrack] = Field(default_factory=list)
    found: bool = False
