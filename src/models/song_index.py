"""Pydantic v2 models for the denormalized song index.

The index is the unit that gets persisted and swapped: one
:class:`SongIndexEntry` per distinct song slug, each carrying every
performance (:class:`ShowInfo`) seen while folding setlists.

Field names are snake_case in Python and camelCase on the wire
(``altTitles``, ``totalPerformances``) so persisted index files and API
payloads keep the shape the frontend already consumes.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

_WIRE_CONFIG = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class ShowVenue(BaseModel):
    """Where a performance happened; missing source fields are defaulted."""

    model_config = _WIRE_CONFIG

    id: str = ""
    name: str = "Unknown Venue"
    city: str = "Unknown City"
    country: str = "Unknown Country"


class ShowInfo(BaseModel):
    """One occurrence of a song in one setlist."""

    model_config = _WIRE_CONFIG

    id: str                 # setlist id, later possibly an archive identifier
    date: str               # DD-MM-YYYY, as reported by setlist.fm (not ISO)
    venue: ShowVenue = Field(default_factory=ShowVenue)
    year: int
    era: str


class SongIndexEntry(BaseModel):
    """Everything the index knows about one song.

    ``total_performances`` always equals ``len(shows)`` and both
    ``first_performance`` and ``last_performance`` are members of
    ``shows``; the validator rejects entries that break either rule.
    """

    model_config = _WIRE_CONFIG

    title: str
    slug: str
    alt_titles: list[str] = Field(default_factory=list)
    shows: list[ShowInfo] = Field(min_length=1)
    total_performances: int
    first_performance: ShowInfo
    last_performance: ShowInfo

    @model_validator(mode="after")
    def _check_performance_invariants(self) -> SongIndexEntry:
        if self.total_performances != len(self.shows):
            raise ValueError(
                f"total_performances={self.total_performances} but {len(self.shows)} shows"
            )
        if self.first_performance not in self.shows or self.last_performance not in self.shows:
            raise ValueError("first/last performance must be one of the entry's shows")
        return self


class SongIndex(BaseModel):
    """The whole searchable index, replaced wholesale on every rebuild.

    ``total_shows`` counts setlists processed during the build, not unique
    shows.
    """

    model_config = _WIRE_CONFIG

    songs: list[SongIndexEntry] = Field(default_factory=list)
    last_updated: datetime
    total_shows: int = 0


class IndexStats(BaseModel):
    """Summary numbers for the currently held index."""

    model_config = _WIRE_CONFIG

    total_songs: int
    total_shows: int
    last_updated: datetime
