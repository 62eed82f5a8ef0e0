"""Pydantic request/response schemas for the Steal Your Stats API.

Defines the public contract for every REST endpoint: song search and
suggestions, song details, index status and rebuilds, archive audio
search, and health.

# ─── HOW SCHEMAS WORK ──────────────────────────────────────────────────
#
# FastAPI validates and serializes through these models (response_model=).
# Responses use camelCase on the wire (``totalPerformances``,
# ``bestIdentifier``) to match the index and archive models they embed;
# Python code keeps snake_case attribute names.
#
# Convention: response schemas end with "Response".
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.models.archive import ArchiveCandidate, AudioTrack, ShowQuery, ShowRecording
from src.models.song_index import IndexStats, SongIndexEntry

_CAMEL = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(BaseModel):
    """Application health check response."""

    model_config = _CAMEL

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None


# ---------------------------------------------------------------------------
# Songs
# ---------------------------------------------------------------------------

class SongSearchResponse(BaseModel):
    """Substring search results, best match first."""

    model_config = _CAMEL

    query: str
    songs: list[SongIndexEntry] = Field(default_factory=list)
    total: int = 0
    index_ready: bool = True


class SongSuggestionItem(BaseModel):
    model_config = _CAMEL

    title: str
    slug: str
    matched_title: str
    score: float
    total_performances: int


class SongSuggestResponse(BaseModel):
    """Fuzzy "did you mean" suggestions."""

    model_config = _CAMEL

    query: str
    suggestions: list[SongSuggestionItem] = Field(default_factory=list)


class EraHint(BaseModel):
    year: str
    label: str


class SongDetailResponse(BaseModel):
    """One song with the era of every year it was played in."""

    model_config = _CAMEL

    song: SongIndexEntry
    era_hints: list[EraHint] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------

class IndexStatusResponse(BaseModel):
    """Held-index statistics plus rebuild state."""

    model_config = _CAMEL

    stats: IndexStats | None = None
    is_building: bool = False
    should_rebuild: bool = True
    build_configured: bool = False


class BuildIndexResponse(BaseModel):
    model_config = _CAMEL

    status: str  # "started" | "already_running"
    message: str


# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------

class SearchInfo(BaseModel):
    model_config = _CAMEL

    total_candidates: int
    best_score: int | None = None
    search_query: ShowQuery


class AudioSearchResponse(BaseModel):
    """A resolved recording, optionally narrowed to one song's tracks.

    ``found`` is ``True`` only when song tracks were pinned down; with a
    song title and ``found=False``, ``song_tracks`` holds the whole
    recording as a fallback.
    """

    model_config = _CAMEL

    show: ShowRecording
    song_tracks: list[AudioTrack] = Field(default_factory=list)
    song_audio: AudioTrack | None = None
    found: bool = False
    total_tracks: int = 0
    candidates: list[ArchiveCandidate] = Field(default_factory=list)
    search_info: SearchInfo | None = None


class AudioNotFoundResponse(BaseModel):
    model_config = _CAMEL

    error: str
    date: str | None = None
    candidates: list[ArchiveCandidate] = Field(default_factory=list)
