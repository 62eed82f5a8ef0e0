"""Resolves shows and songs to playable Internet Archive recordings.

Two sequential phases, never fanned out:

1. **Candidate search** -- an advanced-search query pinned to the act's
   collection, the show date and the ``{prefix}{date}*`` identifier
   pattern, optionally narrowed by venue and city/state.  Every returned
   item is scored additively and the best one wins:

   ====  ==============================================================
   +50   identifier starts with ``{prefix}{date}``
   +15   venue appears in the item's title or venue field
   +10   city appears in the item's coverage field
   +8    soundboard marker ("sbd", "ultramatrix") in source or title
   +5    a streamable format (MP3 / Ogg) is offered
   ====  ==============================================================

2. **Track listing** -- the winning item's file listing, filtered to
   audio formats and mapped to :class:`AudioTrack` objects.

Upstream failures never escape this module: a failed search is an empty
result, a failed listing is an empty track list.
"""

from __future__ import annotations

import re
from collections import Counter
from functools import cmp_to_key
from typing import Any

import structlog

from src.config.domain_knowledge import (
    has_soundboard_marker,
    is_audio_format,
    is_mp3,
    is_streamable_format,
)
from src.interfaces.archive_provider import IArchiveProvider
from src.models.archive import (
    ArchiveCandidate,
    ArchiveSearchResult,
    AudioTrack,
    ShowQuery,
    ShowRecording,
    SongTrackResult,
)
from src.utils.errors import FetchError
from src.utils.text_normalizer import (
    DEFAULT_WORD_OVERLAP_RATIO,
    parse_duration,
    parse_track_number,
    title_matches,
    to_archive_date,
)

logger = structlog.get_logger(logger_name=__name__)

SEARCH_FIELDS: list[str] = [
    "identifier",
    "title",
    "year",
    "venue",
    "coverage",
    "format",
    "mediatype",
    "source",
]

UNKNOWN_DATE = "Unknown Date"

# Score weights, highest signal first.
DATE_PREFIX_POINTS = 50
VENUE_POINTS = 15
CITY_POINTS = 10
SOUNDBOARD_POINTS = 8
STREAMABLE_POINTS = 5

# Primary-format labels, in the order ties are resolved.
_FORMAT_LABELS: tuple[tuple[str, str], ...] = (
    ("mp3", "MP3"),
    ("flac", "FLAC"),
    ("shn", "SHN"),
    ("vbr", "VBR"),
)


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def _text(value: Any) -> str | None:
    """Flatten an archive field (string, list or scalar) to a string."""
    if value is None:
        return None
    if isinstance(value, list):
        parts = [str(v) for v in value if v]
        return ", ".join(parts) if parts else None
    return str(value)


def _formats(value: Any) -> list[str]:
    if isinstance(value, list):
        return [str(v) for v in value if v]
    return [str(value)] if value else []


def _year(value: Any) -> int | None:
    try:
        return int(str(value)[:4])
    except (TypeError, ValueError):
        return None


def _quoted(value: str) -> str:
    """Wrap *value* in double quotes for a Lucene phrase, dropping stray quotes."""
    return '"' + value.replace('"', "").strip() + '"'


def _contains(haystack: str | None, needle: str) -> bool:
    return bool(haystack) and needle.lower() in haystack.lower()


def score_candidate(candidate: ArchiveCandidate, query: ShowQuery, date_prefix: str) -> int:
    """Additive relevance score of *candidate* for *query*.  Deterministic."""
    score = 0
    if candidate.identifier.startswith(date_prefix):
        score += DATE_PREFIX_POINTS
    if query.venue and (
        _contains(candidate.title, query.venue) or _contains(candidate.venue, query.venue)
    ):
        score += VENUE_POINTS
    if query.city and _contains(candidate.coverage, query.city):
        score += CITY_POINTS
    if has_soundboard_marker(candidate.source, candidate.title):
        score += SOUNDBOARD_POINTS
    if any(is_streamable_format(fmt) for fmt in candidate.formats):
        score += STREAMABLE_POINTS
    return score


def determine_format(tracks: list[AudioTrack]) -> str:
    """Primary format label of a recording.

    ``MP3`` whenever any track is MP3; otherwise the most common of
    FLAC / SHN / VBR, earliest-seen on ties; ``MP3`` when nothing is
    recognised.
    """
    counts: Counter[str] = Counter()
    for track in tracks:
        lowered = track.format.lower()
        for marker, label in _FORMAT_LABELS:
            if marker in lowered:
                counts[label] += 1
                break
    if counts["MP3"]:
        return "MP3"
    if not counts:
        return "MP3"
    return counts.most_common(1)[0][0]


def _compare_matches(a: AudioTrack, b: AudioTrack) -> int:
    a_mp3, b_mp3 = is_mp3(a.format), is_mp3(b.format)
    if a_mp3 != b_mp3:
        return -1 if a_mp3 else 1
    if a.track_number is not None and b.track_number is not None:
        if a.track_number != b.track_number:
            return a.track_number - b.track_number
    if a.duration is not None and b.duration is not None:
        if a.duration != b.duration:
            return -1 if a.duration < b.duration else 1
    return 0


def sort_matching_tracks(tracks: list[AudioTrack]) -> list[AudioTrack]:
    """MP3 first, then track number, then duration, else original order."""
    return sorted(tracks, key=cmp_to_key(_compare_matches))


def sort_mp3_first(tracks: list[AudioTrack]) -> list[AudioTrack]:
    return sorted(tracks, key=lambda t: not is_mp3(t.format))


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class ArchiveResolver:
    """Finds archived recordings of shows and the tracks of songs within them.

    Parameters
    ----------
    provider:
        Archive search / metadata client.
    collection:
        Archive collection holding the act's recordings.
    identifier_prefix:
        Shortcode prefixed to dates in item identifiers (``gd`` for
        ``gd1977-05-08.sbd...``).
    rows:
        Maximum candidates requested per search.
    artist_name:
        Used in recording titles ("Grateful Dead - 1977-05-08").
    word_overlap_ratio:
        Threshold for the loose song-title matcher.
    """

    def __init__(
        self,
        provider: IArchiveProvider,
        collection: str = "GratefulDead",
        identifier_prefix: str = "gd",
        rows: int = 50,
        artist_name: str = "Grateful Dead",
        word_overlap_ratio: float = DEFAULT_WORD_OVERLAP_RATIO,
    ) -> None:
        self._provider = provider
        self._collection = collection
        self._prefix = identifier_prefix
        self._rows = rows
        self._artist_name = artist_name
        self._word_overlap_ratio = word_overlap_ratio
        self._identifier_date = re.compile(
            re.escape(identifier_prefix) + r"(\d{4})-(\d{2})-(\d{2})"
        )

    # -- Candidate search -------------------------------------------------------

    def build_query(self, query: ShowQuery) -> str:
        """Advanced-search query string for *query*."""
        date = to_archive_date(query.date.strip())
        parts = [
            f"collection:{self._collection}",
            f"date:{date}",
            f"identifier:{self._prefix}{date}*",
        ]
        if query.venue:
            venue = _quoted(query.venue)
            parts.append(f"(title:{venue} OR venue:{venue})")
        if query.city:
            city = _quoted(query.city)
            if query.state:
                city_state = _quoted(f"{query.city}, {query.state}")
                parts.append(f"(coverage:{city} OR coverage:{city_state})")
            else:
                parts.append(f"coverage:{city}")
        return " AND ".join(parts)

    def date_prefix(self, date: str) -> str:
        return f"{self._prefix}{to_archive_date(date.strip())}"

    def _candidate(self, doc: dict[str, Any], query: ShowQuery, date_prefix: str) -> ArchiveCandidate:
        candidate = ArchiveCandidate(
            identifier=str(doc.get("identifier") or ""),
            title=_text(doc.get("title")),
            year=_year(doc.get("year")),
            venue=_text(doc.get("venue")),
            coverage=_text(doc.get("coverage")),
            source=_text(doc.get("source")),
            formats=_formats(doc.get("format")),
        )
        return candidate.model_copy(
            update={"score": score_candidate(candidate, query, date_prefix)}
        )

    async def find_candidates(self, query: ShowQuery) -> list[ArchiveCandidate]:
        """Search the archive and return scored candidates, best first.

        A failed search is logged and treated as "no candidates".
        """
        if not query.date or not query.date.strip():
            return []
        search_query = self.build_query(query)
        try:
            data = await self._provider.search(search_query, SEARCH_FIELDS, rows=self._rows)
        except FetchError as exc:
            logger.warning("archive_candidate_search_failed", date=query.date, error=str(exc))
            return []

        docs = (data.get("response") or {}).get("docs") or []
        date_prefix = self.date_prefix(query.date)
        candidates = [
            self._candidate(doc, query, date_prefix)
            for doc in docs
            if isinstance(doc, dict) and doc.get("identifier")
        ]
        # sorted() is stable, so equal scores keep search-result order.
        candidates = sorted(candidates, key=lambda c: c.score, reverse=True)
        logger.info(
            "archive_candidates_scored",
            date=query.date,
            candidates=len(candidates),
            top=[(c.identifier, c.score) for c in candidates[:3]],
        )
        return candidates

    async def resolve_show(self, query: ShowQuery) -> ArchiveSearchResult:
        """Find the best recording for *query* and list its tracks."""
        candidates = await self.find_candidates(query)
        if not candidates:
            logger.info("archive_show_not_found", date=query.date)
            return ArchiveSearchResult()
        best = candidates[0].identifier
        tracks = await self.fetch_show_tracks(best)
        return ArchiveSearchResult(candidates=candidates, best_identifier=best, tracks=tracks)

    # -- Track listing ----------------------------------------------------------

    def _track(self, identifier: str, raw: dict[str, Any]) -> AudioTrack:
        name = str(raw.get("name") or "")
        try:
            size = int(raw.get("size") or 0)
        except (TypeError, ValueError):
            size = 0
        length = raw.get("length")
        return AudioTrack(
            name=name,
            url=self._provider.streaming_url(identifier, name),
            size=size,
            format=str(raw.get("format") or ""),
            duration=parse_duration(str(length)) if length else None,
            track_number=parse_track_number(raw.get("track")),
            title=str(raw.get("title") or name),
        )

    async def fetch_show_tracks(self, identifier: str) -> list[AudioTrack]:
        """Audio tracks of *identifier*, in listing order; ``[]`` on any failure."""
        try:
            data = await self._provider.get_metadata(identifier)
        except FetchError as exc:
            logger.warning("archive_tracks_failed", identifier=identifier, error=str(exc))
            return []

        files = data.get("files") or []
        tracks = [
            self._track(identifier, raw)
            for raw in files
            if isinstance(raw, dict) and raw.get("name") and is_audio_format(raw.get("format"))
        ]
        logger.debug("archive_tracks_listed", identifier=identifier, tracks=len(tracks))
        return tracks

    async def get_show_details(self, identifier: str) -> ShowRecording | None:
        """Recording summary for *identifier*, or ``None`` when it has no audio."""
        tracks = await self.fetch_show_tracks(identifier)
        if not tracks:
            return None
        return self.build_recording(identifier, tracks)

    def build_recording(
        self,
        identifier: str,
        tracks: list[AudioTrack],
        title: str | None = None,
        venue: str | None = None,
    ) -> ShowRecording:
        """Summarize *tracks* of *identifier* as a :class:`ShowRecording`.

        The date comes from a ``{prefix}YYYY-MM-DD`` identifier, else
        ``"Unknown Date"``.  *title* defaults to ``"{artist} - {date}"``.
        """
        match = self._identifier_date.search(identifier)
        date = f"{match.group(1)}-{match.group(2)}-{match.group(3)}" if match else UNKNOWN_DATE
        return ShowRecording(
            identifier=identifier,
            title=title or f"{self._artist_name} - {date}",
            date=date,
            venue=venue,
            audio_files=tracks,
            total_duration=sum(t.duration or 0.0 for t in tracks),
            format=determine_format(tracks),
        )

    async def search_shows_by_date(self, date: str) -> list[ShowRecording]:
        """Zero or one recording for a bare date."""
        result = await self.resolve_show(ShowQuery(date=date))
        if not result.best_identifier or not result.tracks:
            return []
        return [self.build_recording(result.best_identifier, result.tracks)]

    # -- Song matching ----------------------------------------------------------

    def matching_tracks(self, tracks: list[AudioTrack], song_title: str) -> list[AudioTrack]:
        """Tracks whose title (or file name) plausibly names *song_title*, in input order."""
        if not song_title.strip():
            return []
        return [
            track
            for track in tracks
            if title_matches(track.display_title, song_title, self._word_overlap_ratio)
        ]

    def select_song_tracks(
        self,
        identifier: str,
        tracks: list[AudioTrack],
        song_title: str,
    ) -> SongTrackResult:
        """Pick the tracks of *song_title* out of an already fetched listing.

        When nothing matches, the whole listing is returned MP3-first with
        ``found=False``.
        """
        matches = self.matching_tracks(tracks, song_title)
        if matches:
            return SongTrackResult(
                identifier=identifier,
                song_title=song_title,
                tracks=sort_matching_tracks(matches),
                found=True,
            )
        logger.info(
            "archive_song_not_pinned",
            identifier=identifier,
            song=song_title,
            fallback_tracks=len(tracks),
        )
        return SongTrackResult(
            identifier=identifier,
            song_title=song_title,
            tracks=sort_mp3_first(tracks),
            found=False,
        )

    async def find_song_tracks(self, identifier: str, song_title: str) -> SongTrackResult:
        """Tracks of *song_title* in *identifier*.

        The track list is empty only when the recording has no audio files
        or could not be fetched.
        """
        tracks = await self.fetch_show_tracks(identifier)
        return self.select_song_tracks(identifier, tracks, song_title)

    async def find_song_audio(self, identifier: str, song_title: str) -> AudioTrack | None:
        """Single best file for *song_title*.

        First MP3 among the matches, else the first match, else the
        recording's first MP3, else its first file.
        """
        tracks = await self.fetch_show_tracks(identifier)
        if not tracks:
            return None
        pool = self.matching_tracks(tracks, song_title) or tracks
        return next((t for t in pool if is_mp3(t.format)), pool[0])
