"""Song lookup over a :class:`SongIndex`.

Two lookups, both pure and side-effect free:

- :func:`search_songs` -- case-insensitive substring match on the title or
  any alternate title.  An exact title match ranks first; the rest are
  ordered by performance count, most played first.  Ties keep index order.
- :func:`suggest_songs` -- rapidfuzz ``WRatio`` scoring for "did you mean"
  hints when a substring search comes back empty ("scarlet begonia",
  "fire on the mountian").
"""

from __future__ import annotations

from dataclasses import dataclass

from rapidfuzz import fuzz

from src.models.song_index import SongIndex, SongIndexEntry

DEFAULT_SEARCH_LIMIT = 20
DEFAULT_SUGGEST_LIMIT = 5
DEFAULT_SUGGEST_MIN_SCORE = 70.0


@dataclass(frozen=True)
class SongSuggestion:
    """A fuzzy match between a query and one indexed song."""

    entry: SongIndexEntry
    matched_title: str
    score: float


def search_songs(
    index: SongIndex | None,
    query: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> list[SongIndexEntry]:
    """Return up to *limit* entries whose title or alt titles contain *query*.

    An empty or whitespace-only query, a missing index, or a non-positive
    limit all return ``[]``.
    """
    if index is None or limit <= 0:
        return []
    term = query.lower().strip()
    if not term:
        return []

    matches = [
        song
        for song in index.songs
        if term in song.title.lower() or any(term in alt.lower() for alt in song.alt_titles)
    ]
    # sorted() is stable, so ties keep index order.
    matches = sorted(
        matches,
        key=lambda song: (song.title.lower() != term, -song.total_performances),
    )
    return matches[:limit]


def suggest_songs(
    index: SongIndex | None,
    query: str,
    limit: int = DEFAULT_SUGGEST_LIMIT,
    min_score: float = DEFAULT_SUGGEST_MIN_SCORE,
) -> list[SongSuggestion]:
    """Rank songs by fuzzy similarity to *query*.

    Each song is scored by its best-matching title or alt title.  Songs
    scoring below *min_score* (0-100) are dropped.  Ties are broken by
    performance count, then index order.
    """
    if index is None or limit <= 0:
        return []
    term = query.lower().strip()
    if not term:
        return []

    suggestions: list[SongSuggestion] = []
    for song in index.songs:
        best_title = song.title
        best_score = -1.0
        for candidate in [song.title, *song.alt_titles]:
            score = fuzz.WRatio(term, candidate.lower())
            if score > best_score:
                best_title, best_score = candidate, score
        if best_score >= min_score:
            suggestions.append(
                SongSuggestion(entry=song, matched_title=best_title, score=round(best_score, 1))
            )

    suggestions.sort(key=lambda s: (-s.score, -s.entry.total_performances))
    return suggestions[:limit]
