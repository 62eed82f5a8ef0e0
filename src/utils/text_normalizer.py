"""Text normalization helpers for song titles, show dates and track lengths.

Three concerns live here:

1. **Slugging** -- ``create_slug`` turns a display title into the stable
   lookup key used by the song index ("Jack Straw" -> "jack-straw").

2. **Setlist dates** -- setlist.fm reports dates as ``DD-MM-YYYY``.  Raw
   string comparison of that format is not chronological, so the index
   builder compares dates through ``show_date_key``.

3. **Track matching** -- Internet Archive file names are noisy
   ("gd77-05-08d2t03 Scarlet Begonias.mp3"), so song-to-track matching
   combines substring containment with a loose word-overlap heuristic.
"""

import re

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUNS = re.compile(r"-{2,}")
_SETLIST_DATE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")
_DURATION_PART = re.compile(r"\d+(?:\.\d+)?")

# Fraction of the shorter title's words that must overlap.
DEFAULT_WORD_OVERLAP_RATIO = 0.5
_MIN_OVERLAP_WORD_LENGTH = 3


def create_slug(title: str) -> str:
    """Normalize a song title into a lowercase, hyphenated slug.

    Lower-cases, drops every character other than ``a-z``, ``0-9``,
    whitespace and hyphens, then turns whitespace runs into single
    hyphens.  Existing hyphens survive so a slug slugs to itself.

    Args:
        title: Display title as reported by the setlist source.

    Returns:
        The slug, e.g. ``"Scarlet Begonias"`` -> ``"scarlet-begonias"``.
    """
    slug = _NON_SLUG_CHARS.sub("", title.lower()).strip()
    slug = _WHITESPACE.sub("-", slug)
    return _HYPHEN_RUNS.sub("-", slug).strip("-")


def parse_show_date(date_string: str | None) -> tuple[int, int, int] | None:
    """Split a ``DD-MM-YYYY`` date into ``(year, month, day)``.

    Returns ``None`` for anything else, including ISO ``YYYY-MM-DD``.
    """
    if not date_string:
        return None
    match = _SETLIST_DATE.match(date_string.strip())
    if match is None:
        return None
    day, month, year = (int(g) for g in match.groups())
    return year, month, day


def show_date_key(date_string: str | None) -> tuple[int, int, int]:
    """Chronological sort key for a ``DD-MM-YYYY`` date.

    Unparseable dates sort before every real date.
    """
    return parse_show_date(date_string) or (0, 0, 0)


def parse_year(date_string: str | None, default: int) -> int:
    """Return the year of a ``DD-MM-YYYY`` date, or *default* if unparseable."""
    parsed = parse_show_date(date_string)
    return parsed[0] if parsed else default


def to_archive_date(date_string: str) -> str:
    """Convert ``DD-MM-YYYY`` to the archive's ``YYYY-MM-DD``.

    Strings that are not setlist dates are returned unchanged.
    """
    parsed = parse_show_date(date_string)
    if parsed is None:
        return date_string
    year, month, day = parsed
    return f"{year:04d}-{month:02d}-{day:02d}"


def parse_duration(value: str | None) -> float | None:
    """Parse an archive ``length`` value into seconds.

    ``"11:30"`` is minutes:seconds (690), ``"1:02:05"`` is
    hours:minutes:seconds (3725).  Each segment must be an unsigned decimal
    number; anything else, including empty strings, yields ``None`` rather
    than zero.
    """
    if not value or ":" not in value:
        return None
    segments = value.strip().split(":")
    if not all(_DURATION_PART.fullmatch(s) for s in segments):
        return None
    parts = [float(s) for s in segments]
    if len(parts) == 2:
        return parts[0] * 60 + parts[1]
    if len(parts) == 3:
        return parts[0] * 3600 + parts[1] * 60 + parts[2]
    return None


def parse_track_number(value: str | int | None) -> int | None:
    """Parse an archive ``track`` value ("3", "03", "3/12") into an int."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    match = re.match(r"\s*(\d+)", str(value))
    return int(match.group(1)) if match else None


def titles_overlap(
    track_title: str,
    song_title: str,
    min_ratio: float = DEFAULT_WORD_OVERLAP_RATIO,
) -> bool:
    """Loose word-overlap test between a track title and a song title.

    Counts the track words (longer than two characters) that contain, or
    are contained in, some song word of the same minimum length.  The
    titles overlap when that count reaches *min_ratio* of the smaller
    word count of the two titles.
    """
    track_words = track_title.lower().split()
    song_words = song_title.lower().split()
    if not track_words or not song_words:
        return False

    common = [
        word
        for word in track_words
        if len(word) >= _MIN_OVERLAP_WORD_LENGTH
        and any(
            len(song_word) >= _MIN_OVERLAP_WORD_LENGTH
            and (song_word in word or word in song_word)
            for song_word in song_words
        )
    ]
    return len(common) >= min(len(track_words), len(song_words)) * min_ratio


def title_matches(
    track_title: str,
    song_title: str,
    min_ratio: float = DEFAULT_WORD_OVERLAP_RATIO,
) -> bool:
    """Return ``True`` when a track title plausibly names *song_title*.

    Matches on case-insensitive containment in either direction, falling
    back to :func:`titles_overlap`.
    """
    track_lower = track_title.lower().strip()
    song_lower = song_title.lower().strip()
    if not track_lower or not song_lower:
        return False
    if song_lower in track_lower or track_lower in song_lower:
        return True
    return titles_overlap(track_lower, song_lower, min_ratio=min_ratio)
