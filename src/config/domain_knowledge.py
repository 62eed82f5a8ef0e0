"""Static domain knowledge for the act's touring history and its archive.

# ─── PURPOSE ───────────────────────────────────────────────────────────
#
# Hand-curated tables used by the index builder and the archive resolver:
#
#   - ERA_RANGES labels every performance year with the band-lineup era
#     it belongs to ("Europe '72 Era", "Brent Early Era", ...).  Display
#     context only; nothing is ranked by era.
#   - The marker tuples describe how the Internet Archive spells audio
#     formats and recording sources in its free-text metadata.
#
# All functions are pure.  Tables are built once at import time.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations


# ═════════════════════════════════════════════════════════════════════════
# 1. ERA TABLE
# ═════════════════════════════════════════════════════════════════════════
# Inclusive (first_year, last_year, label) ranges, in chronological order.

ERA_RANGES: tuple[tuple[int, int, str], ...] = (
    (1965, 1967, "Primal Era"),
    (1968, 1970, "Pigpen Peak Era"),
    (1971, 1972, "Europe '72 Era"),
    (1973, 1974, "Wall of Sound Era"),
    (1975, 1975, "Hiatus"),
    (1976, 1978, "Return + '77 Era"),
    (1979, 1986, "Brent Early Era"),
    (1987, 1990, "Brent Late Era"),
    (1991, 1995, "Vince Era"),
)

UNKNOWN_ERA = "Unknown Era"


def era_for_year(year: int) -> str:
    """Return the era label for *year*, or ``"Unknown Era"``."""
    for first, last, label in ERA_RANGES:
        if first <= year <= last:
            return label
    return UNKNOWN_ERA


def era_hints(years: list[int]) -> list[dict[str, str]]:
    """Return ``{"year", "label"}`` hints for each distinct year, first-seen order."""
    seen: set[int] = set()
    hints: list[dict[str, str]] = []
    for year in years:
        if year in seen:
            continue
        seen.add(year)
        hints.append({"year": str(year), "label": era_for_year(year)})
    return hints


# ═════════════════════════════════════════════════════════════════════════
# 2. ARCHIVE FORMAT / SOURCE MARKERS
# ═════════════════════════════════════════════════════════════════════════
# Archive format labels are free text ("VBR MP3", "24bit Flac", "Shorten"),
# so every check is a case-insensitive substring test.

AUDIO_FORMAT_MARKERS: tuple[str, ...] = ("mp3", "ogg", "flac", "shn", "vbr")

STREAMABLE_FORMAT_MARKERS: tuple[str, ...] = ("mp3", "ogg")

# Soundboard / matrix sources sound better than audience tapes.
SOUNDBOARD_MARKERS: tuple[str, ...] = ("sbd", "ultramatrix")


def is_audio_format(format_label: str | None) -> bool:
    """Return ``True`` when *format_label* names a playable audio format."""
    if not format_label:
        return False
    lowered = format_label.lower()
    return any(marker in lowered for marker in AUDIO_FORMAT_MARKERS)


def is_streamable_format(format_label: str | None) -> bool:
    """Return ``True`` for MP3 / Ogg labels."""
    if not format_label:
        return False
    lowered = format_label.lower()
    return any(marker in lowered for marker in STREAMABLE_FORMAT_MARKERS)


def is_mp3(format_label: str | None) -> bool:
    return bool(format_label) and "mp3" in format_label.lower()


def has_soundboard_marker(*texts: str | None) -> bool:
    """Return ``True`` if any of *texts* mentions a soundboard/matrix source."""
    for text in texts:
        if not text:
            continue
        lowered = text.lower()
        if any(marker in lowered for marker in SOUNDBOARD_MARKERS):
            return True
    return False
