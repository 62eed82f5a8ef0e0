"""Builds the song index from an act's setlist history.

Drives a strictly sequential, delay-paced walk over (year, page) pairs of
setlist.fm data and folds every song occurrence into a
:class:`~src.models.song_index.SongIndex`.

Pacing follows the upstream rate limits:

- ``page_delay`` after every page that returned setlists,
- ``year_delay`` after every year,
- ``rate_limit_cooldown`` after a 429, after which the year is abandoned.

Any other fetch failure abandons the year as well.  The builder never
raises past :meth:`ShowIndexBuilder.build`; it returns whatever it
accumulated.

Usage via CLI::

    python -m src.cli.song_index build --year 1977 --max-pages 2
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable

import structlog

from src.config.domain_knowledge import era_for_year
from src.interfaces.setlist_provider import ISetlistProvider
from src.models.song_index import ShowInfo, ShowVenue, SongIndex, SongIndexEntry
from src.utils.errors import FetchError, RateLimitError
from src.utils.text_normalizer import create_slug, parse_year, show_date_key

logger = structlog.get_logger(logger_name=__name__)

SleepFn = Callable[[float], Awaitable[Any]]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Fold step
# ---------------------------------------------------------------------------

@dataclass
class _SongAccumulator:
    """Mutable per-slug state while folding; frozen into a SongIndexEntry at the end."""

    title: str
    slug: str
    alt_titles: list[str] = field(default_factory=list)
    shows: list[ShowInfo] = field(default_factory=list)
    first: ShowInfo | None = None
    last: ShowInfo | None = None

    def add(self, title: str, show: ShowInfo) -> None:
        self.shows.append(show)
        key = show_date_key(show.date)
        # Strict comparisons keep the first-seen show on ties.
        if self.first is None or key < show_date_key(self.first.date):
            self.first = show
        if self.last is None or key > show_date_key(self.last.date):
            self.last = show
        if title not in self.alt_titles:
            self.alt_titles.append(title)

    def to_entry(self) -> SongIndexEntry:
        return SongIndexEntry(
            title=self.title,
            slug=self.slug,
            alt_titles=list(self.alt_titles),
            shows=list(self.shows),
            total_performances=len(self.shows),
            first_performance=self.first,
            last_performance=self.last,
        )


class SongIndexFolder:
    """Folds raw setlists, in source order, into song entries.

    Raw setlists are read defensively: missing venue fields are defaulted,
    songs without a usable name are skipped, and a setlist with no sets
    still counts towards ``total_shows``.
    """

    def __init__(self) -> None:
        self._songs: dict[str, _SongAccumulator] = {}
        self._total_shows = 0

    @property
    def total_shows(self) -> int:
        return self._total_shows

    @property
    def song_count(self) -> int:
        return len(self._songs)

    def add_setlists(self, setlists: Iterable[dict[str, Any]], default_year: int) -> None:
        for setlist in setlists:
            self.add_setlist(setlist, default_year)

    def add_setlist(self, setlist: dict[str, Any], default_year: int) -> None:
        """Fold one raw setlist.  *default_year* is used when its date is unparseable."""
        self._total_shows += 1
        if not isinstance(setlist, dict):
            logger.debug("setlist_skipped_malformed")
            return

        show = _show_info(setlist, default_year)
        for raw_set in _list_at(setlist.get("sets"), "set"):
            for raw_song in _list_at(raw_set, "song"):
                title = raw_song.get("name") if isinstance(raw_song, dict) else None
                if not isinstance(title, str) or not title.strip():
                    continue
                slug = create_slug(title)
                if not slug:
                    logger.debug("song_skipped_empty_slug", title=title)
                    continue
                entry = self._songs.get(slug)
                if entry is None:
                    entry = _SongAccumulator(title=title, slug=slug)
                    self._songs[slug] = entry
                entry.add(title, show)

    def to_index(self, last_updated: datetime) -> SongIndex:
        return SongIndex(
            songs=[entry.to_entry() for entry in self._songs.values()],
            last_updated=last_updated,
            total_shows=self._total_shows,
        )


def _list_at(container: Any, key: str) -> list[Any]:
    """Return ``container[key]`` when it is a list, else ``[]``."""
    if not isinstance(container, dict):
        return []
    value = container.get(key)
    return value if isinstance(value, list) else []


def _show_info(setlist: dict[str, Any], default_year: int) -> ShowInfo:
    venue = setlist.get("venue") if isinstance(setlist.get("venue"), dict) else {}
    city = venue.get("city") if isinstance(venue.get("city"), dict) else {}
    country = city.get("country") if isinstance(city.get("country"), dict) else {}

    date = str(setlist.get("eventDate") or "")
    year = parse_year(date, default=default_year)
    return ShowInfo(
        id=str(setlist.get("id") or ""),
        date=date,
        venue=ShowVenue(
            id=str(venue.get("id") or ""),
            name=str(venue.get("name") or "Unknown Venue"),
            city=str(city.get("name") or "Unknown City"),
            country=str(country.get("name") or "Unknown Country"),
        ),
        year=year,
        era=era_for_year(year),
    )


def fold_setlists(
    setlists: Iterable[dict[str, Any]],
    default_year: int,
    last_updated: datetime | None = None,
) -> SongIndex:
    """Fold raw setlists into a fresh index without any remote calls."""
    folder = SongIndexFolder()
    folder.add_setlists(setlists, default_year)
    return folder.to_index(last_updated or _utc_now())


# ---------------------------------------------------------------------------
# Remote ingestion
# ---------------------------------------------------------------------------

class ShowIndexBuilder:
    """Sequential, delay-paced ingestion of setlist pages into a SongIndex.

    Parameters
    ----------
    provider:
        Setlist source, e.g. :class:`SetlistFmProvider`.
    artist_id:
        MusicBrainz identifier of the act.
    max_pages:
        Maximum pages fetched per year.
    page_delay / year_delay / rate_limit_cooldown:
        Pacing delays in seconds.
    sleep:
        Awaitable sleep function; tests pass a recorder instead of
        ``asyncio.sleep``.
    clock:
        Returns the completion timestamp stored as ``last_updated``.
    """

    def __init__(
        self,
        provider: ISetlistProvider,
        artist_id: str,
        max_pages: int = 2,
        page_delay: float = 2.0,
        year_delay: float = 5.0,
        rate_limit_cooldown: float = 10.0,
        sleep: SleepFn = asyncio.sleep,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._provider = provider
        self._artist_id = artist_id
        self._max_pages = max_pages
        self._page_delay = page_delay
        self._year_delay = year_delay
        self._rate_limit_cooldown = rate_limit_cooldown
        self._sleep = sleep
        self._clock = clock

    async def build(
        self,
        years: Iterable[int],
        on_progress: Callable[[int, int, int], None] | None = None,
    ) -> SongIndex:
        """Fetch and fold every (year, page) in order and return the index.

        Parameters
        ----------
        years:
            Target years, processed in the given order.
        on_progress:
            Callback ``(year, page, setlists_on_page)`` after each folded page.

        Returns
        -------
        SongIndex
            Everything accumulated, even if some years failed.
        """
        folder = SongIndexFolder()
        years = list(years)
        logger.info("index_build_started", years=years, max_pages=self._max_pages)

        for year in years:
            try:
                await self._build_year(folder, year, on_progress)
            except Exception as exc:
                logger.error("index_year_failed", year=year, error=str(exc))
            await self._sleep(self._year_delay)

        index = folder.to_index(self._clock())
        logger.info(
            "index_build_completed",
            songs=len(index.songs),
            total_shows=index.total_shows,
        )
        return index

    async def _build_year(
        self,
        folder: SongIndexFolder,
        year: int,
        on_progress: Callable[[int, int, int], None] | None,
    ) -> None:
        for page in range(1, self._max_pages + 1):
            try:
                response = await self._provider.get_artist_setlists(
                    self._artist_id, page=page, year=year
                )
            except RateLimitError:
                logger.warning(
                    "index_rate_limited",
                    year=year,
                    page=page,
                    cooldown=self._rate_limit_cooldown,
                )
                await self._sleep(self._rate_limit_cooldown)
                return
            except FetchError as exc:
                logger.warning("index_page_failed", year=year, page=page, error=str(exc))
                return

            setlists = response.get("setlist") if isinstance(response, dict) else None
            if not isinstance(setlists, list) or not setlists:
                logger.info("index_year_exhausted", year=year, page=page)
                return

            folder.add_setlists(setlists, default_year=year)
            logger.info(
                "index_page_fetched",
                year=year,
                page=page,
                setlists=len(setlists),
                songs_so_far=folder.song_count,
            )
            if on_progress:
                on_progress(year, page, len(setlists))

            await self._sleep(self._page_delay)
