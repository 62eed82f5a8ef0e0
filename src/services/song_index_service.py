"""Owns the held song index and exposes the index-facing API.

The service is constructed explicitly and injected wherever it is
needed (FastAPI ``app.state``, the CLI).  It holds one reference to the
current index plus a slug lookup table; a rebuild builds a complete new
index off to the side and replaces both with a single assignment, so a
concurrent search sees either the old index or the new one, never a mix.

Rebuilds are serialized with an ``asyncio.Lock``.  A caller that asks for
a rebuild while one is running waits for it and receives its result
instead of starting a second pass against the rate-limited upstream.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterable, NamedTuple

import structlog

from src.interfaces.index_store import IIndexStore
from src.models.song_index import IndexStats, SongIndex, SongIndexEntry
from src.services.show_index_builder import ShowIndexBuilder
from src.services.song_search import (
    DEFAULT_SEARCH_LIMIT,
    DEFAULT_SUGGEST_LIMIT,
    DEFAULT_SUGGEST_MIN_SCORE,
    SongSuggestion,
    search_songs,
    suggest_songs,
)
from src.utils.errors import ConfigurationError, IndexStoreError

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_MAX_AGE = timedelta(days=7)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def should_rebuild(
    index: SongIndex | None,
    now: datetime,
    max_age: timedelta = DEFAULT_MAX_AGE,
) -> bool:
    """Return ``True`` when there is no index or it is strictly older than *max_age*.

    Naive datetimes are treated as UTC.
    """
    if index is None:
        return True
    return _as_utc(now) - _as_utc(index.last_updated) > max_age


class _HeldIndex(NamedTuple):
    index: SongIndex | None
    by_slug: dict[str, SongIndexEntry]


_EMPTY = _HeldIndex(index=None, by_slug={})


class SongIndexService:
    """Holds the current :class:`SongIndex` and answers queries against it.

    Parameters
    ----------
    builder:
        Index builder; ``None`` when the setlist source is not configured,
        in which case :meth:`build_index` raises ``ConfigurationError``.
    store:
        Optional persistence for the whole index.
    years:
        Target years passed to the builder.
    max_age:
        Age after which :meth:`ensure_fresh` rebuilds.
    clock:
        Returns "now" for the rebuild policy.
    """

    def __init__(
        self,
        builder: ShowIndexBuilder | None,
        store: IIndexStore | None = None,
        years: Iterable[int] = (1977,),
        max_age: timedelta = DEFAULT_MAX_AGE,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._builder = builder
        self._store = store
        self._years = list(years)
        self._max_age = max_age
        self._clock = clock
        self._held = _EMPTY
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Index lifecycle
    # ------------------------------------------------------------------

    @property
    def index(self) -> SongIndex | None:
        return self._held.index

    @property
    def is_building(self) -> bool:
        return self._lock.locked()

    def is_build_configured(self) -> bool:
        return self._builder is not None

    def replace_index(self, index: SongIndex | None) -> None:
        """Swap in *index* (and its slug table) with a single assignment."""
        if index is None:
            self._held = _EMPTY
            return
        by_slug: dict[str, SongIndexEntry] = {}
        for song in index.songs:
            by_slug.setdefault(song.slug, song)
        self._held = _HeldIndex(index=index, by_slug=by_slug)

    async def load(self) -> SongIndex | None:
        """Load the persisted index into memory, if a store is configured.

        An unreadable store is logged and treated as "no index".
        """
        if self._store is None:
            return None
        try:
            index = await self._store.load()
        except IndexStoreError as exc:
            logger.warning("index_load_failed", error=str(exc))
            return None
        if index is not None:
            self.replace_index(index)
        return index

    async def build_index(
        self,
        on_progress: Callable[[int, int, int], None] | None = None,
    ) -> SongIndex:
        """Rebuild the index from the setlist source and swap it in.

        *on_progress* is handed to the builder (see
        :meth:`ShowIndexBuilder.build`).

        Raises
        ------
        ConfigurationError
            If no builder is configured (no setlist API key).
        """
        if self._builder is None:
            raise ConfigurationError(
                message="Setlist API key is not configured; cannot build the song index",
                provider_name="setlistfm",
            )

        if self._lock.locked():
            logger.info("index_build_joined")
            async with self._lock:
                current = self._held.index
            if current is not None:
                return current

        async with self._lock:
            index = await self._builder.build(self._years, on_progress=on_progress)
            self.replace_index(index)
            if self._store is not None:
                try:
                    await self._store.save(index)
                except IndexStoreError as exc:
                    logger.error("index_save_failed", error=str(exc))
        logger.info(
            "index_swapped",
            songs=len(index.songs),
            total_shows=index.total_shows,
        )
        return index

    def should_rebuild(self, now: datetime | None = None) -> bool:
        return should_rebuild(self._held.index, now or self._clock(), self._max_age)

    async def ensure_fresh(self) -> SongIndex | None:
        """Rebuild only when the held index is missing or stale.

        Returns the held index afterwards.  Without a configured builder
        the current index (possibly ``None``) is returned unchanged.
        """
        if not self.should_rebuild():
            return self._held.index
        if self._builder is None:
            logger.warning("index_stale_but_build_not_configured")
            return self._held.index
        return await self.build_index()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def search_songs(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[SongIndexEntry]:
        return search_songs(self._held.index, query, limit)

    def suggest_songs(
        self,
        query: str,
        limit: int = DEFAULT_SUGGEST_LIMIT,
        min_score: float = DEFAULT_SUGGEST_MIN_SCORE,
    ) -> list[SongSuggestion]:
        return suggest_songs(self._held.index, query, limit, min_score)

    def get_song_details(self, slug: str) -> SongIndexEntry | None:
        return self._held.by_slug.get(slug)

    def get_index_stats(self) -> IndexStats | None:
        index = self._held.index
        if index is None:
            return None
        return IndexStats(
            total_songs=len(index.songs),
            total_shows=index.total_shows,
            last_updated=index.last_updated,
        )
