"""CLI for building, inspecting and querying the song index.

Usage::

    # Build the index (needs SETLIST_FM_API_KEY), then save it
    python -m src.cli.song_index build
    python -m src.cli.song_index build --year 1972 --year 1977 --max-pages 3

    # Inspect the saved index
    python -m src.cli.song_index stats
    python -m src.cli.song_index search "scarlet"
    python -m src.cli.song_index song scarlet-begonias

    # Resolve archived recordings
    python -m src.cli.song_index resolve --date 1977-05-08 --venue "Barton Hall"
    python -m src.cli.song_index tracks gd1977-05-08.sbd.hicks.4982.sbeok.shnf "Scarlet Begonias"

    # Look up the MusicBrainz identifier of an act
    python -m src.cli.song_index find-artist "Grateful Dead"

No extra dependencies beyond the core project requirements.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import timedelta

import httpx

from src.config.loader import load_config
from src.config.settings import Settings
from src.models.archive import ShowQuery
from src.providers.store.json_index_store import JsonIndexStore
from src.services.show_index_builder import ShowIndexBuilder
from src.services.song_index_service import SongIndexService
from src.utils.errors import StatsError
from src.utils.logging import configure_logging


def _index_service(
    settings: Settings,
    config: dict,
    builder: ShowIndexBuilder | None = None,
    years: list[int] | None = None,
) -> SongIndexService:
    index_cfg = config.get("index", {})
    return SongIndexService(
        builder=builder,
        store=JsonIndexStore(index_cfg.get("path", settings.index_path)),
        years=years or index_cfg.get("years", settings.index_years),
        max_age=timedelta(days=int(index_cfg.get("max_age_days", settings.index_max_age_days))),
    )


def _format_duration(seconds: float | None) -> str:
    if seconds is None:
        return "--:--"
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_build(args: argparse.Namespace, settings: Settings, config: dict) -> int:
    """Fetch setlists, fold them into an index and save it."""
    from src.providers.setlist.setlistfm_provider import SetlistFmProvider

    if not settings.is_setlist_configured():
        print("Error: SETLIST_FM_API_KEY is not set.", file=sys.stderr)
        return 1

    index_cfg = config.get("index", {})
    years = args.year or index_cfg.get("years", settings.index_years)
    max_pages = args.max_pages or int(index_cfg.get("max_pages", settings.index_max_pages))

    def on_progress(year: int, page: int, setlists: int) -> None:
        print(f"  [{year}] page {page}: {setlists} setlists")

    async with httpx.AsyncClient(timeout=30.0) as client:
        builder = ShowIndexBuilder(
            provider=SetlistFmProvider(settings=settings, http_client=client),
            artist_id=args.artist or config.get("artist", {}).get("mbid", settings.artist_mbid),
            max_pages=max_pages,
            page_delay=float(index_cfg.get("page_delay", settings.index_page_delay)),
            year_delay=float(index_cfg.get("year_delay", settings.index_year_delay)),
            rate_limit_cooldown=float(
                index_cfg.get("rate_limit_cooldown", settings.index_rate_limit_cooldown)
            ),
        )
        service = _index_service(settings, config, builder=builder, years=years)
        print(f"Building index for years {', '.join(str(y) for y in years)} "
              f"(max {max_pages} pages per year)")
        index = await service.build_index(on_progress=on_progress)

    print()
    print(f"Index built: {len(index.songs)} songs across {index.total_shows} setlists")
    return 0


async def _handle_stats(args: argparse.Namespace, settings: Settings, config: dict) -> int:
    service = _index_service(settings, config)
    await service.load()
    stats = service.get_index_stats()
    if stats is None:
        print("No index found. Run: python -m src.cli.song_index build")
        return 1
    print(f"Songs:        {stats.total_songs}")
    print(f"Setlists:     {stats.total_shows}")
    print(f"Last updated: {stats.last_updated.isoformat()}")
    print(f"Stale:        {'yes' if service.should_rebuild() else 'no'}")
    return 0


async def _handle_search(args: argparse.Namespace, settings: Settings, config: dict) -> int:
    service = _index_service(settings, config)
    if await service.load() is None:
        print("No index found. Run: python -m src.cli.song_index build")
        return 1

    results = service.search_songs(args.query, args.limit)
    if not results:
        suggestions = service.suggest_songs(args.query)
        print(f"No songs match '{args.query}'.")
        if suggestions:
            print("Did you mean:")
            for suggestion in suggestions:
                print(f"  {suggestion.entry.title}  ({suggestion.score:.0f})")
        return 0

    for song in results:
        print(f"{song.total_performances:>4}x  {song.title}  [{song.slug}]")
    return 0


async def _handle_song(args: argparse.Namespace, settings: Settings, config: dict) -> int:
    service = _index_service(settings, config)
    await service.load()
    song = service.get_song_details(args.slug)
    if song is None:
        print(f"Song not found: {args.slug}", file=sys.stderr)
        return 1

    print(song.title)
    if len(song.alt_titles) > 1:
        print(f"  Also listed as: {', '.join(song.alt_titles[1:])}")
    print(f"  Performances: {song.total_performances}")
    print(f"  First: {song.first_performance.date}  {song.first_performance.venue.name}")
    print(f"  Last:  {song.last_performance.date}  {song.last_performance.venue.name}")
    print()
    for show in song.shows:
        print(f"  {show.date}  {show.venue.name}, {show.venue.city}  ({show.era})")
    return 0


def _archive_resolver(settings: Settings, config: dict, client: httpx.AsyncClient):  # noqa: ANN202
    from src.providers.archive.internet_archive_provider import InternetArchiveProvider
    from src.services.archive_resolver import ArchiveResolver

    archive_cfg = config.get("archive", {})
    return ArchiveResolver(
        provider=InternetArchiveProvider(settings=settings, http_client=client),
        collection=archive_cfg.get("collection", settings.archive_collection),
        identifier_prefix=archive_cfg.get("identifier_prefix", settings.archive_identifier_prefix),
        rows=int(archive_cfg.get("search_rows", settings.archive_search_rows)),
        artist_name=settings.artist_name,
    )


async def _handle_resolve(args: argparse.Namespace, settings: Settings, config: dict) -> int:
    query = ShowQuery(date=args.date, venue=args.venue, city=args.city, state=args.state)
    async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
        resolver = _archive_resolver(settings, config, client)
        result = await resolver.resolve_show(query)

    if not result.candidates:
        print(f"No recordings found for {args.date}")
        return 1

    for candidate in result.candidates[: args.top]:
        marker = "*" if candidate.identifier == result.best_identifier else " "
        print(f"{marker} {candidate.score:>3}  {candidate.identifier}  {candidate.title or ''}")
    print()
    print(f"{len(result.tracks)} audio files in {result.best_identifier}")
    return 0


async def _handle_tracks(args: argparse.Namespace, settings: Settings, config: dict) -> int:
    async with httpx.AsyncClient(timeout=30.0, follow_redirects=True) as client:
        resolver = _archive_resolver(settings, config, client)
        result = await resolver.find_song_tracks(args.identifier, args.song)

    if not result.tracks:
        print(f"No audio files in {args.identifier}", file=sys.stderr)
        return 1
    if not result.found:
        print(f"'{args.song}' not pinned down; listing the whole recording.")
    for track in result.tracks:
        number = f"{track.track_number:>2}" if track.track_number is not None else "  "
        print(f"{number}  {_format_duration(track.duration):>6}  {track.format:<10}  "
              f"{track.display_title}")
        print(f"      {track.url}")
    return 0


async def _handle_find_artist(args: argparse.Namespace, settings: Settings, config: dict) -> int:
    from src.providers.music_db.musicbrainz_provider import MusicBrainzProvider

    provider = MusicBrainzProvider(settings=settings)
    results = await provider.search_artist(args.name)
    if not results:
        print(f"No artists match '{args.name}'")
        return 1
    for result in results[: args.top]:
        extra = f" ({result.disambiguation})" if result.disambiguation else ""
        print(f"{result.confidence:.2f}  {result.id}  {result.name}{extra}")
    return 0


_HANDLERS = {
    "build": _handle_build,
    "stats": _handle_stats,
    "search": _handle_search,
    "song": _handle_song,
    "resolve": _handle_resolve,
    "tracks": _handle_tracks,
    "find-artist": _handle_find_artist,
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the song index CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.song_index",
        description="Build and query the song index; resolve archived recordings.",
    )
    parser.add_argument("--config", default="config/config.yaml", help="YAML config path")
    subparsers = parser.add_subparsers(dest="command")

    build_parser = subparsers.add_parser("build", help="Build the index from setlist.fm")
    build_parser.add_argument(
        "--year", type=int, action="append", help="Year to index (repeatable)"
    )
    build_parser.add_argument("--max-pages", type=int, help="Pages per year")
    build_parser.add_argument("--artist", help="MusicBrainz id of the act")

    subparsers.add_parser("stats", help="Show index statistics")

    search_parser = subparsers.add_parser("search", help="Search songs by title")
    search_parser.add_argument("query")
    search_parser.add_argument("--limit", type=int, default=20)

    song_parser = subparsers.add_parser("song", help="Show one song by slug")
    song_parser.add_argument("slug")

    resolve_parser = subparsers.add_parser("resolve", help="Find recordings of a show")
    resolve_parser.add_argument("--date", required=True, help="YYYY-MM-DD or DD-MM-YYYY")
    resolve_parser.add_argument("--venue")
    resolve_parser.add_argument("--city")
    resolve_parser.add_argument("--state")
    resolve_parser.add_argument("--top", type=int, default=5, help="Candidates to print")

    tracks_parser = subparsers.add_parser("tracks", help="Find a song's tracks in a recording")
    tracks_parser.add_argument("identifier")
    tracks_parser.add_argument("song")

    artist_parser = subparsers.add_parser("find-artist", help="Look up an act on MusicBrainz")
    artist_parser.add_argument("name")
    artist_parser.add_argument("--top", type=int, default=5)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the song index tool."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    settings = Settings()
    configure_logging(log_level="WARNING")
    handler = _HANDLERS[args.command]
    try:
        config = load_config(args.config, settings=settings)
        exit_code = asyncio.run(handler(args, settings, config))
    except StatsError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
