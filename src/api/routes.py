"""FastAPI API routes for Steal Your Stats.

Exposes the song index and the archive resolver over REST.  Service
dependencies are resolved from ``app.state`` via FastAPI's ``Depends``
using the ``Annotated`` pattern.

# ─── API ROUTE MAP ─────────────────────────────────────────────────────
#
# Endpoint                     Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/songs                GET     Substring song search (?q=&limit=)
# /api/v1/songs/suggest        GET     Fuzzy "did you mean" suggestions
# /api/v1/songs/{slug}         GET     One song with every performance
# /api/v1/index/stats          GET     Held-index statistics + build state
# /api/v1/index/build          POST    Start a background index rebuild
# /api/v1/audio/search         GET     Resolve a show (date or showId) and
#                                      optionally one song's tracks
# /api/v1/health               GET     Health check + provider status
#
# DEPENDENCY INJECTION PATTERN:
# Each route declares its services as type-annotated params.  FastAPI
# resolves them via Depends() helpers that read from app.state
# (populated at startup in main.py's _build_all).
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from src.api.schemas import (
    AudioNotFoundResponse,
    AudioSearchResponse,
    BuildIndexResponse,
    EraHint,
    HealthResponse,
    IndexStatusResponse,
    SearchInfo,
    SongDetailResponse,
    SongSearchResponse,
    SongSuggestionItem,
    SongSuggestResponse,
)
from src.config.domain_knowledge import era_hints
from src.models.archive import ShowQuery
from src.services.archive_resolver import ArchiveResolver
from src.services.song_index_service import SongIndexService
from src.utils.errors import StatsError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# All routes in this file are prefixed with /api/v1.
router = APIRouter(prefix="/api/v1")

_MAX_SEARCH_LIMIT = 100


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def _get_index_service(request: Request) -> SongIndexService:
    return request.app.state.song_index_service


def _get_archive_resolver(request: Request) -> ArchiveResolver:
    return request.app.state.archive_resolver


def _get_search_config(request: Request) -> dict[str, Any]:
    config = getattr(request.app.state, "config", None) or {}
    return config.get("search", {})


IndexServiceDep = Annotated[SongIndexService, Depends(_get_index_service)]
ResolverDep = Annotated[ArchiveResolver, Depends(_get_archive_resolver)]
SearchConfigDep = Annotated[dict[str, Any], Depends(_get_search_config)]


# ---------------------------------------------------------------------------
# Songs
# ---------------------------------------------------------------------------

@router.get(
    "/songs",
    response_model=SongSearchResponse,
    summary="Search songs by title",
)
async def search_songs(
    service: IndexServiceDep,
    search_config: SearchConfigDep,
    q: Annotated[str, Query(description="Case-insensitive title substring")] = "",
    limit: Annotated[int | None, Query(ge=1, le=_MAX_SEARCH_LIMIT)] = None,
) -> SongSearchResponse:
    """Substring search; exact title first, then most played."""
    limit = limit or int(search_config.get("default_limit", 20))
    songs = service.search_songs(q, limit)
    _logger.debug("song_search", query=q, results=len(songs))
    return SongSearchResponse(
        query=q,
        songs=songs,
        total=len(songs),
        index_ready=service.index is not None,
    )


@router.get(
    "/songs/suggest",
    response_model=SongSuggestResponse,
    summary="Fuzzy song-title suggestions",
)
async def suggest_songs(
    service: IndexServiceDep,
    search_config: SearchConfigDep,
    q: Annotated[str, Query(min_length=1)],
    limit: Annotated[int | None, Query(ge=1, le=25)] = None,
) -> SongSuggestResponse:
    suggestions = service.suggest_songs(
        q,
        limit=limit or int(search_config.get("suggest_limit", 5)),
        min_score=float(search_config.get("suggest_min_score", 70)),
    )
    return SongSuggestResponse(
        query=q,
        suggestions=[
            SongSuggestionItem(
                title=s.entry.title,
                slug=s.entry.slug,
                matched_title=s.matched_title,
                score=s.score,
                total_performances=s.entry.total_performances,
            )
            for s in suggestions
        ],
    )


@router.get(
    "/songs/{slug}",
    response_model=SongDetailResponse,
    summary="Song details by slug",
)
async def get_song(slug: str, service: IndexServiceDep) -> SongDetailResponse:
    song = service.get_song_details(slug)
    if song is None:
        raise HTTPException(status_code=404, detail="Song not found")
    hints = era_hints(sorted(show.year for show in song.shows))
    return SongDetailResponse(song=song, era_hints=[EraHint(**hint) for hint in hints])


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------

@router.get(
    "/index/stats",
    response_model=IndexStatusResponse,
    summary="Song index statistics",
)
async def index_stats(service: IndexServiceDep) -> IndexStatusResponse:
    return IndexStatusResponse(
        stats=service.get_index_stats(),
        is_building=service.is_building,
        should_rebuild=service.should_rebuild(),
        build_configured=service.is_build_configured(),
    )


async def _run_build(service: SongIndexService) -> None:
    """Background rebuild; failures are logged, never raised."""
    try:
        index = await service.build_index()
    except StatsError as exc:
        _logger.error("background_index_build_failed", error=str(exc))
        return
    _logger.info("background_index_build_finished", songs=len(index.songs))


@router.post(
    "/index/build",
    response_model=BuildIndexResponse,
    status_code=202,
    summary="Rebuild the song index in the background",
)
async def build_index(
    service: IndexServiceDep,
    background_tasks: BackgroundTasks,
) -> BuildIndexResponse:
    if not service.is_build_configured():
        raise HTTPException(
            status_code=503,
            detail="Setlist API key is not configured; index builds are disabled",
        )
    if service.is_building:
        return BuildIndexResponse(
            status="already_running",
            message="An index rebuild is already in progress",
        )
    background_tasks.add_task(_run_build, service)
    return BuildIndexResponse(status="started", message="Index rebuild started")


# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------

@router.get(
    "/audio/search",
    response_model=AudioSearchResponse,
    responses={404: {"model": AudioNotFoundResponse}},
    summary="Find an archived recording and a song's tracks",
)
async def audio_search(
    resolver: ResolverDep,
    date: str | None = None,
    venue: str | None = None,
    city: str | None = None,
    state: str | None = None,
    song: str | None = None,
    show_id: Annotated[str | None, Query(alias="showId")] = None,
) -> AudioSearchResponse | JSONResponse:
    """Resolve by ``showId`` when given, otherwise by ``date`` (plus hints)."""
    if not date and not show_id:
        raise HTTPException(status_code=400, detail="Date or showId parameter is required")

    if show_id:
        show = await resolver.get_show_details(show_id)
        if show is None:
            raise HTTPException(status_code=404, detail="Show not found")
        if not song:
            return AudioSearchResponse(show=show)
        result = resolver.select_song_tracks(show_id, show.audio_files, song)
        return AudioSearchResponse(
            show=show,
            song_tracks=result.tracks,
            song_audio=result.tracks[0] if result.found else None,
            found=result.found,
            total_tracks=len(result.tracks),
        )

    query = ShowQuery(date=date, venue=venue, city=city, state=state)
    search = await resolver.resolve_show(query)
    if not search.best_identifier or not search.tracks:
        body = AudioNotFoundResponse(
            error="No shows found for this date",
            date=date,
            candidates=search.candidates,
        )
        return JSONResponse(status_code=404, content=body.model_dump(mode="json", by_alias=True))

    best = search.candidates[0]
    show = resolver.build_recording(
        search.best_identifier,
        search.tracks,
        title=best.title,
        venue=best.venue,
    )
    search_info = SearchInfo(
        total_candidates=len(search.candidates),
        best_score=best.score,
        search_query=query,
    )
    if not song:
        return AudioSearchResponse(show=show, candidates=search.candidates, search_info=search_info)

    result = resolver.select_song_tracks(search.best_identifier, search.tracks, song)
    return AudioSearchResponse(
        show=show,
        song_tracks=result.tracks,
        song_audio=result.tracks[0] if result.found else None,
        found=result.found,
        total_tracks=len(result.tracks),
        candidates=search.candidates,
        search_info=search_info,
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    service: SongIndexService | None = getattr(request.app.state, "song_index_service", None)
    index_ready = service is not None and service.index is not None
    providers["song_index"] = index_ready

    status = "healthy" if index_ready else "degraded"
    return HealthResponse(
        status=status,
        version=getattr(request.app.state, "version", "0.1.0"),
        providers=providers,
    )
