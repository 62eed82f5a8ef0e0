"""Steal Your Stats FastAPI application entry point.

Wires together providers, services and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml``, configures
structured logging, loads the persisted song index on startup and,
when ``INDEX_REBUILD_ON_STARTUP`` is set, refreshes a stale index in the
background.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.providers.archive.internet_archive_provider import InternetArchiveProvider
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.setlist.setlistfm_provider import SetlistFmProvider
from src.providers.store.json_index_store import JsonIndexStore
from src.services.archive_resolver import ArchiveResolver
from src.services.show_index_builder import ShowIndexBuilder
from src.services.song_index_service import SongIndexService
from src.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    index_cfg = app_config.get("index", {})
    archive_cfg = app_config.get("archive", {})
    artist_cfg = app_config.get("artist", {})

    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=30.0, follow_redirects=True)
    cache = MemoryCacheProvider(ttl=app_settings.archive_metadata_cache_ttl)

    # -- Setlist source + index builder (only with an API key) --
    setlist_provider = SetlistFmProvider(settings=app_settings, http_client=http_client)
    builder: ShowIndexBuilder | None = None
    if setlist_provider.is_available():
        builder = ShowIndexBuilder(
            provider=setlist_provider,
            artist_id=artist_cfg.get("mbid", app_settings.artist_mbid),
            max_pages=int(index_cfg.get("max_pages", app_settings.index_max_pages)),
            page_delay=float(index_cfg.get("page_delay", app_settings.index_page_delay)),
            year_delay=float(index_cfg.get("year_delay", app_settings.index_year_delay)),
            rate_limit_cooldown=float(
                index_cfg.get("rate_limit_cooldown", app_settings.index_rate_limit_cooldown)
            ),
        )

    store = JsonIndexStore(index_cfg.get("path", app_settings.index_path))
    song_index_service = SongIndexService(
        builder=builder,
        store=store,
        years=index_cfg.get("years", app_settings.index_years),
        max_age=timedelta(days=int(index_cfg.get("max_age_days", app_settings.index_max_age_days))),
    )

    # -- Audio archive --
    archive_provider = InternetArchiveProvider(
        settings=app_settings,
        http_client=http_client,
        cache=cache,
    )
    archive_resolver = ArchiveResolver(
        provider=archive_provider,
        collection=archive_cfg.get("collection", app_settings.archive_collection),
        identifier_prefix=archive_cfg.get(
            "identifier_prefix", app_settings.archive_identifier_prefix
        ),
        rows=int(archive_cfg.get("search_rows", app_settings.archive_search_rows)),
        artist_name=artist_cfg.get("name", app_settings.artist_name),
    )

    provider_registry: dict[str, bool] = {
        "setlistfm": setlist_provider.is_available(),
        "internet_archive": True,
        "index_store": True,
    }

    return {
        "http_client": http_client,
        "config": app_config,
        "song_index_service": song_index_service,
        "archive_resolver": archive_resolver,
        "provider_registry": provider_registry,
        "version": _VERSION,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


def _make_lifespan(
    app_settings: Settings,
    app_config: dict[str, Any],
    components: dict[str, Any] | None,
):
    @asynccontextmanager
    async def _lifespan(application: FastAPI):  # noqa: ANN202
        """Initialise providers and services on startup, clean up on shutdown."""
        built = components if components is not None else _build_all(app_settings, app_config)
        for key, value in built.items():
            setattr(application.state, key, value)

        service: SongIndexService = built["song_index_service"]
        await service.load()

        refresh_task: asyncio.Task | None = None
        if app_settings.index_rebuild_on_startup and service.should_rebuild():
            if service.is_build_configured():
                refresh_task = asyncio.create_task(service.ensure_fresh())
                _logger.info("index_refresh_scheduled")
            else:
                _logger.warning("index_refresh_skipped", reason="setlist API key not configured")

        stats = service.get_index_stats()
        _logger.info(
            "app_startup",
            version=_VERSION,
            environment=app_settings.app_env,
            songs=stats.total_songs if stats else 0,
            index_loaded=stats is not None,
        )

        yield

        if refresh_task is not None and not refresh_task.done():
            refresh_task.cancel()
        http_client: httpx.AsyncClient | None = built.get("http_client")
        if http_client is not None:
            await http_client.aclose()
        _logger.info("app_shutdown", message="HTTP client closed")

    return _lifespan


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(
    app_settings: Settings | None = None,
    components: dict[str, Any] | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    app_settings:
        Settings to wire with; the module-level ``settings`` when omitted.
    components:
        Pre-built ``app.state`` components.  Tests pass services wired to
        fakes here instead of real providers.
    """
    app_settings = app_settings or settings
    if components is None:
        app_config = load_config(settings=app_settings)
    else:
        app_config = components.get("config", {})

    application = FastAPI(
        title="Steal Your Stats API",
        version=_VERSION,
        description=(
            "Search every song the Grateful Dead played, see when and where, "
            "and find the archived recordings to listen to it."
        ),
        lifespan=_make_lifespan(app_settings, app_config, components),
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=app_config.get("app", {}).get("cors_origins"))

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
