"""Integration tests for FastAPI API endpoints using TestClient."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.middleware import status_for_error
from src.main import create_app
from src.models.song_index import SongIndex
from src.services.archive_resolver import ArchiveResolver
from src.services.show_index_builder import ShowIndexBuilder
from src.services.song_index_service import SongIndexService
from src.utils.errors import (
    ConfigurationError,
    FetchError,
    IndexStoreError,
    ProviderUnavailableError,
    RateLimitError,
)
from tests.fakes import (
    DOCS,
    FIXED_NOW,
    SBD_FILES,
    SBD_ID,
    FakeArchiveProvider,
    FakeSetlistProvider,
    SleepRecorder,
    make_page,
    make_setlist,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _create_test_app(
    service: SongIndexService,
    archive: FakeArchiveProvider | None = None,
) -> FastAPI:
    """Create the app wired to fakes instead of real upstream clients."""
    components: dict[str, Any] = {
        "config": {"search": {"default_limit": 20, "suggest_limit": 5, "suggest_min_score": 70}},
        "song_index_service": service,
        "archive_resolver": ArchiveResolver(provider=archive or FakeArchiveProvider()),
        "provider_registry": {"setlistfm": service.is_build_configured(), "internet_archive": True},
        "version": "0.1.0",
    }
    return create_app(components=components)


def _loaded_service(index: SongIndex) -> SongIndexService:
    service = SongIndexService(builder=None, clock=lambda: FIXED_NOW)
    service.replace_index(index)
    return service


@pytest.fixture
def client(sample_index: SongIndex):
    with TestClient(_create_test_app(_loaded_service(sample_index))) as test_client:
        yield test_client


@pytest.fixture
def audio_client(sample_index: SongIndex):
    archive = FakeArchiveProvider(docs=DOCS, files={SBD_ID: SBD_FILES})
    app = _create_test_app(_loaded_service(sample_index), archive=archive)
    with TestClient(app) as test_client:
        yield test_client


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class TestHealth:
    def test_healthy_with_index(self, client: TestClient) -> None:
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["providers"]["song_index"] is True
        assert data["providers"]["internet_archive"] is True

    def test_degraded_without_index(self) -> None:
        with TestClient(_create_test_app(SongIndexService(builder=None))) as client:
            data = client.get("/api/v1/health").json()
        assert data["status"] == "degraded"
        assert data["providers"]["song_index"] is False


# ---------------------------------------------------------------------------
# Songs
# ---------------------------------------------------------------------------


class TestSongs:
    def test_search(self, client: TestClient) -> None:
        resp = client.get("/api/v1/songs", params={"q": "scarlet"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["total"] == 1
        assert data["indexReady"] is True
        song = data["songs"][0]
        assert song["slug"] == "scarlet-begonias"
        assert song["totalPerformances"] == 2
        assert song["firstPerformance"]["date"] == "07-05-1977"

    def test_search_ranking(self, client: TestClient) -> None:
        data = client.get("/api/v1/songs", params={"q": "s"}).json()
        assert [s["slug"] for s in data["songs"]] == [
            "scarlet-begonias",
            "jack-straw",
            "estimated-prophet",
        ]

    def test_empty_query(self, client: TestClient) -> None:
        data = client.get("/api/v1/songs").json()
        assert data["songs"] == []
        assert data["total"] == 0

    def test_limit_bounds(self, client: TestClient) -> None:
        assert client.get("/api/v1/songs", params={"q": "s", "limit": 1}).json()["total"] == 1
        assert client.get("/api/v1/songs", params={"q": "s", "limit": 0}).status_code == 422
        assert client.get("/api/v1/songs", params={"q": "s", "limit": 101}).status_code == 422

    def test_search_without_index(self) -> None:
        with TestClient(_create_test_app(SongIndexService(builder=None))) as client:
            data = client.get("/api/v1/songs", params={"q": "scarlet"}).json()
        assert data["songs"] == []
        assert data["indexReady"] is False

    def test_suggest(self, client: TestClient) -> None:
        resp = client.get("/api/v1/songs/suggest", params={"q": "scarlet begonia"})
        assert resp.status_code == 200
        suggestion = resp.json()["suggestions"][0]
        assert suggestion["slug"] == "scarlet-begonias"
        assert suggestion["matchedTitle"] == "Scarlet Begonias"

    def test_suggest_requires_query(self, client: TestClient) -> None:
        assert client.get("/api/v1/songs/suggest").status_code == 422

    def test_song_details(self, client: TestClient) -> None:
        resp = client.get("/api/v1/songs/jack-straw")
        assert resp.status_code == 200
        data = resp.json()
        assert data["song"]["title"] == "Jack Straw"
        assert len(data["song"]["shows"]) == 2
        assert data["eraHints"] == [{"year": "1977", "label": "Return + '77 Era"}]

    def test_song_not_found(self, client: TestClient) -> None:
        resp = client.get("/api/v1/songs/xyzzy")
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Song not found"


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------


class TestIndex:
    def test_stats(self, client: TestClient) -> None:
        data = client.get("/api/v1/index/stats").json()
        assert data["stats"]["totalSongs"] == 4
        assert data["stats"]["totalShows"] == 3
        assert data["isBuilding"] is False
        assert data["shouldRebuild"] is False
        assert data["buildConfigured"] is False

    def test_build_refused_without_api_key(self, client: TestClient) -> None:
        resp = client.post("/api/v1/index/build")
        assert resp.status_code == 503

    def test_build_runs_in_background(self) -> None:
        builder = ShowIndexBuilder(
            provider=FakeSetlistProvider(
                {(1977, 1): make_page([make_setlist("a", "08-05-1977", ["Sugaree"])])}
            ),
            artist_id="gd-mbid",
            max_pages=1,
            sleep=SleepRecorder(),
            clock=lambda: FIXED_NOW,
        )
        service = SongIndexService(builder=builder, years=[1977])

        with TestClient(_create_test_app(service)) as client:
            resp = client.post("/api/v1/index/build")
            assert resp.status_code == 202
            assert resp.json()["status"] == "started"

            # TestClient runs background tasks before returning.
            data = client.get("/api/v1/songs", params={"q": "sugaree"}).json()

        assert [s["slug"] for s in data["songs"]] == ["sugaree"]


# ---------------------------------------------------------------------------
# Audio
# ---------------------------------------------------------------------------


class TestAudioSearch:
    def test_requires_date_or_show_id(self, audio_client: TestClient) -> None:
        resp = audio_client.get("/api/v1/audio/search")
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Date or showId parameter is required"

    def test_by_date_with_song(self, audio_client: TestClient) -> None:
        resp = audio_client.get(
            "/api/v1/audio/search",
            params={"date": "08-05-1977", "venue": "Barton Hall", "song": "Scarlet Begonias"},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["show"]["identifier"] == SBD_ID
        assert data["show"]["date"] == "1977-05-08"
        assert data["found"] is True
        assert data["songAudio"]["name"] == "gd77-05-08d2t03.mp3"
        assert data["totalTracks"] == 2
        assert data["searchInfo"]["totalCandidates"] == 3
        assert data["searchInfo"]["bestScore"] == 78
        assert data["searchInfo"]["searchQuery"]["venue"] == "Barton Hall"

    def test_by_date_without_song(self, audio_client: TestClient) -> None:
        data = audio_client.get("/api/v1/audio/search", params={"date": "1977-05-08"}).json()
        assert len(data["show"]["audioFiles"]) == 5
        assert data["songTracks"] == []
        assert data["found"] is False

    def test_date_not_found(self, client: TestClient) -> None:
        resp = client.get("/api/v1/audio/search", params={"date": "1999-01-01"})
        assert resp.status_code == 404
        data = resp.json()
        assert data["error"] == "No shows found for this date"
        assert data["date"] == "1999-01-01"
        assert data["candidates"] == []

    def test_by_show_id_fallback(self, audio_client: TestClient) -> None:
        resp = audio_client.get(
            "/api/v1/audio/search", params={"showId": SBD_ID, "song": "Xyzzy"}
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["found"] is False
        assert data["songAudio"] is None
        assert len(data["songTracks"]) == 5
        assert data["songTracks"][0]["format"] == "VBR MP3"

    def test_unknown_show_id(self, audio_client: TestClient) -> None:
        resp = audio_client.get("/api/v1/audio/search", params={"showId": "gd-nope"})
        assert resp.status_code == 404
        assert resp.json()["detail"] == "Show not found"


# ---------------------------------------------------------------------------
# Error handling
# ---------------------------------------------------------------------------


class TestErrorHandling:
    @pytest.mark.parametrize(
        ("error", "status"),
        [
            (ConfigurationError("x"), 503),
            (ProviderUnavailableError("x"), 503),
            (FetchError("x"), 502),
            (RateLimitError(), 502),
            (IndexStoreError("x"), 500),
        ],
    )
    def test_status_mapping(self, error, status: int) -> None:
        assert status_for_error(error) == status

    def test_application_error_becomes_json(self) -> None:
        service = MagicMock(spec=SongIndexService)
        service.index = None
        service.is_build_configured.return_value = False
        service.search_songs.side_effect = ProviderUnavailableError(
            "index unavailable", provider_name="index"
        )

        with TestClient(_create_test_app(service)) as client:
            resp = client.get("/api/v1/songs", params={"q": "scarlet"})

        assert resp.status_code == 503
        assert resp.json() == {
            "error": "ProviderUnavailableError",
            "detail": "index unavailable",
        }
