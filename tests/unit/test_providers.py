"""Unit tests for the setlist, archive, cache, store and artist-lookup adapters."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from src.config.settings import Settings
from src.models.song_index import SongIndex
from src.utils.errors import FetchError, IndexStoreError, RateLimitError


def _response(status: int, url: str = "https://example.test", **kwargs) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", url), **kwargs)


def _settings(**overrides) -> Settings:
    defaults = {
        "setlist_fm_api_key": "test-key",
        "musicbrainz_contact": "test@example.com",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


# ======================================================================
# setlist.fm provider
# ======================================================================


class TestSetlistFmProvider:
    def test_get_provider_name(self) -> None:
        from src.providers.setlist.setlistfm_provider import SetlistFmProvider
        provider = SetlistFmProvider(_settings(), http_client=AsyncMock())
        assert provider.get_provider_name() == "setlistfm"

    def test_is_available_requires_key(self) -> None:
        from src.providers.setlist.setlistfm_provider import SetlistFmProvider
        assert SetlistFmProvider(_settings(), http_client=AsyncMock()).is_available() is True
        assert (
            SetlistFmProvider(_settings(setlist_fm_api_key=""), http_client=AsyncMock())
            .is_available()
            is False
        )

    @pytest.mark.asyncio
    async def test_request_shape(self) -> None:
        from src.providers.setlist.setlistfm_provider import SetlistFmProvider

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=_response(200, json={"setlist": []}))

        provider = SetlistFmProvider(_settings(), http_client=mock_client)
        data = await provider.get_artist_setlists("mbid-1", page=2, year=1977)

        assert data == {"setlist": []}
        args, kwargs = mock_client.get.call_args
        assert args[0] == "https://api.setlist.fm/rest/1.0/artist/mbid-1/setlists"
        assert kwargs["params"] == {"p": 2, "fmt": "json", "year": 1977}
        assert kwargs["headers"]["x-api-key"] == "test-key"
        assert kwargs["headers"]["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_year_omitted_when_not_given(self) -> None:
        from src.providers.setlist.setlistfm_provider import SetlistFmProvider

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=_response(200, json={"setlist": []}))

        provider = SetlistFmProvider(_settings(), http_client=mock_client)
        await provider.get_artist_setlists("mbid-1")

        assert "year" not in mock_client.get.call_args.kwargs["params"]

    @pytest.mark.asyncio
    async def test_429_raises_rate_limit_error(self) -> None:
        from src.providers.setlist.setlistfm_provider import SetlistFmProvider

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=_response(429, text="slow down"))

        provider = SetlistFmProvider(_settings(), http_client=mock_client)
        with pytest.raises(RateLimitError) as exc_info:
            await provider.get_artist_setlists("mbid-1", year=1977)

        assert exc_info.value.status_code == 429
        assert exc_info.value.provider_name == "setlistfm"

    @pytest.mark.asyncio
    async def test_other_status_raises_fetch_error(self) -> None:
        from src.providers.setlist.setlistfm_provider import SetlistFmProvider

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=_response(503, text="down"))

        provider = SetlistFmProvider(_settings(), http_client=mock_client)
        with pytest.raises(FetchError) as exc_info:
            await provider.get_artist_setlists("mbid-1")

        assert not isinstance(exc_info.value, RateLimitError)
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_network_error_raises_fetch_error(self) -> None:
        from src.providers.setlist.setlistfm_provider import SetlistFmProvider

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(side_effect=httpx.ConnectError("refused"))

        provider = SetlistFmProvider(_settings(), http_client=mock_client)
        with pytest.raises(FetchError):
            await provider.get_artist_setlists("mbid-1")

    @pytest.mark.asyncio
    async def test_invalid_json_raises_fetch_error(self) -> None:
        from src.providers.setlist.setlistfm_provider import SetlistFmProvider

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=_response(200, text="<html>nope</html>"))

        provider = SetlistFmProvider(_settings(), http_client=mock_client)
        with pytest.raises(FetchError, match="invalid JSON"):
            await provider.get_artist_setlists("mbid-1")


# ======================================================================
# Internet Archive provider
# ======================================================================


class TestInternetArchiveProvider:
    @pytest.mark.asyncio
    async def test_search_params(self) -> None:
        from src.providers.archive.internet_archive_provider import InternetArchiveProvider

        payload = {"response": {"docs": [{"identifier": "gd1977-05-08.sbd"}]}}
        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=_response(200, json=payload))

        provider = InternetArchiveProvider(_settings(), http_client=mock_client)
        data = await provider.search("collection:GratefulDead", ["identifier", "title"], rows=10)

        assert data == payload
        args, kwargs = mock_client.get.call_args
        assert args[0] == "https://archive.org/advancedsearch.php"
        assert kwargs["params"]["q"] == "collection:GratefulDead"
        assert kwargs["params"]["fl[]"] == ["identifier", "title"]
        assert kwargs["params"]["rows"] == 10
        assert kwargs["params"]["output"] == "json"

    @pytest.mark.asyncio
    async def test_search_http_error_raises_fetch_error(self) -> None:
        from src.providers.archive.internet_archive_provider import InternetArchiveProvider

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=_response(500))

        provider = InternetArchiveProvider(_settings(), http_client=mock_client)
        with pytest.raises(FetchError) as exc_info:
            await provider.search("q", ["identifier"])

        assert exc_info.value.status_code == 500
        assert exc_info.value.provider_name == "internet_archive"

    @pytest.mark.asyncio
    async def test_metadata_is_cached(self) -> None:
        from src.providers.archive.internet_archive_provider import InternetArchiveProvider
        from src.providers.cache.memory_cache import MemoryCacheProvider

        payload = {"files": [{"name": "d1t01.mp3", "format": "VBR MP3"}]}
        mock_client = AsyncMock()
        mock_client.get = AsyncMock(return_value=_response(200, json=payload))

        provider = InternetArchiveProvider(
            _settings(), http_client=mock_client, cache=MemoryCacheProvider()
        )
        first = await provider.get_metadata("gd1977-05-08.sbd")
        second = await provider.get_metadata("gd1977-05-08.sbd")

        assert first == second == payload
        assert mock_client.get.await_count == 1
        assert mock_client.get.call_args.args[0] == "https://archive.org/metadata/gd1977-05-08.sbd"

    @pytest.mark.asyncio
    async def test_metadata_failure_is_not_cached(self) -> None:
        from src.providers.archive.internet_archive_provider import InternetArchiveProvider
        from src.providers.cache.memory_cache import MemoryCacheProvider

        mock_client = AsyncMock()
        mock_client.get = AsyncMock(
            side_effect=[httpx.ReadTimeout("slow"), _response(200, json={"files": []})]
        )

        provider = InternetArchiveProvider(
            _settings(), http_client=mock_client, cache=MemoryCacheProvider()
        )
        with pytest.raises(FetchError):
            await provider.get_metadata("gd1977-05-08.sbd")
        assert await provider.get_metadata("gd1977-05-08.sbd") == {"files": []}

    def test_streaming_url_encodes_file_name(self) -> None:
        from src.providers.archive.internet_archive_provider import InternetArchiveProvider

        provider = InternetArchiveProvider(_settings(), http_client=AsyncMock())
        url = provider.streaming_url("gd1977-05-08.sbd", "gd77-05-08 d1t01 Minglewood.mp3")
        assert url == (
            "https://archive.org/download/gd1977-05-08.sbd/gd77-05-08%20d1t01%20Minglewood.mp3"
        )


# ======================================================================
# Memory cache
# ======================================================================


class _FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestMemoryCacheProvider:
    @pytest.mark.asyncio
    async def test_set_get_delete(self) -> None:
        from src.providers.cache.memory_cache import MemoryCacheProvider

        cache = MemoryCacheProvider()
        await cache.set("k", {"v": 1})
        assert await cache.get("k") == {"v": 1}
        assert await cache.exists("k") is True
        await cache.delete("k")
        assert await cache.get("k") is None
        assert await cache.exists("k") is False

    @pytest.mark.asyncio
    async def test_per_item_ttl(self) -> None:
        from src.providers.cache.memory_cache import MemoryCacheProvider

        clock = _FakeClock()
        cache = MemoryCacheProvider(ttl=3600, timer=clock)
        await cache.set("short", "a", ttl=10)
        await cache.set("long", "b")

        clock.now += 11
        assert await cache.get("short") is None
        assert await cache.get("long") == "b"

    @pytest.mark.asyncio
    async def test_cache_wide_ttl(self) -> None:
        from src.providers.cache.memory_cache import MemoryCacheProvider

        clock = _FakeClock()
        cache = MemoryCacheProvider(ttl=60, timer=clock)
        await cache.set("k", "v")
        clock.now += 61
        assert await cache.get("k") is None

    @pytest.mark.asyncio
    async def test_max_size_evicts(self) -> None:
        from src.providers.cache.memory_cache import MemoryCacheProvider

        cache = MemoryCacheProvider(max_size=2)
        for key in ("a", "b", "c"):
            await cache.set(key, key)
        assert len(cache) == 2


# ======================================================================
# JSON index store
# ======================================================================


class TestJsonIndexStore:
    @pytest.mark.asyncio
    async def test_missing_file_loads_none(self, tmp_path: Path) -> None:
        from src.providers.store.json_index_store import JsonIndexStore

        store = JsonIndexStore(tmp_path / "index.json")
        assert await store.load() is None

    @pytest.mark.asyncio
    async def test_save_then_load(self, tmp_path: Path, sample_index: SongIndex) -> None:
        from src.providers.store.json_index_store import JsonIndexStore

        store = JsonIndexStore(tmp_path / "nested" / "index.json")
        await store.save(sample_index)

        assert await store.load() == sample_index
        raw = (tmp_path / "nested" / "index.json").read_text()
        assert '"totalShows"' in raw
        assert not (tmp_path / "nested" / "index.json.tmp").exists()

    @pytest.mark.asyncio
    async def test_corrupt_file_raises(self, tmp_path: Path) -> None:
        from src.providers.store.json_index_store import JsonIndexStore

        path = tmp_path / "index.json"
        path.write_text("{not json")
        with pytest.raises(IndexStoreError):
            await JsonIndexStore(path).load()

    @pytest.mark.asyncio
    async def test_non_utf8_file_raises(self, tmp_path: Path) -> None:
        from src.providers.store.json_index_store import JsonIndexStore

        path = tmp_path / "index.json"
        path.write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(IndexStoreError):
            await JsonIndexStore(path).load()

    @pytest.mark.asyncio
    async def test_save_overwrites(self, tmp_path: Path, sample_index: SongIndex) -> None:
        from src.providers.store.json_index_store import JsonIndexStore

        store = JsonIndexStore(tmp_path / "index.json")
        await store.save(sample_index)
        empty = SongIndex(last_updated=datetime(2024, 1, 1, tzinfo=timezone.utc))
        await store.save(empty)
        assert await store.load() == empty


# ======================================================================
# MusicBrainz artist lookup
# ======================================================================


class TestMusicBrainzProvider:
    def test_get_provider_name(self) -> None:
        from src.providers.music_db.musicbrainz_provider import MusicBrainzProvider
        with patch("src.providers.music_db.musicbrainz_provider.musicbrainzngs"):
            provider = MusicBrainzProvider(_settings())
        assert provider.get_provider_name() == "musicbrainz"
        assert provider.is_available() is True

    @pytest.mark.asyncio
    async def test_search_artist_sorted_by_confidence(self) -> None:
        from src.providers.music_db.musicbrainz_provider import MusicBrainzProvider

        response = {
            "artist-list": [
                {"id": "id-2", "name": "Grateful Dudes", "ext:score": "60"},
                {
                    "id": "6faa7ca7",
                    "name": "Grateful Dead",
                    "disambiguation": "US rock band",
                    "ext:score": "100",
                },
            ]
        }
        with patch("src.providers.music_db.musicbrainz_provider.musicbrainzngs") as mock_mb:
            mock_mb.search_artists = MagicMock(return_value=response)
            provider = MusicBrainzProvider(_settings())
            results = await provider.search_artist("Grateful Dead")

        assert [r.id for r in results] == ["6faa7ca7", "id-2"]
        assert results[0].confidence == 1.0
        assert results[0].disambiguation == "US rock band"

    @pytest.mark.asyncio
    async def test_exact_name_wins_equal_scores(self) -> None:
        from src.providers.music_db.musicbrainz_provider import MusicBrainzProvider

        response = {
            "artist-list": [
                {"id": "tribute", "name": "Grateful Dead Tribute", "ext:score": "100"},
                {"id": "6faa7ca7", "name": "Grateful Dead", "ext:score": "100"},
            ]
        }
        with patch("src.providers.music_db.musicbrainz_provider.musicbrainzngs") as mock_mb:
            mock_mb.search_artists = MagicMock(return_value=response)
            provider = MusicBrainzProvider(_settings())
            results = await provider.search_artist("grateful dead")

        assert results[0].id == "6faa7ca7"

    @pytest.mark.asyncio
    async def test_web_service_error_raises_fetch_error(self) -> None:
        import musicbrainzngs

        from src.providers.music_db.musicbrainz_provider import MusicBrainzProvider

        with patch(
            "src.providers.music_db.musicbrainz_provider.musicbrainzngs.search_artists",
            side_effect=musicbrainzngs.WebServiceError("boom"),
        ):
            provider = MusicBrainzProvider(_settings())
            with pytest.raises(FetchError):
                await provider.search_artist("Grateful Dead")
