"""Fake providers and raw-payload builders shared by the test suite."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Any

from src.interfaces.archive_provider import IArchiveProvider
from src.interfaces.setlist_provider import ISetlistProvider
from src.utils.errors import FetchError

FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Raw setlist.fm payloads
# ---------------------------------------------------------------------------


def make_setlist(
    setlist_id: str,
    event_date: str,
    songs: list[str],
    venue: str = "Barton Hall",
    city: str = "Ithaca",
    country: str = "United States",
) -> dict[str, Any]:
    """Return a raw setlist in the shape setlist.fm's JSON API uses."""
    return {
        "id": setlist_id,
        "eventDate": event_date,
        "venue": {
            "id": f"venue-{setlist_id}",
            "name": venue,
            "city": {"name": city, "country": {"name": country}},
        },
        "sets": {"set": [{"song": [{"name": name} for name in songs]}]},
    }


def make_page(setlists: list[dict[str, Any]]) -> dict[str, Any]:
    return {"setlist": setlists, "total": len(setlists), "page": 1, "itemsPerPage": 20}


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class SleepRecorder:
    """Stands in for ``asyncio.sleep``: records every delay and yields once."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)
        await asyncio.sleep(0)


class FakeSetlistProvider(ISetlistProvider):
    """Serves canned pages keyed by ``(year, page)``.

    A value that is an exception instance is raised instead of returned.
    Missing keys return an empty page.
    """

    def __init__(self, pages: dict[tuple[int, int], Any] | None = None) -> None:
        self.pages = pages or {}
        self.calls: list[tuple[str, int, int | None]] = []

    async def get_artist_setlists(
        self, artist_id: str, page: int = 1, year: int | None = None
    ) -> dict[str, Any]:
        self.calls.append((artist_id, page, year))
        result = self.pages.get((year, page), {"setlist": []})
        if isinstance(result, Exception):
            raise result
        return result

    def get_provider_name(self) -> str:
        return "fake_setlists"

    def is_available(self) -> bool:
        return True


class FakeArchiveProvider(IArchiveProvider):
    """Returns canned advanced-search docs and per-identifier file listings."""

    def __init__(
        self,
        docs: list[dict[str, Any]] | None = None,
        files: dict[str, list[dict[str, Any]]] | None = None,
        fail_search: bool = False,
    ) -> None:
        self.docs = docs or []
        self.files = files or {}
        self.fail_search = fail_search
        self.queries: list[str] = []
        self.metadata_requests: list[str] = []

    async def search(
        self, query: str, fields: list[str], rows: int = 50
    ) -> dict[str, Any]:
        self.queries.append(query)
        if self.fail_search:
            raise FetchError("search exploded", provider_name="internet_archive")
        return {"response": {"numFound": len(self.docs), "docs": self.docs}}

    async def get_metadata(self, identifier: str) -> dict[str, Any]:
        self.metadata_requests.append(identifier)
        if identifier not in self.files:
            raise FetchError("metadata missing", provider_name="internet_archive", status_code=404)
        return {"files": self.files[identifier]}

    def streaming_url(self, identifier: str, file_name: str) -> str:
        return f"https://archive.org/download/{identifier}/{file_name}"

    def get_provider_name(self) -> str:
        return "fake_archive"


# ---------------------------------------------------------------------------
# Internet Archive payloads for the Cornell 1977 show
# ---------------------------------------------------------------------------

SBD_ID = "gd1977-05-08.sbd.hicks.4982.sbeok.shnf"
AUD_ID = "gd1977-05-08.aud.vernon.82.sbeok.flac16"
OTHER_ID = "gdead.1977-05-08.fm.miller"

DOCS = [
    {
        "identifier": OTHER_ID,
        "title": "Grateful Dead FM broadcast",
        "format": ["VBR MP3"],
    },
    {
        "identifier": AUD_ID,
        "title": "Grateful Dead Live at Barton Hall on 1977-05-08",
        "coverage": "Ithaca, NY",
        "source": "AUD",
        "format": ["Flac"],
        "year": "1977",
    },
    {
        "identifier": SBD_ID,
        "title": "Grateful Dead Live on 1977-05-08",
        "venue": "Barton Hall - Cornell University",
        "coverage": "Ithaca, NY",
        "source": "SBD > Reel > DAT",
        "format": ["Flac", "VBR MP3"],
        "year": "1977",
    },
    {"title": "no identifier, ignored"},
]

SBD_FILES = [
    {"name": "gd77-05-08d1t01.mp3", "format": "VBR MP3", "title": "New Minglewood Blues",
     "track": "01", "length": "5:32", "size": "5300000"},
    {"name": "gd77-05-08d1t01.flac", "format": "Flac", "title": "New Minglewood Blues",
     "track": "01", "length": "5:32"},
    {"name": "gd77-05-08d2t03.flac", "format": "Flac", "title": "Scarlet Begonias",
     "track": "03", "length": "11:30"},
    {"name": "gd77-05-08d2t03.mp3", "format": "VBR MP3", "title": "Scarlet Begonias",
     "track": "03", "length": "11:30"},
    {"name": "gd77-05-08.ffp", "format": "Text"},
    {"name": "gd77-05-08d2t04.mp3", "format": "VBR MP3", "length": "bogus"},
]
