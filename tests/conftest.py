"""Shared pytest fixtures for the Steal Your Stats test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from src.config.settings import Settings
from src.models.song_index import SongIndex
from src.services.show_index_builder import fold_setlists
from tests.fakes import FIXED_NOW, SleepRecorder, make_setlist


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        setlist_fm_api_key="test-key",
        musicbrainz_contact="test@example.com",
    )


@pytest.fixture
def sample_setlists() -> list[dict[str, Any]]:
    """Three 1977 shows listed newest first, the way setlist.fm pages them."""
    return [
        make_setlist(
            "s3", "08-05-1977", ["Scarlet Begonias", "Fire on the Mountain"],
            venue="Barton Hall", city="Ithaca",
        ),
        make_setlist(
            "s2", "07-05-1977", ["Scarlet Begonias", "Jack Straw"],
            venue="Boston Garden", city="Boston",
        ),
        make_setlist(
            "s1", "22-04-1977", ["Jack Straw", "Estimated Prophet"],
            venue="The Spectrum", city="Philadelphia",
        ),
    ]


@pytest.fixture
def sample_index(sample_setlists: list[dict[str, Any]]) -> SongIndex:
    return fold_setlists(sample_setlists, default_year=1977, last_updated=FIXED_NOW)


@pytest.fixture
def sleep_recorder() -> SleepRecorder:
    return SleepRecorder()
