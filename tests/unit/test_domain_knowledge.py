"""Unit tests for the era table and archive format markers."""

from __future__ import annotations

import pytest

from src.config.domain_knowledge import (
    ERA_RANGES,
    UNKNOWN_ERA,
    era_for_year,
    era_hints,
    has_soundboard_marker,
    is_audio_format,
    is_mp3,
    is_streamable_format,
)


class TestEraForYear:
    @pytest.mark.parametrize(
        ("year", "label"),
        [
            (1965, "Primal Era"),
            (1969, "Pigpen Peak Era"),
            (1972, "Europe '72 Era"),
            (1974, "Wall of Sound Era"),
            (1975, "Hiatus"),
            (1977, "Return + '77 Era"),
            (1979, "Brent Early Era"),
            (1990, "Brent Late Era"),
            (1995, "Vince Era"),
        ],
    )
    def test_known_years(self, year: int, label: str) -> None:
        assert era_for_year(year) == label

    @pytest.mark.parametrize("year", [1964, 1996, 0])
    def test_outside_the_table(self, year: int) -> None:
        assert era_for_year(year) == UNKNOWN_ERA

    def test_ranges_are_contiguous(self) -> None:
        for (_, last, _), (first, _, _) in zip(ERA_RANGES, ERA_RANGES[1:]):
            assert first == last + 1


class TestEraHints:
    def test_distinct_years_in_first_seen_order(self) -> None:
        hints = era_hints([1977, 1972, 1977, 1990])
        assert hints == [
            {"year": "1977", "label": "Return + '77 Era"},
            {"year": "1972", "label": "Europe '72 Era"},
            {"year": "1990", "label": "Brent Late Era"},
        ]

    def test_empty(self) -> None:
        assert era_hints([]) == []


class TestFormatMarkers:
    @pytest.mark.parametrize("label", ["VBR MP3", "Ogg Vorbis", "Flac", "24bit Flac", "Shorten shn"])
    def test_audio_formats(self, label: str) -> None:
        assert is_audio_format(label)

    @pytest.mark.parametrize("label", ["Text", "JPEG", "Checksums", "", None])
    def test_non_audio_formats(self, label) -> None:
        assert not is_audio_format(label)

    def test_streamable(self) -> None:
        assert is_streamable_format("VBR MP3")
        assert is_streamable_format("Ogg Vorbis")
        assert not is_streamable_format("Flac")

    def test_is_mp3(self) -> None:
        assert is_mp3("64Kbps MP3")
        assert not is_mp3("Ogg Vorbis")
        assert not is_mp3(None)

    def test_soundboard_marker_in_any_text(self) -> None:
        assert has_soundboard_marker(None, "Grateful Dead Live (SBD)")
        assert has_soundboard_marker("Ultramatrix by Charlie Miller", None)
        assert not has_soundboard_marker("AUD master", "Grateful Dead Live")
        assert not has_soundboard_marker()
