"""Audio-archive providers."""

from src.providers.archive.internet_archive_provider import InternetArchiveProvider

__all__ = ["InternetArchiveProvider"]
