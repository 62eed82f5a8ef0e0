"""Utility modules for Steal Your Stats.

- **errors** -- Domain exception hierarchy rooted at StatsError; fetch,
  rate-limit, configuration and index-store failures each have their own
  subclass so callers can handle them without broad ``except Exception``.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **text_normalizer** -- Song-title slugs, setlist and archive date
  handling, duration / track-number parsing and loose title matching.
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    ConfigurationError,
    FetchError,
    IndexStoreError,
    ProviderUnavailableError,
    RateLimitError,
    StatsError,
)

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

# -- Text normalization -----------------------------------------------------
from src.utils.text_normalizer import create_slug, parse_duration, title_matches

__all__ = [
    "ConfigurationError",
    "FetchError",
    "IndexStoreError",
    "ProviderUnavailableError",
    "RateLimitError",
    "StatsError",
    "configure_logging",
    "create_slug",
    "get_logger",
    "parse_duration",
    "title_matches",
]
