"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ─────────────────────────────────────────────────
#
# Values are read from (highest priority first):
#
#   1. Environment variables, e.g. SETLIST_FM_API_KEY=abc123
#   2. The .env file in the project root (local development)
#   3. The defaults declared below
#
# Field ``setlist_fm_api_key`` maps to env var ``SETLIST_FM_API_KEY``.
# List fields take JSON in the environment: INDEX_YEARS='[1972, 1977]'.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

GRATEFUL_DEAD_MBID = "6faa7ca7-0d99-4a5e-bfa6-1fd5037520c6"


class Settings(BaseSettings):
    """Steal Your Stats application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Act ===
    artist_mbid: str = GRATEFUL_DEAD_MBID
    artist_name: str = "Grateful Dead"

    # === Setlist database ===
    # Empty string = "not configured": index builds are refused.
    setlist_fm_api_key: str = ""
    setlist_fm_base_url: str = "https://api.setlist.fm/rest/1.0"

    # === Audio archive ===
    archive_base_url: str = "https://archive.org"
    archive_collection: str = "GratefulDead"
    archive_identifier_prefix: str = "gd"  # identifiers look like gd1977-05-08.sbd...
    archive_search_rows: int = 50
    archive_metadata_cache_ttl: int = 3600

    # === Music metadata registry ===
    musicbrainz_app_name: str = "StealYourStats"
    musicbrainz_app_version: str = "1.0.0"
    musicbrainz_contact: str = ""

    # === Song index build ===
    # Deliberately small defaults: the setlist API throttles aggressively.
    index_years: list[int] = [1977]
    index_max_pages: int = 2
    index_page_delay: float = 2.0
    index_year_delay: float = 5.0
    index_rate_limit_cooldown: float = 10.0
    index_path: str = "data/song-index.json"
    index_max_age_days: int = 7
    index_rebuild_on_startup: bool = False

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def is_setlist_configured(self) -> bool:
        """Return ``True`` when a setlist.fm API key is present."""
        return bool(self.setlist_fm_api_key.strip())

    def musicbrainz_user_agent(self) -> str:
        """Return the ``name/version (contact)`` user agent string."""
        agent = f"{self.musicbrainz_app_name}/{self.musicbrainz_app_version}"
        if self.musicbrainz_contact:
            agent += f" ({self.musicbrainz_contact})"
        return agent
