"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml  — static defaults checked into the repo
#   2. .env file           — local developer overrides (not committed)
#   3. Environment vars    — set at deploy time
#
# load_config() reads the YAML file first, then deep-merges the values
# that Settings resolved from .env / the environment on top of it:
#
#   base      = {"index": {"years": [1977], "max_pages": 2}}
#   overrides = {"index": {"max_pages": 5}}
#   result    = {"index": {"years": [1977], "max_pages": 5}}
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from src.config.settings import Settings
from src.utils.errors import ConfigurationError


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Only Settings fields that were explicitly set (env var, .env or
    constructor argument) override YAML values; untouched defaults fill
    in keys the YAML file does not mention.

    Args:
        path: Path to the YAML configuration file.
        settings: Resolved settings; a fresh ``Settings()`` when omitted.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the file is not valid YAML or is not a mapping.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path) as f:
            try:
                yaml_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ConfigurationError(
                    message=f"Invalid YAML in {config_path}: {exc}"
                ) from exc
        if not isinstance(yaml_config, dict):
            raise ConfigurationError(
                message=f"{config_path} must contain a mapping at the top level"
            )
    else:
        yaml_config = {}

    settings = settings or Settings()
    explicit = settings.model_fields_set

    env_values = {
        "app": {
            "host": ("app_host", settings.app_host),
            "port": ("app_port", settings.app_port),
            "env": ("app_env", settings.app_env),
        },
        "artist": {
            "mbid": ("artist_mbid", settings.artist_mbid),
            "name": ("artist_name", settings.artist_name),
        },
        "archive": {
            "collection": ("archive_collection", settings.archive_collection),
            "identifier_prefix": ("archive_identifier_prefix", settings.archive_identifier_prefix),
            "search_rows": ("archive_search_rows", settings.archive_search_rows),
        },
        "index": {
            "years": ("index_years", settings.index_years),
            "max_pages": ("index_max_pages", settings.index_max_pages),
            "page_delay": ("index_page_delay", settings.index_page_delay),
            "year_delay": ("index_year_delay", settings.index_year_delay),
            "rate_limit_cooldown": ("index_rate_limit_cooldown", settings.index_rate_limit_cooldown),
            "path": ("index_path", settings.index_path),
            "max_age_days": ("index_max_age_days", settings.index_max_age_days),
        },
        "logging": {
            "level": ("log_level", settings.log_level),
        },
    }

    overrides: dict = {}
    defaults: dict = {}
    for section, fields in env_values.items():
        for key, (field_name, value) in fields.items():
            target = overrides if field_name in explicit else defaults
            target.setdefault(section, {})[key] = value

    _fill_missing(yaml_config, defaults)
    _deep_merge(yaml_config, overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _fill_missing(base: dict, defaults: dict) -> None:
    """Copy keys from *defaults* that *base* lacks, recursing into dicts."""
    for key, value in defaults.items():
        if key not in base:
            base[key] = value
        elif isinstance(base[key], dict) and isinstance(value, dict):
            _fill_missing(base[key], value)
