"""Configuration module — exports Settings, load_config, and domain tables."""

from src.config.domain_knowledge import era_for_year
from src.config.loader import load_config
from src.config.settings import Settings

__all__ = ["Settings", "era_for_year", "load_config"]
