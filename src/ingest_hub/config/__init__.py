"""Configuration management for ingest_hub.

Usage:
    >>> from ingest_hub.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.DATABASE_URL)
"""

from ingest_hub.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
