"""Configuration module with YAML and environment variable support."""

from .settings import DatabaseProvider, Settings, get_settings


__all__ = [
    "DatabaseProvider",
    "Settings",
    "get_settings",
]
