"""Configuration package."""

from fintrack.config.settings import (
    AppSettings,
    GeminiSettings,
    GoogleDriveSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GeminiSettings",
    "GoogleDriveSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
