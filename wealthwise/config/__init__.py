"""Configuration package."""

from wealthwise.config.settings import (
    AppSettings,
    GeminiSettings,
    Settings,
    StorageSettings,
    gemini_settings_or_none,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GeminiSettings",
    "Settings",
    "StorageSettings",
    "gemini_settings_or_none",
    "get_settings",
    "validate_all_settings",
]
