"""Configuration package."""

from bookkeeping.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    MindeeSettings,
    Settings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "MindeeSettings",
    "Settings",
    "StorageSettings",
    "get_settings",
    "validate_all_settings",
]
