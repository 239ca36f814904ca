"""Configuration package."""

from shopsahai.config.settings import (
    AppSettings,
    GoogleSheetsSettings,
    Settings,
    VoiceSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "GoogleSheetsSettings",
    "Settings",
    "VoiceSettings",
    "get_settings",
    "validate_all_settings",
]
