"""Configuration package."""

from finance_tracker.config.settings import (
    GoogleSheetsSettings,
    LedgerSettings,
    ProfileSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "GoogleSheetsSettings",
    "LedgerSettings",
    "ProfileSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
