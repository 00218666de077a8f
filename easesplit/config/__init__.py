"""Configuration package."""

from easesplit.config.settings import (
    AppSettings,
    Settings,
    TesseractSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "Settings",
    "TesseractSettings",
    "get_settings",
    "validate_all_settings",
]
