"""Configuration package."""

from src.config.settings import (
    AppSettings,
    AuthSettings,
    Settings,
    StorageSettings,
    TaxSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "AuthSettings",
    "Settings",
    "StorageSettings",
    "TaxSettings",
    "get_settings",
    "validate_all_settings",
]
