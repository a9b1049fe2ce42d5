"""Configuration package."""

from fintrack.config.settings import (
    AppSettings,
    LedgerSettings,
    Settings,
    VATSettings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AppSettings",
    "LedgerSettings",
    "Settings",
    "VATSettings",
    "get_settings",
    "validate_all_settings",
]
