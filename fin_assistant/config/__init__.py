"""Configuration package."""

from fin_assistant.config.settings import (
    BUNDLED_TAX_SLABS_PATH,
    AppSettings,
    GeminiSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "BUNDLED_TAX_SLABS_PATH",
    "AppSettings",
    "GeminiSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
