"""
Configuration Management for the Financial Assistant

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what external dependencies exist and
ensures all required configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


BUNDLED_TAX_SLABS_PATH = (
    Path(__file__).resolve().parent.parent / "tax" / "data" / "tax_slabs_india_2024_25.json"
)


class GeminiSettings(BaseSettings):
    """Google AI (Gemini) text generation configuration."""
    
    model_config = SettingsConfigDict(
        env_prefix="GOOGLE_AI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    api_key: str = Field(
        ...,
        description="Google AI API key (GOOGLE_AI_API_KEY)"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=1024,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Model temperature (lower = more deterministic)"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="FIN_ASSISTANT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Logging
    log_level: str = Field(
        default="WARNING",
        description="Log level for the structured logger (INFO shows audit events)"
    )
    
    # Storage locations
    data_dir: str = Field(
        default="data",
        description="Root directory for stored data"
    )
    context_dir_name: str = Field(
        default="context",
        description="Sub-directory of data_dir holding transaction contexts"
    )
    tax_slabs_path: Optional[str] = Field(
        default=None,
        description="Override path to the tax slab JSON file"
    )
    
    # Query defaults
    default_age: int = Field(
        default=30,
        ge=0,
        le=150,
        description="Age assumed when a tax query does not give one"
    )
    default_tax_regime: str = Field(
        default="new",
        pattern="^(old|new)$",
        description="Tax regime assumed when a tax query does not give one"
    )
    
    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Log levels are upper-case names understood by the logging module."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level
    
    @property
    def context_dir(self) -> Path:
        """Directory where ingested transaction contexts are stored."""
        return Path(self.data_dir) / self.context_dir_name
    
    @property
    def resolved_tax_slabs_path(self) -> Path:
        """Slab file in use: the override if set, else the bundled table."""
        if self.tax_slabs_path:
            return Path(self.tax_slabs_path)
        return BUNDLED_TAX_SLABS_PATH


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Sub-settings are loaded lazily so the tax calculator and the
    # analysis engine work without an AI key configured.
    
    @property
    def gemini(self) -> GeminiSettings:
        return GeminiSettings()
    
    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}
    
    settings = get_settings()
    
    try:
        _ = settings.gemini
        results["gemini"] = True
    except Exception as e:
        results["gemini"] = False
        results["gemini_error"] = str(e)
    
    try:
        app_settings = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)
        return results
    
    slabs_path = app_settings.resolved_tax_slabs_path
    results["tax_slabs"] = slabs_path.exists()
    if not results["tax_slabs"]:
        results["tax_slabs_error"] = f"Tax slab file not found at {slabs_path}"
    
    return results
