"""
Configuration Management for WealthWise

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


class StorageSettings(BaseSettings):
    """Local key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WEALTHWISE_STORAGE_",
        extra="ignore"
    )

    backend: str = Field(
        default="json",
        pattern="^(json|memory)$",
        description="Storage backend: json (file on disk) or memory"
    )
    data_dir: Path = Field(
        default=Path.home() / ".wealthwise",
        description="Directory holding the local data file"
    )
    file_name: str = Field(
        default="wealthwise.json",
        min_length=1,
        description="Name of the JSON file inside data_dir"
    )

    @property
    def file_path(self) -> Path:
        return self.data_dir / self.file_name


class GeminiSettings(BaseSettings):
    """Gemini LLM configuration for the financial advisor."""

    model_config = SettingsConfigDict(
        env_prefix="GEMINI_",
        extra="ignore"
    )

    api_key: str = Field(
        ...,
        description="Gemini API key"
    )
    model_name: str = Field(
        default="gemini-1.5-flash",
        description="Gemini model to use"
    )
    max_tokens: int = Field(
        default=512,
        ge=100,
        le=8192,
        description="Maximum tokens in response"
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Model temperature"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Display
    currency_symbol: str = Field(
        default="$",
        max_length=3,
        description="Symbol prefixed to amounts in reports and the UI"
    )
    recent_limit: int = Field(
        default=8,
        ge=1,
        le=100,
        description="How many records the home page shows"
    )

    # Budget thresholds (percent of monthly limit)
    budget_warning_percent: float = Field(
        default=80.0,
        gt=0.0,
        description="Spend percentage at which a budget warning appears"
    )
    budget_over_percent: float = Field(
        default=100.0,
        gt=0.0,
        description="Spend percentage at which a budget counts as exceeded"
    )

    # Statistics
    week_days: int = Field(
        default=7,
        ge=1,
        le=31,
        description="Length of the rolling 'week' statistics window in days"
    )

    @field_validator("budget_over_percent")
    @classmethod
    def over_not_below_warning(cls, v: float, info) -> float:
        warning = info.data.get("budget_warning_percent")
        if warning is not None and v < warning:
            raise ValueError("budget_over_percent cannot be below budget_warning_percent")
        return v


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

    # Note: These are loaded lazily to allow partial configuration
    # (the app runs without a Gemini key; only insights are disabled)

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

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
    results: dict = {}

    settings = get_settings()

    for name in ("storage", "gemini", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results


def gemini_settings_or_none() -> Optional[GeminiSettings]:
    """Gemini settings if an API key is configured, else None."""
    try:
        return get_settings().gemini
    except Exception:
        return None
