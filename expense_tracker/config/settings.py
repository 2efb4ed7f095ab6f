"""
Configuration Management for Expense Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The only external resource is the backing file, so most knobs are about
where it lives and how hard we try to write it.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Flat-file storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="EXPENSES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_file: Path = Field(
        default=Path("expenses.txt"),
        description="Path to the backing file, relative to the working directory"
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of the backing file"
    )
    write_retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="How many times a failed whole-file write is attempted"
    )

    @field_validator('encoding')
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Reject encodings Python does not know about."""
        import codecs
        try:
            codecs.lookup(v)
        except LookupError:
            raise ValueError(f"Unknown text encoding: {v}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPENSES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    log_level: str = Field(
        default="INFO",
        description="Minimum level for local logs"
    )
    log_format: str = Field(
        default="json",
        pattern="^(json|console)$",
        description="Render logs as JSON lines or human readable console output"
    )
    currency_symbol: str = Field(
        default="$",
        max_length=5,
        description="Symbol shown in front of amounts in the UI"
    )
    audit_history_size: int = Field(
        default=200,
        ge=1,
        le=10000,
        description="How many audit events are kept in memory for display"
    )

    @field_validator('log_level')
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {v}")
        return level


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

    # Sub-settings are loaded lazily so one broken group does not hide the others

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

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

    Returns a dict of {setting_name: is_valid}, plus a
    "<name>_error" entry for every group that failed to load.
    """
    results = {}

    settings = get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
