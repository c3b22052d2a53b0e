"""Configuration system using pydantic-settings with environment variable loading."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class SanitizerSettings(BaseSettings):
    """Candle sanitizing defaults.

    All fields configurable via SANITIZER_ environment variable prefix.
    """

    model_config = SettingsConfigDict(env_prefix="SANITIZER_")

    default_timeframe: str = "1m"
    default_timezone: str = "UTC"  # applied when timeframe text has no :zone suffix
    validate_batches: bool = True  # run invariant checks before sanitizing


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings.

    ``log_level`` and ``log_format`` are read from LOG_LEVEL and LOG_FORMAT.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    sanitizer: SanitizerSettings = SanitizerSettings()
