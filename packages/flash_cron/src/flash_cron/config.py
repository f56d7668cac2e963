"""
Settings for the Flash Cron engine.
"""

import logging
import zoneinfo

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CronSettings(BaseSettings):
    """
    Runtime settings for cron parsing and next-fire calculation.
    Values are read from the environment or a local .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    # --- Cron Engine ---
    # Zone used when an expression is built without one.
    CRON_DEFAULT_TIMEZONE: str = "UTC"
    # How far ahead the calculator searches before declaring a schedule unsatisfiable.
    # Four years covers the leap-year cycle.
    CRON_SEARCH_HORIZON_YEARS: int = 4

    @model_validator(mode="after")
    def validate_cron(self) -> "CronSettings":
        """Rejects settings the engine cannot run with."""
        if self.CRON_SEARCH_HORIZON_YEARS < 1:
            raise ValueError("CRON_SEARCH_HORIZON_YEARS must be at least 1.")
        try:
            zoneinfo.ZoneInfo(self.CRON_DEFAULT_TIMEZONE)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
            msg = f"CRON_DEFAULT_TIMEZONE is not a known time zone: {self.CRON_DEFAULT_TIMEZONE}"
            raise ValueError(msg) from e
        if not isinstance(logging.getLevelName(self.LOG_LEVEL.upper()), int):
            msg = f"LOG_LEVEL is not a logging level: {self.LOG_LEVEL}"
            raise ValueError(msg)
        return self

    def default_timezone(self) -> zoneinfo.ZoneInfo:
        return zoneinfo.ZoneInfo(self.CRON_DEFAULT_TIMEZONE)


# Singleton instance for library use
cron_settings = CronSettings()
