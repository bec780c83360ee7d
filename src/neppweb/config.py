"""Configuration management for the neppweb application.

This module loads configuration from environment variables with sensible defaults.
It uses dotenv to load from .env files and provides a centralized config object.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

from nepp_core.filters import TimeWindow

logger = logging.getLogger(__name__)


class AppConfig(BaseModel):
    """Application configuration loaded from environment variables."""

    # Data Configuration
    portal_data_file: str = Field(
        description="Path to the JSON seed file for the in-memory document store"
    )

    # Calendar Configuration
    upcoming_events_limit: int = Field(
        description="Number of entries shown in the upcoming events list"
    )
    default_time_window: TimeWindow = Field(
        description="Time window applied to the events list on load"
    )

    # Notification Configuration
    notification_poll_interval: float = Field(
        description="Seconds between unread notification count checks"
    )

    # Logging Configuration
    log_level: str = Field(description="Logging level")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        level = v.upper()
        if level not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return level

    @field_validator("notification_poll_interval")
    @classmethod
    def validate_poll_interval(cls, v: float) -> float:
        """Validate poll interval is positive."""
        if v <= 0:
            raise ValueError("notification_poll_interval must be positive")
        return v

    @field_validator("upcoming_events_limit")
    @classmethod
    def validate_upcoming_limit(cls, v: int) -> int:
        """Validate upcoming events limit is positive."""
        if v <= 0:
            raise ValueError("upcoming_events_limit must be positive")
        return v


def load_default_config() -> AppConfig:
    """Load configuration from environment variables with defaults."""
    # Load environment variables from .env file
    load_dotenv()

    config = AppConfig(
        portal_data_file=os.getenv("PORTAL_DATA_FILE", "portal_data.json"),
        upcoming_events_limit=int(os.getenv("UPCOMING_EVENTS_LIMIT", "5")),
        default_time_window=os.getenv("DEFAULT_TIME_WINDOW", TimeWindow.ALL.value),
        notification_poll_interval=float(
            os.getenv("NOTIFICATION_POLL_INTERVAL", "30")
        ),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )
    logger.debug(f"Loaded configuration: {config.model_dump()}")
    return config


# Singleton config instance
_config: Optional[AppConfig] = None


def get_current_config() -> AppConfig:
    """Get the current application configuration (singleton)."""
    global _config
    if _config is None:
        _config = load_default_config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next access reloads it."""
    global _config
    _config = None
