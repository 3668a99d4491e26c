"""Application configuration."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from slack_monitor.state import DEFAULT_STATE_PATH


class Settings(BaseSettings):
    """Environment-driven settings validated at startup."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    slack_xoxc_token: str = Field(..., min_length=1, alias="SLACK_XOXC_TOKEN")
    slack_xoxd_token: str = Field(..., min_length=1, alias="SLACK_XOXD_TOKEN")
    slack_api_url: str = Field(default="https://slack.com/api", alias="SLACK_API_URL")
    ntfy_topic: str = Field(..., min_length=1, alias="NTFY_TOPIC")
    ntfy_base_url: str = Field(default="https://ntfy.sh", alias="NTFY_BASE_URL")
    poll_interval_seconds: float = Field(default=60.0, ge=1.0, alias="POLL_INTERVAL_SECONDS")
    monitor_dms_only: bool = Field(default=True, alias="MONITOR_DMS_ONLY")
    state_path: Path = Field(default=DEFAULT_STATE_PATH, alias="STATE_PATH")
    # Includes the trailing "..." when a message is cut.
    notification_preview_chars: int = Field(default=500, ge=4, alias="NOTIFICATION_PREVIEW_CHARS")
    notification_min_interval_seconds: float = Field(
        default=2.0,
        ge=0.0,
        alias="NOTIFICATION_MIN_INTERVAL_SECONDS",
    )
    request_timeout_seconds: float = Field(default=30.0, gt=0.0, alias="REQUEST_TIMEOUT_SECONDS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    @field_validator("monitor_dms_only")
    @classmethod
    def _dms_only_supported(cls, value: bool) -> bool:
        if not value:
            raise ValueError("only direct-message monitoring is supported (MONITOR_DMS_ONLY must be true)")
        return value

    @field_validator("state_path")
    @classmethod
    def _expand_state_path(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"unknown log level {value!r}")
        return level


def load_settings() -> Settings:
    """Load and validate settings."""

    return Settings()
