"""Configuration management for the calendar engine."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .utils.date_utils import is_valid_timezone

load_dotenv()


class AppConfig(BaseSettings):
    """Application configuration."""

    # Logging
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_file: Optional[Path] = Field(default=None, validation_alias="LOG_FILE")

    # Calendars
    default_timezone: str = Field(
        default="America/New_York", validation_alias="DEFAULT_TIMEZONE"
    )

    # Conflict policy
    auto_decline: bool = Field(default=False, validation_alias="AUTO_DECLINE")
    reject_conflicting_edits: bool = Field(
        default=True, validation_alias="REJECT_CONFLICTING_EDITS"
    )

    # CSV export
    export_dir: Path = Field(default=Path("."), validation_alias="EXPORT_DIR")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        env_parse_none_str="",  # Treat empty string as None
    )

    @field_validator("default_timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        if not is_valid_timezone(value):
            raise ValueError(f"unknown time zone {value!r}")
        return value


# Global config instance
config = AppConfig()
