"""Configuration management for entrylaunch."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogProfile = Literal["default", "rich"]


class Settings(BaseSettings):
    """Launcher settings, read from ENTRYLAUNCH_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ENTRYLAUNCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Entry resolution
    entry_function: str = Field(default="main", description="Name of the entry function on the unit")
    search_path: list[Path] = Field(
        default_factory=lambda: [Path(".")],
        description="Directories put on sys.path before resolving the entry unit",
    )

    # Stdin notification
    notify_stdin: bool = Field(default=True, description="Emit control markers on stdin reads")
    notify_interval_ms: int = Field(default=100, description="Minimum gap between two control markers")

    # Logging Configuration
    log_level: str = Field(default="WARNING", description="Log level")
    log_profile: LogProfile = Field(default="default", description="Log output profile")

    @field_validator("entry_function")
    @classmethod
    def _check_entry_function(cls, value: str) -> str:
        value = value.strip()
        if not value.isidentifier():
            raise ValueError(f"entry function must be an identifier, got {value!r}")
        return value

    @field_validator("notify_interval_ms")
    @classmethod
    def _check_interval(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("notify interval must be positive")
        return value


def load_settings() -> Settings:
    """Load launcher settings from the environment and `.env`."""
    return Settings()
