from pathlib import Path
from typing import Literal

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_database_url() -> str:
    """Default SQLite database next to the project root (local development only)."""
    db_path = Path(__file__).parent.parent.parent / "coachsync.db"
    return f"sqlite:///{db_path.resolve()}"


class Settings(BaseSettings):
    log_level: str = Field(default="INFO")
    log_file: str | None = Field(default=None)
    log_rotation: str = Field(default="10 MB", description="loguru rotation for the file sink")
    log_retention: str = Field(default="7 days", description="loguru retention for the file sink")
    log_colorize: bool = Field(default=True)
    store_backend: Literal["memory", "sql"] = Field(
        default="memory",
        description="Document store adapter used by the API and CLI",
    )
    database_url: str = Field(default_factory=get_database_url)
    recent_matches_limit: int = Field(
        default=10,
        ge=1,
        description="Prior matches considered for trend analysis on submission",
    )
    coach_matches_limit: int = Field(default=50, ge=1)
    recent_activity_limit: int = Field(default=10, ge=1)
    debounce_delay_ms: int = Field(default=300, ge=0)
    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=8000)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="COACHSYNC_",
        extra="ignore",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate that log level is one of the standard logging levels."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_value = value.upper()
        if upper_value not in valid_levels:
            logger.warning(f"Invalid LOG_LEVEL '{value}'. Valid levels are: {', '.join(sorted(valid_levels))}. Defaulting to INFO.")
            return "INFO"
        return upper_value

    @field_validator("database_url")
    @classmethod
    def log_sqlite_usage(cls, value: str) -> str:
        if value.startswith("sqlite") and ":memory:" not in value:
            logger.debug(f"Using SQLite document table (local development): {value}")
        return value


settings = Settings()
