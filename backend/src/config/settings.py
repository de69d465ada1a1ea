"""
Application settings for the events tracker.

Everything comes from EVENTS_* environment variables, optionally through
a .env file in the working directory.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """
    Environment Variables:
        EVENTS_DB_URL: SQLAlchemy database URL (default: local SQLite file)
        EVENTS_CORS_ORIGINS: Comma-separated allowed CORS origins
        EVENTS_API_PREFIX: Prefix for the versioned API routes
        EVENTS_REQUIRE_UPDATE_TOKEN: Reject event updates without updated_at
            instead of force-overwriting (default: false)
        EVENTS_AUTH_RATE_LIMIT: slowapi limit for login and register
        EVENTS_ENV: development, test or production
        EVENTS_LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL
        EVENTS_LOG_DIR: Directory for the rotating JSON logs in production
    """

    database_url: str = Field(
        default="sqlite:///./events.db",
        validation_alias="EVENTS_DB_URL",
    )
    cors_origins: str = Field(
        default="http://localhost:5173",
        validation_alias="EVENTS_CORS_ORIGINS",
    )
    api_prefix: str = Field(default="/api/v1", validation_alias="EVENTS_API_PREFIX")

    require_update_token: bool = Field(
        default=False,
        validation_alias="EVENTS_REQUIRE_UPDATE_TOKEN",
    )
    auth_rate_limit: str = Field(default="10/minute", validation_alias="EVENTS_AUTH_RATE_LIMIT")

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        validation_alias="EVENTS_ENV",
    )
    log_level: str = Field(default="INFO", validation_alias="EVENTS_LOG_LEVEL")
    log_dir: str = Field(default="logs", validation_alias="EVENTS_LOG_DIR")

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("environment", mode="before")
    @classmethod
    def lowercase_environment(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def cors_origins_list(self) -> List[str]:
        """CORS origins split on commas, blanks dropped."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache()
def get_settings() -> AppSettings:
    return AppSettings()
