"""
Session cookie and server-side session lifetime configuration.

The signed cookie (Starlette SessionMiddleware) carries only a session
GUID. Whether that GUID still grants access is decided by the sessions
table, whose expiry uses the same SESSION_MAX_AGE as the cookie.
"""

import secrets
from datetime import timedelta
from functools import lru_cache
from typing import Any, Dict, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


MIN_SECRET_KEY_LENGTH = 32


class SessionSettings(BaseSettings):
    """
    Environment Variables:
        SESSION_SECRET_KEY: Cookie signing key (random per process when unset)
        SESSION_MAX_AGE: Session lifetime in seconds (default: 30 days)
        SESSION_COOKIE_NAME: Cookie name (default: events_session)
        SESSION_SAME_SITE: lax, strict or none
        SESSION_HTTPS_ONLY: Send the cookie over HTTPS only
        SESSION_PATH: Cookie path
    """

    secret_key: str = Field(default="", validation_alias="SESSION_SECRET_KEY")
    max_age: int = Field(
        default=30 * 24 * 60 * 60,
        ge=60,
        le=90 * 24 * 60 * 60,
        validation_alias="SESSION_MAX_AGE",
    )
    cookie_name: str = Field(default="events_session", validation_alias="SESSION_COOKIE_NAME")
    same_site: Literal["lax", "strict", "none"] = Field(default="lax", validation_alias="SESSION_SAME_SITE")
    https_only: bool = Field(default=False, validation_alias="SESSION_HTTPS_ONLY")
    path: str = Field(default="/", validation_alias="SESSION_PATH")

    class Config:
        env_file = ".env"
        extra = "ignore"

    @field_validator("secret_key")
    @classmethod
    def check_secret_key_length(cls, v: str) -> str:
        if v and len(v) < MIN_SECRET_KEY_LENGTH:
            raise ValueError(
                f"SESSION_SECRET_KEY must be at least {MIN_SECRET_KEY_LENGTH} characters"
            )
        return v

    @property
    def lifetime(self) -> timedelta:
        """How long a freshly issued or extended session stays valid."""
        return timedelta(seconds=self.max_age)

    def middleware_options(self, secret_key: str) -> Dict[str, Any]:
        """Keyword arguments for SessionMiddleware."""
        return {
            "secret_key": secret_key,
            "session_cookie": self.cookie_name,
            "max_age": self.max_age,
            "path": self.path,
            "same_site": self.same_site,
            "https_only": self.https_only,
        }


@lru_cache()
def get_session_settings() -> SessionSettings:
    return SessionSettings()


def generate_secret_key() -> str:
    """Random URL-safe signing key for processes without SESSION_SECRET_KEY."""
    return secrets.token_urlsafe(MIN_SECRET_KEY_LENGTH)
