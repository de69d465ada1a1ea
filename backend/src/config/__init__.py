"""
Configuration module for the events tracker backend.

Provides centralized configuration for:
- Application settings (database, CORS, API prefix, update lock policy)
- Session management
"""

from backend.src.config.settings import AppSettings, get_settings
from backend.src.config.session import SessionSettings, get_session_settings

__all__ = [
    "AppSettings",
    "get_settings",
    "SessionSettings",
    "get_session_settings",
]
