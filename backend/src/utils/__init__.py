"""
Utility modules for the events tracker backend.

This package contains shared utilities used across the application:
- logging_config: Named structured loggers (api, services, auth, db)
- timestamps: Second-resolution naive UTC timestamps for the event store
"""

from backend.src.utils.timestamps import utc_now, to_utc_naive, next_updated_at

__all__ = [
    "utc_now",
    "to_utc_naive",
    "next_updated_at",
]
