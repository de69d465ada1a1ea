"""
Data-access layer.

Repositories wrap the SQLAlchemy session for a single aggregate and never
make authorization decisions; services own those.
"""

from backend.src.repositories.event_repository import EventRepository

__all__ = ["EventRepository"]
