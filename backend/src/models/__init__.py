"""
SQLAlchemy models for the events tracker.

This module provides the declarative base class and imports all models
to ensure they are registered with SQLAlchemy's metadata.
"""

from sqlalchemy.orm import declarative_base

# All models inherit from this Base class
Base = declarative_base()


# Import all models here so they are registered with Base.metadata
# This is required for Alembic autogenerate to detect models
from backend.src.models.user import User
from backend.src.models.user_session import UserSession
from backend.src.models.team import Team
from backend.src.models.team_member import TeamMember, TeamRole
from backend.src.models.event import Event

__all__ = [
    "Base",
    "User",
    "UserSession",
    "Team",
    "TeamMember",
    "TeamRole",
    "Event",
]
