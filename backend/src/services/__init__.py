"""
Service layer for business logic.

This module exports all service classes for use in API endpoints.
"""

from backend.src.services.event_service import EventService, can_access, can_create
from backend.src.services.team_service import TeamService
from backend.src.services.auth_service import AuthService, AuthenticationError
from backend.src.services.exceptions import (
    ServiceError,
    NotFoundError,
    TeamNotFoundError,
    EventNotFoundError,
    AccessDeniedError,
    ConflictError,
    ValidationError,
)

__all__ = [
    "EventService",
    "can_access",
    "can_create",
    "TeamService",
    "AuthService",
    "AuthenticationError",
    "ServiceError",
    "NotFoundError",
    "TeamNotFoundError",
    "EventNotFoundError",
    "AccessDeniedError",
    "ConflictError",
    "ValidationError",
]
