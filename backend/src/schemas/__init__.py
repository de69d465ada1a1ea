"""
Pydantic schemas for API request/response validation.

This module exports all schema classes for use in API endpoints.
"""

from backend.src.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventDetailResponse,
    EventListResponse,
    UserSummary,
    TeamSummary,
)

__all__ = [
    "EventCreate",
    "EventUpdate",
    "EventResponse",
    "EventDetailResponse",
    "EventListResponse",
    "UserSummary",
    "TeamSummary",
]
