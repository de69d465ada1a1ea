"""
Pydantic schemas for event API request/response validation.

Provides data validation and serialization for:
- Event creation requests
- Event update requests (partial, with optional optimistic lock token)
- Event API responses (list, single and with relations)

Design:
- Boundary validation mirrors the event table limits
  (title 1-200, description <=10000, location 1-500)
- end_date >= start_date is enforced on create only; updates are not
  cross-checked
- All datetimes are normalized to naive UTC on the way in
- GUIDs are exposed, never internal IDs
"""

from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_validator, model_validator

from backend.src.utils.timestamps import to_utc_naive


DEFAULT_TIMEZONE = "UTC"


# ============================================================================
# Request Schemas
# ============================================================================


class EventCreate(BaseModel):
    """
    Schema for creating a new event.

    Fields:
        team_guid: Owning team GUID (ten_xxx); must be one of the caller's teams
        title: Event title (1-200 characters)
        description: Optional description (up to 10000 characters)
        location: Event location (1-500 characters)
        start_date: Start instant (ISO 8601, offset-aware or UTC)
        end_date: End instant, not before start_date
        timezone: IANA timezone name (empty or missing means "UTC")
    """

    team_guid: str = Field(..., min_length=1, description="Team GUID (ten_xxx)")
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=10000)
    location: str = Field(..., min_length=1, max_length=500)
    start_date: datetime
    end_date: datetime
    timezone: Optional[str] = Field(default=DEFAULT_TIMEZONE, max_length=64)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_instant(cls, v: datetime) -> datetime:
        return to_utc_naive(v)

    @field_validator("timezone")
    @classmethod
    def default_timezone(cls, v: Optional[str]) -> str:
        return v.strip() if v and v.strip() else DEFAULT_TIMEZONE

    @model_validator(mode="after")
    def validate_date_order(self) -> "EventCreate":
        if self.end_date < self.start_date:
            raise ValueError("End date must be after or equal to start date")
        return self

    model_config = {
        "json_schema_extra": {
            "example": {
                "team_guid": "ten_01hgw2bbg00000000000000001",
                "title": "Standup",
                "location": "Room A",
                "start_date": "2025-02-01T10:00:00Z",
                "end_date": "2025-02-01T10:30:00Z",
            }
        }
    }


class EventUpdate(BaseModel):
    """
    Schema for a partial event update.

    Only fields present in the request body are applied. The owning team
    cannot be changed; unknown fields (including team_guid) are ignored.

    updated_at is not a field to write: it is the updated_at value the
    client last read. When present, the update is rejected with 409 if
    the event has been modified since. When absent, the update
    overwrites unconditionally.
    """

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=10000)
    location: Optional[str] = Field(default=None, min_length=1, max_length=500)
    start_date: Optional[datetime] = Field(default=None)
    end_date: Optional[datetime] = Field(default=None)
    timezone: Optional[str] = Field(default=None, max_length=64)

    updated_at: Optional[datetime] = Field(
        default=None,
        description="Last updated_at seen by the client (optimistic lock token)",
    )

    @field_validator("title", "location", "start_date", "end_date", "timezone", mode="before")
    @classmethod
    def reject_null(cls, v):
        # Omit a field to leave it unchanged; only description may be cleared
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator("start_date", "end_date", "updated_at")
    @classmethod
    def normalize_instant(cls, v: Optional[datetime]) -> Optional[datetime]:
        return to_utc_naive(v)

    @field_validator("timezone")
    @classmethod
    def default_timezone(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or DEFAULT_TIMEZONE

    def changes(self) -> dict:
        """Fields explicitly provided by the client, without the lock token."""
        return self.model_dump(exclude_unset=True, exclude={"updated_at"})

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Daily Standup",
                "updated_at": "2025-02-01T09:00:00",
            }
        }
    }


# ============================================================================
# Response Schemas
# ============================================================================


class UserSummary(BaseModel):
    """Creator/updater projection embedded in detailed event responses."""

    guid: str = Field(..., description="User GUID (usr_xxx)")
    name: str
    email: str

    model_config = {"from_attributes": True}


class TeamSummary(BaseModel):
    """Owning team projection embedded in detailed event responses."""

    guid: str = Field(..., description="Team GUID (ten_xxx)")
    name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class EventResponse(BaseModel):
    """
    Event as returned by list, create, get and update.

    created_by and updated_by are user GUIDs; updated_by is null until
    the first update. updated_at is the token to send back on update.
    """

    guid: str = Field(..., description="Event GUID (evt_xxx)")
    team_guid: str
    title: str
    description: Optional[str] = None
    location: str
    start_date: datetime
    end_date: datetime
    timezone: str
    created_by: str
    updated_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {
        "json_schema_extra": {
            "example": {
                "guid": "evt_01hgw2bbg00000000000000002",
                "team_guid": "ten_01hgw2bbg00000000000000001",
                "title": "Standup",
                "description": None,
                "location": "Room A",
                "start_date": "2025-02-01T10:00:00",
                "end_date": "2025-02-01T10:30:00",
                "timezone": "UTC",
                "created_by": "usr_01hgw2bbg00000000000000003",
                "updated_by": None,
                "created_at": "2025-01-20T08:00:00",
                "updated_at": "2025-01-20T08:00:00",
            }
        }
    }


class EventDetailResponse(EventResponse):
    """Event with its creator, last updater and owning team embedded."""

    creator: UserSummary
    updater: Optional[UserSummary] = None
    team: TeamSummary


class EventListResponse(BaseModel):
    """List envelope for GET /events."""

    events: List[EventResponse]
