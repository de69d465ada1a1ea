"""
Event model for team-scoped calendar events.

Events belong to exactly one team (team_id never changes after creation)
and carry audit attribution through AuditMixin.

Design Rationale:
- updated_at is the optimistic lock token: it strictly increases on every
  successful update (second resolution, see utils.timestamps)
- No ordering constraint between start_date and end_date at the storage
  level; create-time validation happens in the request schema
- Hard delete only; there is no soft-delete state
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin, AuditMixin
from backend.src.utils.timestamps import utc_now


class Event(Base, GuidMixin, AuditMixin):
    """
    Calendar event owned by a team.

    Attributes:
        id: Primary key (internal, never exposed)
        guid: GUID string property (evt_xxx)
        team_id: Owning team (FK, cascade on team delete)
        title: 1-200 characters
        description: Optional, up to 10000 characters
        location: 1-500 characters
        start_date: Start instant (naive UTC)
        end_date: End instant (naive UTC)
        timezone: IANA timezone name for display (default "UTC")
        created_by_user_id: Creator (immutable, from AuditMixin)
        updated_by_user_id: Last updater, NULL until first update
        created_at: Creation timestamp (immutable)
        updated_at: Last modification timestamp (optimistic lock token)

    Indexes:
        - team_id (list by team set)
        - start_date (ordering)
    """

    __tablename__ = "events"

    GUID_PREFIX = "evt"

    TITLE_MAX_LENGTH = 200
    DESCRIPTION_MAX_LENGTH = 10000
    LOCATION_MAX_LENGTH = 500

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(
        Integer,
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    description = Column(Text, nullable=True)
    location = Column(String(LOCATION_MAX_LENGTH), nullable=False)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False)
    timezone = Column(String(64), nullable=False, default="UTC")

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, nullable=False)

    team = relationship("Team", back_populates="events")

    def __repr__(self) -> str:
        return (
            f"<Event(id={self.id}, team_id={self.team_id}, "
            f"title='{self.title}', start_date={self.start_date})>"
        )

    def __str__(self) -> str:
        return self.title
