"""
Team model for team-scoped event access.

Teams are the access boundary for events: every event belongs to exactly
one team, and a user sees the events of every team they are a member of.

Design Rationale:
- Membership is many-to-many (team_members) with a stored role
- Deleting a team cascades to its memberships and events
"""

from typing import TYPE_CHECKING

from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.utils.timestamps import utc_now

if TYPE_CHECKING:
    from backend.src.models.team_member import TeamMember
    from backend.src.models.event import Event


class Team(Base, GuidMixin):
    """
    Team model representing a group that owns events.

    Attributes:
        id: Primary key (internal, never exposed)
        uuid: UUIDv7 for external identification (inherited from GuidMixin)
        guid: GUID string property (ten_xxx, inherited from GuidMixin)
        name: Team display name
        description: Optional description
        created_at: Creation timestamp
        updated_at: Last update timestamp

    Relationships:
        members: TeamMember rows (one-to-many, cascade delete)
        events: Events owned by the team (one-to-many, cascade delete)
    """

    __tablename__ = "teams"

    GUID_PREFIX = "ten"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    members = relationship(
        "TeamMember",
        back_populates="team",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    events = relationship(
        "Event",
        back_populates="team",
        lazy="dynamic",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name='{self.name}')>"

    def __str__(self) -> str:
        return self.name
