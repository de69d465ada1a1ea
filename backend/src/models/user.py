"""
User model for authenticated user management.

Users represent people who can access the system. A user may belong to
any number of teams through TeamMember rows and owns zero or more
server-side sessions.

Design Rationale:
- Email is globally unique (login identifier for the passwordless flow)
- hashed_password is reserved for a future password flow and stays NULL
- Team membership lives in team_members (many-to-many with a role)
"""

from typing import TYPE_CHECKING

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin
from backend.src.utils.timestamps import utc_now

if TYPE_CHECKING:
    from backend.src.models.team_member import TeamMember
    from backend.src.models.user_session import UserSession


class User(Base, GuidMixin):
    """
    User model representing an authenticated person.

    Attributes:
        id: Primary key (internal, never exposed)
        uuid: UUIDv7 for external identification (inherited from GuidMixin)
        guid: GUID string property (usr_xxx, inherited from GuidMixin)
        email: Login email (globally unique)
        name: Display name
        hashed_password: Unused by the passwordless flow (always NULL)
        created_at: Creation timestamp
        updated_at: Last update timestamp

    Relationships:
        memberships: TeamMember rows for this user (one-to-many)
        sessions: Server-side sessions (one-to-many)
    """

    __tablename__ = "users"

    GUID_PREFIX = "usr"

    id = Column(Integer, primary_key=True, autoincrement=True)

    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    hashed_password = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    memberships = relationship(
        "TeamMember",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    sessions = relationship(
        "UserSession",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"

    def __str__(self) -> str:
        return self.name
