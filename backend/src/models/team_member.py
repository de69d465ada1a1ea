"""
Team membership model.

Associates a user with a team under a role. The role is stored for
display and future use only: event access is granted by membership
alone, whatever the role.
"""

import enum

from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.utils.timestamps import utc_now


class TeamRole(enum.Enum):
    """Role of a user within a team."""
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class TeamMember(Base):
    """
    Ternary relation (user, team, role).

    Attributes:
        id: Primary key (internal)
        user_id: Member user (FK, cascade)
        team_id: Team (FK, cascade)
        role: TeamRole (default MEMBER)
        joined_at: When the membership was created

    Constraints:
        - (user_id, team_id) is unique
    """

    __tablename__ = "team_members"
    __table_args__ = (
        UniqueConstraint("user_id", "team_id", name="uq_team_members_user_team"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    team_id = Column(
        Integer,
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role = Column(
        Enum(TeamRole, values_callable=lambda e: [m.value for m in e], name="team_role"),
        nullable=False,
        default=TeamRole.MEMBER,
    )
    joined_at = Column(DateTime, default=utc_now, nullable=False)

    user = relationship("User", back_populates="memberships")
    team = relationship("Team", back_populates="members")

    def __repr__(self) -> str:
        return (
            f"<TeamMember(user_id={self.user_id}, team_id={self.team_id}, "
            f"role={self.role.value if self.role else None})>"
        )
