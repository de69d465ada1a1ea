"""
Team service for managing teams and memberships.

Provides business logic for creating teams, adding members and resolving
the set of teams a user belongs to. That set is what the event service
authorizes against, so it is resolved fresh from team_members on every
request rather than cached in the session.

Design:
- Membership grants access regardless of role
- A user may belong to any number of teams (including none)
- Team GUIDs (ten_xxx) are the team identifiers handed to the event service
"""

from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backend.src.models import Team, TeamMember, TeamRole, User
from backend.src.services.exceptions import (
    ConflictError,
    TeamNotFoundError,
    ValidationError,
)
from backend.src.utils.logging_config import get_logger


logger = get_logger("services")


TEAM_NAME_MAX_LENGTH = 200
TEAM_DESCRIPTION_MAX_LENGTH = 1000


class TeamService:
    """
    Service for managing teams.

    Usage:
        >>> service = TeamService(db_session)
        >>> team = service.create_team(name="Engineering Team")
        >>> service.add_member(team, user, TeamRole.OWNER)
        >>> service.resolve_team_ids(user.id)
        ['ten_01hgw2bbg...']
    """

    def __init__(self, db: Session):
        """
        Initialize team service.

        Args:
            db: SQLAlchemy database session
        """
        self.db = db

    def create_team(self, name: str, description: Optional[str] = None) -> Team:
        """
        Create a new team.

        Args:
            name: Team display name (1-200 characters)
            description: Optional description (up to 1000 characters)

        Returns:
            Created Team instance

        Raises:
            ValidationError: If name is empty or a field is too long
        """
        if not name or not name.strip():
            raise ValidationError("Team name cannot be empty", field="name")

        name = name.strip()
        if len(name) > TEAM_NAME_MAX_LENGTH:
            raise ValidationError(
                f"Team name cannot exceed {TEAM_NAME_MAX_LENGTH} characters",
                field="name",
            )
        if description is not None and len(description) > TEAM_DESCRIPTION_MAX_LENGTH:
            raise ValidationError(
                f"Team description cannot exceed {TEAM_DESCRIPTION_MAX_LENGTH} characters",
                field="description",
            )

        team = Team(name=name, description=description)
        self.db.add(team)
        self.db.commit()
        self.db.refresh(team)

        logger.info(
            f"Created team: {team.name} ({team.guid})",
            extra={"event": "team.create.success", "team_guid": team.guid},
        )
        return team

    def get_by_guid(self, guid: str) -> Team:
        """
        Get a team by GUID.

        Args:
            guid: Team GUID (ten_xxx format)

        Returns:
            Team instance

        Raises:
            TeamNotFoundError: If the GUID is malformed or no team matches
        """
        try:
            uuid_value = Team.parse_guid(guid)
        except ValueError:
            raise TeamNotFoundError(guid)

        team = self.db.query(Team).filter(Team.uuid == uuid_value).first()
        if not team:
            raise TeamNotFoundError(guid)
        return team

    def add_member(
        self,
        team: Team,
        user: User,
        role: TeamRole = TeamRole.MEMBER,
    ) -> TeamMember:
        """
        Add a user to a team.

        Args:
            team: Team to join
            user: User joining
            role: Stored role (default MEMBER)

        Returns:
            Created TeamMember row

        Raises:
            ConflictError: If the user is already a member of the team
        """
        membership = TeamMember(team_id=team.id, user_id=user.id, role=role)
        self.db.add(membership)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"User {user.guid} is already a member of team {team.guid}")

        self.db.refresh(membership)
        logger.info(
            f"Added {user.email} to team {team.name} as {role.value}",
            extra={
                "event": "team.member.added",
                "team_guid": team.guid,
                "user_guid": user.guid,
                "role": role.value,
            },
        )
        return membership

    def list_for_user(self, user_id: int) -> List[Team]:
        """Teams the user belongs to, ordered by name."""
        return (
            self.db.query(Team)
            .join(TeamMember, TeamMember.team_id == Team.id)
            .filter(TeamMember.user_id == user_id)
            .order_by(Team.name.asc())
            .all()
        )

    def resolve_team_ids(self, user_id: Optional[int]) -> List[str]:
        """
        Resolve the GUIDs of every team a user belongs to.

        Args:
            user_id: Internal user ID, or None for an anonymous caller

        Returns:
            Team GUIDs (empty for None or a user without memberships)
        """
        if user_id is None:
            return []
        return [team.guid for team in self.list_for_user(user_id)]
