"""
Identity and team-membership context for requests.

Provides:
- TenantContext: Dataclass carrying the caller's identity and team set
- get_tenant_context: FastAPI dependency building it from the session cookie

The team set is resolved from team_members on every request, so a
membership change takes effect on the caller's next request. It is never
stored in the cookie.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.services.auth_service import AuthService
from backend.src.services.team_service import TeamService


@dataclass
class TenantContext:
    """
    Represents the caller of the current request.

    Attributes:
        user_id: Internal user ID (None when anonymous or session invalid)
        user_guid: User's external GUID (usr_xxx)
        user_email: User's email address
        session_guid: Server-side session GUID (ses_xxx)
        team_ids: GUIDs (ten_xxx) of every team the user belongs to

    Usage:
        @router.get("/events")
        async def list_events(
            ctx: TenantContext = Depends(require_auth)
        ):
            return service.get_events_by_teams(ctx.team_ids)
    """

    user_id: Optional[int] = None
    user_guid: Optional[str] = None
    user_email: Optional[str] = None
    session_guid: Optional[str] = None
    team_ids: List[str] = field(default_factory=list)

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


async def get_tenant_context(
    request: Request,
    db: Session = Depends(get_db)
) -> TenantContext:
    """
    FastAPI dependency to extract the caller context from the request.

    Never raises: an absent, unknown or expired session yields an
    anonymous context (user_id None, no teams). Use require_auth to
    reject anonymous callers.

    Args:
        request: FastAPI Request object
        db: Database session

    Returns:
        TenantContext for the caller
    """
    auth_service = AuthService(db)
    session, user = auth_service.validate_session(auth_service.get_session_guid(request))
    if not user:
        return TenantContext()

    return TenantContext(
        user_id=user.id,
        user_guid=user.guid,
        user_email=user.email,
        session_guid=session.guid,
        team_ids=TeamService(db).resolve_team_ids(user.id),
    )
