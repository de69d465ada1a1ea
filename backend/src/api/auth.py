"""
Authentication API endpoints.

Provides the passwordless session flow:
- POST /auth/register - Create a user and sign them in
- POST /auth/login - Sign in an existing user by email
- POST /auth/logout - Delete the current session and clear the cookie
- GET /auth/me - Get current user info and team memberships

Rate Limiting:
- /auth/register and /auth/login: EVENTS_AUTH_RATE_LIMIT per IP
  (default 10 requests per minute)
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status, Request
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from slowapi import Limiter
from slowapi.util import get_remote_address

from backend.src.config.settings import get_settings
from backend.src.db.database import get_db
from backend.src.middleware.auth import require_auth
from backend.src.middleware.tenant import TenantContext, get_tenant_context
from backend.src.models import User, UserSession
from backend.src.services.auth_service import AuthService, AuthenticationError
from backend.src.services.exceptions import ConflictError, ValidationError
from backend.src.services.team_service import TeamService
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

# Rate limiter for auth endpoints
limiter = Limiter(key_func=get_remote_address)

AUTH_RATE_LIMIT = get_settings().auth_rate_limit


router = APIRouter(prefix="/auth", tags=["Authentication"])


# ============================================================================
# Request / Response Models
# ============================================================================


class RegisterRequest(BaseModel):
    """Registration payload."""
    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)


class LoginRequest(BaseModel):
    """Login payload."""
    email: str = Field(..., min_length=1, max_length=255)


class UserInfo(BaseModel):
    """Public user information."""
    guid: str
    email: str
    name: str


class SessionInfo(BaseModel):
    """Issued session."""
    guid: str
    expires_at: datetime


class TeamInfo(BaseModel):
    """Team the user belongs to."""
    guid: str
    name: str


class AuthResponse(BaseModel):
    """Result of a successful register or login."""
    user: UserInfo
    session: SessionInfo


class MeResponse(BaseModel):
    """Current user information."""
    user: UserInfo
    teams: List[TeamInfo] = []


class LogoutResponse(BaseModel):
    """Logout confirmation."""
    success: bool


def _auth_response(user: User, session: UserSession) -> AuthResponse:
    return AuthResponse(
        user=UserInfo(guid=user.guid, email=user.email, name=user.name),
        session=SessionInfo(guid=session.guid, expires_at=session.expires_at),
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.post(
    "/register",
    response_model=AuthResponse,
    summary="Register",
    description="Create a user account and start a session.",
)
@limiter.limit(AUTH_RATE_LIMIT)
async def register(
    request: Request,
    payload: RegisterRequest,
    db: Session = Depends(get_db),
) -> AuthResponse:
    """
    Register a new user.

    Raises:
        400: Invalid email or name, or the email is already registered
    """
    auth_service = AuthService(db)
    try:
        user, session = auth_service.register(payload.email, payload.name)
    except ConflictError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": e.message},
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": e.message, "field": e.field},
        )

    auth_service.attach_session(request, session)
    return _auth_response(user, session)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login",
    description="Start a session for an existing user.",
)
@limiter.limit(AUTH_RATE_LIMIT)
async def login(
    request: Request,
    payload: LoginRequest,
    db: Session = Depends(get_db),
) -> AuthResponse:
    """
    Log in by email.

    Raises:
        401: No user with this email
    """
    auth_service = AuthService(db)
    try:
        user, session = auth_service.login(payload.email)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": e.message},
        )

    auth_service.attach_session(request, session)
    return _auth_response(user, session)


@router.post(
    "/logout",
    response_model=LogoutResponse,
    summary="Logout",
    description="Deletes the server-side session and clears the session cookie.",
)
async def logout(
    request: Request,
    ctx: TenantContext = Depends(get_tenant_context),
    db: Session = Depends(get_db),
) -> LogoutResponse:
    """
    Logout the current user.

    Raises:
        401: No valid session
    """
    auth_service = AuthService(db)
    if not ctx.session_guid:
        auth_service.clear_session(request)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"error": "Not authenticated"},
        )

    auth_service.invalidate_session(ctx.session_guid)
    auth_service.clear_session(request)
    return LogoutResponse(success=True)


@router.get(
    "/me",
    response_model=MeResponse,
    summary="Get current user",
    description="Returns the authenticated user and the teams they belong to.",
)
async def get_me(
    ctx: TenantContext = Depends(require_auth),
    db: Session = Depends(get_db),
) -> MeResponse:
    """
    Get current user information.

    Raises:
        401: Not authenticated
    """
    user: Optional[User] = db.get(User, ctx.user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "User not found"},
        )

    teams = TeamService(db).list_for_user(user.id)
    return MeResponse(
        user=UserInfo(guid=user.guid, email=user.email, name=user.name),
        teams=[TeamInfo(guid=t.guid, name=t.name) for t in teams],
    )
