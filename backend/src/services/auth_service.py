"""
Authentication service for the passwordless session flow.

Handles the business logic for:
- Registering users (email + display name, no password)
- Logging in existing users by email
- Issuing, validating and invalidating server-side sessions
- Binding a session to the signed session cookie

Security:
- The cookie carries only the session GUID; the sessions table decides
  whether it is valid
- Expired sessions are deleted when presented
- Sessions past half of their lifetime are extended (sliding expiry)
"""

from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.requests import Request

from backend.src.config.session import get_session_settings
from backend.src.models import User, UserSession
from backend.src.services.exceptions import ConflictError, ValidationError
from backend.src.utils.logging_config import get_logger
from backend.src.utils.timestamps import utc_now


logger = get_logger("auth")


SESSION_COOKIE_KEY = "session_guid"

EMAIL_MAX_LENGTH = 255
NAME_MAX_LENGTH = 255


class AuthenticationError(Exception):
    """Exception raised for authentication failures."""

    def __init__(self, message: str, error_code: str):
        self.message = message
        self.error_code = error_code
        super().__init__(message)


def normalize_email(email: str) -> str:
    """
    Normalize and validate an email address.

    Basic validation - checks for @ and a dotted domain.

    Raises:
        ValidationError: If the email is empty, malformed or too long
    """
    if not email or not email.strip():
        raise ValidationError("Email cannot be empty", field="email")

    email = email.strip().lower()
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError(
            f"Email cannot exceed {EMAIL_MAX_LENGTH} characters", field="email"
        )

    if "@" not in email:
        raise ValidationError(f"Invalid email format: {email}", field="email")
    local, domain = email.rsplit("@", 1)
    if not local or "." not in domain or domain.startswith(".") or domain.endswith("."):
        raise ValidationError(f"Invalid email format: {email}", field="email")

    return email


class AuthService:
    """
    Service for managing users and their sessions.

    Usage:
        >>> service = AuthService(db_session)
        >>> user, session = service.login("alice@example.com")
        >>> service.attach_session(request, session)
        >>> session, user = service.validate_session(session.guid)
    """

    def __init__(self, db: Session, session_max_age: Optional[int] = None):
        """
        Initialize auth service.

        Args:
            db: SQLAlchemy database session
            session_max_age: Session lifetime in seconds
                (defaults to SESSION_MAX_AGE)
        """
        self.db = db
        if session_max_age is None:
            self.session_lifetime = get_session_settings().lifetime
        else:
            self.session_lifetime = timedelta(seconds=session_max_age)

    # =========================================================================
    # Users
    # =========================================================================

    def register(self, email: str, name: str) -> Tuple[User, UserSession]:
        """
        Create a user and open a session for them.

        Args:
            email: Login email (normalized to lowercase, globally unique)
            name: Display name

        Returns:
            Tuple of (user, session)

        Raises:
            ValidationError: If email or name is invalid
            ConflictError: If a user with this email already exists
        """
        email = normalize_email(email)
        if not name or not name.strip():
            raise ValidationError("Name cannot be empty", field="name")
        name = name.strip()
        if len(name) > NAME_MAX_LENGTH:
            raise ValidationError(
                f"Name cannot exceed {NAME_MAX_LENGTH} characters", field="name"
            )

        if self.get_user_by_email(email):
            raise ConflictError("User already exists")

        user = User(email=email, name=name, hashed_password=None)
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("User already exists")
        self.db.refresh(user)

        logger.info(
            "User registered",
            extra={"event": "auth.register.success", "email": email, "user_guid": user.guid},
        )
        return user, self.create_session(user)

    def login(self, email: str) -> Tuple[User, UserSession]:
        """
        Open a session for an existing user.

        Raises:
            AuthenticationError: If no user has this email
        """
        user = self.get_user_by_email(email)
        if not user:
            logger.warning(
                "Login failed: unknown email",
                extra={"event": "auth.login.failed", "email": email},
            )
            raise AuthenticationError("Invalid credentials", "invalid_credentials")

        logger.info(
            "User logged in",
            extra={"event": "auth.login.success", "email": user.email, "user_guid": user.guid},
        )
        return user, self.create_session(user)

    def get_user_by_email(self, email: str) -> Optional[User]:
        if not email:
            return None
        return (
            self.db.query(User)
            .filter(User.email == email.strip().lower())
            .first()
        )

    # =========================================================================
    # Sessions
    # =========================================================================

    def create_session(self, user: User) -> UserSession:
        """Persist a new session for user expiring after the session lifetime."""
        session = UserSession(user_id=user.id, expires_at=utc_now() + self.session_lifetime)
        self.db.add(session)
        self.db.commit()
        self.db.refresh(session)

        logger.info(
            "Session created",
            extra={
                "event": "auth.session.created",
                "user_guid": user.guid,
                "session_guid": session.guid,
            },
        )
        return session

    def validate_session(
        self, session_guid: Optional[str]
    ) -> Tuple[Optional[UserSession], Optional[User]]:
        """
        Resolve a session GUID to its session and user.

        Expired sessions are deleted. Sessions with less than half of
        their lifetime left are extended to a full lifetime from now.

        Args:
            session_guid: GUID read from the session cookie

        Returns:
            (session, user), or (None, None) if unknown, malformed or expired
        """
        if not session_guid:
            return None, None

        try:
            session_uuid = UserSession.parse_guid(session_guid)
        except ValueError:
            return None, None

        session = (
            self.db.query(UserSession)
            .filter(UserSession.uuid == session_uuid)
            .first()
        )
        if not session:
            return None, None

        now = utc_now()
        if session.is_expired(now):
            self.db.delete(session)
            self.db.commit()
            logger.info(
                "Expired session removed",
                extra={"event": "auth.session.expired", "session_guid": session_guid},
            )
            return None, None

        if session.expires_at - now < self.session_lifetime / 2:
            session.expires_at = now + self.session_lifetime
            self.db.commit()

        return session, session.user

    def invalidate_session(self, session_guid: str) -> bool:
        """
        Delete a session.

        Returns:
            True if a session was deleted
        """
        try:
            session_uuid = UserSession.parse_guid(session_guid)
        except ValueError:
            return False

        deleted = (
            self.db.query(UserSession)
            .filter(UserSession.uuid == session_uuid)
            .delete(synchronize_session=False)
        )
        self.db.commit()

        if deleted:
            logger.info(
                "User logged out",
                extra={"event": "auth.logout", "session_guid": session_guid},
            )
        return bool(deleted)

    # =========================================================================
    # Cookie binding
    # =========================================================================

    def attach_session(self, request: Request, session: UserSession) -> None:
        """
        Store the session GUID in the signed session cookie.

        Raises:
            RuntimeError: If session middleware is not installed
        """
        if not self._has_session(request):
            raise RuntimeError(
                "Cannot create session: SessionMiddleware not installed."
            )
        request.session.clear()
        request.session[SESSION_COOKIE_KEY] = session.guid

    def clear_session(self, request: Request) -> None:
        """Clear the session cookie (logout)."""
        if not self._has_session(request):
            return
        request.session.clear()

    def get_session_guid(self, request: Request) -> Optional[str]:
        """Session GUID carried by the request cookie, if any."""
        if not self._has_session(request):
            return None
        return request.session.get(SESSION_COOKIE_KEY)

    def _has_session(self, request: Request) -> bool:
        """Check if session middleware is installed."""
        return "session" in request.scope
