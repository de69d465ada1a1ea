"""
Server-side session model.

A session row backs the signed session cookie: the cookie only carries
the session GUID, and the row decides whether it is still valid.
"""

from datetime import datetime

from sqlalchemy import Column, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from backend.src.models import Base
from backend.src.models.mixins import GuidMixin


class UserSession(Base, GuidMixin):
    """
    Authenticated session for a user.

    Attributes:
        id: Primary key (internal)
        guid: GUID string property (ses_xxx) stored in the session cookie
        user_id: Owning user (FK, cascade on user delete)
        expires_at: Naive UTC expiry instant
    """

    __tablename__ = "sessions"

    GUID_PREFIX = "ses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    expires_at = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="sessions")

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def __repr__(self) -> str:
        return f"<UserSession(id={self.id}, user_id={self.user_id}, expires_at={self.expires_at})>"
