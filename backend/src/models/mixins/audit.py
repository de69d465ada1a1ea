"""
Audit mixin for SQLAlchemy models.

Provides user attribution columns and relationships to track who created
and last modified each record. Uses select loading (lazy="select") so the
attribution users are only fetched when a caller asks for them.

Design:
- created_by_user_id: Set once on creation, never modified afterward.
- updated_by_user_id: NULL on creation, set to the acting user on every
  update.
- FK ON DELETE SET NULL on updated_by; created_by is NOT NULL, so users
  that created events cannot be removed while those events exist.

Immutability of created_by_user_id is enforced by the service layer:
update paths never write it.
"""

from sqlalchemy import Column, Integer, ForeignKey
from sqlalchemy.orm import relationship, declared_attr


class AuditMixin:
    """
    Mixin providing user attribution columns for audit trail visibility.

    Adds:
    - created_by_user_id: FK to users.id (who created the record)
    - updated_by_user_id: FK to users.id (who last modified the record)
    - created_by_user: User relationship for created_by (lazy select)
    - updated_by_user: User relationship for updated_by (lazy select)

    Usage:
        class Event(Base, GuidMixin, AuditMixin):
            __tablename__ = "events"
            # ... other columns
    """

    @declared_attr
    def created_by_user_id(cls):
        return Column(
            Integer,
            ForeignKey("users.id"),
            nullable=False,
            index=True,
        )

    @declared_attr
    def updated_by_user_id(cls):
        return Column(
            Integer,
            ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        )

    @declared_attr
    def created_by_user(cls):
        return relationship(
            "User",
            foreign_keys=f"{cls.__name__}.created_by_user_id",
            lazy="select",
        )

    @declared_attr
    def updated_by_user(cls):
        return relationship(
            "User",
            foreign_keys=f"{cls.__name__}.updated_by_user_id",
            lazy="select",
        )
