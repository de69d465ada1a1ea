"""
Event service for team-scoped calendar events.

The single authorizing and consistency-enforcing gateway for event reads
and writes. Every operation on an existing event resolves it through
get_event_by_id, which checks existence first and team access second.

Design:
- Access is granted by team membership alone: an event is visible to a
  caller iff its team GUID is in the caller's team set (roles are not
  consulted)
- updated_at is the optimistic lock token. Updates carrying the client's
  last-seen updated_at are rejected when the stored value is later, and
  the write itself is conditional on the same comparison so a concurrent
  writer cannot slip in between the check and the UPDATE
- Updates without a token overwrite unconditionally unless the service
  is configured with require_update_token
- Audit entries go to the "services" logger with an "event" extra field
"""

from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy.orm import Session

from backend.src.models import Event
from backend.src.repositories.event_repository import EventRepository
from backend.src.schemas.event import EventCreate
from backend.src.services.exceptions import (
    AccessDeniedError,
    ConflictError,
    EventNotFoundError,
    TeamNotFoundError,
    ValidationError,
)
from backend.src.utils.logging_config import get_logger
from backend.src.utils.timestamps import next_updated_at, to_utc_naive, utc_now


logger = get_logger("services")


# Fields a partial update may replace. team_id, created_by and created_at
# are never written after creation.
UPDATABLE_FIELDS = (
    "title",
    "description",
    "location",
    "start_date",
    "end_date",
    "timezone",
)


def can_access(event: Event, team_ids: Sequence[str]) -> bool:
    """Whether a caller holding team_ids may operate on event."""
    return event.team.guid in team_ids


def can_create(team_guid: str, team_ids: Sequence[str]) -> bool:
    """Whether a caller holding team_ids may create an event in team_guid."""
    return team_guid in team_ids


class EventService:
    """
    Service for managing team-scoped events.

    Usage:
        >>> service = EventService(db_session)
        >>> service.authorize_create(payload.team_guid, ctx.team_ids)
        >>> event = service.create_event(payload, user_id=ctx.user_id)
        >>> events = service.get_events_by_teams(ctx.team_ids)
    """

    def __init__(
        self,
        db: Session,
        repository: Optional[EventRepository] = None,
        require_update_token: bool = False,
    ):
        """
        Initialize event service.

        Args:
            db: SQLAlchemy database session
            repository: Event repository (defaults to one bound to db)
            require_update_token: Reject updates without client_updated_at
        """
        self.db = db
        self.repository = repository or EventRepository(db)
        self.require_update_token = require_update_token

    # =========================================================================
    # Access control
    # =========================================================================

    def authorize_create(self, team_guid: str, team_ids: Sequence[str]) -> None:
        """
        Check that the caller may create events in team_guid.

        Raises:
            AccessDeniedError: resource "team" if team_guid is not in team_ids
        """
        if not can_create(team_guid, team_ids):
            logger.warning(
                f"Create denied for team {team_guid}",
                extra={"event": "event.access.denied", "team_guid": team_guid},
            )
            raise AccessDeniedError("team", team_guid)

    # =========================================================================
    # Operations
    # =========================================================================

    def create_event(self, data: EventCreate, user_id: int) -> Event:
        """
        Create a new event.

        The caller is expected to have run authorize_create already. The
        team is looked up again here so a team removed after the
        membership check is reported instead of written to.

        Args:
            data: Validated creation payload
            user_id: Acting user's internal ID (recorded as creator)

        Returns:
            Created Event (updated_by NULL, created_at == updated_at)

        Raises:
            TeamNotFoundError: If data.team_guid does not exist
        """
        logger.info(
            f"Creating event in team {data.team_guid}",
            extra={"event": "event.create.start", "team_guid": data.team_guid, "user_id": user_id},
        )

        team = self.repository.get_team_by_guid(data.team_guid)
        if not team:
            logger.warning(
                f"Event creation failed: team {data.team_guid} not found",
                extra={
                    "event": "event.create.failed",
                    "reason": "team_not_found",
                    "team_guid": data.team_guid,
                    "user_id": user_id,
                },
            )
            raise TeamNotFoundError(data.team_guid)

        now = utc_now()
        event = self.repository.create(
            team_id=team.id,
            title=data.title,
            description=data.description,
            location=data.location,
            start_date=data.start_date,
            end_date=data.end_date,
            timezone=data.timezone or "UTC",
            created_by_user_id=user_id,
            updated_by_user_id=None,
            created_at=now,
            updated_at=now,
        )

        logger.info(
            f"Created event: {event.guid} - {event.title}",
            extra={
                "event": "event.create.success",
                "event_guid": event.guid,
                "team_guid": team.guid,
                "user_id": user_id,
            },
        )
        return event

    def get_events_by_teams(self, team_ids: Sequence[str]) -> List[Event]:
        """
        List all events of the given teams, ordered by start_date.

        An empty team set returns [] without touching the store.
        """
        if not team_ids:
            return []
        return self.repository.list_by_team_guids(team_ids)

    def get_event_by_id(
        self,
        event_guid: str,
        team_ids: Sequence[str],
        include_relations: bool = False,
    ) -> Event:
        """
        Get an event the caller has access to.

        Existence is checked before access, so a missing event is always
        EventNotFoundError whatever team_ids holds.

        Args:
            event_guid: Event GUID (evt_xxx)
            team_ids: Caller's team GUIDs
            include_relations: Also load creator and updater users

        Returns:
            Event instance (team always loaded)

        Raises:
            EventNotFoundError: If no such event exists
            AccessDeniedError: If the event's team is not in team_ids
        """
        event = self.repository.get_by_guid(event_guid, include_relations=include_relations)
        if not event:
            raise EventNotFoundError(event_guid)

        if not can_access(event, team_ids):
            logger.warning(
                f"Access denied to event {event_guid}",
                extra={
                    "event": "event.access.denied",
                    "event_guid": event_guid,
                    "team_guid": event.team.guid,
                },
            )
            raise AccessDeniedError("event", event_guid)

        return event

    def update_event(
        self,
        event_guid: str,
        changes: Mapping[str, Any],
        team_ids: Sequence[str],
        user_id: int,
        client_updated_at: Optional[datetime] = None,
    ) -> Event:
        """
        Apply a partial update to an event.

        Args:
            event_guid: Event GUID (evt_xxx)
            changes: Subset of title/description/location/start_date/
                end_date/timezone; other keys are ignored
            team_ids: Caller's team GUIDs
            user_id: Acting user's internal ID (recorded as updater)
            client_updated_at: updated_at last seen by the client; when
                given, the update fails if the event changed since

        Returns:
            The updated Event

        Raises:
            EventNotFoundError: If no such event exists
            AccessDeniedError: If the event's team is not in team_ids
            ConflictError: If the event was modified after client_updated_at
            ValidationError: If a token is required and none was given
        """
        event = self.get_event_by_id(event_guid, team_ids)

        client_updated_at = to_utc_naive(client_updated_at)
        if client_updated_at is None and self.require_update_token:
            raise ValidationError(
                "updated_at is required to update an event",
                field="updated_at",
            )

        logger.info(
            f"Updating event {event_guid}",
            extra={
                "event": "event.update.start",
                "event_guid": event_guid,
                "user_id": user_id,
                "has_lock_token": client_updated_at is not None,
            },
        )

        if client_updated_at is not None and event.updated_at > client_updated_at:
            self._raise_conflict(event_guid, event.updated_at, client_updated_at, user_id)

        values: Dict[str, Any] = {
            field: changes[field] for field in UPDATABLE_FIELDS if field in changes
        }
        values["updated_by_user_id"] = user_id
        values["updated_at"] = next_updated_at(event.updated_at)

        if not self.repository.update_if_unchanged(event.id, values, client_updated_at):
            # Someone else wrote between our read and our conditional write
            current = self.repository.get_by_guid(event_guid)
            if not current:
                raise EventNotFoundError(event_guid)
            self._raise_conflict(event_guid, current.updated_at, client_updated_at, user_id)

        event = self.repository.reload(event)

        logger.info(
            f"Updated event: {event.guid}",
            extra={
                "event": "event.update.success",
                "event_guid": event.guid,
                "user_id": user_id,
                "fields": sorted(k for k in values if k in UPDATABLE_FIELDS),
            },
        )
        return event

    def delete_event(self, event_guid: str, team_ids: Sequence[str]) -> None:
        """
        Delete an event the caller has access to.

        No lock token is involved: the delete is unconditional once
        existence and access are established.

        Raises:
            EventNotFoundError: If no such event exists
            AccessDeniedError: If the event's team is not in team_ids
        """
        event = self.get_event_by_id(event_guid, team_ids)
        self.repository.delete(event)

        logger.info(
            f"Deleted event: {event_guid}",
            extra={"event": "event.delete.success", "event_guid": event_guid},
        )

    # =========================================================================
    # Response builders
    # =========================================================================

    def build_event_response(self, event: Event) -> dict:
        """
        Build a response dictionary for an event.

        Args:
            event: Event instance with team loaded

        Returns:
            Dictionary suitable for EventResponse schema
        """
        return {
            "guid": event.guid,
            "team_guid": event.team.guid,
            "title": event.title,
            "description": event.description,
            "location": event.location,
            "start_date": event.start_date,
            "end_date": event.end_date,
            "timezone": event.timezone,
            "created_by": event.created_by_user.guid,
            "updated_by": event.updated_by_user.guid if event.updated_by_user else None,
            "created_at": event.created_at,
            "updated_at": event.updated_at,
        }

    def build_event_detail_response(self, event: Event) -> dict:
        """
        Build a response dictionary with creator, updater and team embedded.

        Args:
            event: Event loaded with include_relations=True

        Returns:
            Dictionary suitable for EventDetailResponse schema
        """
        response = self.build_event_response(event)

        creator = event.created_by_user
        response["creator"] = {
            "guid": creator.guid,
            "name": creator.name,
            "email": creator.email,
        }

        updater = event.updated_by_user
        if updater:
            response["updater"] = {
                "guid": updater.guid,
                "name": updater.name,
                "email": updater.email,
            }
        else:
            response["updater"] = None

        response["team"] = {
            "guid": event.team.guid,
            "name": event.team.name,
            "description": event.team.description,
        }
        return response

    # =========================================================================
    # Helpers
    # =========================================================================

    def _raise_conflict(
        self,
        event_guid: str,
        server_updated_at: datetime,
        client_updated_at: Optional[datetime],
        user_id: int,
    ) -> None:
        logger.warning(
            f"Update conflict on event {event_guid}",
            extra={
                "event": "event.update.conflict",
                "event_guid": event_guid,
                "user_id": user_id,
                "server_updated_at": server_updated_at.isoformat(),
                "client_updated_at": client_updated_at.isoformat() if client_updated_at else None,
            },
        )
        raise ConflictError(
            "Event was updated by another user",
            server_updated_at=server_updated_at,
            client_updated_at=client_updated_at,
        )
