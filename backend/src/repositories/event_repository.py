"""Data-access layer for events and the teams that own them."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy.orm import Session, joinedload, selectinload

from backend.src.models import Event, Team


class EventRepository:
    """
    CRUD against the events table, keyed by event GUID.

    The only write with a precondition is update_if_unchanged, which folds
    the optimistic lock comparison into the UPDATE statement itself.
    """

    def __init__(self, db: Session):
        self.db = db

    # ── Teams ─────────────────────────────────────────────────────────

    def get_team_by_guid(self, team_guid: str) -> Optional[Team]:
        try:
            team_uuid = Team.parse_guid(team_guid)
        except ValueError:
            return None
        return self.db.query(Team).filter(Team.uuid == team_uuid).first()

    # ── Read ──────────────────────────────────────────────────────────

    def get_by_guid(self, guid: str, include_relations: bool = False) -> Optional[Event]:
        """
        Fetch an event by GUID.

        The owning team is always loaded since access control reads its
        GUID. With include_relations the creator and updater are loaded
        in the same round trip.
        """
        try:
            event_uuid = Event.parse_guid(guid)
        except ValueError:
            return None

        options = [joinedload(Event.team)]
        if include_relations:
            options.append(joinedload(Event.created_by_user))
            options.append(joinedload(Event.updated_by_user))

        return (
            self.db.query(Event)
            .options(*options)
            .filter(Event.uuid == event_uuid)
            .first()
        )

    def list_by_team_guids(self, team_guids: Sequence[str]) -> List[Event]:
        """Events of the given teams ordered by start_date ascending."""
        team_uuids = []
        for team_guid in team_guids:
            try:
                team_uuids.append(Team.parse_guid(team_guid))
            except ValueError:
                continue

        if not team_uuids:
            return []

        return (
            self.db.query(Event)
            .join(Team, Event.team_id == Team.id)
            .options(
                joinedload(Event.team),
                selectinload(Event.created_by_user),
                selectinload(Event.updated_by_user),
            )
            .filter(Team.uuid.in_(team_uuids))
            .order_by(Event.start_date.asc(), Event.id.asc())
            .all()
        )

    # ── Write ─────────────────────────────────────────────────────────

    def create(self, **values: Any) -> Event:
        event = Event(**values)
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)
        return event

    def update_if_unchanged(
        self,
        event_id: int,
        values: Dict[str, Any],
        expected_updated_at: Optional[datetime] = None,
    ) -> bool:
        """
        Apply values to one event in a single UPDATE statement.

        When expected_updated_at is given the row is only written if its
        stored updated_at is not later than it, so a concurrent writer
        that got in first makes this a no-op instead of a lost update.

        Returns:
            True if the row was written, False otherwise
        """
        query = self.db.query(Event).filter(Event.id == event_id)
        if expected_updated_at is not None:
            query = query.filter(Event.updated_at <= expected_updated_at)

        written = query.update(values, synchronize_session=False)
        self.db.commit()
        return written == 1

    def reload(self, event: Event) -> Event:
        self.db.refresh(event)
        return event

    def delete(self, event: Event) -> None:
        self.db.delete(event)
        self.db.commit()
