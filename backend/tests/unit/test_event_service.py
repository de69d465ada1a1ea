"""
Unit tests for EventService.

Tests the access-controlled event operations:
- Team-scoped listing, retrieval, creation, update and deletion
- Existence-before-access ordering of errors
- Optimistic concurrency on updated_at
- Audit log entries
"""

import pytest
from datetime import datetime, timedelta

from backend.src.models import Event, TeamRole
from backend.src.schemas.event import EventCreate
from backend.src.services import event_service as event_service_module
from backend.src.services.event_service import EventService, can_access, can_create
from backend.src.services.exceptions import (
    AccessDeniedError,
    ConflictError,
    EventNotFoundError,
    TeamNotFoundError,
    ValidationError,
)
from backend.src.utils.timestamps import utc_now


MISSING_EVENT_GUID = "evt_" + "0" * 25 + "1"
MISSING_TEAM_GUID = "ten_" + "0" * 25 + "1"


@pytest.fixture
def event_service(test_db_session):
    """Create an EventService instance for testing."""
    return EventService(test_db_session)


@pytest.fixture
def create_payload():
    """Factory for valid EventCreate payloads."""
    def _create(team_guid, **kwargs):
        start = kwargs.pop("start_date", datetime(2030, 2, 1, 10, 0, 0))
        data = {
            "team_guid": team_guid,
            "title": "Standup",
            "location": "Room A",
            "start_date": start,
            "end_date": kwargs.pop("end_date", start + timedelta(minutes=30)),
        }
        data.update(kwargs)
        return EventCreate(**data)
    return _create


def _logged_events(mock_logger):
    names = []
    for method in (mock_logger.info, mock_logger.warning):
        for call in method.call_args_list:
            extra = call.kwargs.get("extra") or {}
            if "event" in extra:
                names.append(extra["event"])
    return names


class TestAccessPredicates:
    """Tests for can_access and can_create."""

    def test_can_access_member_team(self, sample_event, team_a, alice):
        event = sample_event(team_a, alice)
        assert can_access(event, [team_a.guid]) is True

    def test_can_access_other_team(self, sample_event, team_a, team_b, alice):
        event = sample_event(team_a, alice)
        assert can_access(event, [team_b.guid]) is False

    def test_can_access_empty_team_set(self, sample_event, team_a, alice):
        event = sample_event(team_a, alice)
        assert can_access(event, []) is False

    def test_can_create(self, team_a, team_b):
        assert can_create(team_a.guid, [team_a.guid, team_b.guid]) is True
        assert can_create(team_b.guid, [team_a.guid]) is False
        assert can_create(team_a.guid, []) is False


class TestCreateEvent:
    """Tests for authorize_create and create_event."""

    def test_create_event_success(self, event_service, create_payload, team_a, alice):
        """Creates an event attributed to the caller with no updater."""
        event = event_service.create_event(create_payload(team_a.guid), user_id=alice.id)

        assert event.guid.startswith("evt_")
        assert event.team_id == team_a.id
        assert event.created_by_user_id == alice.id
        assert event.updated_by_user_id is None
        assert event.created_at == event.updated_at
        assert event.timezone == "UTC"

    def test_create_event_keeps_timezone(self, event_service, create_payload, team_a, alice):
        event = event_service.create_event(
            create_payload(team_a.guid, timezone="Europe/Paris"), user_id=alice.id
        )
        assert event.timezone == "Europe/Paris"

    def test_create_event_empty_timezone_defaults_to_utc(
        self, event_service, create_payload, team_a, alice
    ):
        event = event_service.create_event(
            create_payload(team_a.guid, timezone=""), user_id=alice.id
        )
        assert event.timezone == "UTC"

    def test_create_event_unknown_team(self, event_service, create_payload, alice):
        with pytest.raises(TeamNotFoundError):
            event_service.create_event(create_payload(MISSING_TEAM_GUID), user_id=alice.id)

    def test_create_event_unknown_team_writes_nothing(
        self, event_service, create_payload, test_db_session, alice
    ):
        with pytest.raises(TeamNotFoundError):
            event_service.create_event(create_payload(MISSING_TEAM_GUID), user_id=alice.id)
        assert test_db_session.query(Event).count() == 0

    def test_authorize_create_member(self, event_service, team_a):
        event_service.authorize_create(team_a.guid, [team_a.guid])

    def test_authorize_create_non_member(self, event_service, team_a, team_b):
        """Scenario: caller in team A only creating in team B is denied."""
        with pytest.raises(AccessDeniedError) as exc_info:
            event_service.authorize_create(team_b.guid, [team_a.guid])
        assert exc_info.value.resource == "team"

    def test_create_logs_audit_entries(
        self, event_service, create_payload, team_a, alice, mocker
    ):
        mock_logger = mocker.patch.object(event_service_module, "logger")

        event_service.create_event(create_payload(team_a.guid), user_id=alice.id)

        assert _logged_events(mock_logger) == ["event.create.start", "event.create.success"]

    def test_create_unknown_team_logs_failure(
        self, event_service, create_payload, alice, mocker
    ):
        mock_logger = mocker.patch.object(event_service_module, "logger")

        with pytest.raises(TeamNotFoundError):
            event_service.create_event(create_payload(MISSING_TEAM_GUID), user_id=alice.id)

        assert "event.create.failed" in _logged_events(mock_logger)
        failed = [
            c for c in mock_logger.warning.call_args_list
            if c.kwargs["extra"]["event"] == "event.create.failed"
        ][0]
        assert failed.kwargs["extra"]["reason"] == "team_not_found"


class TestGetEventsByTeams:
    """Tests for get_events_by_teams."""

    def test_lists_only_member_teams(self, event_service, sample_event, team_a, team_b, alice, charlie):
        """Scenario: caller sees team A events and never team B events."""
        own = sample_event(team_a, alice, title="Planning")
        sample_event(team_b, charlie, title="Campaign Review")

        events = event_service.get_events_by_teams([team_a.guid])

        assert [e.guid for e in events] == [own.guid]

    def test_lists_union_of_teams(self, event_service, sample_event, team_a, team_b, alice, charlie):
        sample_event(team_a, alice, title="Planning")
        sample_event(team_b, charlie, title="Campaign Review")

        events = event_service.get_events_by_teams([team_a.guid, team_b.guid])

        assert {e.title for e in events} == {"Planning", "Campaign Review"}

    def test_ordered_by_start_date(self, event_service, sample_event, team_a, alice):
        later = sample_event(team_a, alice, title="Later", start_date=datetime(2030, 3, 1, 9, 0))
        earlier = sample_event(team_a, alice, title="Earlier", start_date=datetime(2030, 1, 1, 9, 0))

        events = event_service.get_events_by_teams([team_a.guid])

        assert [e.guid for e in events] == [earlier.guid, later.guid]

    def test_empty_team_set_short_circuits(self, event_service, sample_event, team_a, alice, mocker):
        """An empty team set returns [] without querying the store."""
        sample_event(team_a, alice)
        spy = mocker.spy(event_service.repository, "list_by_team_guids")

        assert event_service.get_events_by_teams([]) == []
        spy.assert_not_called()

    def test_team_without_events(self, event_service, team_a):
        assert event_service.get_events_by_teams([team_a.guid]) == []


class TestGetEventById:
    """Tests for get_event_by_id."""

    def test_get_own_event(self, event_service, sample_event, team_a, alice):
        event = sample_event(team_a, alice)
        found = event_service.get_event_by_id(event.guid, [team_a.guid])
        assert found.id == event.id

    def test_get_other_team_event_denied(self, event_service, sample_event, team_a, team_b, charlie):
        """Scenario: an event of team B is forbidden to a team A member."""
        event = sample_event(team_b, charlie)
        with pytest.raises(AccessDeniedError) as exc_info:
            event_service.get_event_by_id(event.guid, [team_a.guid])
        assert exc_info.value.resource == "event"

    def test_missing_event_is_not_found_regardless_of_teams(self, event_service, team_a):
        """Existence is checked before access."""
        with pytest.raises(EventNotFoundError):
            event_service.get_event_by_id(MISSING_EVENT_GUID, [team_a.guid])
        with pytest.raises(EventNotFoundError):
            event_service.get_event_by_id(MISSING_EVENT_GUID, [])

    def test_malformed_guid_is_not_found(self, event_service, team_a):
        with pytest.raises(EventNotFoundError):
            event_service.get_event_by_id("not-a-guid", [team_a.guid])

    def test_access_denied_is_logged(self, event_service, sample_event, team_a, team_b, charlie, mocker):
        event = sample_event(team_b, charlie)
        mock_logger = mocker.patch.object(event_service_module, "logger")

        with pytest.raises(AccessDeniedError):
            event_service.get_event_by_id(event.guid, [team_a.guid])

        assert _logged_events(mock_logger) == ["event.access.denied"]

    def test_include_relations(self, event_service, sample_event, team_a, alice):
        event = sample_event(team_a, alice)

        found = event_service.get_event_by_id(event.guid, [team_a.guid], include_relations=True)
        detail = event_service.build_event_detail_response(found)

        assert detail["creator"] == {"guid": alice.guid, "name": alice.name, "email": alice.email}
        assert detail["updater"] is None
        assert detail["team"]["guid"] == team_a.guid
        assert detail["team"]["name"] == "Engineering Team"


class TestUpdateEvent:
    """Tests for update_event."""

    def test_partial_update(self, event_service, sample_event, team_a, alice, bob):
        """Only supplied fields change; updater and updated_at are recorded."""
        event = sample_event(team_a, alice, title="Standup", description="Daily")
        previous_updated_at = event.updated_at

        updated = event_service.update_event(
            event.guid, {"title": "Daily Standup"}, [team_a.guid], user_id=bob.id
        )

        assert updated.title == "Daily Standup"
        assert updated.description == "Daily"
        assert updated.location == "Room A"
        assert updated.updated_by_user_id == bob.id
        assert updated.created_by_user_id == alice.id
        assert updated.updated_at > previous_updated_at

    def test_update_clears_description(self, event_service, sample_event, team_a, alice):
        event = sample_event(team_a, alice, description="Daily")
        updated = event_service.update_event(
            event.guid, {"description": None}, [team_a.guid], user_id=alice.id
        )
        assert updated.description is None

    def test_update_ignores_immutable_fields(self, event_service, sample_event, team_a, team_b, alice):
        event = sample_event(team_a, alice)
        created_at = event.created_at

        updated = event_service.update_event(
            event.guid,
            {"team_id": team_b.id, "created_by_user_id": 999, "created_at": datetime(2000, 1, 1)},
            [team_a.guid],
            user_id=alice.id,
        )

        assert updated.team_id == team_a.id
        assert updated.created_by_user_id == alice.id
        assert updated.created_at == created_at

    def test_updated_at_strictly_increases(self, event_service, sample_event, team_a, alice):
        """Back-to-back updates within the same second still advance updated_at."""
        event = sample_event(team_a, alice)
        seen = [event.updated_at]

        for title in ("One", "Two", "Three"):
            updated = event_service.update_event(
                event.guid, {"title": title}, [team_a.guid], user_id=alice.id
            )
            seen.append(updated.updated_at)

        assert seen == sorted(seen)
        assert len(set(seen)) == len(seen)

    def test_update_with_current_token(self, event_service, sample_event, team_a, alice):
        event = sample_event(team_a, alice)
        updated = event_service.update_event(
            event.guid,
            {"title": "Renamed"},
            [team_a.guid],
            user_id=alice.id,
            client_updated_at=event.updated_at,
        )
        assert updated.title == "Renamed"

    def test_stale_token_conflicts(self, event_service, sample_event, team_a, alice, bob):
        """Scenario: two clients read the same version; the second writer gets a conflict."""
        event = sample_event(team_a, alice, title="Original")
        token = event.updated_at

        first = event_service.update_event(
            event.guid, {"title": "From Alice"}, [team_a.guid],
            user_id=alice.id, client_updated_at=token,
        )
        server_updated_at = first.updated_at

        with pytest.raises(ConflictError) as exc_info:
            event_service.update_event(
                event.guid, {"title": "From Bob"}, [team_a.guid],
                user_id=bob.id, client_updated_at=token,
            )

        assert exc_info.value.server_updated_at == server_updated_at
        assert exc_info.value.client_updated_at == token

        current = event_service.get_event_by_id(event.guid, [team_a.guid])
        assert current.title == "From Alice"
        assert current.updated_by_user_id == alice.id

    def test_conflict_is_logged(self, event_service, sample_event, team_a, alice, mocker):
        event = sample_event(team_a, alice, updated_at=utc_now())
        stale = event.updated_at - timedelta(seconds=10)
        mock_logger = mocker.patch.object(event_service_module, "logger")

        with pytest.raises(ConflictError):
            event_service.update_event(
                event.guid, {"title": "x"}, [team_a.guid],
                user_id=alice.id, client_updated_at=stale,
            )

        assert _logged_events(mock_logger) == ["event.update.start", "event.update.conflict"]

    def test_no_token_overwrites(self, event_service, sample_event, team_a, alice, bob):
        """Without a token the update is applied whatever happened in between."""
        event = sample_event(team_a, alice)
        event_service.update_event(event.guid, {"title": "First"}, [team_a.guid], user_id=alice.id)

        updated = event_service.update_event(event.guid, {"title": "Second"}, [team_a.guid], user_id=bob.id)

        assert updated.title == "Second"

    def test_token_required_when_configured(self, test_db_session, sample_event, team_a, alice):
        service = EventService(test_db_session, require_update_token=True)
        event = sample_event(team_a, alice)

        with pytest.raises(ValidationError) as exc_info:
            service.update_event(event.guid, {"title": "x"}, [team_a.guid], user_id=alice.id)
        assert exc_info.value.field == "updated_at"

    def test_lost_race_on_write_conflicts(self, event_service, sample_event, team_a, alice, mocker):
        """A writer that commits between the check and the write causes a conflict."""
        event = sample_event(team_a, alice)
        mocker.patch.object(event_service.repository, "update_if_unchanged", return_value=False)

        with pytest.raises(ConflictError):
            event_service.update_event(
                event.guid, {"title": "x"}, [team_a.guid],
                user_id=alice.id, client_updated_at=event.updated_at,
            )

    def test_update_other_team_denied(self, event_service, sample_event, team_a, team_b, charlie, alice):
        event = sample_event(team_b, charlie)
        with pytest.raises(AccessDeniedError):
            event_service.update_event(event.guid, {"title": "x"}, [team_a.guid], user_id=alice.id)

    def test_update_missing_event(self, event_service, team_a, alice):
        with pytest.raises(EventNotFoundError):
            event_service.update_event(MISSING_EVENT_GUID, {"title": "x"}, [team_a.guid], user_id=alice.id)

    def test_update_does_not_check_date_order(self, event_service, sample_event, team_a, alice):
        """Updates are not cross-validated against the stored start_date."""
        event = sample_event(team_a, alice, start_date=datetime(2030, 1, 15, 10, 0))
        updated = event_service.update_event(
            event.guid, {"end_date": datetime(2030, 1, 1, 10, 0)}, [team_a.guid], user_id=alice.id
        )
        assert updated.end_date < updated.start_date

    def test_update_logs_success(self, event_service, sample_event, team_a, alice, mocker):
        event = sample_event(team_a, alice)
        mock_logger = mocker.patch.object(event_service_module, "logger")

        event_service.update_event(event.guid, {"title": "x"}, [team_a.guid], user_id=alice.id)

        assert _logged_events(mock_logger) == ["event.update.start", "event.update.success"]

    def test_membership_role_is_not_consulted(
        self, event_service, sample_user, sample_team, sample_event, alice
    ):
        viewer = sample_user(email="viewer@example.com")
        team = sample_team(name="Ops", members=[(alice, TeamRole.OWNER), (viewer, TeamRole.VIEWER)])
        event = sample_event(team, alice)

        updated = event_service.update_event(event.guid, {"title": "x"}, [team.guid], user_id=viewer.id)

        assert updated.updated_by_user_id == viewer.id


class TestDeleteEvent:
    """Tests for delete_event."""

    def test_delete_own_event(self, event_service, sample_event, team_a, alice, test_db_session):
        event = sample_event(team_a, alice)
        guid = event.guid

        event_service.delete_event(guid, [team_a.guid])

        assert test_db_session.query(Event).count() == 0
        with pytest.raises(EventNotFoundError):
            event_service.get_event_by_id(guid, [team_a.guid])

    def test_delete_other_team_event_denied(
        self, event_service, sample_event, team_a, team_b, charlie, test_db_session
    ):
        event = sample_event(team_b, charlie)
        with pytest.raises(AccessDeniedError):
            event_service.delete_event(event.guid, [team_a.guid])
        assert test_db_session.query(Event).count() == 1

    def test_delete_missing_event(self, event_service, team_a):
        with pytest.raises(EventNotFoundError):
            event_service.delete_event(MISSING_EVENT_GUID, [team_a.guid])

    def test_delete_logs_success(self, event_service, sample_event, team_a, alice, mocker):
        event = sample_event(team_a, alice)
        mock_logger = mocker.patch.object(event_service_module, "logger")

        event_service.delete_event(event.guid, [team_a.guid])

        assert _logged_events(mock_logger) == ["event.delete.success"]


class TestBuildEventResponse:
    """Tests for build_event_response."""

    def test_exposes_guids_only(self, event_service, sample_event, team_a, alice):
        event = sample_event(team_a, alice)
        response = event_service.build_event_response(event)

        assert response["guid"] == event.guid
        assert response["team_guid"] == team_a.guid
        assert response["created_by"] == alice.guid
        assert response["updated_by"] is None
        assert "id" not in response
        assert "team_id" not in response
