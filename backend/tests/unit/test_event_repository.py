"""
Unit tests for EventRepository.

Focuses on the conditional update that closes the window between the
optimistic lock check and the write.
"""

import pytest
from datetime import datetime, timedelta

from backend.src.models import Event
from backend.src.repositories.event_repository import EventRepository


@pytest.fixture
def repository(test_db_session):
    return EventRepository(test_db_session)


class TestUpdateIfUnchanged:
    """Tests for update_if_unchanged."""

    def test_writes_without_expectation(self, repository, sample_event, team_a, alice):
        event = sample_event(team_a, alice)

        assert repository.update_if_unchanged(event.id, {"title": "Renamed"}) is True
        assert repository.reload(event).title == "Renamed"

    def test_writes_when_stored_not_later(self, repository, sample_event, team_a, alice):
        stamp = datetime(2030, 1, 1, 12, 0, 0)
        event = sample_event(team_a, alice, updated_at=stamp)

        assert repository.update_if_unchanged(
            event.id, {"title": "Renamed"}, expected_updated_at=stamp
        ) is True

    def test_skips_when_stored_is_later(self, repository, sample_event, team_a, alice):
        stamp = datetime(2030, 1, 1, 12, 0, 0)
        event = sample_event(team_a, alice, title="Original", updated_at=stamp)

        written = repository.update_if_unchanged(
            event.id, {"title": "Stale"}, expected_updated_at=stamp - timedelta(seconds=1)
        )

        assert written is False
        assert repository.reload(event).title == "Original"

    def test_missing_row(self, repository):
        assert repository.update_if_unchanged(12345, {"title": "x"}) is False


class TestLookups:
    """Tests for GUID lookups and listing."""

    def test_get_by_guid_loads_team(self, repository, sample_event, team_a, alice):
        event = sample_event(team_a, alice)
        found = repository.get_by_guid(event.guid)
        assert found.team.guid == team_a.guid

    def test_get_by_guid_wrong_prefix(self, repository, team_a):
        assert repository.get_by_guid(team_a.guid) is None

    def test_get_team_by_guid(self, repository, team_a):
        assert repository.get_team_by_guid(team_a.guid).id == team_a.id
        assert repository.get_team_by_guid("ten_bogus") is None

    def test_list_skips_malformed_team_guids(self, repository, sample_event, team_a, alice):
        sample_event(team_a, alice)
        assert len(repository.list_by_team_guids(["garbage", team_a.guid])) == 1
        assert repository.list_by_team_guids(["garbage"]) == []

    def test_team_delete_cascades_to_events(self, repository, sample_event, team_a, alice, test_db_session):
        sample_event(team_a, alice)
        test_db_session.delete(team_a)
        test_db_session.commit()
        assert test_db_session.query(Event).count() == 0
