"""
Unit tests for TeamService.

Tests team creation, membership and the team membership resolver.
"""

import pytest

from backend.src.models import TeamRole
from backend.src.services.exceptions import ConflictError, TeamNotFoundError, ValidationError
from backend.src.services.team_service import TeamService


@pytest.fixture
def team_service(test_db_session):
    """Create a TeamService instance for testing."""
    return TeamService(test_db_session)


class TestCreateTeam:
    """Tests for create_team."""

    def test_create_team(self, team_service):
        team = team_service.create_team("  Design  ", description="UI and UX")
        assert team.name == "Design"
        assert team.guid.startswith("ten_")

    def test_empty_name(self, team_service):
        with pytest.raises(ValidationError) as exc_info:
            team_service.create_team("   ")
        assert exc_info.value.field == "name"

    def test_name_too_long(self, team_service):
        with pytest.raises(ValidationError):
            team_service.create_team("x" * 201)

    def test_description_too_long(self, team_service):
        with pytest.raises(ValidationError) as exc_info:
            team_service.create_team("Design", description="x" * 1001)
        assert exc_info.value.field == "description"


class TestMembership:
    """Tests for add_member and get_by_guid."""

    def test_add_member(self, team_service, alice):
        team = team_service.create_team("Design")
        membership = team_service.add_member(team, alice, TeamRole.VIEWER)
        assert membership.role == TeamRole.VIEWER

    def test_duplicate_member(self, team_service, alice):
        team = team_service.create_team("Design")
        team_service.add_member(team, alice)
        with pytest.raises(ConflictError):
            team_service.add_member(team, alice, TeamRole.ADMIN)

    def test_get_by_guid(self, team_service, team_a):
        assert team_service.get_by_guid(team_a.guid).id == team_a.id

    def test_get_by_guid_invalid(self, team_service):
        with pytest.raises(TeamNotFoundError):
            team_service.get_by_guid("evt_01hgw2bbg00000000000000000")


class TestResolveTeamIds:
    """Tests for resolve_team_ids."""

    def test_anonymous(self, team_service):
        assert team_service.resolve_team_ids(None) == []

    def test_user_without_teams(self, team_service, sample_user):
        loner = sample_user(email="loner@example.com")
        assert team_service.resolve_team_ids(loner.id) == []

    def test_single_team(self, team_service, team_a, team_b, bob):
        assert team_service.resolve_team_ids(bob.id) == [team_a.guid]

    def test_multiple_teams(self, team_service, team_a, team_b, alice):
        team_service.add_member(team_b, alice, TeamRole.MEMBER)
        assert set(team_service.resolve_team_ids(alice.id)) == {team_a.guid, team_b.guid}

    def test_reflects_membership_changes(self, team_service, team_a, team_b, charlie, test_db_session):
        assert team_service.resolve_team_ids(charlie.id) == [team_b.guid]

        team_service.add_member(team_a, charlie)
        assert set(team_service.resolve_team_ids(charlie.id)) == {team_a.guid, team_b.guid}

        test_db_session.delete(team_b)
        test_db_session.commit()
        assert team_service.resolve_team_ids(charlie.id) == [team_a.guid]
