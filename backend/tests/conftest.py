"""
Pytest configuration and fixtures for backend tests.

Provides shared fixtures for:
- Test database sessions
- User, team, membership and event factories
- FastAPI test clients (anonymous and with an overridden caller)
"""

import os
import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app modules
os.environ['EVENTS_DB_URL'] = 'sqlite:///:memory:'
os.environ['SESSION_SECRET_KEY'] = 'test-session-secret-key-that-is-long-enough-0123'

from backend.src.models import Base, User, Team, TeamMember, TeamRole, Event
from backend.src.middleware.tenant import TenantContext
from backend.src.utils.timestamps import utc_now


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture(scope='function')
def test_db_engine():
    """Create an in-memory SQLite database engine for testing."""
    from sqlalchemy import event

    engine = create_engine(
        'sqlite:///:memory:',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )

    # Enable foreign key constraints for SQLite
    # This must be set for each connection
    def _fk_pragma_on_connect(dbapi_con, con_record):
        dbapi_con.execute('pragma foreign_keys=ON')

    event.listen(engine, 'connect', _fk_pragma_on_connect)

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope='function')
def test_db_session(test_db_engine):
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


# ============================================================================
# Sample Data Factories
# ============================================================================

@pytest.fixture
def sample_user(test_db_session):
    """Factory for creating User models in the database."""
    counter = {'n': 0}

    def _create(email=None, name=None):
        counter['n'] += 1
        user = User(
            email=email or f'user{counter["n"]}@example.com',
            name=name or f'User {counter["n"]}',
        )
        test_db_session.add(user)
        test_db_session.commit()
        test_db_session.refresh(user)
        return user
    return _create


@pytest.fixture
def sample_team(test_db_session):
    """Factory for creating Team models, optionally with members."""
    def _create(name='Test Team', description=None, members=None):
        team = Team(name=name, description=description)
        test_db_session.add(team)
        test_db_session.commit()
        for member in members or []:
            user, role = member if isinstance(member, tuple) else (member, TeamRole.MEMBER)
            test_db_session.add(TeamMember(user_id=user.id, team_id=team.id, role=role))
        test_db_session.commit()
        test_db_session.refresh(team)
        return team
    return _create


@pytest.fixture
def sample_event(test_db_session):
    """Factory for creating Event models directly (bypassing the service)."""
    def _create(team, creator, title='Standup', start_date=None, **kwargs):
        start_date = start_date or datetime(2030, 1, 15, 10, 0, 0)
        event = Event(
            team_id=team.id,
            title=title,
            description=kwargs.get('description'),
            location=kwargs.get('location', 'Room A'),
            start_date=start_date,
            end_date=kwargs.get('end_date', start_date + timedelta(hours=1)),
            timezone=kwargs.get('timezone', 'UTC'),
            created_by_user_id=creator.id,
        )
        stamp = kwargs.get('updated_at') or utc_now()
        event.created_at = stamp
        event.updated_at = stamp
        test_db_session.add(event)
        test_db_session.commit()
        test_db_session.refresh(event)
        return event
    return _create


# ============================================================================
# Scenario Fixtures
# ============================================================================

@pytest.fixture
def alice(sample_user):
    return sample_user(email='alice@example.com', name='Alice Johnson')


@pytest.fixture
def bob(sample_user):
    return sample_user(email='bob@example.com', name='Bob Smith')


@pytest.fixture
def charlie(sample_user):
    return sample_user(email='charlie@example.com', name='Charlie Davis')


@pytest.fixture
def team_a(sample_team, alice, bob):
    """Engineering team: alice (owner) and bob (admin)."""
    return sample_team(
        name='Engineering Team',
        description='Software engineering team',
        members=[(alice, TeamRole.OWNER), (bob, TeamRole.ADMIN)],
    )


@pytest.fixture
def team_b(sample_team, charlie):
    """Marketing team: charlie (admin) only."""
    return sample_team(
        name='Marketing Team',
        description='Marketing and communications team',
        members=[(charlie, TeamRole.ADMIN)],
    )


@pytest.fixture
def make_context():
    """Factory building the caller context a real session for user would produce."""
    def _create(user, *teams) -> TenantContext:
        return TenantContext(
            user_id=user.id,
            user_guid=user.guid,
            user_email=user.email,
            team_ids=[team.guid for team in teams],
        )
    return _create


# ============================================================================
# API Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Give every test a fresh auth rate limit budget."""
    from backend.src.api.auth import limiter
    limiter.reset()
    yield


@pytest.fixture
def test_client(test_db_session):
    """Create a test client for FastAPI application."""
    from fastapi.testclient import TestClient
    from backend.src.main import app
    from backend.src.db.database import get_db

    # Override dependencies
    def get_test_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = get_test_db

    with TestClient(app) as client:
        yield client

    # Clear overrides
    app.dependency_overrides.clear()


@pytest.fixture
def authenticated_as(test_client):
    """
    Make subsequent requests run as the given caller.

    Usage:
        authenticated_as(make_context(alice, team_a))
    """
    from backend.src.main import app
    from backend.src.middleware.auth import require_auth

    def _set(ctx: TenantContext):
        app.dependency_overrides[require_auth] = lambda: ctx
        return test_client
    return _set
