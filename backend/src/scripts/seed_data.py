#!/usr/bin/env python3
"""
Seed demo users, teams, memberships and events.

Creates three users, two teams with memberships across roles, and a few
upcoming events, so the API can be exercised right after setup. It is
idempotent - users and teams that already exist are reused, and events
are only added to teams that have none.

Usage:
    python -m backend.src.scripts.seed_data [--create-tables] [--dry-run]

Options:
    --create-tables   Create missing tables first (development databases
                      that were not migrated with Alembic)
    --dry-run         Show what would be created without making changes

Seeded accounts (passwordless login by email):
    alice@example.com    owner of Engineering Team, member of Marketing Team
    bob@example.com      admin of Engineering Team
    charlie@example.com  admin of Marketing Team
"""

import argparse
import signal
import sys
from datetime import timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import Session


DEMO_USERS = [
    {"email": "alice@example.com", "name": "Alice Johnson"},
    {"email": "bob@example.com", "name": "Bob Smith"},
    {"email": "charlie@example.com", "name": "Charlie Davis"},
]

DEMO_TEAMS = [
    {"name": "Engineering Team", "description": "Software engineering team"},
    {"name": "Marketing Team", "description": "Marketing and communications team"},
]

# (email, team name, role)
DEMO_MEMBERSHIPS = [
    ("alice@example.com", "Engineering Team", "owner"),
    ("bob@example.com", "Engineering Team", "admin"),
    ("charlie@example.com", "Marketing Team", "admin"),
    ("alice@example.com", "Marketing Team", "member"),
]

# (team name, creator email, title, description, location, days ahead, hours long, timezone)
DEMO_EVENTS = [
    ("Engineering Team", "alice@example.com", "Team Planning Meeting",
     "Q1 planning and retrospective", "Conference Room A", 1, 2, "America/Los_Angeles"),
    ("Engineering Team", "bob@example.com", "Engineering Offsite",
     "Team building and technical workshops", "Mountain View Campus", 7, 8, "America/Los_Angeles"),
    ("Marketing Team", "charlie@example.com", "Marketing Campaign Review",
     "Review Q4 campaign results", "Online (Zoom)", 1, 1, "UTC"),
]


def signal_handler(signum, frame):
    """Handle CTRL+C gracefully."""
    print("\n\nOperation interrupted by user.")
    sys.exit(130)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Seed demo data for the events tracker.",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before seeding"
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be created without making changes"
    )
    return parser.parse_args(argv)


def seed_database(db: Session) -> Dict[str, int]:
    """
    Insert the demo data set, reusing rows that already exist.

    Args:
        db: SQLAlchemy database session

    Returns:
        Counts of created rows keyed by users, teams, memberships, events
    """
    from backend.src.models import Event, Team, TeamMember, TeamRole, User
    from backend.src.utils.timestamps import utc_now

    created = {"users": 0, "teams": 0, "memberships": 0, "events": 0}

    users: Dict[str, User] = {}
    for user_data in DEMO_USERS:
        user = db.query(User).filter(User.email == user_data["email"]).first()
        if not user:
            user = User(email=user_data["email"], name=user_data["name"], hashed_password=None)
            db.add(user)
            created["users"] += 1
        users[user_data["email"]] = user

    teams: Dict[str, Team] = {}
    for team_data in DEMO_TEAMS:
        team = db.query(Team).filter(Team.name == team_data["name"]).first()
        if not team:
            team = Team(name=team_data["name"], description=team_data["description"])
            db.add(team)
            created["teams"] += 1
        teams[team_data["name"]] = team

    db.flush()

    for email, team_name, role in DEMO_MEMBERSHIPS:
        user, team = users[email], teams[team_name]
        exists = (
            db.query(TeamMember)
            .filter(TeamMember.user_id == user.id, TeamMember.team_id == team.id)
            .first()
        )
        if not exists:
            db.add(TeamMember(user_id=user.id, team_id=team.id, role=TeamRole(role)))
            created["memberships"] += 1

    now = utc_now()
    seeded_teams = {
        name for name, team in teams.items()
        if db.query(Event).filter(Event.team_id == team.id).count() > 0
    }
    for team_name, email, title, description, location, days, hours, tz in DEMO_EVENTS:
        if team_name in seeded_teams:
            continue
        start = now + timedelta(days=days)
        db.add(Event(
            team_id=teams[team_name].id,
            title=title,
            description=description,
            location=location,
            start_date=start,
            end_date=start + timedelta(hours=hours),
            timezone=tz,
            created_by_user_id=users[email].id,
            created_at=now,
            updated_at=now,
        ))
        created["events"] += 1

    db.commit()
    return created


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    args = parse_args(argv)

    print("=" * 50)
    print("Events Tracker: Demo Data Seed Script")
    print("=" * 50)

    if args.dry_run:
        print("\n[DRY RUN] Would create:")
        print(f"  Users: {len(DEMO_USERS)}")
        print(f"  Teams: {len(DEMO_TEAMS)}")
        print(f"  Memberships: {len(DEMO_MEMBERSHIPS)}")
        print(f"  Events: {len(DEMO_EVENTS)}")
        print("\nNo changes made.")
        return 0

    # Import here to avoid loading database during argument parsing
    from backend.src.db.database import SessionLocal, init_db

    if args.create_tables:
        init_db()

    db = SessionLocal()
    try:
        created = seed_database(db)
    except Exception as e:
        db.rollback()
        print(f"\n[ERROR] Seeding failed: {e}")
        return 1
    finally:
        db.close()

    print()
    for kind, count in created.items():
        print(f"  {kind.capitalize()}: {count} created")

    print("\n" + "=" * 50)
    print("SEED COMPLETE" if any(created.values()) else "ALREADY SEEDED")
    print("\nLog in with alice@example.com, bob@example.com or charlie@example.com")
    return 0


if __name__ == "__main__":
    sys.exit(main())
