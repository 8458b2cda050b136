"""
Pytest configuration and shared fixtures.
Provides an in-memory database, seeded groups/events and an API client.
"""

import os

# Must be set before the package creates its engine
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("DB_LOG_SLOW_QUERIES", "false")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from mates_scheduling.database import Base, get_db
from mates_scheduling.domain.scheduling.locking import EventLockRegistry
from mates_scheduling.domain.scheduling.service import SchedulingService
from mates_scheduling.main import app
from mates_scheduling.models import Event, Group, GroupMember

DAY = datetime(2026, 11, 14)


# ==================== Database Fixtures ====================

@pytest.fixture
def engine():
    """Fresh in-memory database shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


# ==================== Seed Data Fixtures ====================

@pytest.fixture
def group(db):
    """Group with two accepted members (alice, bob) and one pending (dave)."""
    group = Group(name="Weekend hikers")
    db.add(group)
    db.flush()
    db.add_all(
        [
            GroupMember(group_id=group.id, user_id="alice", acceptance_status="accepted", is_admin=True),
            GroupMember(group_id=group.id, user_id="bob", acceptance_status="accepted"),
            GroupMember(group_id=group.id, user_id="dave", acceptance_status="pending"),
        ]
    )
    db.commit()
    return group


@pytest.fixture
def other_group(db):
    group = Group(name="Book club")
    db.add(group)
    db.flush()
    db.add(GroupMember(group_id=group.id, user_id="erin", acceptance_status="accepted"))
    db.commit()
    return group


@pytest.fixture
def members(db, group):
    """Accepted memberships keyed by user id."""
    rows = (
        db.query(GroupMember)
        .filter(GroupMember.group_id == group.id, GroupMember.acceptance_status == "accepted")
        .all()
    )
    return {m.user_id: m for m in rows}


@pytest.fixture
def event(db, group):
    """Open event: one hour meeting, no search bound."""
    event = Event(group_id=group.id, title="Hike", duration_minutes=60, is_auto_scheduled=False)
    db.add(event)
    db.commit()
    return event


@pytest.fixture
def bounded_event(db, group):
    """Auto-scheduled event searching 09:00-17:00."""
    event = Event(
        group_id=group.id,
        title="Planning call",
        duration_minutes=60,
        is_auto_scheduled=True,
        range_start=DAY.replace(hour=9),
        range_end=DAY.replace(hour=17),
    )
    db.add(event)
    db.commit()
    return event


# ==================== Service Fixtures ====================

@pytest.fixture
def locks():
    return EventLockRegistry()


@pytest.fixture
def service(db, locks):
    return SchedulingService(db, locks=locks, retry_backoff=0)


# ==================== API Fixtures ====================

@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()
