"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from app.core.database import get_session
from app.interest.cache import InterestCache
from app.interest.storage import MemoryStore
from app.main import app
from app.models import Event


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


def _add_event(session: Session, **fields) -> Event:
    event = Event(**fields)
    session.add(event)
    session.commit()
    session.refresh(event)
    return event


@pytest.fixture(name="upcoming_event")
def upcoming_event_fixture(session: Session) -> Event:
    """An event starting in a day."""
    now = datetime.now(UTC)
    return _add_event(
        session,
        title="Revival conference",
        start_datetime=now + timedelta(days=1),
        end_datetime=now + timedelta(days=1, hours=3),
    )


@pytest.fixture(name="ongoing_event")
def ongoing_event_fixture(session: Session) -> Event:
    """An event that started an hour ago and ends in an hour."""
    now = datetime.now(UTC)
    return _add_event(
        session,
        title="Night of prayer",
        start_datetime=now - timedelta(hours=1),
        end_datetime=now + timedelta(hours=1),
    )


@pytest.fixture(name="completed_event")
def completed_event_fixture(session: Session) -> Event:
    """An event that ended a week ago."""
    now = datetime.now(UTC)
    return _add_event(
        session,
        title="Easter celebration",
        start_datetime=now - timedelta(days=7),
        end_datetime=now - timedelta(days=7) + timedelta(hours=2),
    )


@pytest.fixture(name="cancelled_event")
def cancelled_event_fixture(session: Session) -> Event:
    """An upcoming event that was cancelled."""
    now = datetime.now(UTC)
    return _add_event(
        session,
        title="Open-air service",
        start_datetime=now + timedelta(days=3),
        end_datetime=now + timedelta(days=3, hours=2),
        cancelled_at=now - timedelta(hours=5),
        cancellation_reason="Storm warning for the weekend",
    )


@pytest.fixture(name="store")
def store_fixture() -> MemoryStore:
    return MemoryStore()


@pytest.fixture(name="cache")
def cache_fixture(store: MemoryStore) -> InterestCache:
    return InterestCache(store)
