import os
from datetime import datetime, timedelta, timezone

# Point the app at a throwaway in-memory database before anything imports settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_ROOMS"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from boxoffice.api.deps import get_clock  # noqa: E402
from boxoffice.core.config import EngineConfig  # noqa: E402
from boxoffice.db.base import Base  # noqa: E402
from boxoffice.db.session import SessionLocal, engine  # noqa: E402
from boxoffice.main import app  # noqa: E402
from boxoffice.models.room import Room  # noqa: E402
from boxoffice.services.engine import BookingEngine  # noqa: E402

NOW = datetime(2030, 1, 1, 8, 0, tzinfo=timezone.utc)

ROOMS = [
    {"id": "A", "name": "Room A", "capacity": 50},
    {"id": "B", "name": "Room B", "capacity": 10},
    {"id": "C", "name": "Room C", "capacity": 100},
]


def at(hour: int, minute: int = 0, days: int = 0) -> str:
    """ISO timestamp on the test day (NOW's date), offset by ``days``."""
    moment = NOW.replace(hour=hour, minute=minute) + timedelta(days=days)
    return moment.isoformat()


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    for data in ROOMS:
        session.add(Room(**data))
    session.commit()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def config():
    return EngineConfig(
        buffer_minutes=15,
        max_tickets_per_person=8,
        min_duration=60,
        max_duration=240,
        min_lead_minutes=60,
    )


@pytest.fixture
def booking_engine(db, config):
    return BookingEngine(db, config, clock=lambda: NOW)


@pytest.fixture
def client(db):
    app.dependency_overrides[get_clock] = lambda: (lambda: NOW)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def showing_factory(booking_engine):
    """Create showings with sensible defaults: 'Movie A', 120 min, room A."""
    def _create(start: str, duration: int = 120, room_id: str = "A", title: str = "Movie A"):
        return booking_engine.create_showing(title, start, duration, room_id)
    return _create
