import os
from datetime import datetime, timedelta

# Must be set before app.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["QUEUE_AUTO_EXPIRE_ENABLED"] = "false"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from app.core.clock import Clock, get_clock
from app.core.security import create_access_token, get_password_hash
from app.db.base import Base
from app.db.session import build_engine, get_db
from app.main import app
from app.models.user import User
from app.schemas.booking import BookingCreate

# Tuesday. 2025-06-14 is the Saturday of the same week.
DEFAULT_NOW = datetime(2025, 6, 10, 9, 30)


class FixedClock(Clock):
    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock(DEFAULT_NOW)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'tavola.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory, clock):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    # No context manager: the lifespan (Postgres bootstrap, expiry loop) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()


BOOKING_FIELDS = {
    "customer_name": "Ana Souza",
    "customer_email": "ana@example.com",
    "customer_phone": "(11) 99999-9999",
    "date": "2025-06-14",
    "time_slot": "19:00",
    "environment": "INDOOR",
    "guests": 4,
}


@pytest.fixture
def booking_fields():
    """Builds a valid booking request body; keyword overrides replace fields."""

    def build(**overrides) -> dict:
        return {**BOOKING_FIELDS, **overrides}

    return build


@pytest.fixture
def booking_data(booking_fields):
    def build(**overrides) -> BookingCreate:
        return BookingCreate(**booking_fields(**overrides))

    return build


def _staff_headers(session_factory, role: str) -> dict:
    session = session_factory()
    try:
        user = User(
            email=f"{role}@tavola.com",
            full_name=f"{role.title()} Staff",
            password_hash=get_password_hash("correct-horse"),
            role=role,
        )
        session.add(user)
        session.commit()
        token = create_access_token(str(user.id), role)
    finally:
        session.close()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(session_factory):
    return _staff_headers(session_factory, "admin")


@pytest.fixture
def supervisor_headers(session_factory):
    return _staff_headers(session_factory, "supervisor")
