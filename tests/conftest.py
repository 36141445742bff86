import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("MAIL_ENABLED", "false")
os.environ.pop("TELEGRAM_BOT_TOKEN", None)

import pytest
from datetime import date, timedelta
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tripbook import models
from tripbook.auth import create_access_token
from tripbook.database import Base, get_db
from tripbook.main import app
from tripbook.routers import realtime as realtime_router


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_client(monkeypatch):
    """TestClient whose request and websocket sessions come from the given factory"""
    def _make_client(factory):
        def override_get_db():
            session = factory()
            try:
                yield session
            finally:
                session.close()

        app.dependency_overrides[get_db] = override_get_db
        monkeypatch.setattr(realtime_router, "SessionLocal", factory)
        return TestClient(app)

    yield _make_client
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client, session_factory):
    with make_client(session_factory) as test_client:
        yield test_client


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(first_name="Test", role="user"):
        counter["n"] += 1
        user = models.User(
            first_name=first_name,
            last_name=f"User{counter['n']}",
            email=f"user{counter['n']}@example.com",
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def guest(make_user):
    return make_user("Guest")


@pytest.fixture
def owner(make_user):
    return make_user("Owner", role="owner")


@pytest.fixture
def stranger(make_user):
    return make_user("Stranger")


@pytest.fixture
def guest_house(db, owner):
    place = models.Place(name="Nile View Guest House", place_type="guest_house", owner_id=owner.id)
    db.add(place)
    db.commit()
    db.refresh(place)
    return place


@pytest.fixture
def restaurant(db, owner):
    place = models.Place(name="Felfela", place_type="restaurant", owner_id=owner.id)
    db.add(place)
    db.commit()
    db.refresh(place)
    return place


@pytest.fixture
def booking(db, guest, owner, guest_house):
    arrival = date.today() + timedelta(days=10)
    row = models.Booking(
        booking_type="guest_house",
        arrival_date=arrival,
        leaving_date=arrival + timedelta(days=3),
        number_of_rooms=1,
        adults=2,
        children=0,
        member_number=2,
        total_price=450.0,
        place_id=guest_house.id,
        user_id=guest.id,
        admin_id=owner.id,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


@pytest.fixture
def auth_headers():
    def _headers(user, role=None):
        token = create_access_token(user.id, role or user.role)
        return {"Authorization": f"Bearer {token}"}

    return _headers
