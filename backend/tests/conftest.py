"""Pytest fixtures: file-backed SQLite database per test for fast, isolated tests."""
import os

# The app engine is created at import time; keep it off PostgreSQL in tests.
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from tzevents.database import Base, get_db  # noqa: E402
from tzevents.main import app  # noqa: E402

# Import all models so they register with Base.metadata
import tzevents.models  # noqa: E402,F401


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}",
        connect_args={"check_same_thread": False},
    )

    # Enable WAL mode for better concurrency
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """Yield a database session bound to the per-test engine."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def _override_get_db():
        session = TestingSession()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: create records via the API, return the JSON response dict
# ---------------------------------------------------------------------------
def create_test_profile(client: TestClient, name: str = "Test Profile", tz: str = "America/New_York") -> dict:
    """Helper: POST /api/profiles and return response JSON."""
    resp = client.post("/api/profiles/", json={"name": name, "timezone": tz})
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_event(
    client: TestClient,
    profile_ids: list,
    title: str = "Test Event",
    start: str = "2024-06-01T09:00",
    end: str = "2024-06-01T10:00",
    tz: str = "America/New_York",
    created_by: str = None,
    description: str = None,
) -> dict:
    """Helper: POST /api/events and return response JSON."""
    payload = {
        "title": title,
        "profiles": profile_ids,
        "timezone": tz,
        "startDateTime": start,
        "endDateTime": end,
    }
    if created_by:
        payload["createdBy"] = created_by
    if description is not None:
        payload["description"] = description
    resp = client.post("/api/events/", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()
