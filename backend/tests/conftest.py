"""Pytest fixtures — SQLite database file for fast, isolated tests."""
import os

# Must be set before tocafy.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from fastapi.testclient import TestClient

from tocafy.database import Base, get_db
from tocafy.main import app

# Import all models so they register with Base.metadata
from tocafy.models.profile import Profile                      # noqa: F401
from tocafy.models.show import Show                            # noqa: F401
from tocafy.models.song import Song                            # noqa: F401
from tocafy.models.song_request import SongRequest             # noqa: F401
from tocafy.models.moderation_config import ModerationConfig   # noqa: F401
from tocafy.models.show_activity import ShowActivity           # noqa: F401

SQLITE_URL = "sqlite:///./test.db"


@pytest.fixture(scope="function")
def db_engine():
    """Create a fresh SQLite engine for each test."""
    engine = create_engine(SQLITE_URL, connect_args={"check_same_thread": False})

    # WAL lets readers run while one writer commits (threaded tests)
    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Yield a database session, closed after the test."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(session_factory):
    """FastAPI TestClient with the database dependency overridden to use SQLite."""

    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers: create records via the API, return the response JSON dict
# ---------------------------------------------------------------------------
def create_test_profile(client: TestClient, username: str = "dj_ana", role: str = "artist",
                        display_name: str = "DJ Ana") -> dict:
    """Helper — POST /api/profiles and return response JSON."""
    resp = client.post("/api/profiles/", json={
        "username": username,
        "display_name": display_name,
        "role": role,
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_test_show(client: TestClient, owner_id: str, name: str = "Acoustic Night") -> dict:
    """Helper — POST /api/shows and return response JSON (status draft)."""
    resp = client.post("/api/shows/", json={"owner_id": owner_id, "name": name})
    assert resp.status_code == 201, resp.text
    return resp.json()


def transition(client: TestClient, show_id: str, target: str, actor_id: str):
    return client.post(f"/api/shows/{show_id}/transition", json={
        "target_status": target,
        "actor_id": actor_id,
    })


def create_live_show(client: TestClient, owner_id: str, name: str = "Acoustic Night") -> dict:
    """Helper — create a show and take it live."""
    show = create_test_show(client, owner_id, name)
    resp = transition(client, show["show_id"], "live", owner_id)
    assert resp.status_code == 200, resp.text
    return resp.json()


def create_test_song(client: TestClient, owner_id: str, title: str = "Garota de Ipanema",
                     artist: str = "Tom Jobim", **extra) -> dict:
    """Helper — POST /api/songs and return response JSON."""
    resp = client.post("/api/songs/", json={"owner_id": owner_id, "title": title, "artist": artist, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()


def submit_request(client: TestClient, show_id: str, **body):
    """Helper — POST /api/requests for a show id, returns the raw response."""
    return client.post(f"/api/requests/?show_id={show_id}", json=body)
