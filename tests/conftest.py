"""Shared fixtures: an in-memory database behind the API and client-side stores."""
import json
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from agenda.client.backends import LocalEventBackend
from agenda.client.store import EventStore
from agenda.db import get_db
from agenda.main import app

TODAY = date(2026, 2, 17)  # a Tuesday


@pytest.fixture
def engine():
    """One SQLite connection shared by every session of a test."""
    engine = create_engine(
        "sqlite://",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def client(engine):
    """API client whose requests run against the in-memory engine."""
    TestingSession = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)

    def override_get_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def event_record(id, date, time="09:00", order=None, **extra):
    record = {
        "id": id,
        "title": extra.pop("title", f"Event {id}"),
        "date": date,
        "time": time,
        "location": extra.pop("location", ""),
        "priority": extra.pop("priority", "media"),
        "attendees": extra.pop("attendees", []),
    }
    if order is not None:
        record["order"] = order
    record.update(extra)
    return record


@pytest.fixture
def make_store(tmp_path):
    """Build an EventStore over a JSON file holding `records`."""
    def _make(records):
        path = tmp_path / "events.json"
        path.write_text(json.dumps(records), encoding="utf-8")
        store = EventStore(LocalEventBackend(path))
        store.refresh()
        return store
    return _make
