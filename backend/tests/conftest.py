from __future__ import annotations

import os

# In-memory database for anything that touches the default engine at import/startup.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api.deps import get_db
from app.db.base import Base
from app.main import app


class FakeClock:
    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now = int(start_ms)

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> int:
        self.now += int(ms)
        return self.now


class FakeStore:
    """In-memory stand-in for the Session Store with switchable failures."""

    def __init__(self, summaries: Optional[List[Dict[str, Any]]] = None):
        self.summaries: List[Dict[str, Any]] = list(summaries or [])
        self.speeds: Dict[str, List[Dict[str, Any]]] = {}
        self.created: List[Dict[str, Any]] = []
        self.notes_calls: List[tuple] = []
        self.list_calls: List[Optional[int]] = []
        self.speed_calls: List[str] = []
        self.fail_create = False
        self.fail_list = False
        self.fail_notes = False
        self.fail_speeds = False

    async def create_summary(self, payload):
        if self.fail_create:
            raise RuntimeError("store unavailable")
        self.created.append(payload)
        return {"ok": True, "created": True}

    async def list_summaries(self, duration_min=None):
        self.list_calls.append(duration_min)
        if self.fail_list:
            raise RuntimeError("store unavailable")
        rows = [dict(r) for r in self.summaries]
        if duration_min is not None:
            rows = [r for r in rows if r["duration_min"] == duration_min]
        return rows

    async def get_speed_series(self, summary_id):
        self.speed_calls.append(summary_id)
        if self.fail_speeds:
            raise RuntimeError("store unavailable")
        return list(self.speeds.get(summary_id, []))

    async def update_notes(self, summary_id, notes):
        if self.fail_notes:
            raise RuntimeError("store unavailable")
        self.notes_calls.append((summary_id, notes))
        return {"ok": True}


def summary_payload(summary_id: str = "s1", *, duration_min: int = 1, answered: int = 2, correct: int = 1, **overrides):
    payload = {
        "id": summary_id,
        "duration_min": duration_min,
        "started_at": 1_700_000_000_000,
        "ended_at": 1_700_000_060_000,
        "answered": answered,
        "correct": correct,
        "wrong": answered - correct,
        "avg_seconds": 1.5 if answered else 0,
        "speed_series": [{"x": i + 1, "seconds": 1.0 + i} for i in range(answered)],
        "notes": "",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(bind=db_engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def client(session_factory):
    def _override_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _override_db
    yield TestClient(app)
    app.dependency_overrides.clear()
