# tests/conftest.py

from __future__ import annotations

from datetime import datetime

import fakeredis
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from pecal.core.config import settings
from pecal.core.redis import set_redis
from pecal.db.base import Base
from pecal.models import Task, TeamMember, Workspace

from .fakes import FakePushGateway

# "2025-01-10 09:00:00" at the default +09:00 offset
START_TIME = "2025-01-10 09:00:00"
START_UNIX = 1736467200


@pytest.fixture(autouse=True)
def _fixed_offset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "REMINDER_DEFAULT_TZ_OFFSET_MINUTES", 540)


@pytest.fixture()
def redis_client():
    """Fake Redis with real stream / sorted set / SET NX EX semantics."""
    client = fakeredis.FakeRedis(decode_responses=True)
    client.flushall()
    set_redis(client)
    yield client
    set_redis(None)
    client.flushall()


@pytest.fixture()
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    session = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def push_gateway() -> FakePushGateway:
    return FakePushGateway()


@pytest.fixture()
def personal_workspace(db) -> Workspace:
    workspace = Workspace(workspace_id=7, type="personal", owner_id=100, name="Mine")
    db.add(workspace)
    db.commit()
    return workspace


@pytest.fixture()
def team_workspace(db) -> Workspace:
    workspace = Workspace(workspace_id=8, type="team", owner_id=55, name="Team")
    db.add(workspace)
    db.add_all([
        TeamMember(team_id=55, member_id=201),
        TeamMember(team_id=55, member_id=202),
        TeamMember(team_id=55, member_id=203),
    ])
    db.commit()
    return workspace


def make_task(db, *, task_id=42, workspace_id=7, minutes=10, status="TODO", title="Standup") -> Task:
    task = Task(
        id=task_id,
        workspace_id=workspace_id,
        title=title,
        start_time=datetime(2025, 1, 10, 9, 0, 0),
        end_time=datetime(2025, 1, 10, 9, 30, 0),
        status=status,
        color="#ff8800",
        reminder_minutes=minutes,
    )
    db.add(task)
    db.commit()
    return task
