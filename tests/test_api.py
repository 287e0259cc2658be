# tests/test_api.py

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from pecal.core.config import settings
from pecal.db.session import get_db
from pecal.models import Notification
from pecal.reminders import api as cron_api
from pecal.reminders.api import get_push_gateway
from pecal.reminders.producer import emit_reminder_event
from pecal.reminders.service import app

from .conftest import START_TIME, START_UNIX, make_task

AUTH = {"Authorization": "Bearer s3cret"}


@pytest.fixture()
def client(db, push_gateway, monkeypatch):
    monkeypatch.setattr(settings, "CRON_SECRET", "s3cret")

    def _get_db():
        yield db

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_push_gateway] = lambda: push_gateway
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_requires_configured_secret(client, monkeypatch) -> None:
    monkeypatch.setattr(settings, "CRON_SECRET", None)
    response = client.post("/api/cron/task-reminders", headers=AUTH)
    assert response.status_code == 500
    assert response.json() == {"error": "CRON_SECRET is not configured"}


def test_rejects_wrong_bearer(client) -> None:
    assert client.post("/api/cron/task-reminders").status_code == 401
    response = client.get("/api/cron/task-reminders", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401


def test_cycle_compiles_and_dispatches(client, db, redis_client, personal_workspace, monkeypatch) -> None:
    monkeypatch.setattr("pecal.reminders.dispatcher.now_unix", lambda: START_UNIX)
    make_task(db)
    emit_reminder_event("upsert", 42, 7, title="Standup", start_time=START_TIME, reminder_minutes=10)

    response = client.post("/api/cron/task-reminders", headers=AUTH)

    assert response.status_code == 200
    assert response.json() == {"success": True, "processedStreamEvents": 1, "sentNotifications": 1}
    assert db.query(Notification).count() == 1

    status = client.get("/api/cron/task-reminders", headers=AUTH).json()
    assert status["success"] is True
    assert status["redis"] is True
    assert status["lastRun"]["processedStreamEvents"] == 1
    assert status["lastRun"]["sentNotifications"] == 1
    assert "ranAt" in status["lastRun"]


def test_failure_is_recorded(client, redis_client, monkeypatch) -> None:
    def broken_cycle(**kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(cron_api, "run_reminder_cycle", broken_cycle)

    response = client.post("/api/cron/task-reminders", headers=AUTH)
    assert response.status_code == 500
    last_run = client.get("/api/cron/task-reminders", headers=AUTH).json()["lastRun"]
    assert last_run["error"] == "boom"


def test_status_without_store(client, monkeypatch) -> None:
    from pecal.core.redis import set_redis

    set_redis(None)
    monkeypatch.setattr(settings, "REDIS_URL", None)
    assert client.get("/api/cron/task-reminders", headers=AUTH).json() == {
        "success": True,
        "redis": False,
        "lastRun": None,
    }
