# tests/test_celery_tasks.py

from __future__ import annotations

from pecal.reminders.celery_app import celery_app
from pecal.reminders.producer import emit_reminder_event
from pecal.reminders.store import ReminderStore
from pecal.reminders.tasks import dispatch_due_task, process_stream_task

from .conftest import START_TIME, START_UNIX


def test_beat_schedule_targets_registered_tasks() -> None:
    registered = set(celery_app.tasks.keys())
    for entry in celery_app.conf.beat_schedule.values():
        assert entry["task"] in registered
    assert "reminders.run_cycle" in registered


def test_process_stream_task_runs_locally(redis_client) -> None:
    emit_reminder_event("upsert", 42, 7, start_time=START_TIME, reminder_minutes=5)

    assert process_stream_task.apply().get() == 1
    assert ReminderStore(redis_client).get_trigger_at("task:42") == START_UNIX - 300


def test_dispatch_task_without_due_jobs(redis_client) -> None:
    assert dispatch_due_task.apply().get() == 0
