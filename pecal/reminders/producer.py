"""
Reminder event producer, called by task create/update/delete handlers.

Emitting is best-effort: reminder delivery must never fail the task write it
accompanies, so every failure is logged and swallowed here.
"""
import logging
from datetime import datetime
from typing import Optional, Union

import redis
from pydantic import ValidationError

from pecal.core.redis import get_redis
from pecal.utils.timezone import sanitize_reminder_minutes, to_local_naive
from .config import reminder_settings
from .metrics import reminder_events_emitted_total, reminder_events_emit_failed_total
from .schemas import ReminderEvent
from .store import ReminderStore

logger = logging.getLogger(__name__)

MIN_STREAM_MAXLEN = 1000


def emit_reminder_event(
    action: str,
    task_id: int,
    workspace_id: int,
    title: Optional[str] = None,
    color: Optional[str] = None,
    start_time: Union[str, datetime, None] = None,
    reminder_minutes: Optional[Union[int, str]] = None,
    redis_client: Optional[redis.Redis] = None,
) -> None:
    client = redis_client if redis_client is not None else get_redis()
    if client is None:
        return

    if isinstance(start_time, datetime):
        start_time = to_local_naive(start_time).strftime("%Y-%m-%d %H:%M:%S")

    try:
        event = ReminderEvent(
            action=action,
            task_id=task_id,
            workspace_id=workspace_id,
            title=title,
            color=color,
            start_time=start_time,
            reminder_minutes=sanitize_reminder_minutes(reminder_minutes),
        )
    except ValidationError as e:
        logger.warning(f"⚠️ [Reminders] Dropping invalid reminder event for task {task_id}: {e.errors()}")
        reminder_events_emit_failed_total.inc()
        return

    try:
        maxlen = max(MIN_STREAM_MAXLEN, reminder_settings.STREAM_MAXLEN)
        ReminderStore(client).append_event(event.to_stream_fields(), maxlen=maxlen)
    except redis.RedisError as e:
        logger.warning(f"⚠️ [Reminders] Enqueue failed for task {task_id}: {e!r}")
        reminder_events_emit_failed_total.inc()
        return
    reminder_events_emitted_total.labels(action=event.action).inc()
