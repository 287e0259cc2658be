import logging
from datetime import datetime, timezone as dt_timezone
from typing import Any, Dict, Optional

import redis
from celery import shared_task
from sqlalchemy.orm import Session

from pecal.core.redis import get_redis
from .config import reminder_settings
from .dispatcher import dispatch_due_reminders
from .store import ReminderStore
from .stream import process_reminder_stream

logger = logging.getLogger(__name__)


def run_reminder_cycle(db: Optional[Session] = None, push_gateway=None) -> Dict[str, Any]:
    """Compile new events, then deliver due jobs, and record the run."""
    processed = process_reminder_stream()
    sent = dispatch_due_reminders(db=db, push_gateway=push_gateway)
    payload = {
        "ranAt": datetime.now(dt_timezone.utc).isoformat(),
        "processedStreamEvents": processed,
        "sentNotifications": sent,
    }
    record_last_run(payload)
    return payload


def record_last_run(payload: Dict[str, Any]) -> None:
    client = get_redis()
    if client is None:
        return
    try:
        ReminderStore(client).record_last_run(payload, reminder_settings.CRON_LAST_RUN_TTL_SEC)
    except redis.RedisError as e:
        logger.warning(f"⚠️ [Reminders] Failed to record cron run: {e!r}")


@shared_task(name="reminders.process_stream")
def process_stream_task() -> int:
    return process_reminder_stream()


@shared_task(name="reminders.dispatch_due")
def dispatch_due_task() -> int:
    return dispatch_due_reminders()


@shared_task(name="reminders.run_cycle")
def run_cycle_task() -> Dict[str, Any]:
    return run_reminder_cycle()
