"""
Stream consumer: compiles reminder events into the schedule.

Entries are applied strictly in stream order from the stored cursor, in
bounded batches. Every step is idempotent, so a crash between applying
entries and persisting the cursor is recovered by simply running again.
"""
import logging
from typing import Dict, Optional

import redis
from pydantic import ValidationError

from pecal.core.redis import get_redis
from pecal.utils.timezone import parse_datetime_to_unix, sanitize_reminder_minutes
from .config import reminder_settings
from .metrics import (
    stream_entries_processed_total,
    stream_entries_skipped_total,
    jobs_scheduled_total,
    jobs_removed_total,
)
from .schemas import ReminderEvent, ReminderJob
from .store import ReminderStore, job_key_for_task

logger = logging.getLogger(__name__)


def parse_stream_entry(fields: Dict[str, str]) -> Optional[ReminderEvent]:
    """Decode a flat stream field set. Returns None for malformed entries."""
    try:
        task_id = int(str(fields.get("task_id", "")).strip())
        workspace_id = int(str(fields.get("workspace_id", "")).strip())
    except ValueError:
        return None
    try:
        return ReminderEvent(
            action=fields.get("action", ""),
            task_id=task_id,
            workspace_id=workspace_id,
            title=fields.get("title") or None,
            color=fields.get("color") or None,
            start_time=fields.get("start_time") or None,
            reminder_minutes=sanitize_reminder_minutes(fields.get("reminder_minutes")),
        )
    except ValidationError:
        return None


def compile_job(event: ReminderEvent) -> Optional[ReminderJob]:
    """Build the schedule job for an upsert, or None when the reminder is disabled."""
    minutes = sanitize_reminder_minutes(event.reminder_minutes)
    start_at = parse_datetime_to_unix(event.start_time) if event.start_time else None
    if minutes is None or start_at is None:
        return None
    return ReminderJob(
        task_id=event.task_id,
        workspace_id=event.workspace_id,
        title=event.title or "",
        color=event.color,
        start_at=start_at,
        reminder_minutes=minutes,
    )


def apply_event(store: ReminderStore, event: ReminderEvent) -> None:
    job = compile_job(event) if event.action == "upsert" else None
    if job is None:
        store.remove_job(job_key_for_task(event.task_id))
        jobs_removed_total.inc()
        return
    store.upsert_job(job)
    jobs_scheduled_total.inc()


def process_reminder_stream(redis_client: Optional[redis.Redis] = None) -> int:
    """Drain new stream entries into the schedule. Returns entries applied."""
    client = redis_client if redis_client is not None else get_redis()
    if client is None:
        return 0

    store = ReminderStore(client)
    batch_size = max(1, reminder_settings.STREAM_BATCH_SIZE)
    max_loops = max(1, reminder_settings.STREAM_MAX_LOOPS)

    processed = 0
    last_id = None
    next_id = None
    try:
        last_id = store.get_cursor()
        next_id = last_id
        for _ in range(max_loops):
            entries = store.read_events(next_id, batch_size)
            if not entries:
                break
            for entry_id, fields in entries:
                event = parse_stream_entry(fields)
                if event is None:
                    # Malformed entries are skipped but never block the cursor
                    logger.debug(f"[Reminders] Skipping malformed stream entry {entry_id}: {fields}")
                    stream_entries_skipped_total.inc()
                    next_id = entry_id
                    continue
                apply_event(store, event)
                processed += 1
                next_id = entry_id
            if processed >= batch_size * max_loops:
                break
    except redis.RedisError as e:
        logger.warning(f"⚠️ [Reminders] Stream processing interrupted after {processed} entries: {e!r}")

    if next_id is not None and next_id != last_id:
        try:
            store.advance_cursor(next_id)
        except redis.RedisError as e:
            logger.warning(f"⚠️ [Reminders] Failed to persist stream cursor {next_id}: {e!r}")

    if processed:
        stream_entries_processed_total.inc(processed)
        logger.info(f"🔄 [Reminders] Applied {processed} stream entries (cursor={next_id})")
    return processed
