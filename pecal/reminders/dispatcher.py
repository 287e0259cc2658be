"""
Due-job dispatcher.

Pulls jobs whose trigger time has passed, validates them against the
canonical task, resolves the audience, claims a per-(member, occurrence)
dedupe marker, persists notifications and fans out pushes. Every job taken
from the schedule is retired exactly once, whatever the outcome.
"""
import logging
from typing import Any, Dict, List, Optional

import redis
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pecal.core.redis import get_redis
from pecal.crud.notification import create_notifications_bulk
from pecal.crud.push_token import deactivate_push_tokens, get_active_push_tokens_by_member_ids
from pecal.crud.task import get_task_by_id
from pecal.db.session import SessionLocal
from pecal.models.task import Task, TERMINAL_TASK_STATUSES
from pecal.utils.timezone import now_unix, parse_datetime_to_unix, sanitize_reminder_minutes
from .audience import resolve_audience
from .config import reminder_settings
from .metrics import (
    dispatcher_scans_total,
    jobs_dispatched_total,
    jobs_dropped_total,
    notifications_sent_total,
    dedupe_claims_lost_total,
    push_failed_total,
    push_tokens_deactivated_total,
)
from .push import FCMPushGateway, PushMessage
from .schemas import ReminderJob
from .store import ReminderStore

logger = logging.getLogger(__name__)

NOTIFICATION_TYPE = "TASK_REMINDER"
NOTIFICATION_TITLE = "Task reminder"
SOURCE_TYPE = "TASK"


def format_reminder_message(task_title: str, minutes: int) -> str:
    if minutes <= 0:
        return f"'{task_title}' starts now."
    return f"'{task_title}' starts in {minutes} minutes."


def _format_time(value: Any) -> Optional[str]:
    if value is None:
        return None
    if hasattr(value, "strftime"):
        return value.strftime("%Y-%m-%d %H:%M:%S")
    return str(value)


def is_job_current(task: Optional[Task], job: ReminderJob) -> bool:
    """True when the task still exists, is not terminal and matches the job's occurrence."""
    if task is None or task.status in TERMINAL_TASK_STATUSES:
        return False
    current_start_at = parse_datetime_to_unix(task.start_time)
    current_minutes = sanitize_reminder_minutes(task.reminder_minutes)
    if current_start_at is None or current_minutes is None:
        return False
    return current_start_at == job.start_at and current_minutes == job.reminder_minutes


def build_notification_row(task: Task, job: ReminderJob, member_id: int) -> Dict[str, Any]:
    return {
        "member_id": member_id,
        "type": NOTIFICATION_TYPE,
        "title": NOTIFICATION_TITLE,
        "message": format_reminder_message(task.title, job.reminder_minutes),
        "payload": {
            "task_id": task.id,
            "workspace_id": task.workspace_id,
            "start_time": _format_time(task.start_time),
            "end_time": _format_time(task.end_time),
            "reminder_minutes": job.reminder_minutes,
            "color": task.color,
        },
        "source_type": SOURCE_TYPE,
        "source_id": task.id,
    }


def build_push_messages(rows: List[Dict[str, Any]], tokens: List[Dict[str, Any]]) -> List[PushMessage]:
    tokens_by_member: Dict[int, List[str]] = {}
    for token_row in tokens:
        tokens_by_member.setdefault(int(token_row["member_id"]), []).append(str(token_row["token"]))

    messages: List[PushMessage] = []
    for row in rows:
        data = {"type": row["type"], "source_type": row["source_type"], "task_id": str(row["source_id"])}
        for key, value in row["payload"].items():
            data[key] = "" if value is None else str(value)
        for token in tokens_by_member.get(row["member_id"], []):
            messages.append(PushMessage(token=token, title=row["title"], body=row["message"], data=data))
    return messages


class DueReminderDispatcher:
    def __init__(self, db: Session, store: ReminderStore, push_gateway=None):
        self.db = db
        self.store = store
        self.push_gateway = push_gateway if push_gateway is not None else FCMPushGateway()
        self.sent_count = 0

    def _drop(self, job_key: str, reason: str) -> None:
        self.store.remove_job(job_key)
        jobs_dropped_total.labels(reason=reason).inc()
        logger.debug(f"[Reminders] Dropped job {job_key} ({reason})")

    def _load_job(self, job_key: str) -> Optional[ReminderJob]:
        raw = self.store.get_job_payload(job_key)
        if raw is None:
            # Index entry without payload: drop the stray entry
            self.store.remove_index_entry(job_key)
            jobs_dropped_total.labels(reason="missing_payload").inc()
            return None
        try:
            return ReminderJob.model_validate_json(raw)
        except ValidationError:
            self._drop(job_key, "invalid_payload")
            return None

    def _claim_members(self, job: ReminderJob, member_ids: List[int]) -> List[int]:
        ttl = reminder_settings.SENT_DEDUPE_TTL_SEC
        claimed = []
        for member_id in member_ids:
            if self.store.claim_occurrence(member_id, job, ttl):
                claimed.append(member_id)
            else:
                dedupe_claims_lost_total.inc()
        return claimed

    def _fan_out(self, rows: List[Dict[str, Any]]) -> None:
        member_ids = list(dict.fromkeys(row["member_id"] for row in rows))
        messages: List[PushMessage] = []
        try:
            tokens = get_active_push_tokens_by_member_ids(self.db, member_ids)
            messages = build_push_messages(rows, tokens)
            if messages:
                result = self.push_gateway.send(messages)
                if result.bounced_tokens:
                    deactivated = deactivate_push_tokens(self.db, result.bounced_tokens)
                    push_tokens_deactivated_total.inc(deactivated)
                    logger.info(f"🔕 [Reminders] Deactivated {deactivated} bounced push tokens")
        except Exception as e:
            # Notifications are already committed; push is best-effort
            self.db.rollback()
            push_failed_total.inc(len(messages) or 1)
            logger.error(f"❌ [Reminders] Push fan-out failed for {len(member_ids)} members: {e!r}")
        for member_id in member_ids:
            self.store.invalidate_notification_caches(member_id)

    def dispatch_job(self, job_key: str) -> int:
        """Deliver one due job and retire it. Returns notifications sent."""
        job = self._load_job(job_key)
        if job is None:
            return 0

        task = get_task_by_id(self.db, job.task_id)
        if not is_job_current(task, job):
            self._drop(job_key, "stale")
            return 0

        jobs_dispatched_total.inc()
        sent = 0
        member_ids = resolve_audience(self.db, job.workspace_id)
        claimed = self._claim_members(job, member_ids) if member_ids else []
        if claimed:
            # Re-read the task right before persisting; a claim on a stale
            # occurrence is harmless because the markers are per occurrence.
            self.db.expire_all()
            task = get_task_by_id(self.db, job.task_id)
            if not is_job_current(task, job):
                self._drop(job_key, "stale")
                return 0
            rows = [build_notification_row(task, job, member_id) for member_id in claimed]
            try:
                sent = create_notifications_bulk(self.db, rows)
            except SQLAlchemyError:
                # Nothing was persisted: free the markers so the retained job can retry
                for member_id in claimed:
                    self.store.release_occurrence(member_id, job)
                raise
            notifications_sent_total.inc(sent)
            self._fan_out(rows)

        self.store.remove_job(job_key)
        return sent

    def dispatch_due(self, now: Optional[int] = None) -> int:
        current = now_unix() if now is None else int(now)
        job_keys = self.store.due_job_keys(current, reminder_settings.SEND_BATCH_SIZE)
        dispatcher_scans_total.inc()
        for job_key in job_keys:
            self.sent_count += self.dispatch_job(job_key)
        return self.sent_count


def dispatch_due_reminders(
    db: Optional[Session] = None,
    redis_client: Optional[redis.Redis] = None,
    push_gateway=None,
    now: Optional[int] = None,
) -> int:
    """Deliver all currently due reminder jobs. Returns notifications sent after dedupe."""
    client = redis_client if redis_client is not None else get_redis()
    if client is None:
        return 0

    own_session = db is None
    session = SessionLocal() if own_session else db
    dispatcher = DueReminderDispatcher(session, ReminderStore(client), push_gateway=push_gateway)
    try:
        dispatcher.dispatch_due(now=now)
    except redis.RedisError as e:
        logger.warning(f"⚠️ [Reminders] Dispatch interrupted by store error: {e!r}")
    except SQLAlchemyError as e:
        session.rollback()
        logger.warning(f"⚠️ [Reminders] Dispatch interrupted by database error: {e!r}")
    finally:
        if own_session:
            session.close()
    sent = dispatcher.sent_count
    if sent:
        logger.info(f"🔔 [Reminders] Sent {sent} task reminder notifications")
    return sent
