"""
Redis-backed coordination store for the reminder pipeline.

Key layout (all keys carry settings.REDIS_KEY_PREFIX):
- task:reminders:stream        stream of reminder events
- task:reminders:last-id       consumer cursor (last applied stream id)
- task:reminders:due           sorted set, member task:<id>, score trigger_at
- task:reminders:jobs          hash, field task:<id>, JSON ReminderJob
- task:reminders:sent:<member>:<task>:<start_at>:<minutes>   dedupe flag
"""

import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import redis

from pecal.core.redis import create_cache_key, to_redis_key
from .schemas import ReminderJob

logger = logging.getLogger(__name__)

INITIAL_STREAM_ID = "0-0"


def job_key_for_task(task_id: int) -> str:
    return f"task:{task_id}"


def _stream_id_tuple(entry_id: str) -> Tuple[int, int]:
    ms, _, seq = entry_id.partition("-")
    return int(ms), int(seq or 0)


class ReminderStore:
    """Thin wrapper over the Redis primitives the pipeline relies on."""

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

        self.STREAM_KEY = to_redis_key("task:reminders:stream")
        self.LAST_ID_KEY = to_redis_key("task:reminders:last-id")
        self.DUE_ZSET_KEY = to_redis_key("task:reminders:due")
        self.JOB_HASH_KEY = to_redis_key("task:reminders:jobs")
        self.LAST_RUN_KEY = to_redis_key("task:reminders:cron:last-run")

    # --- Event log ---
    def append_event(self, fields: Dict[str, str], maxlen: int) -> str:
        return self.redis.xadd(self.STREAM_KEY, fields, maxlen=maxlen, approximate=True)

    def read_events(self, after_id: str, count: int) -> List[Tuple[str, Dict[str, str]]]:
        result = self.redis.xread({self.STREAM_KEY: after_id}, count=count)
        entries: List[Tuple[str, Dict[str, str]]] = []
        for _stream, stream_entries in result or []:
            for entry_id, fields in stream_entries:
                entries.append((entry_id, fields or {}))
        return entries

    # --- Cursor ---
    def get_cursor(self) -> str:
        return self.redis.get(self.LAST_ID_KEY) or INITIAL_STREAM_ID

    def advance_cursor(self, entry_id: str) -> bool:
        """Store entry_id unless the stored cursor is already at or past it."""
        advanced = False

        def _advance(pipe: redis.client.Pipeline) -> None:
            nonlocal advanced
            current = pipe.get(self.LAST_ID_KEY) or INITIAL_STREAM_ID
            advanced = _stream_id_tuple(entry_id) > _stream_id_tuple(current)
            pipe.multi()
            if advanced:
                pipe.set(self.LAST_ID_KEY, entry_id)

        self.redis.transaction(_advance, self.LAST_ID_KEY)
        return advanced

    # --- Schedule index + job store ---
    def upsert_job(self, job: ReminderJob) -> None:
        key = job_key_for_task(job.task_id)
        pipe = self.redis.pipeline(transaction=True)
        pipe.zadd(self.DUE_ZSET_KEY, {key: job.trigger_at})
        pipe.hset(self.JOB_HASH_KEY, key, job.model_dump_json())
        pipe.execute()

    def remove_job(self, job_key: str) -> None:
        pipe = self.redis.pipeline(transaction=True)
        pipe.zrem(self.DUE_ZSET_KEY, job_key)
        pipe.hdel(self.JOB_HASH_KEY, job_key)
        pipe.execute()

    def remove_index_entry(self, job_key: str) -> None:
        self.redis.zrem(self.DUE_ZSET_KEY, job_key)

    def due_job_keys(self, now_unix: int, limit: int) -> List[str]:
        return list(self.redis.zrangebyscore(self.DUE_ZSET_KEY, "-inf", now_unix, start=0, num=max(1, limit)))

    def get_job_payload(self, job_key: str) -> Optional[str]:
        return self.redis.hget(self.JOB_HASH_KEY, job_key)

    def get_trigger_at(self, job_key: str) -> Optional[float]:
        return self.redis.zscore(self.DUE_ZSET_KEY, job_key)

    # --- Dedupe markers ---
    @staticmethod
    def _sent_key(member_id: int, job: ReminderJob) -> str:
        return to_redis_key(
            f"task:reminders:sent:{member_id}:{job.task_id}:{job.start_at}:{job.reminder_minutes}"
        )

    def claim_occurrence(self, member_id: int, job: ReminderJob, ttl_seconds: int) -> bool:
        key = self._sent_key(member_id, job)
        return bool(self.redis.set(key, "1", ex=max(60, ttl_seconds), nx=True))

    def release_occurrence(self, member_id: int, job: ReminderJob) -> None:
        self.redis.delete(self._sent_key(member_id, job))

    # --- Member caches ---
    def invalidate_notification_caches(self, member_id: int) -> None:
        self.redis.delete(to_redis_key(create_cache_key("notifications", "unread", "member", member_id)))
        pattern = to_redis_key(create_cache_key("notifications", "list", "member", member_id, "limit", "*"))
        keys = list(self.redis.scan_iter(match=pattern, count=200))
        if keys:
            self.redis.delete(*keys)

    # --- Cron bookkeeping ---
    def record_last_run(self, payload: Dict[str, Any], ttl_seconds: int) -> None:
        self.redis.set(self.LAST_RUN_KEY, json.dumps(payload), ex=ttl_seconds)

    def get_last_run(self) -> Optional[Dict[str, Any]]:
        raw = self.redis.get(self.LAST_RUN_KEY)
        if not raw:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            return {"raw": raw}
