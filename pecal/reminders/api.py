import logging
import secrets
from datetime import datetime, timezone as dt_timezone
from typing import Optional

import redis
from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pecal.core.config import settings
from pecal.core.redis import get_redis
from pecal.db.session import get_db
from .push import FCMPushGateway
from .store import ReminderStore
from .tasks import record_last_run, run_reminder_cycle

logger = logging.getLogger(__name__)

router = APIRouter()


def get_push_gateway() -> FCMPushGateway:
    return FCMPushGateway()


def _check_cron_auth(authorization: Optional[str]) -> Optional[JSONResponse]:
    cron_secret = settings.CRON_SECRET
    if not cron_secret:
        return JSONResponse({"error": "CRON_SECRET is not configured"}, status_code=500)
    if not authorization or not secrets.compare_digest(authorization, f"Bearer {cron_secret}"):
        return JSONResponse({"error": "Unauthorized"}, status_code=401)
    return None


@router.post("/task-reminders")
def run_task_reminders(
    authorization: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
    push_gateway: FCMPushGateway = Depends(get_push_gateway),
):
    """Compile pending reminder events and deliver due reminders."""
    denied = _check_cron_auth(authorization)
    if denied is not None:
        return denied
    try:
        result = run_reminder_cycle(db=db, push_gateway=push_gateway)
    except Exception as e:
        logger.exception("❌ [Cron Task Reminders] failed")
        record_last_run({"ranAt": datetime.now(dt_timezone.utc).isoformat(), "error": str(e)})
        return JSONResponse({"error": "Failed to process task reminders"}, status_code=500)
    return {
        "success": True,
        "processedStreamEvents": result["processedStreamEvents"],
        "sentNotifications": result["sentNotifications"],
    }


@router.get("/task-reminders")
def get_task_reminders_status(authorization: Optional[str] = Header(default=None)):
    """Report the last recorded cron run."""
    denied = _check_cron_auth(authorization)
    if denied is not None:
        return denied
    client = get_redis()
    if client is None:
        return {"success": True, "redis": False, "lastRun": None}
    try:
        last_run = ReminderStore(client).get_last_run()
    except redis.RedisError as e:
        logger.warning(f"⚠️ [Cron Task Reminders] Failed to read last run: {e!r}")
        last_run = None
    return {"success": True, "redis": True, "lastRun": last_run}
