from celery import Celery
from pecal.core.config import settings
from .config import reminder_settings


broker_url = reminder_settings.CELERY_BROKER_URL or settings.REDIS_URL or "memory://"
result_backend = reminder_settings.CELERY_RESULT_BACKEND or None

celery_app = Celery(
    "reminders",
    broker=broker_url,
    backend=result_backend,
)

celery_app.conf.update(
    task_acks_late=True,
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    worker_prefetch_multiplier=1,
    include=["pecal.reminders.tasks"],
    task_ignore_result=True,
)

# Celery Beat schedule: the pipeline has no internal workers, it is driven from here
celery_app.conf.beat_schedule = {
    "process-reminder-stream": {
        "task": "reminders.process_stream",
        "schedule": reminder_settings.SCAN_INTERVAL_SECONDS,
        "options": {"expires": reminder_settings.SCAN_INTERVAL_SECONDS},
    },
    "dispatch-due-reminders": {
        "task": "reminders.dispatch_due",
        "schedule": reminder_settings.SCAN_INTERVAL_SECONDS,
        "options": {"expires": reminder_settings.SCAN_INTERVAL_SECONDS},
    },
}
