from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class ReminderSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="REMINDER_", env_file=".env", extra="ignore")

    # Stream consumer
    STREAM_BATCH_SIZE: int = 200
    STREAM_MAX_LOOPS: int = 10
    STREAM_MAXLEN: int = 100000

    # Dispatcher
    SEND_BATCH_SIZE: int = 100
    SENT_DEDUPE_TTL_SEC: int = 60 * 60 * 24 * 7

    # Scheduling
    SCAN_INTERVAL_SECONDS: int = 30
    CRON_LAST_RUN_TTL_SEC: int = 60 * 60 * 24
    CELERY_BROKER_URL: Optional[str] = None
    CELERY_RESULT_BACKEND: Optional[str] = None

    # FCM
    PUSH_ENABLED: bool = True
    FCM_PROJECT_ID: Optional[str] = None
    FCM_CREDENTIALS_JSON: Optional[str] = None  # path or inline JSON via env

    # Metrics
    METRICS_ENABLED: bool = True


reminder_settings = ReminderSettings()
