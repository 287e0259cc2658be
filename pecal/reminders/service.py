import logging
import sys

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from pecal.core.config import settings
from .api import router as cron_router
from .config import reminder_settings


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(title="Pecal Reminder Service")
    app.include_router(cron_router, prefix="/api/cron", tags=["reminders"])
    if reminder_settings.METRICS_ENABLED:
        Instrumentator().instrument(app).expose(app, endpoint="/metrics")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("pecal.reminders.service:app", host="0.0.0.0", port=8000)
