from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Index

from pecal.db.base import Base


TERMINAL_TASK_STATUSES = ("DONE",)


class Task(Base):
    """Calendar task. Only the columns the reminder pipeline reads are modeled."""
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    workspace_id = Column(Integer, nullable=False, index=True)
    title = Column(String(255), nullable=False)
    start_time = Column(DateTime, nullable=False)  # naive local wall time
    end_time = Column(DateTime, nullable=False)
    status = Column(String(20), nullable=False, default="TODO")
    color = Column(String(20), nullable=True)
    reminder_minutes = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_tasks_workspace_start", "workspace_id", "start_time"),
    )
