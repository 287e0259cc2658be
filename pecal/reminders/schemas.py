"""
Schemas for reminder stream events and compiled schedule jobs.
"""
from typing import Dict, Literal, Optional
from pydantic import BaseModel, Field


ReminderAction = Literal["upsert", "delete"]


class ReminderEvent(BaseModel):
    """One reminder-relevant task mutation, as appended to the stream."""
    action: ReminderAction
    task_id: int = Field(..., gt=0)
    workspace_id: int = Field(..., gt=0)
    title: Optional[str] = None
    color: Optional[str] = None
    start_time: Optional[str] = None
    reminder_minutes: Optional[int] = None

    def to_stream_fields(self) -> Dict[str, str]:
        """Flat string field set; absent values are written as empty strings."""
        return {
            "action": self.action,
            "task_id": str(self.task_id),
            "workspace_id": str(self.workspace_id),
            "reminder_minutes": "" if self.reminder_minutes is None else str(self.reminder_minutes),
            "title": self.title or "",
            "color": self.color or "",
            "start_time": self.start_time or "",
        }


class ReminderJob(BaseModel):
    """Dispatch-ready job, one per task, stored as JSON in the job hash."""
    task_id: int
    workspace_id: int
    title: str = ""
    color: Optional[str] = None
    start_at: int
    reminder_minutes: int = Field(..., ge=0, le=7 * 24 * 60)

    @property
    def trigger_at(self) -> int:
        return self.start_at - self.reminder_minutes * 60
