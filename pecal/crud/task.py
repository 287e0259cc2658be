from typing import Optional
from sqlalchemy.orm import Session

from pecal.models.task import Task


def get_task_by_id(db: Session, task_id: int) -> Optional[Task]:
    return db.get(Task, task_id)
