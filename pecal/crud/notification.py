import json
from datetime import datetime
from typing import Any, Dict, List
from sqlalchemy.orm import Session

from pecal.models.notification import Notification


def create_notifications_bulk(db: Session, rows: List[Dict[str, Any]]) -> int:
    """Insert notification rows in one commit. Returns the number inserted."""
    if not rows:
        return 0
    now = datetime.utcnow()
    objects = [
        Notification(
            member_id=row["member_id"],
            type=row["type"],
            title=row.get("title"),
            message=row.get("message"),
            payload_json=json.dumps(row["payload"]) if row.get("payload") else None,
            source_type=row.get("source_type"),
            source_id=row.get("source_id"),
            is_read=False,
            created_at=now,
        )
        for row in rows
    ]
    db.add_all(objects)
    db.commit()
    return len(objects)
