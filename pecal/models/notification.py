from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Index

from pecal.db.base import Base


class Notification(Base):
    __tablename__ = "notifications"

    notification_id = Column(Integer, primary_key=True, autoincrement=True)
    member_id = Column(Integer, nullable=False, index=True)
    type = Column(String(50), nullable=False)
    title = Column(String(255), nullable=True)
    message = Column(Text, nullable=True)
    payload_json = Column(Text, nullable=True)
    source_type = Column(String(50), nullable=True)
    source_id = Column(Integer, nullable=True)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    read_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("ix_notifications_member_read", "member_id", "is_read"),
        Index("ix_notifications_source", "source_type", "source_id"),
    )
