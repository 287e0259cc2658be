from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, Index

from pecal.db.base import Base


class MemberPushToken(Base):
    """Registered push destination (FCM registration token) for a member."""
    __tablename__ = "member_push_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    member_id = Column(Integer, nullable=False, index=True)
    token = Column(String(255), nullable=False, unique=True)
    platform = Column(String(20), nullable=False, default="ios")  # ios, android
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_member_push_tokens_member_active", "member_id", "is_active"),
    )
