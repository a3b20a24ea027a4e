"""Notification model definitions."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from backend.database import Base


class Notification(Base):
    """An in-app notification, either immediate or scheduled for later delivery."""
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    appointment_id = Column(Integer, ForeignKey("appointments.id"), index=True)
    type = Column(String, nullable=False)
    channel = Column(String, default="in_app")
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    scheduled_for = Column(DateTime)
    is_sent = Column(Boolean, default=False)
    sent_at = Column(DateTime)
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
