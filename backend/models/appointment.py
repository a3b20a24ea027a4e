"""Appointment model definitions."""

from datetime import datetime

from sqlalchemy import JSON, Column, Date, DateTime, ForeignKey, Integer, String
from backend.database import Base


class Appointment(Base):
    """Represents a booked appointment between a patient and a doctor."""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False)
    start_time = Column(String(8), nullable=False)  # "HH:MM"
    end_time = Column(String(8), nullable=False)
    duration_minutes = Column(Integer, default=30)
    appointment_type = Column(String, default="consultation")
    status = Column(String, default="pending")
    reason = Column(String)
    notes = Column(String)
    special_requirements = Column(JSON)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
