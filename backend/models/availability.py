"""Working-hours model definitions."""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from backend.database import Base


class WorkingHours(Base):
    """One weekday entry of a doctor's weekly working-hours template."""
    __tablename__ = "working_hours"
    __table_args__ = (UniqueConstraint("doctor_id", "day_of_week", name="uq_working_hours_doctor_day"),)

    id = Column(Integer, primary_key=True)
    doctor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    day_of_week = Column(String, nullable=False)  # monday..sunday
    start_time = Column(String(8), nullable=False)
    end_time = Column(String(8), nullable=False)
