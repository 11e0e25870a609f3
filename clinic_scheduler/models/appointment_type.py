"""Appointment type model definitions."""

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, String
from clinic_scheduler.database import Base


class AppointmentType(Base):
    """A bookable kind of appointment and how long it occupies the agenda."""
    __tablename__ = "appointment_types"
    __table_args__ = (
        CheckConstraint("duration_minutes >= 5", name="ck_appointment_types_duration"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=30)
    default_professional_id = Column(Integer, ForeignKey("professionals.id"), nullable=True)
    is_active = Column(Boolean, default=True)
