"""Appointment model definitions."""

from datetime import datetime

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String, Time
from clinic_scheduler.database import Base


class Appointment(Base):
    """A booked appointment.

    ``professional`` keeps the legacy display-name link; new bookings also
    fill ``professional_id``.
    """
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True)
    patient_id = Column(Integer, ForeignKey("patients.id"))
    type = Column(String, nullable=False, default="consulta")
    date = Column(Date, nullable=False, index=True)
    time = Column(Time, nullable=False)
    professional = Column(String, nullable=False)
    professional_id = Column(Integer, ForeignKey("professionals.id"), nullable=True)
    status = Column(String, nullable=False, default="scheduled")
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
