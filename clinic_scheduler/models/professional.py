"""Professional and weekly service schedule model definitions."""

from sqlalchemy import Boolean, CheckConstraint, Column, ForeignKey, Integer, String, Time
from clinic_scheduler.database import Base


class Professional(Base):
    """A doctor or nurse working at the clinic."""
    __tablename__ = "professionals"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False)  # doctor/nurse
    specialty = Column(String, nullable=True)
    status = Column(String, nullable=False, default="active")  # active/inactive


class ServiceSchedule(Base):
    """One recurring weekly service window for a professional."""
    __tablename__ = "service_schedules"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_service_schedules_window"),
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_service_schedules_weekday"),
    )

    id = Column(Integer, primary_key=True)
    professional_id = Column(Integer, ForeignKey("professionals.id"), nullable=False, index=True)
    weekday = Column(Integer, nullable=False)  # 0=Sunday .. 6=Saturday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    is_active = Column(Boolean, default=True)
