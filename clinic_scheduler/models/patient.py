"""Patient model definitions."""

from sqlalchemy import Column, Integer, String
from clinic_scheduler.database import Base


class Patient(Base):
    """Represents a clinic patient."""
    __tablename__ = "patients"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    cpf = Column(String(14), unique=True, index=True, nullable=False)
    phone = Column(String(20), index=True, nullable=False)
    email = Column(String, nullable=True)
    status = Column(String, nullable=False, default="active")
