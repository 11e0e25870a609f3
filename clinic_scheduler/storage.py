"""Storage collaborator consumed by the scheduling engine."""

import logging
from datetime import date
from typing import Any, Callable, Protocol

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_scheduler.models.appointment import Appointment
from clinic_scheduler.models.appointment_type import AppointmentType
from clinic_scheduler.models.patient import Patient
from clinic_scheduler.models.professional import Professional, ServiceSchedule
from clinic_scheduler.scheduling.errors import Conflict, InvalidInput, StorageUnavailable

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE_MESSAGE = 'Database unavailable. Verify DATABASE_URL and database credentials.'
SLOT_TAKEN_MESSAGE = 'This time is already booked for this professional.'


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when ``exc`` comes from a unique index rather than a foreign key or check."""
    # 23505 is unique_violation on Postgres; SQLite only reports it in the message
    if getattr(exc.orig, 'pgcode', None) == '23505':
        return True
    return 'unique' in str(exc.orig).lower()


def _appointment_integrity_error(exc: IntegrityError) -> Exception:
    if is_unique_violation(exc):
        return Conflict(message=SLOT_TAKEN_MESSAGE)
    return InvalidInput('Appointment references an unknown patient or professional.')


class Storage(Protocol):
    def get_appointments_by_date_range(self, start: date, end: date) -> list[Appointment]: ...

    def get_appointments_by_status(self, status: str) -> list[Appointment]: ...

    def get_appointment(self, appointment_id: int) -> Appointment | None: ...

    def get_appointments_by_patient(self, patient_id: int) -> list[Appointment]: ...

    def get_all_appointment_types(self) -> list[AppointmentType]: ...

    def get_all_professionals(self) -> list[Professional]: ...

    def get_professional(self, professional_id: int) -> Professional | None: ...

    def get_all_service_schedules(self) -> list[ServiceSchedule]: ...

    def get_schedules_by_professional(self, professional_id: int) -> list[ServiceSchedule]: ...

    def get_patient(self, patient_id: int) -> Patient | None: ...

    def get_patient_by_cpf(self, cpf: str) -> Patient | None: ...

    def get_patient_by_phone(self, phone: str) -> Patient | None: ...

    def create_appointment(self, data: dict[str, Any]) -> Appointment: ...

    def update_appointment(self, appointment_id: int, partial: dict[str, Any]) -> Appointment | None: ...

    def create_service_schedule(self, data: dict[str, Any]) -> ServiceSchedule: ...


class SqlAlchemyStorage:
    """``Storage`` backed by a SQLAlchemy session.

    Reads and writes run in the caller's session; each write commits on its
    own. Database failures surface as ``StorageUnavailable``.
    """

    def __init__(self, db: Session):
        self.db = db

    def _read(self, query):
        try:
            return query()
        except SQLAlchemyError as exc:
            logger.exception('Storage read failed.')
            raise StorageUnavailable(DATABASE_UNAVAILABLE_MESSAGE) from exc

    def _write(self, instance, integrity_error: Callable[[IntegrityError], Exception]):
        try:
            self.db.add(instance)
            self.db.commit()
            self.db.refresh(instance)
            return instance
        except IntegrityError as exc:
            self.db.rollback()
            raise integrity_error(exc) from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception('Storage write failed.')
            raise StorageUnavailable(DATABASE_UNAVAILABLE_MESSAGE) from exc

    def get_appointments_by_date_range(self, start: date, end: date) -> list[Appointment]:
        return self._read(
            lambda: self.db.query(Appointment).filter(
                Appointment.date >= start,
                Appointment.date <= end,
            ).order_by(Appointment.date.asc(), Appointment.time.asc()).all()
        )

    def get_appointments_by_status(self, status: str) -> list[Appointment]:
        return self._read(
            lambda: self.db.query(Appointment).filter(
                Appointment.status == status,
            ).order_by(Appointment.date.asc(), Appointment.time.asc()).all()
        )

    def get_appointment(self, appointment_id: int) -> Appointment | None:
        return self._read(
            lambda: self.db.query(Appointment).filter(Appointment.id == appointment_id).first()
        )

    def get_appointments_by_patient(self, patient_id: int) -> list[Appointment]:
        return self._read(
            lambda: self.db.query(Appointment).filter(
                Appointment.patient_id == patient_id,
            ).order_by(Appointment.date.desc(), Appointment.time.desc()).all()
        )

    def get_all_appointment_types(self) -> list[AppointmentType]:
        return self._read(lambda: self.db.query(AppointmentType).order_by(AppointmentType.id.asc()).all())

    def get_all_professionals(self) -> list[Professional]:
        return self._read(lambda: self.db.query(Professional).order_by(Professional.id.asc()).all())

    def get_professional(self, professional_id: int) -> Professional | None:
        return self._read(
            lambda: self.db.query(Professional).filter(Professional.id == professional_id).first()
        )

    def get_all_service_schedules(self) -> list[ServiceSchedule]:
        return self._read(lambda: self.db.query(ServiceSchedule).order_by(ServiceSchedule.id.asc()).all())

    def get_schedules_by_professional(self, professional_id: int) -> list[ServiceSchedule]:
        return self._read(
            lambda: self.db.query(ServiceSchedule).filter(
                ServiceSchedule.professional_id == professional_id,
            ).order_by(ServiceSchedule.weekday.asc(), ServiceSchedule.start_time.asc()).all()
        )

    def get_patient(self, patient_id: int) -> Patient | None:
        return self._read(lambda: self.db.query(Patient).filter(Patient.id == patient_id).first())

    def get_patient_by_cpf(self, cpf: str) -> Patient | None:
        return self._read(lambda: self.db.query(Patient).filter(Patient.cpf == cpf).first())

    def get_patient_by_phone(self, phone: str) -> Patient | None:
        return self._read(lambda: self.db.query(Patient).filter(Patient.phone == phone).first())

    def create_appointment(self, data: dict[str, Any]) -> Appointment:
        return self._write(Appointment(**data), _appointment_integrity_error)

    def update_appointment(self, appointment_id: int, partial: dict[str, Any]) -> Appointment | None:
        appointment = self.get_appointment(appointment_id)
        if appointment is None:
            return None

        for field_name, value in partial.items():
            setattr(appointment, field_name, value)

        return self._write(appointment, _appointment_integrity_error)

    def create_service_schedule(self, data: dict[str, Any]) -> ServiceSchedule:
        return self._write(ServiceSchedule(**data), lambda _exc: InvalidInput('Invalid service schedule.'))
