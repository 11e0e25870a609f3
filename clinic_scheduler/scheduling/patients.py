"""Patient lookups by CPF or phone, used by booking front ends."""

from dataclasses import dataclass
from datetime import date

from clinic_scheduler.models.patient import Patient
from clinic_scheduler.scheduling.errors import InvalidInput
from clinic_scheduler.scheduling.formatting import format_minutes
from clinic_scheduler.scheduling.rules import DEFAULT_RULES, SchedulingRules, normalize_label
from clinic_scheduler.scheduling.timeutils import time_to_minutes
from clinic_scheduler.storage import Storage


@dataclass(frozen=True)
class PatientStatus:
    exists: bool
    active: bool


@dataclass(frozen=True)
class PersonAppointment:
    id: int
    date: date
    time: str
    status: str
    type: str
    specialty: str | None


def find_patient(storage: Storage, cpf: str | None = None, phone: str | None = None) -> Patient | None:
    cpf = (cpf or '').strip()
    phone = (phone or '').strip()
    if not cpf and not phone:
        raise InvalidInput('Provide a CPF or phone number.')

    patient = storage.get_patient_by_cpf(cpf) if cpf else None
    if patient is None and phone:
        patient = storage.get_patient_by_phone(phone)
    return patient


def validate_patient(storage: Storage, cpf: str | None = None, phone: str | None = None) -> PatientStatus:
    patient = find_patient(storage, cpf, phone)
    if patient is None:
        return PatientStatus(exists=False, active=False)
    return PatientStatus(exists=True, active=patient.status == 'active')


def appointments_by_person(
    storage: Storage,
    today: date,
    cpf: str | None = None,
    phone: str | None = None,
    rules: SchedulingRules = DEFAULT_RULES,
) -> list[PersonAppointment]:
    """Upcoming appointments (today onwards) for the patient, with display labels."""
    patient = find_patient(storage, cpf, phone)
    if patient is None:
        return []

    specialties = {professional.name: professional.specialty for professional in storage.get_all_professionals()}
    upcoming = sorted(
        (appointment for appointment in storage.get_appointments_by_patient(patient.id) if appointment.date >= today),
        key=lambda appointment: (appointment.date, time_to_minutes(appointment.time)),
    )

    return [
        PersonAppointment(
            id=appointment.id,
            date=appointment.date,
            time=format_minutes(time_to_minutes(appointment.time)),
            status=rules.status_labels.get(normalize_label(appointment.status), appointment.status),
            type=rules.type_labels.get(normalize_label(appointment.type), appointment.type),
            specialty=specialties.get(appointment.professional),
        )
        for appointment in upcoming
    ]
