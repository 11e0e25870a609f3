from datetime import date, time

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, field_validator

from clinic_scheduler.routes.dependencies import get_scheduling_engine, to_http_exception
from clinic_scheduler.scheduling.engine import SchedulingEngine
from clinic_scheduler.scheduling.errors import SchedulingError, StorageUnavailable
from clinic_scheduler.scheduling.patients import appointments_by_person

router = APIRouter(tags=['appointments'])

MAX_APPOINTMENT_NOTES_LENGTH = 600


class ValidateBookingRequest(BaseModel):
    professional_id: int
    date: date
    time: time
    appointment_type: str
    appointment_id: int | None = None

    @field_validator('appointment_type')
    @classmethod
    def validate_appointment_type(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Appointment type is required.')
        return normalized


class CreateAppointmentRequest(BaseModel):
    patient_id: int
    professional_id: int
    date: date
    time: time
    appointment_type: str
    notes: str | None = None

    @field_validator('appointment_type')
    @classmethod
    def validate_appointment_type(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Appointment type is required.')
        return normalized

    @field_validator('notes')
    @classmethod
    def validate_notes(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip()
        if not normalized:
            return None

        if len(normalized) > MAX_APPOINTMENT_NOTES_LENGTH:
            raise ValueError(f'Notes must be {MAX_APPOINTMENT_NOTES_LENGTH} characters or fewer.')

        return normalized


class ValidateBookingResponse(BaseModel):
    ok: bool
    duration_minutes: int | None = None
    error: dict | None = None


class AppointmentResponse(BaseModel):
    id: int
    patient_id: int | None = None
    type: str
    date: date
    time: time
    professional: str
    professional_id: int | None = None
    status: str
    notes: str | None = None

    class Config:
        from_attributes = True


class LifecycleResponse(BaseModel):
    started: list[int]
    attended: list[int]

    class Config:
        from_attributes = True


class PersonAppointmentResponse(BaseModel):
    id: int
    date: date
    time: str
    status: str
    type: str
    specialty: str | None = None

    class Config:
        from_attributes = True


@router.post('/validate', response_model=ValidateBookingResponse)
def validate_booking(data: ValidateBookingRequest, engine: SchedulingEngine = Depends(get_scheduling_engine)):
    try:
        validation = engine.validate_booking(
            data.professional_id,
            data.date,
            data.time,
            data.appointment_type,
            exclude_appointment_id=data.appointment_id,
        )
    except StorageUnavailable as exc:
        raise to_http_exception(exc) from exc

    return ValidateBookingResponse(
        ok=validation.ok,
        duration_minutes=validation.duration_minutes,
        error=validation.error.to_dict() if validation.error else None,
    )


@router.post('', response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(data: CreateAppointmentRequest, engine: SchedulingEngine = Depends(get_scheduling_engine)):
    try:
        return engine.book_appointment(
            data.patient_id,
            data.professional_id,
            data.date,
            data.time,
            data.appointment_type,
            notes=data.notes,
        )
    except (SchedulingError, StorageUnavailable) as exc:
        raise to_http_exception(exc) from exc


@router.post('/{appointment_id}/cancel', response_model=AppointmentResponse)
def cancel_appointment(appointment_id: int, engine: SchedulingEngine = Depends(get_scheduling_engine)):
    try:
        return engine.cancel_appointment(appointment_id)
    except (SchedulingError, StorageUnavailable) as exc:
        raise to_http_exception(exc) from exc


@router.post('/advance', response_model=LifecycleResponse)
def advance_lifecycle(engine: SchedulingEngine = Depends(get_scheduling_engine)):
    try:
        return engine.advance_lifecycle()
    except StorageUnavailable as exc:
        raise to_http_exception(exc) from exc


@router.get('/by-person', response_model=list[PersonAppointmentResponse])
def list_person_appointments(
    cpf: str | None = Query(default=None),
    phone: str | None = Query(default=None),
    engine: SchedulingEngine = Depends(get_scheduling_engine),
):
    try:
        return appointments_by_person(
            engine.storage,
            engine.clock().date(),
            cpf=cpf,
            phone=phone,
            rules=engine.rules,
        )
    except (SchedulingError, StorageUnavailable) as exc:
        raise to_http_exception(exc) from exc
