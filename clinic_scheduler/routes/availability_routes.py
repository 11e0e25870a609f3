from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from clinic_scheduler.scheduling.engine import SchedulingEngine
from clinic_scheduler.scheduling.errors import SchedulingError, StorageUnavailable
from clinic_scheduler.routes.dependencies import get_scheduling_engine, to_http_exception

router = APIRouter(tags=['availability'])


class DayAvailabilityResponse(BaseModel):
    date: date
    available_slots: list[str]

    class Config:
        from_attributes = True


class AppointmentTypeOptionResponse(BaseModel):
    slug: str
    name: str
    duration_minutes: int

    class Config:
        from_attributes = True


@router.get('/slots', response_model=list[DayAvailabilityResponse])
def list_available_slots(
    date_start: str = Query(...),
    date_end: str | None = Query(default=None),
    appointment_type: str | None = Query(default=None),
    engine: SchedulingEngine = Depends(get_scheduling_engine),
):
    try:
        return engine.get_availability(date_start, date_end, appointment_type)
    except (SchedulingError, StorageUnavailable) as exc:
        raise to_http_exception(exc) from exc


@router.get('/appointment-types', response_model=list[AppointmentTypeOptionResponse])
def list_appointment_types(engine: SchedulingEngine = Depends(get_scheduling_engine)):
    try:
        appointment_types = engine.storage.get_all_appointment_types()
    except StorageUnavailable as exc:
        raise to_http_exception(exc) from exc

    return [appointment_type for appointment_type in appointment_types if appointment_type.is_active]

