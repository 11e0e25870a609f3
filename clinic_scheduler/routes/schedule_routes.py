from datetime import time

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator

from clinic_scheduler.routes.dependencies import get_scheduling_engine, to_http_exception
from clinic_scheduler.scheduling.engine import SchedulingEngine
from clinic_scheduler.scheduling.errors import SchedulingError, StorageUnavailable

router = APIRouter(tags=['schedules'])


class CreateServiceScheduleRequest(BaseModel):
    professional_id: int
    weekday: int
    start_time: time
    end_time: time
    is_active: bool = True

    @field_validator('weekday')
    @classmethod
    def validate_weekday(cls, value: int) -> int:
        if not 0 <= value <= 6:
            raise ValueError('Weekday must be between 0 (Sunday) and 6 (Saturday).')
        return value


class ServiceScheduleResponse(BaseModel):
    id: int
    professional_id: int
    weekday: int
    start_time: time
    end_time: time
    is_active: bool

    class Config:
        from_attributes = True


@router.post('', response_model=ServiceScheduleResponse, status_code=status.HTTP_201_CREATED)
def create_service_schedule(
    data: CreateServiceScheduleRequest,
    engine: SchedulingEngine = Depends(get_scheduling_engine),
):
    try:
        return engine.create_service_schedule(
            data.professional_id,
            data.weekday,
            data.start_time,
            data.end_time,
            is_active=data.is_active,
        )
    except (SchedulingError, StorageUnavailable) as exc:
        raise to_http_exception(exc) from exc
