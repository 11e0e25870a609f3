"""Error taxonomy for the scheduling engine."""

from dataclasses import dataclass

from clinic_scheduler.scheduling.formatting import format_window


@dataclass(frozen=True)
class ConflictDetail:
    """The existing appointment a proposed booking collides with."""

    appointment_id: int | None
    appointment_type: str
    start_minutes: int
    end_minutes: int

    @property
    def window(self) -> str:
        return format_window(self.start_minutes, self.end_minutes)


class SchedulingError(Exception):
    code = 'scheduling_error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {'code': self.code, 'message': self.message}


class InvalidInput(SchedulingError):
    code = 'invalid_input'


class InvalidDate(InvalidInput):
    code = 'invalid_date'


class ScheduleMissing(SchedulingError):
    code = 'schedule_missing'

    def __init__(self, message: str = 'Professional does not work this day.'):
        super().__init__(message)


class ScheduleInactive(SchedulingError):
    code = 'schedule_inactive'

    def __init__(self, message: str = 'Schedule inactive for this day.'):
        super().__init__(message)


class OutsideWindow(SchedulingError):
    code = 'outside_window'

    def __init__(self, message: str = "Time outside professional's scale."):
        super().__init__(message)


class Conflict(SchedulingError):
    code = 'conflict'

    def __init__(self, detail: ConflictDetail | None = None, message: str | None = None):
        if message is None:
            message = (
                f'Time conflicts with an existing appointment ({detail.window}).'
                if detail is not None
                else 'Time conflicts with an existing appointment.'
            )
        super().__init__(message)
        self.detail = detail

    def to_dict(self) -> dict:
        payload = super().to_dict()
        if self.detail is not None:
            payload['conflict'] = {
                'appointment_id': self.detail.appointment_id,
                'appointment_type': self.detail.appointment_type,
                'window': self.detail.window,
            }
        return payload


class NotFound(SchedulingError):
    code = 'not_found'


class StorageUnavailable(Exception):
    """Raised when the storage backend fails; never a validation outcome."""
