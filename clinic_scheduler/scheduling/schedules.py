"""
Weekly schedule validation.

Two validators live here:

- ``check_schedule`` decides whether a professional's weekly service windows
  cover a proposed booking.
- ``validate_service_window`` checks a service window itself against the
  clinic's business hours before an admin saves it.
"""

from dataclasses import dataclass
from datetime import time
from typing import Iterable

from clinic_scheduler.models.professional import ServiceSchedule
from clinic_scheduler.scheduling.errors import (
    InvalidInput,
    OutsideWindow,
    ScheduleInactive,
    ScheduleMissing,
    SchedulingError,
)
from clinic_scheduler.scheduling.formatting import format_minutes
from clinic_scheduler.scheduling.rules import DEFAULT_RULES, SchedulingRules
from clinic_scheduler.scheduling.timeutils import business_window, time_to_minutes

WEEKDAY_NAMES = ('Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')


@dataclass(frozen=True)
class ScheduleCheck:
    error: SchedulingError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def check_schedule(
    professional_id: int,
    weekday: int,
    start_minutes: int,
    end_minutes: int,
    schedules: Iterable[ServiceSchedule],
) -> ScheduleCheck:
    """
    Check that ``[start_minutes, end_minutes]`` fits an active service window.

    Args:
        professional_id: professional being booked
        weekday: clinic weekday, 0=Sunday .. 6=Saturday
        start_minutes: proposed start, minutes since midnight
        end_minutes: proposed end, minutes since midnight
        schedules: service windows (any professional, any weekday)

    Returns:
        ScheduleCheck whose ``error`` is ``ScheduleMissing`` when the
        professional has no window that weekday, ``ScheduleInactive`` when
        every window that weekday is disabled, ``OutsideWindow`` when no
        active window contains the proposal, and ``None`` on success.
    """
    day_rows = [
        schedule for schedule in schedules
        if schedule.professional_id == professional_id and schedule.weekday == weekday
    ]
    if not day_rows:
        return ScheduleCheck(ScheduleMissing())

    active_rows = [schedule for schedule in day_rows if schedule.is_active]
    if not active_rows:
        return ScheduleCheck(ScheduleInactive())

    for schedule in active_rows:
        window_start = time_to_minutes(schedule.start_time)
        window_end = time_to_minutes(schedule.end_time)
        if start_minutes >= window_start and end_minutes <= window_end:
            return ScheduleCheck()

    return ScheduleCheck(OutsideWindow())


def validate_service_window(
    weekday: int,
    start_time: str | time,
    end_time: str | time,
    rules: SchedulingRules = DEFAULT_RULES,
) -> tuple[int, int]:
    if weekday not in range(7):
        raise InvalidInput('Weekday must be between 0 (Sunday) and 6 (Saturday).')

    window = business_window(weekday, rules)
    if window is None:
        raise InvalidInput(f'The clinic is closed on {WEEKDAY_NAMES[weekday]}.')

    start_minutes = time_to_minutes(start_time)
    end_minutes = time_to_minutes(end_time)

    if start_minutes >= end_minutes:
        raise InvalidInput('Start time must be before end time.')

    if start_minutes < window.open_minutes or end_minutes > window.close_minutes:
        raise InvalidInput(
            f'{WEEKDAY_NAMES[weekday]} schedules must fit between '
            f'{format_minutes(window.open_minutes)} and {format_minutes(window.close_minutes)}.'
        )

    return start_minutes, end_minutes
