from dataclasses import dataclass
from datetime import date, datetime, time

from clinic_scheduler.scheduling.errors import InvalidDate, InvalidInput
from clinic_scheduler.scheduling.rules import DEFAULT_RULES, SchedulingRules

MINUTES_PER_DAY = 24 * 60


@dataclass(frozen=True)
class BusinessWindow:
    open_minutes: int
    close_minutes: int


def time_to_minutes(value: str | time) -> int:
    """Convert ``HH:MM``, ``HH:MM:SS`` (or a ``time``) to minutes since midnight.

    A missing minute component reads as 0; seconds are ignored.
    """
    if isinstance(value, time):
        return value.hour * 60 + value.minute

    parts = str(value).strip().split(':')
    try:
        hours = int(parts[0])
        minutes = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    except ValueError as exc:
        raise InvalidInput(f'Invalid time: {value!r}.') from exc

    if not 0 <= hours < 24 or not 0 <= minutes < 60:
        raise InvalidInput(f'Invalid time: {value!r}.')

    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> time:
    return time(minutes // 60, minutes % 60)


def intervals_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    # half-open intervals: touching endpoints do not overlap
    return start_a < end_b and start_b < end_a


def clinic_weekday(value: date) -> int:
    """Weekday numbered 0=Sunday .. 6=Saturday."""
    return (value.weekday() + 1) % 7


def business_window(weekday: int, rules: SchedulingRules = DEFAULT_RULES) -> BusinessWindow | None:
    hours = rules.business_hours.get(weekday)
    if hours is None:
        return None
    return BusinessWindow(open_minutes=hours[0], close_minutes=hours[1])


def parse_date(value: str | date, field_name: str = 'date') -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as exc:
        raise InvalidDate(f'Invalid {field_name}: {value!r}.') from exc


def parse_time(value: str | time) -> time:
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    return minutes_to_time(time_to_minutes(value))
