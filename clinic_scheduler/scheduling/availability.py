"""
Availability Calculator

Lists the bookable slots per weekday in a date range, considering:
- Business hours (Mon-Thu 09:00-18:00, Fri 09:00-13:00, weekends closed)
- The fixed slot grid starting at opening time
- Intervals occupied by appointments in a blocking status
- The current instant (no slots in the past)

The overlap test here ignores tracks on purpose: it is a conservative view
for patients picking a time. Booking-time validation uses the track-aware
rules in ``conflicts.py`` and may accept a slot this view hides.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Iterable

from clinic_scheduler.models.appointment import Appointment
from clinic_scheduler.models.appointment_type import AppointmentType
from clinic_scheduler.scheduling.durations import resolve_duration
from clinic_scheduler.scheduling.errors import InvalidInput
from clinic_scheduler.scheduling.formatting import format_minutes
from clinic_scheduler.scheduling.rules import DEFAULT_RULES, SchedulingRules
from clinic_scheduler.scheduling.timeutils import (
    business_window,
    clinic_weekday,
    intervals_overlap,
    time_to_minutes,
)

logger = logging.getLogger(__name__)


@dataclass
class DayAvailability:
    date: date
    available_slots: list[str] = field(default_factory=list)


def generate_slot_grid(weekday: int, rules: SchedulingRules = DEFAULT_RULES) -> list[int]:
    """Candidate slot starts (minutes) for ``weekday``; empty when closed."""
    window = business_window(weekday, rules)
    if window is None:
        return []
    return list(range(window.open_minutes, window.close_minutes, rules.slot_interval_minutes))


def occupied_intervals(
    appointments: Iterable[Appointment],
    appointment_types: Iterable[AppointmentType],
    rules: SchedulingRules = DEFAULT_RULES,
) -> dict[date, list[tuple[int, int]]]:
    """Group the intervals held by blocking-status appointments by date."""
    types = list(appointment_types)
    occupied: dict[date, list[tuple[int, int]]] = defaultdict(list)

    for appointment in appointments:
        if not rules.is_blocking_status(appointment.status):
            continue
        start = time_to_minutes(appointment.time)
        occupied[appointment.date].append((start, start + resolve_duration(appointment.type, types, rules)))

    return occupied


def compute_availability(
    start_date: date,
    end_date: date | None,
    appointment_type: str | None,
    appointments: Iterable[Appointment],
    appointment_types: Iterable[AppointmentType],
    now: datetime,
    rules: SchedulingRules = DEFAULT_RULES,
) -> list[DayAvailability]:
    """
    Compute available slots per weekday in ``[start_date, end_date]``.

    Args:
        start_date: first day of the range
        end_date: last day of the range (inclusive); defaults to start_date
        appointment_type: slug or name of the type being booked; its
            duration sizes each candidate slot (default duration if None)
        appointments: appointments within the range, any status
        appointment_types: configured types, for duration lookups
        now: current local time; today's slots at or before it are dropped

    Returns:
        One DayAvailability per weekday, ascending by date, with slots as
        ascending ``HH:MM`` strings.
    """
    end_date = end_date or start_date
    if end_date < start_date:
        raise InvalidInput('End date must not be before start date.')
    if (end_date - start_date).days + 1 > rules.max_range_days:
        raise InvalidInput(f'Date range must not exceed {rules.max_range_days} days.')

    types = list(appointment_types)
    duration = resolve_duration(appointment_type, types, rules) if appointment_type else rules.default_duration_minutes
    occupied = occupied_intervals(appointments, types, rules)

    today = now.date()
    now_minutes = now.hour * 60 + now.minute

    results: list[DayAvailability] = []
    current_day = start_date
    while current_day <= end_date:
        weekday = clinic_weekday(current_day)
        window = business_window(weekday, rules)

        if window is not None:
            day = DayAvailability(date=current_day)
            if current_day >= today:
                day_occupied = occupied.get(current_day, [])
                for slot_start in generate_slot_grid(weekday, rules):
                    slot_end = slot_start + duration
                    if slot_end > window.close_minutes:
                        continue
                    if current_day == today and slot_start <= now_minutes:
                        continue
                    if any(
                        intervals_overlap(slot_start, slot_end, busy_start, busy_end)
                        for busy_start, busy_end in day_occupied
                    ):
                        continue
                    day.available_slots.append(format_minutes(slot_start))
            results.append(day)

        current_day += timedelta(days=1)

    logger.debug(
        'Computed availability for %s..%s (%s minutes): %s days.',
        start_date,
        end_date,
        duration,
        len(results),
    )
    return results
