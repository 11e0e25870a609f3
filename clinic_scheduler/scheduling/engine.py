"""
Scheduling engine.

Entry points used by the HTTP layer (or any other front end). A booking
request resolves the type's duration, checks the professional's weekly
schedule, then checks same-track conflicts before anything is written.

Booking is check-then-act: two concurrent requests for one slot can both
pass ``validate_booking`` before either commits. The partial unique index
created by ``database.ensure_appointment_schema`` rejects the second write
for the same professional; cross-professional races inside one track are
not prevented here.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Callable

from clinic_scheduler.models.appointment import Appointment
from clinic_scheduler.models.professional import ServiceSchedule
from clinic_scheduler.scheduling.availability import DayAvailability, compute_availability
from clinic_scheduler.scheduling.conflicts import ProposedAppointment, find_conflict
from clinic_scheduler.scheduling.durations import resolve_duration
from clinic_scheduler.scheduling.errors import Conflict, InvalidInput, NotFound, SchedulingError
from clinic_scheduler.scheduling.lifecycle import LifecycleReport, advance_lifecycle
from clinic_scheduler.scheduling.rules import (
    DEFAULT_RULES,
    STATUS_ATTENDED,
    STATUS_CANCELLED,
    STATUS_SCHEDULED,
    SchedulingRules,
)
from clinic_scheduler.scheduling.schedules import check_schedule, validate_service_window
from clinic_scheduler.scheduling.timeutils import (
    clinic_weekday,
    minutes_to_time,
    parse_date,
    parse_time,
    time_to_minutes,
)
from clinic_scheduler.storage import Storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingValidation:
    error: SchedulingError | None = None
    duration_minutes: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class SchedulingEngine:
    def __init__(
        self,
        storage: Storage,
        rules: SchedulingRules = DEFAULT_RULES,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.storage = storage
        self.rules = rules
        self.clock = clock

    def get_availability(
        self,
        date_start: str | date,
        date_end: str | date | None = None,
        appointment_type: str | None = None,
    ) -> list[DayAvailability]:
        start = parse_date(date_start, 'start date')
        end = parse_date(date_end, 'end date') if date_end else start

        appointments = self.storage.get_appointments_by_date_range(start, end) if end >= start else []
        return compute_availability(
            start,
            end,
            appointment_type,
            appointments,
            self.storage.get_all_appointment_types(),
            self.clock(),
            self.rules,
        )

    def validate_booking(
        self,
        professional_id: int,
        booking_date: str | date,
        booking_time: str | time,
        appointment_type: str,
        exclude_appointment_id: int | None = None,
    ) -> BookingValidation:
        """Validate a proposed booking without writing anything.

        Returns a ``BookingValidation`` carrying either nothing (ok) or one of
        ``InvalidInput``, ``NotFound``, ``ScheduleMissing``,
        ``ScheduleInactive``, ``OutsideWindow`` or ``Conflict``.
        """
        try:
            target_date = parse_date(booking_date)
            start_minutes = time_to_minutes(booking_time)
        except InvalidInput as exc:
            return BookingValidation(error=exc)

        if not (appointment_type or '').strip():
            return BookingValidation(error=InvalidInput('Appointment type is required.'))

        if self.storage.get_professional(professional_id) is None:
            return BookingValidation(error=NotFound('Professional not found.'))

        appointment_types = self.storage.get_all_appointment_types()
        duration = resolve_duration(appointment_type, appointment_types, self.rules)
        end_minutes = start_minutes + duration

        schedule = check_schedule(
            professional_id,
            clinic_weekday(target_date),
            start_minutes,
            end_minutes,
            self.storage.get_schedules_by_professional(professional_id),
        )
        if not schedule.ok:
            return BookingValidation(error=schedule.error, duration_minutes=duration)

        proposed = ProposedAppointment(
            date=target_date,
            start_minutes=start_minutes,
            duration_minutes=duration,
            type=appointment_type,
            appointment_id=exclude_appointment_id,
        )
        conflict = find_conflict(
            proposed,
            self.storage.get_appointments_by_date_range(target_date, target_date),
            appointment_types,
            self.rules,
        )
        if conflict is not None:
            return BookingValidation(error=Conflict(conflict), duration_minutes=duration)

        return BookingValidation(duration_minutes=duration)

    def book_appointment(
        self,
        patient_id: int,
        professional_id: int,
        booking_date: str | date,
        booking_time: str | time,
        appointment_type: str,
        notes: str | None = None,
    ) -> Appointment:
        if self.storage.get_patient(patient_id) is None:
            raise NotFound('Patient not found.')

        validation = self.validate_booking(professional_id, booking_date, booking_time, appointment_type)
        if not validation.ok:
            raise validation.error

        professional = self.storage.get_professional(professional_id)
        appointment = self.storage.create_appointment({
            'patient_id': patient_id,
            'type': appointment_type.strip(),
            'date': parse_date(booking_date),
            'time': parse_time(booking_time),
            'professional': professional.name,
            'professional_id': professional.id,
            'status': STATUS_SCHEDULED,
            'notes': notes,
        })
        logger.info(
            'Booked appointment %s (%s) on %s %s with %s.',
            appointment.id,
            appointment.type,
            appointment.date,
            appointment.time,
            appointment.professional,
        )
        return appointment

    def cancel_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.storage.get_appointment(appointment_id)
        if appointment is None:
            raise NotFound('Appointment not found.')

        if self.rules.is_cancelled_status(appointment.status):
            return appointment
        if appointment.status == STATUS_ATTENDED:
            raise InvalidInput('Attended appointments cannot be cancelled.')

        logger.info('Cancelling appointment %s.', appointment_id)
        return self.storage.update_appointment(appointment_id, {'status': STATUS_CANCELLED})

    def advance_lifecycle(self) -> LifecycleReport:
        return advance_lifecycle(self.storage, self.clock(), self.rules)

    def create_service_schedule(
        self,
        professional_id: int,
        weekday: int,
        start_time: str | time,
        end_time: str | time,
        is_active: bool = True,
    ) -> ServiceSchedule:
        start_minutes, end_minutes = validate_service_window(weekday, start_time, end_time, self.rules)

        if self.storage.get_professional(professional_id) is None:
            raise NotFound('Professional not found.')

        schedule = self.storage.create_service_schedule({
            'professional_id': professional_id,
            'weekday': weekday,
            'start_time': minutes_to_time(start_minutes),
            'end_time': minutes_to_time(end_minutes),
            'is_active': is_active,
        })
        logger.info(
            'Created service schedule %s for professional %s (weekday %s, %s-%s).',
            schedule.id,
            professional_id,
            weekday,
            schedule.start_time,
            schedule.end_time,
        )
        return schedule
