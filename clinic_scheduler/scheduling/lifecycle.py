"""
Appointment lifecycle advancer.

Moves appointments forward with the wall clock:

1. ``scheduled`` appointments dated today whose start time has arrived
   become ``in_progress``.
2. ``in_progress`` appointments whose start + duration has passed become
   ``attended``.

``attended`` and ``cancelled`` are terminal and never touched. Running the
advancer again without the clock moving changes nothing.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from clinic_scheduler.scheduling.durations import resolve_duration
from clinic_scheduler.scheduling.rules import (
    DEFAULT_RULES,
    STATUS_ATTENDED,
    STATUS_IN_PROGRESS,
    STATUS_SCHEDULED,
    SchedulingRules,
)
from clinic_scheduler.scheduling.timeutils import parse_time
from clinic_scheduler.storage import Storage

logger = logging.getLogger(__name__)


@dataclass
class LifecycleReport:
    started: list[int] = field(default_factory=list)
    attended: list[int] = field(default_factory=list)

    @property
    def changed(self) -> int:
        return len(self.started) + len(self.attended)


def advance_lifecycle(
    storage: Storage,
    now: datetime,
    rules: SchedulingRules = DEFAULT_RULES,
) -> LifecycleReport:
    report = LifecycleReport()
    today = now.date()
    current_time = now.time()

    for appointment in storage.get_appointments_by_date_range(today, today):
        if appointment.status != STATUS_SCHEDULED:
            continue
        if parse_time(appointment.time) <= current_time:
            storage.update_appointment(appointment.id, {'status': STATUS_IN_PROGRESS})
            report.started.append(appointment.id)
            logger.info('Appointment %s started (%s %s).', appointment.id, appointment.date, appointment.time)

    appointment_types = storage.get_all_appointment_types()
    for appointment in storage.get_appointments_by_status(STATUS_IN_PROGRESS):
        start = datetime.combine(appointment.date, parse_time(appointment.time))
        end = start + timedelta(minutes=resolve_duration(appointment.type, appointment_types, rules))
        if now >= end:
            storage.update_appointment(appointment.id, {'status': STATUS_ATTENDED})
            report.attended.append(appointment.id)
            logger.info('Appointment %s attended (ended %s).', appointment.id, end)

    if report.changed:
        logger.info(
            'Lifecycle advanced: %s started, %s attended.',
            len(report.started),
            len(report.attended),
        )
    return report
