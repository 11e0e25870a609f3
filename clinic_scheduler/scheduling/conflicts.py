"""
Conflict Detection

Detects overlapping bookings inside one professional track. The clinic runs
two independent tracks:

- medical (consulta, retorno), served by doctors
- nursing (aplicacao, tirzepatida), served by nurses

Overlaps across tracks, or involving a type that belongs to no track, are
allowed. The availability view is stricter and blocks any overlap; see
``availability.py``.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable

from clinic_scheduler.models.appointment import Appointment
from clinic_scheduler.models.appointment_type import AppointmentType
from clinic_scheduler.scheduling.durations import resolve_duration
from clinic_scheduler.scheduling.errors import ConflictDetail
from clinic_scheduler.scheduling.rules import (
    DEFAULT_RULES,
    MEDICAL_TRACK,
    NURSING_TRACK,
    SchedulingRules,
    normalize_label,
)
from clinic_scheduler.scheduling.timeutils import intervals_overlap, time_to_minutes


@dataclass(frozen=True)
class ProposedAppointment:
    date: date
    start_minutes: int
    duration_minutes: int
    type: str
    # set when re-validating an existing appointment so it is not compared with itself
    appointment_id: int | None = None

    @property
    def end_minutes(self) -> int:
        return self.start_minutes + self.duration_minutes


def classify_track(appointment_type: str | None, rules: SchedulingRules = DEFAULT_RULES) -> str | None:
    label = normalize_label(appointment_type)
    if label in rules.medical_types:
        return MEDICAL_TRACK
    if label in rules.nursing_types:
        return NURSING_TRACK
    return None


def find_conflict(
    proposed: ProposedAppointment,
    existing: Iterable[Appointment],
    appointment_types: Iterable[AppointmentType],
    rules: SchedulingRules = DEFAULT_RULES,
) -> ConflictDetail | None:
    """Return the first same-track appointment overlapping ``proposed``, if any."""
    proposed_track = classify_track(proposed.type, rules)
    if proposed_track is None:
        return None

    types = list(appointment_types)
    for appointment in existing:
        if appointment.date != proposed.date:
            continue
        if rules.is_cancelled_status(appointment.status):
            continue
        if proposed.appointment_id is not None and appointment.id == proposed.appointment_id:
            continue
        if classify_track(appointment.type, rules) != proposed_track:
            continue

        start = time_to_minutes(appointment.time)
        end = start + resolve_duration(appointment.type, types, rules)
        if intervals_overlap(proposed.start_minutes, proposed.end_minutes, start, end):
            return ConflictDetail(
                appointment_id=appointment.id,
                appointment_type=appointment.type,
                start_minutes=start,
                end_minutes=end,
            )

    return None


def has_conflict(
    proposed: ProposedAppointment,
    existing: Iterable[Appointment],
    appointment_types: Iterable[AppointmentType],
    rules: SchedulingRules = DEFAULT_RULES,
) -> bool:
    return find_conflict(proposed, existing, appointment_types, rules) is not None
