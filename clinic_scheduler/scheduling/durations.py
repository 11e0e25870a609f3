import logging
from typing import Iterable

from clinic_scheduler.models.appointment_type import AppointmentType
from clinic_scheduler.scheduling.rules import DEFAULT_RULES, SchedulingRules, normalize_label

logger = logging.getLogger(__name__)


def _match_type(label: str, appointment_types: list[AppointmentType]) -> AppointmentType | None:
    for appointment_type in appointment_types:
        if label in (normalize_label(appointment_type.slug), normalize_label(appointment_type.name)):
            return appointment_type
    return None


def find_appointment_type(
    identifier: str | None,
    appointment_types: Iterable[AppointmentType],
    rules: SchedulingRules = DEFAULT_RULES,
) -> AppointmentType | None:
    label = normalize_label(identifier)
    if not label:
        return None

    candidates = list(appointment_types)
    alias = rules.type_aliases.get(label)
    if alias is not None:
        matched = _match_type(normalize_label(alias), candidates)
        if matched is not None:
            return matched

    return _match_type(label, candidates)


def resolve_duration(
    identifier: str | None,
    appointment_types: Iterable[AppointmentType],
    rules: SchedulingRules = DEFAULT_RULES,
) -> int:
    appointment_type = find_appointment_type(identifier, appointment_types, rules)

    if appointment_type is None:
        if identifier:
            logger.warning(
                'Unknown appointment type %r; using default duration of %s minutes.',
                identifier,
                rules.default_duration_minutes,
            )
        return rules.default_duration_minutes

    duration = appointment_type.duration_minutes
    if duration is None or duration < rules.minimum_duration_minutes:
        logger.warning(
            'Appointment type %r has invalid duration %r; using default duration of %s minutes.',
            appointment_type.slug,
            duration,
            rules.default_duration_minutes,
        )
        return rules.default_duration_minutes

    return int(duration)
