"""Scheduling rules shared by every engine module.

The clinic's lookup tables (business hours, blocking statuses, appointment
tracks, type aliases and display labels) live in one immutable
``SchedulingRules`` object instead of module globals, so tests and callers can
swap in alternate configurations.
"""

import re
import unicodedata
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Collection, Mapping


MEDICAL_TRACK = 'medical'
NURSING_TRACK = 'nursing'

STATUS_SCHEDULED = 'scheduled'
STATUS_IN_PROGRESS = 'in_progress'
STATUS_ATTENDED = 'attended'
STATUS_CANCELLED = 'cancelled'

_SEPARATORS = re.compile(r'[\s_\-]+')


def normalize_label(value: str | None) -> str:
    """Lower-case ``value``, strip diacritics and collapse separators.

    ``'Aplicação_Tirzepatida'`` and ``'aplicacao tirzepatida'`` both become
    ``'aplicacao tirzepatida'``.
    """
    if not value:
        return ''
    decomposed = unicodedata.normalize('NFKD', value)
    stripped = ''.join(char for char in decomposed if not unicodedata.combining(char))
    return _SEPARATORS.sub(' ', stripped.casefold()).strip()


def _frozen_labels(values: Collection[str]) -> frozenset[str]:
    return frozenset(normalize_label(value) for value in values)


def _frozen_mapping(mapping: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType({normalize_label(key): value for key, value in mapping.items()})


DEFAULT_BUSINESS_HOURS = {
    1: (9 * 60, 18 * 60),
    2: (9 * 60, 18 * 60),
    3: (9 * 60, 18 * 60),
    4: (9 * 60, 18 * 60),
    5: (9 * 60, 13 * 60),
}

DEFAULT_BLOCKING_STATUSES = (
    'scheduled', 'confirmed', 'completed', 'pending',
    'agendado', 'confirmado', 'concluido', 'pendente',
    'in_progress', 'attended', 'em_atendimento', 'atendido',
)

DEFAULT_STATUS_LABELS = {
    'scheduled': 'Agendado',
    'in_progress': 'Em Atendimento',
    'attended': 'Atendido',
    'cancelled': 'Cancelado',
}

DEFAULT_TYPE_LABELS = {
    'consulta': 'Consulta',
    'retorno': 'Retorno',
    'aplicacao': 'Aplicação',
    'tirzepatida': 'Aplicação Tirzepatida',
    'aplicacao_tirzepatida': 'Aplicação Tirzepatida',
}


@dataclass(frozen=True, eq=False)
class SchedulingRules:
    # eq=False keeps identity hashing; the lookup tables are mapping proxies
    slot_interval_minutes: int = 30
    default_duration_minutes: int = 30
    minimum_duration_minutes: int = 5
    max_range_days: int = 62
    # clinic weekday (0=Sunday) -> (open, close) in minutes since midnight
    business_hours: Mapping[int, tuple[int, int]] = field(default_factory=lambda: dict(DEFAULT_BUSINESS_HOURS))
    blocking_statuses: Collection[str] = DEFAULT_BLOCKING_STATUSES
    cancelled_statuses: Collection[str] = ('cancelled', 'cancelado')
    medical_types: Collection[str] = ('consulta', 'retorno')
    nursing_types: Collection[str] = ('aplicacao', 'tirzepatida', 'aplicação', 'aplicação tirzepatida')
    type_aliases: Mapping[str, str] = field(default_factory=lambda: {'tirzepatida': 'aplicacao_tirzepatida'})
    status_labels: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_STATUS_LABELS))
    type_labels: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_TYPE_LABELS))

    def __post_init__(self) -> None:
        if self.minimum_duration_minutes <= 0:
            raise ValueError('minimum_duration_minutes must be positive.')
        if self.default_duration_minutes < self.minimum_duration_minutes:
            raise ValueError(
                f'default_duration_minutes must be at least {self.minimum_duration_minutes}.'
            )
        if self.slot_interval_minutes <= 0:
            raise ValueError('slot_interval_minutes must be positive.')
        if self.max_range_days < 1:
            raise ValueError('max_range_days must be at least 1.')
        for weekday, (open_minutes, close_minutes) in self.business_hours.items():
            if weekday not in range(7):
                raise ValueError(f'Invalid weekday {weekday} in business_hours.')
            if open_minutes >= close_minutes:
                raise ValueError(f'Business window for weekday {weekday} must open before it closes.')

        # frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, 'business_hours', MappingProxyType(dict(self.business_hours)))
        object.__setattr__(self, 'blocking_statuses', _frozen_labels(self.blocking_statuses))
        object.__setattr__(self, 'cancelled_statuses', _frozen_labels(self.cancelled_statuses))
        object.__setattr__(self, 'medical_types', _frozen_labels(self.medical_types))
        object.__setattr__(self, 'nursing_types', _frozen_labels(self.nursing_types))
        object.__setattr__(self, 'type_aliases', _frozen_mapping(self.type_aliases))
        object.__setattr__(self, 'status_labels', _frozen_mapping(self.status_labels))
        object.__setattr__(self, 'type_labels', _frozen_mapping(self.type_labels))

    def is_blocking_status(self, status: str | None) -> bool:
        return normalize_label(status) in self.blocking_statuses

    def is_cancelled_status(self, status: str | None) -> bool:
        return normalize_label(status) in self.cancelled_statuses


DEFAULT_RULES = SchedulingRules()
