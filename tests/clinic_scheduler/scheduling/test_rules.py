import pytest

from clinic_scheduler.scheduling.rules import DEFAULT_RULES, SchedulingRules, normalize_label


@pytest.mark.parametrize(
    ('value', 'expected'),
    [
        ('Aplicação', 'aplicacao'),
        ('APLICAÇÃO_TIRZEPATIDA', 'aplicacao tirzepatida'),
        ('  consulta  ', 'consulta'),
        ('em-atendimento', 'em atendimento'),
        (None, ''),
    ],
)
def test_normalize_label(value, expected) -> None:
    assert normalize_label(value) == expected


def test_blocking_statuses_cover_english_and_portuguese() -> None:
    for status in ('scheduled', 'CONFIRMED', 'Pendente', 'concluído', 'agendado'):
        assert DEFAULT_RULES.is_blocking_status(status)

    for status in ('cancelled', 'cancelado', 'no_show', None):
        assert not DEFAULT_RULES.is_blocking_status(status)


def test_rules_reject_default_duration_below_minimum() -> None:
    with pytest.raises(ValueError):
        SchedulingRules(default_duration_minutes=4)


def test_rules_reject_inverted_business_window() -> None:
    with pytest.raises(ValueError):
        SchedulingRules(business_hours={1: (600, 540)})


def test_rules_normalize_lookup_tables() -> None:
    rules = SchedulingRules(medical_types=('Consulta Médica',))

    assert 'consulta medica' in rules.medical_types
    assert rules.type_aliases['tirzepatida'] == 'aplicacao_tirzepatida'


def test_rules_can_key_a_cache() -> None:
    rules = SchedulingRules(slot_interval_minutes=15)
    cache = {DEFAULT_RULES: 'default', rules: 'quarter-hour'}

    assert cache[rules] == 'quarter-hour'
    assert cache[DEFAULT_RULES] == 'default'
