from datetime import date, datetime, time

from clinic_scheduler.scheduling.lifecycle import advance_lifecycle

TODAY = date(2024, 3, 4)
NOW = datetime(2024, 3, 4, 11, 0)


def _statuses(storage) -> dict[int, str]:
    return {appointment.id: appointment.status for appointment in storage.get_appointments_by_date_range(date(2024, 3, 1), date(2024, 3, 31))}


def test_in_progress_appointment_past_its_duration_becomes_attended(storage, add_appointment) -> None:
    appointment = add_appointment('consulta', TODAY, time(10, 25), status='in_progress')

    report = advance_lifecycle(storage, NOW)

    assert report.attended == [appointment.id]
    assert storage.get_appointment(appointment.id).status == 'attended'


def test_scheduled_appointment_that_has_started_becomes_in_progress(storage, add_appointment) -> None:
    started = add_appointment('consulta', TODAY, time(10, 45))
    exact = add_appointment('retorno', TODAY, time(11, 0))
    later = add_appointment('consulta', TODAY, time(11, 30))

    report = advance_lifecycle(storage, NOW)

    assert sorted(report.started) == sorted([started.id, exact.id])
    assert report.attended == []
    assert storage.get_appointment(started.id).status == 'in_progress'
    assert storage.get_appointment(exact.id).status == 'in_progress'
    assert storage.get_appointment(later.id).status == 'scheduled'


def test_scheduled_appointment_already_over_is_attended_in_one_pass(storage, add_appointment) -> None:
    appointment = add_appointment('consulta', TODAY, time(9, 0))

    report = advance_lifecycle(storage, NOW)

    assert report.started == [appointment.id]
    assert report.attended == [appointment.id]
    assert storage.get_appointment(appointment.id).status == 'attended'


def test_duration_comes_from_appointment_type(storage, add_appointment, clinic) -> None:
    # aplicacao lasts 15 minutes, consulta 30
    short = add_appointment('aplicacao', TODAY, time(10, 40), status='in_progress', professional=clinic['nurse'])
    long = add_appointment('consulta', TODAY, time(10, 40), status='in_progress')

    advance_lifecycle(storage, NOW)

    assert storage.get_appointment(short.id).status == 'attended'
    assert storage.get_appointment(long.id).status == 'in_progress'


def test_in_progress_from_previous_day_is_attended(storage, add_appointment) -> None:
    appointment = add_appointment('consulta', date(2024, 3, 1), time(17, 45), status='in_progress')

    advance_lifecycle(storage, NOW)

    assert storage.get_appointment(appointment.id).status == 'attended'


def test_scheduled_appointments_on_other_days_are_untouched(storage, add_appointment) -> None:
    tomorrow = add_appointment('consulta', date(2024, 3, 5), time(9, 0))

    report = advance_lifecycle(storage, NOW)

    assert report.changed == 0
    assert storage.get_appointment(tomorrow.id).status == 'scheduled'


def test_terminal_statuses_are_never_changed(storage, add_appointment) -> None:
    cancelled = add_appointment('consulta', TODAY, time(9, 0), status='cancelled')
    attended = add_appointment('retorno', TODAY, time(9, 30), status='attended')

    advance_lifecycle(storage, NOW)

    assert storage.get_appointment(cancelled.id).status == 'cancelled'
    assert storage.get_appointment(attended.id).status == 'attended'


def test_advancing_twice_is_idempotent(storage, add_appointment) -> None:
    add_appointment('consulta', TODAY, time(9, 0))
    add_appointment('consulta', TODAY, time(10, 45))
    add_appointment('retorno', TODAY, time(10, 0), status='in_progress')
    add_appointment('consulta', TODAY, time(15, 0))

    advance_lifecycle(storage, NOW)
    after_first = _statuses(storage)
    second = advance_lifecycle(storage, NOW)

    assert second.changed == 0
    assert _statuses(storage) == after_first
