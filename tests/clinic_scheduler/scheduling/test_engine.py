from datetime import date, datetime, time

import pytest

from clinic_scheduler.models.appointment import Appointment
from clinic_scheduler.models.professional import ServiceSchedule
from clinic_scheduler.scheduling.engine import SchedulingEngine
from clinic_scheduler.scheduling.errors import (
    Conflict,
    InvalidDate,
    InvalidInput,
    NotFound,
    OutsideWindow,
    ScheduleInactive,
    ScheduleMissing,
)

MONDAY = date(2024, 3, 4)
FRIDAY = date(2024, 3, 8)
SATURDAY = date(2024, 3, 9)
NOW = datetime(2024, 3, 1, 8, 0)


@pytest.fixture
def engine(storage, clinic):
    return SchedulingEngine(storage, clock=lambda: NOW)


def test_booking_inside_schedule_is_valid(engine, clinic) -> None:
    validation = engine.validate_booking(clinic['doctor'].id, MONDAY, '10:00', 'consulta')

    assert validation.ok
    assert validation.error is None
    assert validation.duration_minutes == 30


def test_booking_on_saturday_reports_missing_schedule(engine, clinic) -> None:
    validation = engine.validate_booking(clinic['doctor'].id, SATURDAY, '10:00', 'consulta')

    assert isinstance(validation.error, ScheduleMissing)


def test_booking_on_inactive_day_reports_inactive_schedule(engine, clinic, db) -> None:
    db.query(ServiceSchedule).filter(
        ServiceSchedule.professional_id == clinic['doctor'].id,
        ServiceSchedule.weekday == 1,
    ).update({'is_active': False})
    db.commit()

    validation = engine.validate_booking(clinic['doctor'].id, MONDAY, '10:00', 'consulta')

    assert isinstance(validation.error, ScheduleInactive)


def test_booking_running_past_window_reports_outside_window(engine, clinic) -> None:
    validation = engine.validate_booking(clinic['doctor'].id, FRIDAY, '12:45', 'consulta')

    assert isinstance(validation.error, OutsideWindow)


def test_same_track_overlap_is_a_conflict(engine, clinic) -> None:
    engine.book_appointment(clinic['patient'].id, clinic['doctor'].id, MONDAY, '10:00', 'consulta')

    validation = engine.validate_booking(clinic['doctor'].id, MONDAY, '10:15', 'retorno')

    assert isinstance(validation.error, Conflict)
    assert validation.error.detail.window == '10:00-10:30'
    assert validation.error.to_dict()['conflict']['window'] == '10:00-10:30'


def test_cross_track_bookings_at_same_time_both_succeed(engine, clinic) -> None:
    nursing = engine.book_appointment(clinic['patient'].id, clinic['nurse'].id, MONDAY, '10:00', 'aplicacao')
    medical = engine.book_appointment(clinic['patient'].id, clinic['doctor'].id, MONDAY, '10:00', 'consulta')

    assert nursing.status == 'scheduled'
    assert medical.status == 'scheduled'
    assert medical.professional == 'Dr. Santos'
    assert medical.professional_id == clinic['doctor'].id


def test_revalidating_an_existing_appointment_does_not_conflict_with_itself(engine, clinic) -> None:
    appointment = engine.book_appointment(clinic['patient'].id, clinic['doctor'].id, MONDAY, '10:00', 'consulta')

    validation = engine.validate_booking(
        clinic['doctor'].id,
        MONDAY,
        '10:00',
        'consulta',
        exclude_appointment_id=appointment.id,
    )

    assert validation.ok


def test_validate_booking_reports_unknown_professional(engine) -> None:
    validation = engine.validate_booking(999, MONDAY, '10:00', 'consulta')

    assert isinstance(validation.error, NotFound)


@pytest.mark.parametrize(
    ('booking_date', 'booking_time', 'appointment_type'),
    [('2024-13-01', '10:00', 'consulta'), (MONDAY, '10h', 'consulta'), (MONDAY, '10:00', '  ')],
)
def test_validate_booking_reports_invalid_input(engine, clinic, booking_date, booking_time, appointment_type) -> None:
    validation = engine.validate_booking(clinic['doctor'].id, booking_date, booking_time, appointment_type)

    assert isinstance(validation.error, InvalidInput)


def test_book_appointment_raises_validation_error(engine, clinic) -> None:
    with pytest.raises(ScheduleMissing):
        engine.book_appointment(clinic['patient'].id, clinic['doctor'].id, SATURDAY, '10:00', 'consulta')


def test_book_appointment_rejects_unknown_patient(engine, clinic, db) -> None:
    with pytest.raises(NotFound) as exception_info:
        engine.book_appointment(9999, clinic['doctor'].id, MONDAY, '10:00', 'consulta')

    assert exception_info.value.message == 'Patient not found.'
    assert db.query(Appointment).count() == 0


def test_availability_reflects_booked_appointments(engine, clinic) -> None:
    engine.book_appointment(clinic['patient'].id, clinic['doctor'].id, FRIDAY, '09:00', 'consulta')

    result = engine.get_availability('2024-03-08')

    assert result[0].available_slots == ['09:30', '10:00', '10:30', '11:00', '11:30', '12:00', '12:30']


def test_availability_is_stricter_than_booking_across_tracks(engine, clinic) -> None:
    engine.book_appointment(clinic['patient'].id, clinic['nurse'].id, FRIDAY, '10:00', 'aplicacao')

    result = engine.get_availability(FRIDAY, FRIDAY, 'consulta')

    assert '10:00' not in result[0].available_slots
    assert engine.validate_booking(clinic['doctor'].id, FRIDAY, '10:00', 'consulta').ok


def test_availability_rejects_invalid_dates(engine) -> None:
    with pytest.raises(InvalidDate):
        engine.get_availability('not-a-date')

    with pytest.raises(InvalidDate):
        engine.get_availability('2024-03-04', '2024-03-32')


def test_cancel_appointment_frees_the_slot(engine, clinic) -> None:
    appointment = engine.book_appointment(clinic['patient'].id, clinic['doctor'].id, MONDAY, '10:00', 'consulta')

    cancelled = engine.cancel_appointment(appointment.id)

    assert cancelled.status == 'cancelled'
    assert engine.validate_booking(clinic['doctor'].id, MONDAY, '10:00', 'retorno').ok
    assert engine.cancel_appointment(appointment.id).status == 'cancelled'


def test_cancel_appointment_rejects_missing_and_attended(engine, clinic, add_appointment) -> None:
    attended = add_appointment('consulta', MONDAY, time(9, 0), status='attended')

    with pytest.raises(NotFound):
        engine.cancel_appointment(999)

    with pytest.raises(InvalidInput):
        engine.cancel_appointment(attended.id)


def test_cancel_appointment_accepts_portuguese_cancelled_status(engine, clinic, add_appointment) -> None:
    appointment = add_appointment('consulta', MONDAY, time(10, 0), status='cancelado')

    assert engine.cancel_appointment(appointment.id).status == 'cancelado'


def test_create_service_schedule_validates_business_hours(engine, clinic) -> None:
    schedule = engine.create_service_schedule(clinic['doctor'].id, 1, '13:00', '17:00')

    assert schedule.id is not None
    assert schedule.start_time == time(13, 0)
    assert schedule.end_time == time(17, 0)

    with pytest.raises(InvalidInput):
        engine.create_service_schedule(clinic['doctor'].id, 6, '09:00', '12:00')

    with pytest.raises(NotFound):
        engine.create_service_schedule(999, 1, '09:00', '12:00')
