import os
from datetime import date, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')

from clinic_scheduler.database import Base  # noqa: E402
from clinic_scheduler.models.appointment import Appointment  # noqa: E402
from clinic_scheduler.models.appointment_type import AppointmentType  # noqa: E402
from clinic_scheduler.models.patient import Patient  # noqa: E402
from clinic_scheduler.models.professional import Professional, ServiceSchedule  # noqa: E402
from clinic_scheduler.storage import SqlAlchemyStorage  # noqa: E402

TABLES = [
    Patient.__table__,
    Professional.__table__,
    AppointmentType.__table__,
    ServiceSchedule.__table__,
    Appointment.__table__,
]


@pytest.fixture
def db_engine():
    engine = create_engine('sqlite:///:memory:')
    Base.metadata.create_all(bind=engine, tables=TABLES)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(db):
    return SqlAlchemyStorage(db)


@pytest.fixture
def clinic(db):
    """Two professionals, the four clinic appointment types and one patient."""
    doctor = Professional(name='Dr. Santos', role='doctor', specialty='Endocrinologia', status='active')
    nurse = Professional(name='Enf. Lima', role='nurse', specialty='Enfermagem', status='active')
    db.add_all([doctor, nurse])
    db.flush()

    db.add_all([
        AppointmentType(name='Consulta', slug='consulta', duration_minutes=30, default_professional_id=doctor.id, is_active=True),
        AppointmentType(name='Retorno', slug='retorno', duration_minutes=30, default_professional_id=doctor.id, is_active=True),
        AppointmentType(name='Aplicação', slug='aplicacao', duration_minutes=15, default_professional_id=nurse.id, is_active=True),
        AppointmentType(
            name='Aplicação Tirzepatida',
            slug='aplicacao_tirzepatida',
            duration_minutes=20,
            default_professional_id=nurse.id,
            is_active=True,
        ),
    ])
    patient = Patient(name='Maria Souza', cpf='123.456.789-00', phone='11999990000', status='active')
    db.add(patient)

    # Monday to Thursday full day, Friday morning
    for professional in (doctor, nurse):
        for weekday in (1, 2, 3, 4):
            db.add(ServiceSchedule(
                professional_id=professional.id,
                weekday=weekday,
                start_time=time(9, 0),
                end_time=time(18, 0),
                is_active=True,
            ))
        db.add(ServiceSchedule(
            professional_id=professional.id,
            weekday=5,
            start_time=time(9, 0),
            end_time=time(13, 0),
            is_active=True,
        ))

    db.commit()
    return {'doctor': doctor, 'nurse': nurse, 'patient': patient}


@pytest.fixture
def add_appointment(db, clinic):
    def _add(appointment_type: str, day: date, at: time, status: str = 'scheduled', professional=None) -> Appointment:
        professional = professional or clinic['doctor']
        appointment = Appointment(
            patient_id=clinic['patient'].id,
            type=appointment_type,
            date=day,
            time=at,
            professional=professional.name,
            professional_id=professional.id,
            status=status,
        )
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    return _add

