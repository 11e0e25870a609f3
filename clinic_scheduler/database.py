from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from clinic_scheduler.core import config
from clinic_scheduler.scheduling.rules import DEFAULT_RULES, SchedulingRules


engine = create_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_appointment_schema_checked = False


def _cancelled_status_predicate(rules: SchedulingRules) -> str:
    # labels are normalised with spaces; stored statuses use underscores
    literals = sorted({
        variant
        for label in rules.cancelled_statuses
        for variant in (label, label.replace(' ', '_'))
    })
    quoted = ', '.join("'{}'".format(literal.replace("'", "''")) for literal in literals)
    return f'lower(status) NOT IN ({quoted})'


def upgrade_appointment_table(bind, rules: SchedulingRules = DEFAULT_RULES) -> None:
    """Bring a legacy ``appointments`` table up to the current shape.

    Older databases link appointments to professionals by display name only;
    this adds the ``professional_id`` column and the indexes the engine relies
    on. The partial unique index rejects two live bookings for the same
    professional at the same date and time; every status the rules treat as
    cancelled frees the slot.
    """
    inspector = inspect(bind)

    if 'appointments' not in inspector.get_table_names():
        return

    existing_columns = {column['name'] for column in inspector.get_columns('appointments')}
    migration_steps = [
        ('professional_id', 'ALTER TABLE appointments ADD COLUMN professional_id INTEGER'),
        ('notes', 'ALTER TABLE appointments ADD COLUMN notes VARCHAR'),
    ]

    with bind.begin() as connection:
        for column_name, statement in migration_steps:
            if column_name not in existing_columns:
                connection.execute(text(statement))
        connection.execute(
            text('CREATE INDEX IF NOT EXISTS idx_appointments_date_time ON appointments(date, time)')
        )
        connection.execute(
            text('CREATE INDEX IF NOT EXISTS idx_appointments_status ON appointments(status)')
        )
        connection.execute(text('DROP INDEX IF EXISTS uq_appointments_professional_slot'))
        connection.execute(
            text(
                'CREATE UNIQUE INDEX uq_appointments_professional_slot '
                f'ON appointments(professional, date, time) WHERE {_cancelled_status_predicate(rules)}'
            )
        )


def ensure_appointment_schema() -> None:
    global _appointment_schema_checked

    if _appointment_schema_checked:
        return

    with _schema_lock:
        if _appointment_schema_checked:
            return

        upgrade_appointment_table(engine, config.build_rules())

        _appointment_schema_checked = True
