from fastapi import Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from clinic_scheduler.core import config
from clinic_scheduler.database import SessionLocal, ensure_appointment_schema
from clinic_scheduler.scheduling.engine import SchedulingEngine
from clinic_scheduler.scheduling.errors import (
    Conflict,
    NotFound,
    SchedulingError,
    StorageUnavailable,
)
from clinic_scheduler.storage import DATABASE_UNAVAILABLE_MESSAGE, SqlAlchemyStorage


def ensure_database_ready() -> None:
    try:
        ensure_appointment_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DATABASE_UNAVAILABLE_MESSAGE,
        ) from exc


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_scheduling_engine(db: Session = Depends(get_db)) -> SchedulingEngine:
    ensure_database_ready()
    return SchedulingEngine(SqlAlchemyStorage(db), rules=config.build_rules())


def to_http_exception(exc: SchedulingError | StorageUnavailable) -> HTTPException:
    if isinstance(exc, StorageUnavailable):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    if isinstance(exc, NotFound):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.to_dict())
    if isinstance(exc, Conflict):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.to_dict())
    # invalid input and schedule violations
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.to_dict())
