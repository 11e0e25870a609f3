"""
Scheduled Tasks

Background jobs that run periodically:
- advance_appointment_lifecycle: promotes appointments through their states
"""

import logging
from datetime import datetime
from typing import Callable

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from clinic_scheduler.core import config
from clinic_scheduler.database import SessionLocal
from clinic_scheduler.scheduling.lifecycle import LifecycleReport, advance_lifecycle
from clinic_scheduler.scheduling.rules import SchedulingRules
from clinic_scheduler.storage import SqlAlchemyStorage

logger = logging.getLogger(__name__)

LIFECYCLE_JOB_ID = 'advance_appointment_lifecycle'


def advance_appointment_lifecycle(
    session_factory: Callable[[], Session] = SessionLocal,
    rules: SchedulingRules | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> LifecycleReport | None:
    """Run one lifecycle pass in its own session.

    Failures are logged and swallowed so the job keeps its schedule.
    """
    db = session_factory()
    try:
        return advance_lifecycle(SqlAlchemyStorage(db), clock(), rules or config.build_rules())
    except Exception:
        logger.exception('Lifecycle job failed.')
        return None
    finally:
        db.close()


class LifecycleScheduler:
    """Runs the lifecycle advancer on an interval in a background thread."""

    def __init__(
        self,
        interval_seconds: int | None = None,
        session_factory: Callable[[], Session] = SessionLocal,
    ):
        self.scheduler = BackgroundScheduler()
        self.interval_seconds = interval_seconds or config.LIFECYCLE_INTERVAL_SECONDS
        self.session_factory = session_factory

    def start(self) -> None:
        if self.scheduler.running:
            return

        self.scheduler.add_job(
            advance_appointment_lifecycle,
            IntervalTrigger(seconds=self.interval_seconds),
            kwargs={'session_factory': self.session_factory},
            id=LIFECYCLE_JOB_ID,
            replace_existing=True,
            name='Advance Appointment Lifecycle',
            max_instances=1,
            coalesce=True,
        )
        self.scheduler.start()
        logger.info('Lifecycle scheduler started (every %s seconds).', self.interval_seconds)

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info('Lifecycle scheduler stopped.')
