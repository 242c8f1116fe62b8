"""
Scheduled expiry sweep.

Celery beat triggers ``sweep_expired_reservations`` once a day at
``SWEEP_HOUR:SWEEP_MINUTE`` in the campus reference timezone.
"""

from typing import Any, Dict

from celery import Celery
from celery.schedules import crontab

from campus_reservations.config.logging import get_logger
from campus_reservations.config.settings import settings
from campus_reservations.db.session import SessionLocal
from campus_reservations.services.background import ExpirySweeper

logger = get_logger(__name__)

SWEEP_TASK_NAME = "campus_reservations.tasks.sweeper.sweep_expired_reservations"

celery_app = Celery(
    "campus_reservations",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone=settings.TIMEZONE,
    enable_utc=False,
    task_track_started=True,
    worker_prefetch_multiplier=1,
    task_acks_late=True,
)

celery_app.conf.beat_schedule = {
    'sweep-expired-reservations': {
        'task': SWEEP_TASK_NAME,
        'schedule': crontab(hour=settings.SWEEP_HOUR, minute=settings.SWEEP_MINUTE),
    },
}


def run_sweep() -> Dict[str, Any]:
    """Run one sweep on a fresh session and return its counters."""
    db = SessionLocal()
    try:
        result = ExpirySweeper(db).sweep_expired()
        return result.model_dump(mode="json")
    finally:
        db.close()


@celery_app.task(name=SWEEP_TASK_NAME)
def sweep_expired_reservations() -> Dict[str, Any]:
    logger.info("Scheduled expiry sweep started")
    return run_sweep()
