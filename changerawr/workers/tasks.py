"""Celery tasks for Changerawr.

Provides:
- The periodic sweep that publishes scheduled entries
"""

from typing import Dict, Any
import logging

from celery import Celery, shared_task

from changerawr.core.config import get_settings
from changerawr.core.publication.scheduling import SchedulingService
from changerawr.db.session import SessionLocal

logger = logging.getLogger(__name__)
settings = get_settings()

celery_app = Celery(
    'changerawr',
    broker=settings.celery_broker,
    backend=settings.celery_backend,
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_default_queue='default',
    beat_schedule={
        'publish-scheduled-entries': {
            'task': 'changerawr.workers.tasks.publish_scheduled_entries',
            'schedule': float(settings.schedule_sweep_seconds),
        },
    },
)


@shared_task(name='changerawr.workers.tasks.publish_scheduled_entries')
def publish_scheduled_entries() -> Dict[str, Any]:
    """
    Publish every draft entry whose scheduled time has passed.

    Returns:
        Summary with the number and ids of entries published
    """
    db = SessionLocal()
    try:
        published = SchedulingService(db).publish_due_entries()
        entry_ids = [str(entry.id) for entry in published]
        db.commit()

        if entry_ids:
            logger.info(f"Scheduled publishing sweep published {len(entry_ids)} entries")
        return {"published": len(entry_ids), "entry_ids": entry_ids}

    except Exception:
        db.rollback()
        logger.exception("Scheduled publishing sweep failed")
        raise

    finally:
        db.close()
