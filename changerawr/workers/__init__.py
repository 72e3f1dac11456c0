"""Celery workers for Changerawr."""

from changerawr.workers.tasks import celery_app, publish_scheduled_entries

__all__ = [
    "celery_app",
    "publish_scheduled_entries",
]
