"""
Cleanup Tasks Package
=====================
Background cleanup: the in-process scheduler and its Celery counterparts.

The Celery tasks live in app.tasks.cleanup and are imported by the
worker (see app.core.celery_app), not here.
"""

from app.tasks.scheduler import CleanupScheduler, ScheduledJob, build_cleanup_scheduler

__all__ = [
    "CleanupScheduler",
    "ScheduledJob",
    "build_cleanup_scheduler",
]
