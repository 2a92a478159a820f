"""
Celery Configuration
====================
Out-of-process cleanup for deployments that set CLEANUP_MODE=celery.

The API process then skips its in-process scheduler and beat drives the
same three cleanup jobs.
"""

from celery import Celery
from app.core.config import get_settings

settings = get_settings()

# Create Celery app
celery_app = Celery(
    "paraphraser",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks.cleanup"],
)

# Celery configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    
    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    
    # Result settings
    result_expires=3600,  # Results expire after 1 hour
    
    # Worker settings
    worker_prefetch_multiplier=1,  # Fair distribution
    
    # Task routes
    task_routes={
        "app.tasks.cleanup.*": {"queue": "cleanup"},
    },
    
    # Beat scheduler (for periodic tasks)
    beat_schedule={
        "sweep-expired-sessions": {
            "task": "app.tasks.cleanup.sweep_expired_sessions",
            "schedule": settings.sweep_expired_interval_seconds,
        },
        "sweep-stale-sessions": {
            "task": "app.tasks.cleanup.sweep_stale_sessions",
            "schedule": settings.sweep_stale_interval_seconds,
        },
        "cleanup-upload-dir": {
            "task": "app.tasks.cleanup.cleanup_upload_dir",
            "schedule": settings.upload_dir_sweep_interval_seconds,
        },
    },
)
